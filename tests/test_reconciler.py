"""
Tests for village/mandal parsing, merging and the form session lifecycle.
"""

import asyncio
import logging

import pytest

from chittoor_tracker.locations.reconciler import (
    LocationMapping, LocationReconciler, LocationSession, MalformedRemoteData,
    SOURCE_FALLBACK, SOURCE_LOCAL, SOURCE_MERGED,
    normalize_remote_rows, parse_location_blob
)
from chittoor_tracker.models import LocationRecord

from .conftest import FakeRemoteSource


def reconcile(blob, remote=None):
    return asyncio.run(LocationReconciler(remote).reconcile(blob))


class TestParseLocationBlob:

    def test_local_rows_without_remote(self):
        mapping = reconcile("Anantapur,Anantapur M\nKadapa,Kadapa M\n")

        assert len(mapping) == 2
        assert mapping.get("anantapur").mandal == "Anantapur M"
        assert mapping.get("KADAPA").mandal == "Kadapa M"

    @pytest.mark.parametrize("header", ["Village, Mandal", "village,mandal", "VILLAGE ,  MANDAL"])
    def test_header_is_skipped_regardless_of_case(self, header):
        records = parse_location_blob(f"{header}\nKadapa,Kadapa M")

        assert records == [LocationRecord("Kadapa", "Kadapa M")]

    def test_splits_on_last_comma(self):
        records = parse_location_blob("A, B Village,X Mandal")

        assert records[0].village == "A, B Village"
        assert records[0].mandal == "X Mandal"

    def test_blank_and_malformed_lines_are_dropped(self):
        text = "\r\n  \nKadapa,Kadapa M\r\nno comma here\n,Orphan M\nLonely,\n  Pulivendula , Pulivendula M  \n"

        records = parse_location_blob(text)

        assert [(r.village, r.mandal) for r in records] == [
            ("Kadapa", "Kadapa M"),
            ("Pulivendula", "Pulivendula M"),
        ]

    def test_empty_and_missing_blob(self):
        assert parse_location_blob("") == []
        assert parse_location_blob(None) == []


class TestLocationMapping:

    def test_first_local_occurrence_wins(self):
        mapping = reconcile("Kadapa,First M\nkadapa,Second M\n")

        assert len(mapping) == 1
        assert mapping.get("Kadapa").mandal == "First M"

    def test_first_local_occurrence_wins_with_remote(self):
        remote = FakeRemoteSource(rows=[{"village": "Rayachoti", "mandal": "Rayachoti M"}])

        mapping = reconcile("Kadapa,First M\nKADAPA,Second M\n", remote)

        assert mapping.get("Kadapa").mandal == "First M"
        assert mapping.get("Kadapa").village == "Kadapa"
        assert len(mapping) == 2

    def test_remote_overwrites_local(self):
        remote = FakeRemoteSource(rows=[{"village": "Kadapa", "mandal": "Kadapa New M"}])

        mapping = reconcile("Kadapa,Kadapa M\nAnantapur,Anantapur M\n", remote)

        assert mapping.get("Kadapa").mandal == "Kadapa New M"
        assert mapping.get("Anantapur").mandal == "Anantapur M"
        assert len(mapping) == 2

    def test_remote_adds_new_villages(self):
        remote = FakeRemoteSource(rows=[{"village": "Yerpedu", "mandal": "Yerpedu"}])

        mapping = reconcile("Kadapa,Kadapa M\n", remote)

        assert "yerpedu" in mapping
        assert mapping.villages() == ["Kadapa", "Yerpedu"]

    def test_remote_rows_with_empty_side_are_skipped(self):
        remote = FakeRemoteSource(rows=[
            {"village": "  ", "mandal": "Ghost M"},
            {"village": "Kadapa", "mandal": None},
            {"village": "Rayachoti", "mandal": "Rayachoti M"},
        ])

        mapping = reconcile("Kadapa,Kadapa M\n", remote)

        assert mapping.get("Kadapa").mandal == "Kadapa M"
        assert mapping.get("Rayachoti").mandal == "Rayachoti M"

    def test_queries(self, sample_blob):
        mapping = reconcile(sample_blob)

        assert mapping.mandals() == ["Chittoor", "Gudipala", "Puthalapattu"]
        assert mapping.villages("Gudipala") == ["Gudipala", "Kothapalli East"]
        assert mapping.mandal_for("Kothapalli") == "Puthalapattu"
        assert mapping.mandal_for("kothapalli") is None
        assert mapping.get(" kothapalli ").village == "Kothapalli"

    def test_mandals_sort_ignores_case_and_accents(self):
        mapping = LocationMapping.from_records([
            LocationRecord("A", "beta"),
            LocationRecord("B", "Alpha"),
            LocationRecord("C", "Älvdal"),
        ])

        assert mapping.mandals() == ["Alpha", "Älvdal", "beta"]

    def test_to_dataframe(self, sample_blob):
        df = reconcile(sample_blob).to_dataframe()

        assert list(df.columns) == ["village", "mandal"]
        assert len(df) == 5


class TestRemoteFailures:

    def test_fetch_error_falls_back_to_local(self, caplog):
        remote = FakeRemoteSource(error=ConnectionError("network down"))

        with caplog.at_level(logging.WARNING):
            mapping = reconcile("Kadapa,Kadapa M\nkadapa,Other M\n", remote)

        assert mapping.get("Kadapa").mandal == "Kadapa M"
        assert len(mapping) == 1
        assert "network down" in caplog.text

    def test_non_list_payload_falls_back_to_local(self):
        remote = FakeRemoteSource(rows={"village": "Kadapa", "mandal": "Remote M"})

        mapping = reconcile("Kadapa,Kadapa M\n", remote)

        assert mapping.get("Kadapa").mandal == "Kadapa M"

    def test_normalize_rejects_non_mapping_rows(self):
        with pytest.raises(MalformedRemoteData):
            normalize_remote_rows([("Kadapa", "Kadapa M")])

    def test_fetch_requests_village_and_mandal(self):
        remote = FakeRemoteSource(rows=[])
        reconciler = LocationReconciler(remote, remote_table="mandal_villages")

        asyncio.run(reconciler.fetch_remote())

        assert remote.calls == [("mandal_villages", ("mandal", "village"))]


class TestLocationSession:

    def test_mount_publishes_local_mapping(self, sample_blob):
        session = LocationSession(LocationReconciler())

        mapping = session.mount(sample_blob)

        assert len(mapping) == 5
        assert session.source == SOURCE_LOCAL
        assert session.is_mounted

    def test_refresh_merges_remote_and_notifies(self):
        remote = FakeRemoteSource(rows=[{"village": "Kadapa", "mandal": "Kadapa New M"}])
        session = LocationSession(LocationReconciler(remote))
        seen = []
        session.subscribe(seen.append)

        session.mount("Kadapa,Kadapa M\n")
        result = asyncio.run(session.refresh())

        assert result.get("Kadapa").mandal == "Kadapa New M"
        assert session.source == SOURCE_MERGED
        assert [m.get("Kadapa").mandal for m in seen] == ["Kadapa M", "Kadapa New M"]

    def test_refresh_failure_keeps_local(self):
        remote = FakeRemoteSource(error=TimeoutError("slow"))
        session = LocationSession(LocationReconciler(remote))

        session.mount("Kadapa,Kadapa M\n")
        result = asyncio.run(session.refresh())

        assert result.get("Kadapa").mandal == "Kadapa M"
        assert session.source == SOURCE_FALLBACK

    def test_refresh_before_mount_does_nothing(self):
        remote = FakeRemoteSource(rows=[])
        session = LocationSession(LocationReconciler(remote))

        assert asyncio.run(session.refresh()) is None
        assert remote.calls == []

    def test_fetch_resolving_after_unmount_is_discarded(self):
        remote = FakeRemoteSource(
            rows=[{"village": "Kadapa", "mandal": "Kadapa New M"}],
            gate_factory=asyncio.Event
        )
        session = LocationSession(LocationReconciler(remote))
        seen = []

        async def scenario():
            session.mount("Kadapa,Kadapa M\n")
            session.subscribe(seen.append)
            task = asyncio.ensure_future(session.refresh())
            await asyncio.sleep(0)
            session.unmount()
            remote.gate.set()
            return await task

        assert asyncio.run(scenario()) is None
        assert session.mapping.is_empty()
        assert session.source is None
        assert seen == []

    def test_fetch_from_previous_mount_is_discarded(self):
        remote = FakeRemoteSource(
            rows=[{"village": "Kadapa", "mandal": "Kadapa New M"}],
            gate_factory=asyncio.Event
        )
        session = LocationSession(LocationReconciler(remote))

        async def scenario():
            session.mount("Kadapa,Kadapa M\n")
            task = asyncio.ensure_future(session.refresh())
            await asyncio.sleep(0)
            session.mount("Anantapur,Anantapur M\n")
            remote.gate.set()
            return await task

        assert asyncio.run(scenario()) is None
        assert session.mapping.villages() == ["Anantapur"]

    def test_unsubscribe(self):
        session = LocationSession(LocationReconciler())
        seen = []
        unsubscribe = session.subscribe(seen.append)

        unsubscribe()
        session.mount("Kadapa,Kadapa M\n")

        assert seen == []
