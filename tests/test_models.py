"""
Tests for location and project records.
"""

import dataclasses

import pytest

from chittoor_tracker.models import (
    ApprovalStatus, LocationRecord, ProjectRecord, SiteVisitStatus, SubsidyScope
)


def test_location_record_is_trimmed_and_frozen():
    record = LocationRecord("  Kothapalli ", " Gudipala")

    assert (record.village, record.mandal) == ("Kothapalli", "Gudipala")
    assert record.key == "kothapalli"
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.village = "Other"


def test_location_record_requires_both_sides():
    with pytest.raises(ValueError):
        LocationRecord("Kothapalli", "  ")
    assert LocationRecord.from_values(None, "Gudipala") is None


def test_project_record_from_row_cleans_values():
    record = ProjectRecord.from_row({
        "id": 7,
        "project_name": " Reddy House ",
        "capacity_kw": "3",
        "site_visit_status": "Unknown",
        "subsidy_scope": "Customer",
        "approval_status": "APPROVED",
        "village": "",
        "images": None,
        "not_a_column": True,
    })

    assert record.id == "7"
    assert record.project_name == "Reddy House"
    assert record.capacity_kw == 3.0
    assert record.site_visit_status is None
    assert record.subsidy_scope == SubsidyScope.CUSTOMER
    assert record.approval_status == ApprovalStatus.APPROVED
    assert record.village is None
    assert record.images == []


def test_project_record_to_dict_unwraps_enums():
    data = ProjectRecord(id="a", project_name="A", site_visit_status=SiteVisitStatus.VISITED).to_dict()

    assert data["site_visit_status"] == "Visited"
    assert data["approval_status"] == "pending"


def test_merged_ignores_unknown_fields():
    record = ProjectRecord(id="a", project_name="A")

    updated = record.merged({"project_name": "B", "colour": "red"})

    assert updated.project_name == "B"
    assert record.project_name == "A"


@pytest.mark.parametrize("values, expected", [
    ({"location": "Near temple"}, "Near temple"),
    ({"village": "Kothapalli", "mandal": "Gudipala"}, "Kothapalli, Gudipala"),
    ({"mandal": "Gudipala"}, "Gudipala"),
    ({}, None),
])
def test_display_location(values, expected):
    assert ProjectRecord(id="a", project_name="A", **values).display_location == expected
