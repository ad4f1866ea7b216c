"""
Tests for reading the village blob and project exports.
"""

import asyncio
import json

import pytest

from chittoor_tracker.backend import CsvTableSource
from chittoor_tracker.data_loader import DataLoader, parse_image_list
from chittoor_tracker.exceptions import DataLoadError, FileAccessError
from chittoor_tracker.locations.reconciler import parse_location_blob
from chittoor_tracker.models import ApprovalStatus, SiteVisitStatus
from chittoor_tracker.utils.error_handler import RetryConfig


@pytest.fixture
def loader():
    return DataLoader(retry_config=RetryConfig(max_attempts=1, base_delay=0))


def test_bundled_villages_parse(loader):
    records = parse_location_blob(loader.read_villages_blob())

    assert len(records) > 10
    assert all(record.village and record.mandal for record in records)


def test_villages_file_with_bom(loader, tmp_path):
    path = tmp_path / "villages.csv"
    path.write_text("\ufeffVillage, Mandal\nKadapa,Kadapa M\n", encoding="utf-8")

    blob = loader.read_villages_blob(str(path))

    assert blob.startswith("Village")
    assert parse_location_blob(blob)[0].village == "Kadapa"


def test_missing_villages_file(loader, tmp_path):
    with pytest.raises(FileAccessError):
        loader.read_villages_blob(str(tmp_path / "missing.csv"))


def test_load_projects_csv(loader, tmp_path):
    path = tmp_path / "projects.csv"
    path.write_text(
        "id,project_name,capacity_kw,project_cost,approval_status,site_visit_status,images,extra\n"
        "p-1,Reddy House,3,\"2,05,000\",approved,Visited,https://a/1.jpg;https://a/2.jpg,x\n"
        "p-2,Naidu Farm,,,,,,\n",
        encoding="utf-8"
    )

    records = loader.load_projects(str(path))

    assert [r.id for r in records] == ["p-1", "p-2"]
    assert records[0].capacity_kw == 3.0
    assert records[0].project_cost == 205000.0
    assert records[0].approval_status == ApprovalStatus.APPROVED
    assert records[0].site_visit_status == SiteVisitStatus.VISITED
    assert records[0].images == ["https://a/1.jpg", "https://a/2.jpg"]
    assert records[1].approval_status == ApprovalStatus.PENDING
    assert records[1].capacity_kw is None


def test_load_projects_json(loader, tmp_path):
    path = tmp_path / "projects.json"
    path.write_text(json.dumps({"data": [
        {"id": "p-9", "project_name": "School Roof", "images": ["https://a/9.jpg"],
         "payment_amount": 50000}
    ]}), encoding="utf-8")

    records = loader.load_projects(str(path))

    assert records[0].images == ["https://a/9.jpg"]
    assert records[0].payment_amount == 50000.0


def test_load_projects_missing_columns(loader, tmp_path):
    path = tmp_path / "projects.csv"
    path.write_text("name,capacity\nA,2\n", encoding="utf-8")

    with pytest.raises(DataLoadError):
        loader.load_projects(str(path))


def test_load_projects_invalid_json(loader, tmp_path):
    path = tmp_path / "projects.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DataLoadError):
        loader.load_projects(str(path))


def test_load_projects_missing_file(loader, tmp_path):
    with pytest.raises(FileAccessError):
        loader.load_projects(str(tmp_path / "nope.csv"))


@pytest.mark.parametrize("value, expected", [
    (None, []),
    ("", []),
    ('["https://a/1.jpg", ""]', ["https://a/1.jpg"]),
    ("https://a/1.jpg; https://a/2.jpg", ["https://a/1.jpg", "https://a/2.jpg"]),
    (["https://a/1.jpg", None], ["https://a/1.jpg"]),
])
def test_parse_image_list(value, expected):
    assert parse_image_list(value) == expected


def test_villages_file_with_invalid_utf8(loader, tmp_path):
    path = tmp_path / "villages.csv"
    path.write_bytes(b"Kadapa,Kadapa M\n\xff\xfeBad,Row M\n")

    with pytest.raises(DataLoadError):
        loader.read_villages_blob(str(path))


def test_csv_table_source_reads_requested_columns(tmp_path):
    path = tmp_path / "remote.csv"
    path.write_text("Village,Mandal,Extra\nKadapa,Kadapa New M,x\n", encoding="utf-8")

    rows = asyncio.run(CsvTableSource(str(path)).select("mandal_villages", ("mandal", "village")))

    assert rows == [{"mandal": "Kadapa New M", "village": "Kadapa"}]


def test_csv_table_source_missing_columns(tmp_path):
    path = tmp_path / "remote.csv"
    path.write_text("name\nKadapa\n", encoding="utf-8")

    with pytest.raises(KeyError):
        asyncio.run(CsvTableSource(str(path)).select("mandal_villages", ("mandal", "village")))
