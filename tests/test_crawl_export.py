import csv
import json
import os

import httpx
import pytest

from laserspec.models.equipment import RECORD_FIELDS, EquipmentRecord
from laserspec.services.crawl.exporter import default_output_path, write_records
from laserspec.services.crawl.importer_adapter import ImportServiceError, post_records


def sample_records():
    return [
        EquipmentRecord(
            brand="TRUMPF",
            model="TruLaser 3030",
            laser_type="Fiber",
            power_kw=6.0,
            max_cutting_thickness={"steel": 25.0},
            description='Cuts steel, "fast" and clean\nsecond line',
            origin_country="DE",
        ),
        EquipmentRecord(brand="Bodor", model="P3015", laser_type="Fiber", work_area_length=3000),
    ]


def test_default_output_path():
    assert default_output_path("TRUMPF", now_ms=1700000000000) == os.path.join(
        "data", "equipment-import-trumpf-1700000000000.json"
    )
    assert default_output_path(None, now_ms=5).endswith("equipment-import-5.json")


def test_json_output(tmp_path):
    path = write_records(str(tmp_path / "nested" / "out.json"), sample_records())
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    assert list(payload) == ["records"]
    first, second = payload["records"]
    assert list(first) == RECORD_FIELDS
    assert first["max_cutting_thickness"] == {"steel": 25.0}
    assert second["max_cutting_thickness"] is None
    assert second["cutting_speed"] is None


def test_csv_round_trip(tmp_path):
    path = write_records(str(tmp_path / "out.CSV"), sample_records())
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == RECORD_FIELDS
    assert len(rows) == 3
    first = dict(zip(rows[0], rows[1]))
    assert first["description"] == 'Cuts steel, "fast" and clean\nsecond line'
    assert json.loads(first["max_cutting_thickness"]) == {"steel": 25.0}
    assert first["cutting_speed"] == ""
    assert first["power_kw"] == "6.0"
    with open(path, encoding="utf-8") as f:
        assert '"Cuts steel, ""fast"" and clean' in f.read()


def import_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_post_records_success():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "inserted": 1, "updated": 1})

    summary = post_records(sample_records(), "http://localhost:3000/api/admin/import", client=import_client(handler))
    assert summary.inserted == 1 and summary.updated == 1
    assert seen["method"] == "POST"
    assert [r["model"] for r in seen["body"]["records"]] == ["TruLaser 3030", "P3015"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"success": False, "error": "duplicate"}),
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=["unexpected"]),
    ],
)
def test_post_records_failures(response):
    with pytest.raises(ImportServiceError):
        post_records(sample_records(), "http://localhost:3000/api/admin/import", client=import_client(lambda r: response))


def test_post_records_transport_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ImportServiceError):
        post_records(sample_records(), "http://localhost:3000/api/admin/import", client=import_client(handler))
