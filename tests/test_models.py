import pytest
from pydantic import ValidationError

from laserspec.models.equipment import RECORD_FIELDS, EquipmentRecord, ImportSummary


def test_equipment_record_model():
    r = EquipmentRecord(brand="TRUMPF", model="TruLaser 3030", laser_type="Fiber", power_kw=6.0)
    assert r.brand == "TRUMPF"
    assert r.power_kw == 6.0
    assert r.max_cutting_thickness is None
    assert r.applications is None


def test_record_fields_match_csv_header():
    assert list(EquipmentRecord.model_fields) == RECORD_FIELDS
    assert len(RECORD_FIELDS) == 24


def test_record_is_frozen():
    r = EquipmentRecord(brand="Bodor", model="P3015")
    with pytest.raises(ValidationError):
        r.power_kw = 3.0


def test_laser_type_vocabulary():
    with pytest.raises(ValidationError):
        EquipmentRecord(brand="Bodor", model="P3015", laser_type="Plasma")


def test_import_summary_defaults():
    s = ImportSummary(success=True)
    assert s.inserted == 0
    assert s.updated == 0
