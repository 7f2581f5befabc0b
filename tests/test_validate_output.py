"""Contract checks for the exported table."""

from __future__ import annotations

import pytest

from quake_atlas.data.exporter import convert_to_frame, export_csv
from quake_atlas.data.validate_output import find_out_of_bounds, main, validate_enriched_table


def _make_record(event_id: int, **overrides) -> dict:
    record = {
        "eventId": event_id,
        "utcDate": "2007-08-15T18:40:57.000Z",
        "longitude": -77.0,
        "latitude": -12.0,
        "depth": 39.0,
        "magnitude": 7.9,
        "year": 2007,
        "type": "Instrumental",
        "districtId": "150101",
        "distanceFromCoastKm": 0.0,
        "department": "Lima",
        "description": "Lima",
    }
    record.update(overrides)
    return record


def _make_table(*records):
    return convert_to_frame(list(records) or [_make_record(0)])


def test_valid_table_passes() -> None:
    table = _make_table(
        _make_record(0),
        _make_record(0, type="Historical", distanceFromCoastKm=120.4),
        _make_record(1, longitude=None, latitude=None, districtId=None, distanceFromCoastKm=None, department=None, description=None),
    )
    validate_enriched_table(table)


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"type": "Paleo"}, "type must be one of"),
        ({"depth": -1.0}, "depth must be non-negative"),
        ({"magnitude": "strong"}, "not numbers"),
        ({"year": None}, "year cannot be blank"),
        ({"distanceFromCoastKm": None}, "both set or both blank"),
        ({"districtId": None, "distanceFromCoastKm": None}, "department requires a districtId"),
    ],
)
def test_contract_violations(overrides, message) -> None:
    with pytest.raises(AssertionError, match=message):
        validate_enriched_table(_make_table(_make_record(0, **overrides)))


def test_columns_must_be_in_order() -> None:
    table = _make_table()
    with pytest.raises(AssertionError, match="out of order"):
        validate_enriched_table(table[list(reversed(table.columns))])


def test_missing_column() -> None:
    with pytest.raises(AssertionError, match="missing required columns"):
        validate_enriched_table(_make_table().drop(columns=["department"]))


def test_duplicate_ids_within_a_type() -> None:
    with pytest.raises(AssertionError, match="unique"):
        validate_enriched_table(_make_table(_make_record(3), _make_record(3)))


def test_find_out_of_bounds() -> None:
    table = _make_table(_make_record(0), _make_record(1, latitude=3.2), _make_record(2, latitude=-19.0))
    outside = find_out_of_bounds(table)
    assert outside["eventId"].tolist() == ["1", "2"]


def test_main_exit_status(tmp_path) -> None:
    good = export_csv([_make_record(0)], tmp_path / "good.csv")
    bad = export_csv([_make_record(0, type="Paleo")], tmp_path / "bad.csv")
    assert main([str(good)]) == 0
    assert main([str(bad)]) == 1
    assert main([str(tmp_path / "missing.csv")]) == 1
