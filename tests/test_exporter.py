"""Unit tests for CSV export."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quake_atlas.data.events import EXPORT_COLUMNS, EnrichedEvent, EventType
from quake_atlas.data.exporter import (
    convert_to_frame,
    export_csv,
    format_csv_value,
    read_enriched_csv,
    smart_export_csv,
    stream_export_csv,
)
from quake_atlas.errors import ExportError


def _make_event(event_id: int, **overrides) -> EnrichedEvent:
    values = dict(
        event_id=event_id,
        utc_date=datetime(2007, 8, 15, 18, 40, 57, tzinfo=timezone.utc),
        longitude=-77.0,
        latitude=-12.0,
        depth=39.0,
        magnitude=7.9,
        year=2007,
        type=EventType.INSTRUMENTAL,
        district_id="150101",
        distance_from_coast_km=0.0,
        department="Lima",
        description="Lima",
    )
    values.update(overrides)
    return EnrichedEvent(**values)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        (float("nan"), ""),
        (7.0, "7"),
        (7.9, "7.9"),
        (-12.05, "-12.05"),
        (2007, "2007"),
        (True, "true"),
        (False, "false"),
        (EventType.HISTORICAL, "Historical"),
        (datetime(2007, 8, 15, 18, 40, 57, 120000, tzinfo=timezone.utc), "2007-08-15T18:40:57.120Z"),
        (datetime(1746, 10, 28, 22, 30, 1), "1746-10-28T22:30:01.000Z"),
        ({"a": 1, "b": [2, 3]}, '{"a":1;"b":[2;3]}'),
        ("Lima, Peru", "Lima, Peru"),
        (1e-7, "1e-7"),
        (1.5e-7, "1.5e-7"),
        (0.0000123, "0.0000123"),
        (1e21, "1e+21"),
        (1e20, "100000000000000000000"),
        (float("inf"), "Infinity"),
    ],
)
def test_format_csv_value(value, expected) -> None:
    assert format_csv_value(value) == expected


def test_header_comes_from_first_record() -> None:
    frame = convert_to_frame([_make_event(0), _make_event(1)])
    assert list(frame.columns) == EXPORT_COLUMNS
    assert frame.loc[0, "utcDate"] == "2007-08-15T18:40:57.000Z"
    assert frame.loc[0, "distanceFromCoastKm"] == "0"
    assert frame.loc[0, "type"] == "Instrumental"


def test_mapping_records_are_accepted() -> None:
    frame = convert_to_frame([{"b": 1, "a": None}, {"a": "x"}])
    assert list(frame.columns) == ["b", "a"]
    assert frame.values.tolist() == [["1", ""], ["", "x"]]


def test_empty_input_raises(tmp_path) -> None:
    with pytest.raises(ExportError, match="non-empty"):
        export_csv([], tmp_path / "out.csv")
    with pytest.raises(ExportError):
        stream_export_csv([], tmp_path / "out.csv")
    assert not (tmp_path / "out.csv").exists()


def test_special_characters_are_quoted(tmp_path) -> None:
    path = export_csv([{"name": 'Say "hi", Lima', "extra": {"k": "v", "n": 1}}], tmp_path / "quoted.csv")
    lines = path.read_text(encoding="utf-8").split("\n")
    assert lines[0] == "name,extra"
    assert lines[1] == '"Say ""hi"", Lima","{""k"":""v"";""n"":1}"'


def test_round_trip_keeps_rows_and_ids(tmp_path) -> None:
    events = [_make_event(k, description=None if k % 2 else "Lima") for k in range(5)]
    path = export_csv(events, tmp_path / "nested" / "output.csv")
    table = read_enriched_csv(path)
    assert list(table.columns) == EXPORT_COLUMNS
    assert len(table) == len(events)
    assert set(table["eventId"]) == {str(event.event_id) for event in events}
    assert table.loc[1, "description"] == ""


def test_buffered_and_streamed_output_are_identical(tmp_path) -> None:
    events = [_make_event(k, magnitude=5.0 + k / 10, description="Lima, Callao") for k in range(7)]
    buffered = export_csv(events, tmp_path / "buffered.csv")
    streamed = stream_export_csv(events, tmp_path / "streamed.csv", chunk_size=3)
    assert buffered.read_bytes() == streamed.read_bytes()
    assert buffered.read_bytes().endswith(b"\n")


def test_smart_export_switches_to_streaming(tmp_path, caplog) -> None:
    events = [_make_event(k) for k in range(4)]
    with caplog.at_level("INFO", logger="quake_atlas.data.exporter"):
        smart_export_csv(events, tmp_path / "small.csv", stream_threshold=10)
        assert "streaming" not in caplog.text
        smart_export_csv(events, tmp_path / "large.csv", stream_threshold=3, chunk_size=2)
        assert "streaming" in caplog.text
    assert (tmp_path / "small.csv").read_bytes() == (tmp_path / "large.csv").read_bytes()


def test_failed_stream_leaves_no_files(tmp_path) -> None:
    path = tmp_path / "output.csv"
    with pytest.raises(ExportError, match="Cannot export"):
        stream_export_csv([_make_event(0), _make_event(1), object()], path, chunk_size=1)
    assert list(tmp_path.iterdir()) == []
