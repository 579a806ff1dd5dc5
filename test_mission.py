"""
Tests for mission loading, repair and fallback.
"""

import json
from pathlib import Path

import pytest
import yaml

from replay.mission import (
    FALLBACK_MISSION, EventType, MissionError, Side, load_mission, parse_mission,
)

DATA_PATH = Path(__file__).parent / "data"


def minimal(**overrides):
    data = {
        "duration_s": 60,
        "center": {"lat": 10.0, "lng": 20.0},
        "aircraft": [
            {"id": "A", "callsign": "ACE", "side": "RAF", "path": [
                {"t": 0, "lat": 10.0, "lng": 20.0}, {"t": 60, "lat": 10.5, "lng": 20.5},
            ]},
        ],
        "events": [{"t": 5, "type": "contact", "text": "hello"}],
    }
    data.update(overrides)
    return data


def test_bundled_mission_loads_cleanly():
    result = load_mission(DATA_PATH / "missions" / "pemberley.yaml")
    assert not result.fallback_used
    assert result.warnings == []
    assert result.mission.title == "Pemberley Dogfight"
    assert result.mission.get_track("ELIZABETH").side == Side.FRIENDLY


def test_loads_json_and_yaml(tmp_path):
    json_path = tmp_path / "m.json"
    json_path.write_text(json.dumps(minimal()))
    yaml_path = tmp_path / "m.yaml"
    yaml_path.write_text(yaml.safe_dump(minimal()))
    for path in (json_path, yaml_path):
        result = load_mission(path)
        assert result.mission.duration_s == 60
        assert result.mission.center == (10.0, 20.0)
        assert result.mission.aircraft[0].side == Side.FRIENDLY
        assert result.source == str(path)


def test_missing_file_falls_back_with_warning(tmp_path):
    result = load_mission(tmp_path / "nope.json")
    assert result.fallback_used
    assert "built-in sample" in result.warnings[0]
    assert result.mission.title == "Fallback mission"


def test_malformed_file_falls_back(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")
    assert load_mission(path).fallback_used


def test_no_mission_at_all_is_a_boot_failure(tmp_path):
    with pytest.raises(MissionError):
        load_mission(tmp_path / "nope.json", fallback=None)
    with pytest.raises(MissionError):
        load_mission(None, fallback=None)


def test_structural_errors_raise():
    with pytest.raises(MissionError):
        parse_mission([1, 2, 3])
    with pytest.raises(MissionError):
        parse_mission({"duration_s": 10})


def test_item_level_repairs():
    data = minimal(
        duration_s=-1,
        aircraft=[
            {"id": "A", "side": "purple", "path": [
                {"t": 30, "lat": 1, "lng": 1},
                {"t": 10, "lat": 0, "lng": 0},
                {"t": 20, "lat": "x", "lng": 0},
            ]},
            {"id": "A", "side": "enemy", "path": []},
            {"callsign": "NOID"},
        ],
        events=[
            {"t": 1, "type": "explosion", "text": "?"},
            {"type": "kill"},
            {"t": 2, "type": "kill", "target": "GHOST"},
            {"t": 3, "type": "note", "text": "a"},
            {"t": 3, "type": "note", "text": "b"},
        ],
    )
    result = parse_mission(data, default_duration_s=90)
    mission = result.mission
    assert mission.duration_s == 90
    assert len(mission.aircraft) == 1
    track = mission.aircraft[0]
    assert track.side == Side.HOSTILE
    assert track.callsign == "A"
    assert [w.t for w in track.path] == [10, 30]
    assert [e.type for e in mission.events] == [
        EventType.NOTE, EventType.KILL, EventType.NOTE, EventType.NOTE,
    ]
    text = "\n".join(result.warnings)
    assert "unknown target GHOST" in text
    assert "never fire" in text
    assert "sorted" in text


def test_default_center_when_missing():
    result = parse_mission(minimal(center=None))
    assert result.mission.center == (51.505, -0.09)


def test_to_dict_round_trips():
    mission = parse_mission(FALLBACK_MISSION).mission
    again = parse_mission(mission.to_dict()).mission
    assert again == mission


def test_generated_sample_mission_is_clean():
    from gen_sample_mission import build_mission

    result = parse_mission(build_mission(pairs=3, duration=180.0))
    assert result.warnings == []
    assert len(result.mission.aircraft) == 6
    kills = [e for e in result.mission.events if e.type == EventType.KILL]
    assert len(kills) == 3
    assert all(k.t <= 180.0 for k in kills)


@pytest.mark.parametrize("name", ["bad.yaml", "bad.json"])
def test_undecodable_file_falls_back(tmp_path, name):
    path = tmp_path / name
    path.write_bytes(b"\xff\xfe\x00garbage")
    result = load_mission(path)
    assert result.fallback_used
    assert "built-in sample" in result.warnings[0]


def test_wrong_field_types_are_repaired():
    data = dict(
        FALLBACK_MISSION,
        meta="Operation X",
        aircraft=[
            {"id": "A", "side": "friendly", "path": 5},
            {"id": "B", "side": "hostile", "path": [
                "north", {"t": 0, "lat": 1, "lng": 1}, {"t": 10, "lat": 2, "lng": 2},
            ]},
        ],
    )
    result = load_mission(None, fallback=data)
    mission = result.mission
    assert mission.title == "MISSION"
    assert mission.get_track("A").path == ()
    assert len(mission.get_track("B").path) == 2
    text = "\n".join(result.warnings)
    assert "meta" in text
    assert "path is not a list" in text
    assert "malformed waypoint" in text
