from __future__ import annotations

import json
from pathlib import Path

import pytest

from pathfinder.core.errors import StateError
from pathfinder.core.model import BatteryStatus, MovementPlan, Step
from pathfinder.core.state import StateFile, TrackedState


def test_missing_file_loads_empty_state(tmp_path: Path) -> None:
    state = StateFile(tmp_path / "pathfinder.state.json").load()
    assert state.movement is None
    assert state.probes == {}


def test_save_then_load(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "pathfinder.state.json"
    plan = MovementPlan(
        name="example",
        persist=False,
        steps=(Step(angle=0, direction="forward", distance=1.0), Step(angle=45, direction="backward", distance=7.5)),
    )
    state_file = StateFile(path)

    state_file.save(TrackedState(movement=plan, probes={"battery": BatteryStatus(value=90, unit="%")}))
    loaded = state_file.load()

    assert loaded.movement == plan
    assert loaded.probes == {"battery": {"value": 90, "unit": "%"}}
    assert json.loads(path.read_text(encoding="utf-8"))["version"] == 1
    assert [p.name for p in path.parent.iterdir()] == ["pathfinder.state.json"]


def test_corrupt_file_raises_state_error(tmp_path: Path) -> None:
    path = tmp_path / "pathfinder.state.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StateError):
        StateFile(path).load()


def test_unknown_version_raises_state_error(tmp_path: Path) -> None:
    path = tmp_path / "pathfinder.state.json"
    path.write_text('{"version": 99}', encoding="utf-8")
    with pytest.raises(StateError):
        StateFile(path).load()


def test_malformed_movement_raises_state_error(tmp_path: Path) -> None:
    path = tmp_path / "pathfinder.state.json"
    path.write_text('{"version": 1, "movement": {"steps": []}}', encoding="utf-8")
    with pytest.raises(StateError):
        StateFile(path).load()
