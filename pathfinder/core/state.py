"""JSON file holding tracked snapshots between invocations."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field, is_dataclass
from pathlib import Path
from typing import Any

from pathfinder.core import codec
from pathfinder.core.errors import StateError
from pathfinder.core.model import MovementPlan

LOGGER = logging.getLogger(__name__)

STATE_ENV = "PATHFINDER_STATE"
STATE_VERSION = 1


@dataclass
class TrackedState:
    movement: MovementPlan | None = None
    probes: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "movement": codec.plan_to_dict(self.movement) if self.movement else None,
            "probes": {
                name: asdict(value) if is_dataclass(value) else value
                for name, value in sorted(self.probes.items())
            },
        }


def default_state_path() -> Path:
    return Path(os.environ.get(STATE_ENV, "pathfinder.state.json"))


class StateFile:
    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> TrackedState:
        if not self.path.exists():
            return TrackedState()
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StateError(f"Could not read state file {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise StateError(f"State file {self.path} is not valid JSON: {exc}") from exc

        if not isinstance(doc, dict) or doc.get("version") != STATE_VERSION:
            raise StateError(f"State file {self.path} has an unsupported layout")

        movement = doc.get("movement")
        try:
            plan = codec.plan_from_dict(movement) if movement else None
        except (KeyError, TypeError, ValueError) as exc:
            raise StateError(f"State file {self.path} has a malformed movement entry: {exc}") from exc
        return TrackedState(movement=plan, probes=dict(doc.get("probes") or {}))

    def save(self, state: TrackedState) -> None:
        text = json.dumps(state.to_dict(), indent=2, sort_keys=True) + "\n"
        directory = self.path.parent if str(self.path.parent) else Path(".")
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise StateError(f"Could not write state file {self.path}: {exc}") from exc
        LOGGER.debug("Wrote state to %s", self.path)
