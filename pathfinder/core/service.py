"""Service layer used by the CLI and the public API."""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from pathfinder.core.diagnostics import Result
from pathfinder.core.errors import UnknownProbeError
from pathfinder.core.model import Config, MovementPlan
from pathfinder.core.movement import MovementPlanReconciler
from pathfinder.core.probe import Probe, ProbeSpec, build_probes
from pathfinder.transports.base import Transport
from pathfinder.transports.http import HTTPTransport

LOGGER = logging.getLogger(__name__)


class Action(str, enum.Enum):
    NOOP = "noop"
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"


@dataclass(frozen=True)
class ApplyResult:
    """What ``apply`` decided and how it ended.

    ``action`` is ``None`` when refreshing the tracked plan failed and nothing
    was attempted.
    """

    action: Action | None
    result: Result[MovementPlan]


def diff(desired: MovementPlan | None, tracked: MovementPlan | None) -> Action:
    if desired is None:
        return Action.DELETE if tracked is not None else Action.NOOP
    if tracked is None:
        return Action.CREATE
    if desired.name != tracked.name:
        return Action.REPLACE
    if desired == tracked:
        return Action.NOOP
    return Action.UPDATE


class PathfinderService:
    def __init__(
        self,
        config: Config,
        *,
        transport: Transport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport or HTTPTransport(
            config.provider.address,
            api_key=config.provider.api_key,
            timeout_s=config.provider.timeout_s,
        )
        self.probes: dict[str, Probe] = build_probes(self.transport)
        self.reconciler = MovementPlanReconciler(self.transport)

    def list_probes(self) -> list[ProbeSpec]:
        return [probe.spec for probe in self.probes.values()]

    def probe(
        self,
        name: str,
        tracked: Any = None,
        *,
        cancel: threading.Event | None = None,
    ) -> Result[Any]:
        probe = self.probes.get(name)
        if probe is None:
            available = ", ".join(self.probes)
            raise UnknownProbeError(f"Unknown probe '{name}'. Available: {available}")
        return probe.read(tracked, cancel=cancel)

    def probe_all(
        self,
        tracked: dict[str, Any] | None = None,
        *,
        max_workers: int = 6,
        cancel: threading.Event | None = None,
    ) -> dict[str, Result[Any]]:
        tracked = tracked or {}
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="probe") as pool:
            futures = {
                name: pool.submit(probe.read, tracked.get(name), cancel=cancel)
                for name, probe in self.probes.items()
            }
            return {name: future.result() for name, future in futures.items()}

    def create_plan(self, desired: MovementPlan, *, cancel: threading.Event | None = None) -> Result[MovementPlan]:
        return self.reconciler.create(desired, cancel=cancel)

    def read_plan(self, tracked: MovementPlan, *, cancel: threading.Event | None = None) -> Result[MovementPlan]:
        return self.reconciler.read(tracked, cancel=cancel)

    def update_plan(self, tracked: MovementPlan | None, desired: MovementPlan) -> Result[MovementPlan]:
        return self.reconciler.update(tracked, desired)

    def delete_plan(self, tracked: MovementPlan, *, cancel: threading.Event | None = None) -> Result[MovementPlan]:
        return self.reconciler.delete(tracked, cancel=cancel)

    def refresh(
        self,
        tracked: MovementPlan | None,
        *,
        cancel: threading.Event | None = None,
    ) -> Result[MovementPlan]:
        if tracked is None:
            return Result(state=None)
        return self.reconciler.read(tracked, cancel=cancel)

    def plan(
        self,
        desired: MovementPlan | None,
        tracked: MovementPlan | None,
        *,
        cancel: threading.Event | None = None,
    ) -> ApplyResult:
        refreshed = self.refresh(tracked, cancel=cancel)
        if refreshed.has_error:
            return ApplyResult(action=None, result=refreshed)
        return ApplyResult(action=diff(desired, refreshed.state), result=refreshed)

    def apply(
        self,
        desired: MovementPlan | None,
        tracked: MovementPlan | None,
        *,
        cancel: threading.Event | None = None,
    ) -> ApplyResult:
        planned = self.plan(desired, tracked, cancel=cancel)
        if planned.action is None:
            return planned
        current = planned.result.state
        action = planned.action
        LOGGER.info("Applying movement plan: %s", action.value)

        if action is Action.NOOP:
            return planned
        if action is Action.CREATE:
            return ApplyResult(action, self.reconciler.create(desired, cancel=cancel))
        if action is Action.UPDATE:
            return ApplyResult(action, self.reconciler.update(current, desired))
        if action is Action.DELETE:
            return ApplyResult(action, self.reconciler.delete(current, cancel=cancel))

        removed = self.reconciler.delete(current, cancel=cancel)
        if removed.has_error:
            return ApplyResult(action, removed)
        return ApplyResult(action, self.reconciler.create(desired, cancel=cancel))

    def destroy(
        self,
        tracked: MovementPlan | None,
        *,
        cancel: threading.Event | None = None,
    ) -> Result[MovementPlan]:
        if tracked is None:
            return Result(state=None)
        return self.reconciler.delete(tracked, cancel=cancel)

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()
