"""Stable public API for building tooling on top of pathfinder.

This module is the supported integration surface for third-party callers
(declarative-configuration hosts, scripts, services). Avoid importing from
private/internal modules unless intentionally depending on non-stable
internals.
"""

from __future__ import annotations

import threading
from typing import Any

import httpx

from pathfinder.core.diagnostics import Diagnostic, DiagnosticKind, Result
from pathfinder.core.errors import (
    ConfigLoadError,
    ConfigValidationError,
    DecodeError,
    EncodeError,
    PathfinderError,
    PlanValidationError,
    StateError,
    TransportCancelledError,
    TransportConnectError,
    TransportError,
    TransportSendError,
    TransportTimeoutError,
    UnexpectedStatusError,
    UnknownProbeError,
)
from pathfinder.core.model import (
    BatteryStatus,
    Config,
    DeviceIdentifiers,
    DeviceStatus,
    DeviceVersions,
    HealthStatus,
    MovementLockStatus,
    MovementPlan,
    ProviderConfig,
    ReadyStatus,
    Step,
    WifiNetwork,
    WifiNetworks,
)
from pathfinder.core.service import Action, ApplyResult, PathfinderService
from pathfinder.transports.base import HTTPResponse, Transport
from pathfinder.transports.http import HTTPTransport

__all__ = [
    "PathfinderError",
    "ConfigLoadError",
    "ConfigValidationError",
    "DecodeError",
    "EncodeError",
    "PlanValidationError",
    "StateError",
    "TransportError",
    "TransportCancelledError",
    "TransportConnectError",
    "TransportSendError",
    "TransportTimeoutError",
    "UnexpectedStatusError",
    "UnknownProbeError",
    "BatteryStatus",
    "Config",
    "DeviceIdentifiers",
    "DeviceStatus",
    "DeviceVersions",
    "HealthStatus",
    "MovementLockStatus",
    "MovementPlan",
    "ProviderConfig",
    "ReadyStatus",
    "Step",
    "WifiNetwork",
    "WifiNetworks",
    "Action",
    "ApplyResult",
    "Diagnostic",
    "DiagnosticKind",
    "Result",
    "HTTPResponse",
    "HTTPTransport",
    "Transport",
    "Client",
]


class Client:
    """Public client for the device's control API.

    Every lifecycle method returns a :class:`Result`; ``result.state`` is the
    value the caller should track afterwards and ``result.diagnostics`` lists
    anything that went wrong. Operational failures are never raised.
    """

    def __init__(
        self,
        address: str,
        *,
        api_key: str | None = None,
        timeout_s: float = 10.0,
        transport: Transport | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        config = Config(provider=ProviderConfig(address=address, api_key=api_key, timeout_s=timeout_s))
        if transport is None:
            transport = HTTPTransport(address, api_key=api_key, timeout_s=timeout_s, transport=http_transport)
        self._service = PathfinderService(config, transport=transport)

    def device(self, tracked: DeviceStatus | None = None) -> Result[DeviceStatus]:
        return self._service.probe("device", tracked)

    def battery(self, tracked: BatteryStatus | None = None) -> Result[BatteryStatus]:
        return self._service.probe("battery", tracked)

    def wifi(self, tracked: WifiNetworks | None = None) -> Result[WifiNetworks]:
        return self._service.probe("wifi", tracked)

    def health(self, tracked: HealthStatus | None = None) -> Result[HealthStatus]:
        return self._service.probe("health", tracked)

    def ready(self, tracked: ReadyStatus | None = None) -> Result[ReadyStatus]:
        return self._service.probe("ready", tracked)

    def movement_lock(self, tracked: MovementLockStatus | None = None) -> Result[MovementLockStatus]:
        return self._service.probe("movement_lock", tracked)

    def probe_all(self, tracked: dict[str, Any] | None = None) -> dict[str, Result[Any]]:
        return self._service.probe_all(tracked)

    def create_plan(
        self,
        desired: MovementPlan,
        *,
        cancel: threading.Event | None = None,
    ) -> Result[MovementPlan]:
        return self._service.create_plan(desired, cancel=cancel)

    def read_plan(
        self,
        tracked: MovementPlan,
        *,
        cancel: threading.Event | None = None,
    ) -> Result[MovementPlan]:
        return self._service.read_plan(tracked, cancel=cancel)

    def update_plan(self, tracked: MovementPlan | None, desired: MovementPlan) -> Result[MovementPlan]:
        return self._service.update_plan(tracked, desired)

    def delete_plan(
        self,
        tracked: MovementPlan,
        *,
        cancel: threading.Event | None = None,
    ) -> Result[MovementPlan]:
        return self._service.delete_plan(tracked, cancel=cancel)

    def close(self) -> None:
        self._service.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
