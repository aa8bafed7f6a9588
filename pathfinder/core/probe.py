"""Read-only status probes.

One :class:`Probe` class covers every status endpoint; the six instances differ
only in path and response decoder.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from pathfinder.core import codec
from pathfinder.core.diagnostics import OPERATIONAL_ERRORS, Result, translate
from pathfinder.core.errors import UnexpectedStatusError
from pathfinder.transports.base import HTTPResponse, Transport

T = TypeVar("T")
LOGGER = logging.getLogger(__name__)
_BODY_EXCERPT = 160


def expect_success(response: HTTPResponse, *, method: str, path: str) -> None:
    """Raise :class:`UnexpectedStatusError` unless the status is 2xx."""
    if response.ok:
        return
    error = codec.decode_error_response(response.body)
    if error is not None:
        detail = error.message
    else:
        detail = response.body.decode("utf-8", errors="replace").strip()[:_BODY_EXCERPT] or "empty body"
    raise UnexpectedStatusError(response.status, f"{method} {path} returned {response.status}: {detail}")


@dataclass(frozen=True)
class ProbeSpec(Generic[T]):
    name: str
    path: str
    decode: Callable[[bytes], T]
    description: str


class Probe(Generic[T]):
    def __init__(self, spec: ProbeSpec[T], transport: Transport) -> None:
        self.spec = spec
        self._transport = transport

    @property
    def name(self) -> str:
        return self.spec.name

    def read(self, tracked: T | None = None, *, cancel: threading.Event | None = None) -> Result[T]:
        """Issue one GET and decode the result.

        A 404 drops ``tracked``; any failure leaves it as it was.
        """
        path = self.spec.path
        try:
            response = self._transport.send("GET", path, cancel=cancel)
            if response.not_found:
                LOGGER.info("%s probe: %s returned 404, dropping tracked value", self.name, path)
                return Result(state=None)
            expect_success(response, method="GET", path=path)
            return Result(state=self.spec.decode(response.body))
        except OPERATIONAL_ERRORS as exc:
            LOGGER.debug("%s probe failed: %s", self.name, exc)
            return Result(state=tracked, diagnostics=translate(exc, operation=f"{self.name} read"))


PROBE_SPECS: tuple[ProbeSpec, ...] = (
    ProbeSpec("device", "/v1/device/status", codec.decode_device_status, "Device identity and versions"),
    ProbeSpec("battery", "/v1/device/battery", codec.decode_battery, "Battery level"),
    ProbeSpec("wifi", "/v1/device/wifi", codec.decode_wifi_networks, "Visible Wi-Fi networks"),
    ProbeSpec("health", "/v1/healthz", codec.decode_health, "Health check"),
    ProbeSpec("ready", "/v1/readyz", codec.decode_ready, "Readiness check"),
    ProbeSpec("movement_lock", "/v1/movement/lock", codec.decode_movement_lock, "Movement lock status"),
)


def build_probes(transport: Transport) -> dict[str, Probe]:
    return {spec.name: Probe(spec, transport) for spec in PROBE_SPECS}
