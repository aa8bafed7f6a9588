from __future__ import annotations

import pytest

from pathfinder.core.diagnostics import DiagnosticKind
from pathfinder.core.errors import TransportTimeoutError
from pathfinder.core.model import BatteryStatus, HealthStatus
from pathfinder.core.probe import PROBE_SPECS, build_probes
from pathfinder.transports.base import HTTPResponse


class FakeTransport:
    def __init__(self, responses: dict[str, HTTPResponse] | None = None, error: Exception | None = None) -> None:
        self.responses = responses or {}
        self.error = error
        self.calls: list[tuple[str, str, bytes]] = []

    def send(self, method: str, path: str, body: bytes = b"", *, cancel=None) -> HTTPResponse:
        self.calls.append((method, path, body))
        if self.error is not None:
            raise self.error
        return self.responses[path]


SAMPLE_BODIES = {
    "/v1/device/status": b'{"name": "rover", "uptime": 10.5}',
    "/v1/device/battery": b'{"value": 80, "unit": "%"}',
    "/v1/device/wifi": b'[{"ssid": "lab", "rssi": -40.0, "encrypted": true}]',
    "/v1/healthz": b'{"healthy": true}',
    "/v1/readyz": b'{"ready": false}',
    "/v1/movement/lock": b'{"locked": true}',
}


def test_six_probes_cover_every_status_endpoint() -> None:
    assert [spec.name for spec in PROBE_SPECS] == [
        "device",
        "battery",
        "wifi",
        "health",
        "ready",
        "movement_lock",
    ]
    assert {spec.path for spec in PROBE_SPECS} == set(SAMPLE_BODIES)


@pytest.mark.parametrize("spec", PROBE_SPECS, ids=lambda spec: spec.name)
def test_probe_issues_single_get_and_decodes(spec) -> None:
    transport = FakeTransport({path: HTTPResponse(200, body) for path, body in SAMPLE_BODIES.items()})
    probe = build_probes(transport)[spec.name]

    result = probe.read()

    assert not result.has_error
    assert result.state is not None
    assert transport.calls == [("GET", spec.path, b"")]


@pytest.mark.parametrize("spec", PROBE_SPECS, ids=lambda spec: spec.name)
def test_probe_404_clears_tracked_without_error(spec) -> None:
    transport = FakeTransport({spec.path: HTTPResponse(404, b"")})
    probe = build_probes(transport)[spec.name]

    result = probe.read(tracked=object())

    assert result.state is None
    assert result.diagnostics == ()


def test_probe_values() -> None:
    transport = FakeTransport({path: HTTPResponse(200, body) for path, body in SAMPLE_BODIES.items()})
    probes = build_probes(transport)

    assert probes["battery"].read().state == BatteryStatus(value=80, unit="%")
    assert probes["health"].read().state == HealthStatus(healthy=True)
    assert probes["movement_lock"].read().state.locked is True


def test_probe_unexpected_status_keeps_tracked() -> None:
    transport = FakeTransport({"/v1/device/battery": HTTPResponse(500, b'{"message": "sensor offline", "status": 500}')})
    tracked = BatteryStatus(value=55, unit="%")

    result = build_probes(transport)["battery"].read(tracked)

    assert result.state == tracked
    assert result.diagnostics[0].kind is DiagnosticKind.UNEXPECTED_STATUS
    assert result.diagnostics[0].status == 500
    assert "sensor offline" in result.diagnostics[0].detail


def test_probe_decode_failure_keeps_tracked() -> None:
    transport = FakeTransport({"/v1/healthz": HTTPResponse(200, b'{"healthy": 1}')})
    tracked = HealthStatus(healthy=True)

    result = build_probes(transport)["health"].read(tracked)

    assert result.state == tracked
    assert result.diagnostics[0].kind is DiagnosticKind.DECODE


def test_probe_transport_failure() -> None:
    transport = FakeTransport(error=TransportTimeoutError("GET /v1/readyz timed out"))

    result = build_probes(transport)["ready"].read()

    assert result.state is None
    assert result.diagnostics[0].kind is DiagnosticKind.TRANSPORT
    assert "timed out" in result.diagnostics[0].detail
    assert len(transport.calls) == 1
