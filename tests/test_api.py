from __future__ import annotations

import json

import httpx

from pathfinder.api import Client, DiagnosticKind, MovementPlan, Step


class FakeDevice:
    """In-memory stand-in for the vehicle's HTTP API."""

    def __init__(self) -> None:
        self.plan: dict | None = None
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = (request.method, request.url.path)
        if route == ("GET", "/v1/device/battery"):
            return httpx.Response(200, json={"value": 64, "unit": "%"})
        if route == ("POST", "/v1/movement"):
            self.plan = json.loads(request.content)
            return httpx.Response(201, json={"moving": True})
        if route == ("GET", "/v1/movement"):
            if self.plan is None:
                return httpx.Response(404, json={"message": "no movement plan", "status": 404})
            return httpx.Response(200, json={"moving": True})
        if route == ("DELETE", "/v1/movement"):
            if self.plan is None:
                return httpx.Response(404, json={"message": "no movement plan", "status": 404})
            self.plan = None
            return httpx.Response(200, json={"moving": False})
        return httpx.Response(404, json={"message": "not found", "status": 404})


def _client(device: FakeDevice) -> Client:
    return Client("http://rover.local", api_key="k", http_transport=httpx.MockTransport(device))


def test_battery_probe() -> None:
    device = FakeDevice()
    with _client(device) as client:
        result = client.battery()
    assert result.state.value == 64
    assert device.requests[0].headers["x-api-key"] == "k"


def test_plan_lifecycle_end_to_end() -> None:
    device = FakeDevice()
    desired = MovementPlan(name="example", persist=True, steps=(Step(angle=0, direction="forward", distance=1),))

    with _client(device) as client:
        created = client.create_plan(desired)
        assert created.state == desired
        assert device.plan == {
            "name": "example",
            "persist": True,
            "steps": [{"angle": 0, "direction": "forward", "distance": 1.0}],
        }

        assert client.read_plan(created.state).state == desired

        changed = MovementPlan(name="example", persist=False, steps=desired.steps)
        sent_before = len(device.requests)
        updated = client.update_plan(created.state, changed)
        assert updated.state == changed
        assert len(device.requests) == sent_before

        deleted = client.delete_plan(updated.state)
        assert deleted.state is None
        assert not deleted.has_error

        assert client.read_plan(changed).state is None
        assert client.delete_plan(changed).state is None


def test_invalid_plan_is_rejected_locally() -> None:
    device = FakeDevice()
    desired = MovementPlan(
        name="example",
        steps=(
            Step(angle=0, direction="forward", distance=1),
            Step(angle=90, direction="right", distance=1),
        ),
    )

    with _client(device) as client:
        result = client.create_plan(desired)

    assert result.state is None
    assert result.diagnostics[0].kind is DiagnosticKind.VALIDATION
    assert device.requests == []
