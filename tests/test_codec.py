from __future__ import annotations

import pytest

from pathfinder.core import codec
from pathfinder.core.errors import DecodeError, EncodeError, PlanValidationError
from pathfinder.core.model import (
    DeviceIdentifiers,
    DeviceVersions,
    MovementPlan,
    MovementRequest,
    MovementStepItem,
    Step,
)


def test_movement_request_roundtrip_preserves_order() -> None:
    plan = MovementPlan(
        name="square",
        persist=False,
        steps=(
            Step(angle=0, direction="forward", distance=2.0),
            Step(angle=90, direction="forward", distance=2.0),
            Step(angle=-90, direction="backward", distance=100.0),
            Step(angle=270, direction="forward", distance=1.0),
        ),
    )

    body = codec.encode_movement_request(codec.plan_to_request(plan))
    decoded = codec.request_to_plan(codec.decode_movement_request(body))

    assert decoded == plan


def test_empty_step_list_roundtrip() -> None:
    plan = MovementPlan(name="idle", steps=())
    body = codec.encode_movement_request(codec.plan_to_request(plan))
    assert codec.request_to_plan(codec.decode_movement_request(body)) == plan


def test_encode_rejects_nan_distance() -> None:
    request = MovementRequest(
        name="x",
        persist=True,
        steps=(MovementStepItem(angle=0, direction="forward", distance=float("nan")),),
    )
    with pytest.raises(EncodeError):
        codec.encode_movement_request(request)


def test_validate_plan_collects_problems() -> None:
    plan = MovementPlan(
        name="",
        steps=(Step(angle=True, direction="forward", distance=1.0),),  # type: ignore[arg-type]
    )
    with pytest.raises(PlanValidationError) as exc:
        codec.validate_plan(plan)
    assert len(exc.value.problems) == 2
    assert "name" in exc.value.problems[0]
    assert "angle" in exc.value.problems[1]


def test_decode_movement_response_requires_moving() -> None:
    with pytest.raises(DecodeError, match="moving"):
        codec.decode_movement_response(b"{}")
    assert codec.decode_movement_response(b'{"moving": true}').moving is True


def test_decode_rejects_non_object() -> None:
    with pytest.raises(DecodeError):
        codec.decode_health(b"[]")


def test_decode_device_status_populates_features() -> None:
    body = b"""{
        "name": "rover-1",
        "uptime": 1234.5,
        "identifiers": {"long": "rover-0001-abcd", "short": "r1"},
        "versions": {"api": "v1", "app": "1.4.2"},
        "features": {"camera": true, "lidar": false}
    }"""

    status = codec.decode_device_status(body)

    assert status.name == "rover-1"
    assert status.uptime == 1234.5
    assert status.identifiers == DeviceIdentifiers(long="rover-0001-abcd", short="r1")
    assert status.versions == DeviceVersions(api="v1", app="1.4.2")
    assert status.features == {"camera": True, "lidar": False}


def test_decode_device_status_optional_blocks() -> None:
    status = codec.decode_device_status(b'{"name": "rover", "uptime": 3}')
    assert status.identifiers is None
    assert status.versions is None
    assert status.features == {}
    assert status.uptime == 3.0


def test_decode_battery_requires_integer_value() -> None:
    assert codec.decode_battery(b'{"value": 87, "unit": "%"}').value == 87
    with pytest.raises(DecodeError):
        codec.decode_battery(b'{"value": 87.5, "unit": "%"}')


def test_decode_wifi_networks() -> None:
    body = b'[{"ssid": "lab", "rssi": -41.5, "encrypted": true}, {"ssid": "guest", "rssi": -70, "encrypted": false}]'

    result = codec.decode_wifi_networks(body)

    assert [n.ssid for n in result.networks] == ["lab", "guest"]
    assert result.networks[1].rssi == -70.0
    assert result.networks[1].encrypted is False


def test_decode_wifi_networks_rejects_object() -> None:
    with pytest.raises(DecodeError, match="array"):
        codec.decode_wifi_networks(b'{"ssid": "lab"}')


def test_decode_error_response_is_best_effort() -> None:
    parsed = codec.decode_error_response(b'{"message": "locked", "status": 423}')
    assert parsed is not None
    assert parsed.message == "locked"
    assert parsed.status == 423
    assert codec.decode_error_response(b"<html>oops</html>") is None
