"""JSON envelope codec for the device API.

Each endpoint shape has a ``decode_*`` function that turns a raw response body
into a typed record, raising :class:`DecodeError` on malformed JSON or a
missing/mistyped field. Requests go the other way through
:func:`encode_movement_request`, which raises :class:`EncodeError` before any
network call when a value has no JSON representation.
"""

from __future__ import annotations

import json
from typing import Any

from pathfinder.core.errors import DecodeError, EncodeError, PlanValidationError
from pathfinder.core.model import (
    DIRECTIONS,
    MAX_DISTANCE,
    MAX_STEPS,
    MIN_DISTANCE,
    BatteryStatus,
    DeviceIdentifiers,
    DeviceStatus,
    DeviceVersions,
    ErrorResponse,
    HealthStatus,
    MovementLockStatus,
    MovementPlan,
    MovementRequest,
    MovementResponse,
    MovementStepItem,
    ReadyStatus,
    Step,
    WifiNetwork,
    WifiNetworks,
)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_plan(plan: MovementPlan) -> None:
    """Check a plan against its declared constraints.

    All violations are collected, in step order, into a single
    :class:`PlanValidationError`.
    """
    problems: list[str] = []
    if not isinstance(plan.name, str) or not plan.name.strip():
        problems.append("name must be a non-empty string")
    if not isinstance(plan.persist, bool):
        problems.append("persist must be boolean true/false")
    if len(plan.steps) > MAX_STEPS:
        problems.append(f"steps must contain at most {MAX_STEPS} items, got {len(plan.steps)}")

    for index, step in enumerate(plan.steps):
        where = f"steps[{index}]"
        if not _is_int(step.angle):
            problems.append(f"{where}.angle must be an integer, got {step.angle!r}")
        if step.direction not in DIRECTIONS:
            allowed = ", ".join(DIRECTIONS)
            problems.append(f"{where}.direction must be one of: {allowed}; got {step.direction!r}")
        if not _is_number(step.distance) or not MIN_DISTANCE <= step.distance <= MAX_DISTANCE:
            problems.append(
                f"{where}.distance must be between {MIN_DISTANCE} and {MAX_DISTANCE}, got {step.distance!r}"
            )

    if problems:
        raise PlanValidationError(problems)


def plan_to_request(plan: MovementPlan) -> MovementRequest:
    return MovementRequest(
        name=plan.name,
        persist=plan.persist,
        steps=tuple(
            MovementStepItem(angle=step.angle, direction=step.direction, distance=step.distance)
            for step in plan.steps
        ),
    )


def request_to_plan(request: MovementRequest) -> MovementPlan:
    return MovementPlan(
        name=request.name,
        persist=request.persist,
        steps=tuple(
            Step(angle=item.angle, direction=item.direction, distance=item.distance)
            for item in request.steps
        ),
    )


def encode_movement_request(request: MovementRequest) -> bytes:
    for index, item in enumerate(request.steps):
        if not _INT64_MIN <= item.angle <= _INT64_MAX:
            raise EncodeError(f"steps[{index}].angle {item.angle} does not fit in a 64-bit integer")
    doc = {
        "name": request.name,
        "persist": request.persist,
        "steps": [
            {"angle": item.angle, "direction": item.direction, "distance": float(item.distance)}
            for item in request.steps
        ],
    }
    try:
        return json.dumps(doc, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError, OverflowError) as exc:
        raise EncodeError(f"Could not encode movement request: {exc}") from exc


def _load(body: bytes, shape: str) -> Any:
    try:
        return json.loads(body.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise DecodeError(f"{shape} response is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DecodeError(f"{shape} response is not valid JSON: {exc}") from exc


def _object(doc: Any, shape: str) -> dict[str, Any]:
    if not isinstance(doc, dict):
        raise DecodeError(f"{shape} response must be a JSON object, got {type(doc).__name__}")
    return doc


def _field(doc: dict[str, Any], key: str, shape: str, kind: str) -> Any:
    if key not in doc:
        raise DecodeError(f"{shape} response is missing required field '{key}'")
    value = doc[key]
    checks = {
        "bool": lambda v: isinstance(v, bool),
        "int": _is_int,
        "number": _is_number,
        "str": lambda v: isinstance(v, str),
    }
    if not checks[kind](value):
        raise DecodeError(f"{shape} response field '{key}' must be {kind}, got {value!r}")
    return value


def decode_movement_request(body: bytes) -> MovementRequest:
    shape = "movement request"
    doc = _object(_load(body, shape), shape)
    raw_steps = doc.get("steps")
    if not isinstance(raw_steps, list):
        raise DecodeError(f"{shape} field 'steps' must be a list")
    steps = []
    for raw in raw_steps:
        item = _object(raw, "movement step")
        steps.append(
            MovementStepItem(
                angle=_field(item, "angle", "movement step", "int"),
                direction=_field(item, "direction", "movement step", "str"),
                distance=float(_field(item, "distance", "movement step", "number")),
            )
        )
    return MovementRequest(
        name=_field(doc, "name", shape, "str"),
        persist=_field(doc, "persist", shape, "bool"),
        steps=tuple(steps),
    )


def decode_movement_response(body: bytes) -> MovementResponse:
    doc = _object(_load(body, "movement"), "movement")
    return MovementResponse(moving=_field(doc, "moving", "movement", "bool"))


def decode_device_status(body: bytes) -> DeviceStatus:
    shape = "device status"
    doc = _object(_load(body, shape), shape)

    identifiers = None
    if doc.get("identifiers") is not None:
        raw = _object(doc["identifiers"], "device identifiers")
        identifiers = DeviceIdentifiers(
            long=_field(raw, "long", "device identifiers", "str"),
            short=_field(raw, "short", "device identifiers", "str"),
        )

    versions = None
    if doc.get("versions") is not None:
        raw = _object(doc["versions"], "device versions")
        versions = DeviceVersions(
            api=_field(raw, "api", "device versions", "str"),
            app=_field(raw, "app", "device versions", "str"),
        )

    features: dict[str, bool] = {}
    if doc.get("features") is not None:
        raw = _object(doc["features"], "device features")
        for key in raw:
            features[key] = _field(raw, key, "device features", "bool")

    return DeviceStatus(
        name=_field(doc, "name", shape, "str"),
        uptime=float(_field(doc, "uptime", shape, "number")),
        identifiers=identifiers,
        versions=versions,
        features=features,
    )


def decode_battery(body: bytes) -> BatteryStatus:
    doc = _object(_load(body, "battery"), "battery")
    return BatteryStatus(
        value=_field(doc, "value", "battery", "int"),
        unit=_field(doc, "unit", "battery", "str"),
    )


def decode_wifi_networks(body: bytes) -> WifiNetworks:
    doc = _load(body, "wifi")
    if not isinstance(doc, list):
        raise DecodeError(f"wifi response must be a JSON array, got {type(doc).__name__}")
    networks = []
    for raw in doc:
        item = _object(raw, "wifi network")
        networks.append(
            WifiNetwork(
                ssid=_field(item, "ssid", "wifi network", "str"),
                rssi=float(_field(item, "rssi", "wifi network", "number")),
                encrypted=_field(item, "encrypted", "wifi network", "bool"),
            )
        )
    return WifiNetworks(networks=tuple(networks))


def decode_health(body: bytes) -> HealthStatus:
    doc = _object(_load(body, "health"), "health")
    return HealthStatus(healthy=_field(doc, "healthy", "health", "bool"))


def decode_ready(body: bytes) -> ReadyStatus:
    doc = _object(_load(body, "ready"), "ready")
    return ReadyStatus(ready=_field(doc, "ready", "ready", "bool"))


def decode_movement_lock(body: bytes) -> MovementLockStatus:
    doc = _object(_load(body, "movement lock"), "movement lock")
    return MovementLockStatus(locked=_field(doc, "locked", "movement lock", "bool"))


def decode_error_response(body: bytes) -> ErrorResponse | None:
    """Best-effort parse of the device's ``{message, status}`` error body."""
    try:
        doc = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(doc, dict) or not isinstance(doc.get("message"), str):
        return None
    status = doc.get("status")
    return ErrorResponse(message=doc["message"], status=status if _is_int(status) else None)


def plan_to_dict(plan: MovementPlan) -> dict[str, Any]:
    return {
        "name": plan.name,
        "persist": plan.persist,
        "steps": [
            {"angle": step.angle, "direction": step.direction, "distance": step.distance}
            for step in plan.steps
        ],
    }


def plan_from_dict(doc: dict[str, Any]) -> MovementPlan:
    return MovementPlan(
        name=doc["name"],
        persist=doc.get("persist", True),
        steps=tuple(
            Step(angle=raw["angle"], direction=raw["direction"], distance=float(raw["distance"]))
            for raw in doc.get("steps", [])
        ),
    )
