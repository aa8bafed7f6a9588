"""Core data models used across the codec, probes, reconciler, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field

DIRECTIONS = ("forward", "backward")
MIN_DISTANCE = 1.0
MAX_DISTANCE = 100.0
MAX_STEPS = 50


@dataclass(frozen=True)
class Step:
    angle: int
    direction: str
    distance: float


@dataclass(frozen=True)
class MovementPlan:
    name: str
    steps: tuple[Step, ...] = ()
    persist: bool = True


@dataclass(frozen=True)
class DeviceIdentifiers:
    long: str
    short: str


@dataclass(frozen=True)
class DeviceVersions:
    api: str
    app: str


@dataclass(frozen=True)
class DeviceStatus:
    name: str
    uptime: float
    identifiers: DeviceIdentifiers | None = None
    versions: DeviceVersions | None = None
    features: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class BatteryStatus:
    value: int
    unit: str


@dataclass(frozen=True)
class WifiNetwork:
    ssid: str
    rssi: float
    encrypted: bool


@dataclass(frozen=True)
class WifiNetworks:
    networks: tuple[WifiNetwork, ...]


@dataclass(frozen=True)
class HealthStatus:
    healthy: bool


@dataclass(frozen=True)
class ReadyStatus:
    ready: bool


@dataclass(frozen=True)
class MovementLockStatus:
    locked: bool


# Wire records. These mirror the JSON bodies exchanged with /v1/movement.


@dataclass(frozen=True)
class MovementStepItem:
    angle: int
    direction: str
    distance: float


@dataclass(frozen=True)
class MovementRequest:
    name: str
    persist: bool
    steps: tuple[MovementStepItem, ...]


@dataclass(frozen=True)
class MovementResponse:
    moving: bool


@dataclass(frozen=True)
class ErrorResponse:
    message: str
    status: int | None = None


@dataclass(frozen=True)
class ProviderConfig:
    address: str
    api_key: str | None = None
    timeout_s: float = 10.0


@dataclass(frozen=True)
class Config:
    provider: ProviderConfig
    movement: MovementPlan | None = None
