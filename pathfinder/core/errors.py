"""Domain-specific errors for pathfinder."""

from __future__ import annotations


class PathfinderError(Exception):
    """Base error for pathfinder."""


class ConfigValidationError(PathfinderError):
    """Raised when a configuration file does not conform to schema or semantics."""


class ConfigLoadError(PathfinderError):
    """Raised when reading the configuration file fails."""


class StateError(PathfinderError):
    """Raised when the tracked-state file cannot be read or written."""


class PlanValidationError(PathfinderError):
    """Raised when a movement plan violates a declared constraint.

    Every violation found is kept in ``problems`` so callers can report all of
    them at once.
    """

    def __init__(self, problems: list[str] | tuple[str, ...]) -> None:
        self.problems = tuple(problems)
        super().__init__("; ".join(self.problems))


class EncodeError(PathfinderError):
    """Raised when a request value cannot be serialized."""


class DecodeError(PathfinderError):
    """Raised when a response body does not decode into the expected shape."""


class UnexpectedStatusError(PathfinderError):
    """Raised on a non-404, non-2xx HTTP status."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        super().__init__(message)


class TransportError(PathfinderError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised when the device cannot be reached."""


class TransportSendError(TransportError):
    """Raised when the request cannot be built or the round trip fails."""


class TransportTimeoutError(TransportError):
    """Raised when the round trip does not complete in time."""


class TransportCancelledError(TransportError):
    """Raised when the caller cancels an in-flight round trip."""


class UnknownProbeError(PathfinderError):
    """Raised when a probe name does not match any status endpoint."""
