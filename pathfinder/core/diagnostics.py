"""Translate internal failures into caller-facing diagnostics."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar

from pathfinder.core.errors import (
    DecodeError,
    EncodeError,
    PathfinderError,
    PlanValidationError,
    TransportError,
    UnexpectedStatusError,
)

T = TypeVar("T")


class DiagnosticKind(str, enum.Enum):
    VALIDATION = "validation"
    ENCODE = "encode"
    TRANSPORT = "transport"
    UNEXPECTED_STATUS = "unexpected-status"
    DECODE = "decode"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    summary: str
    detail: str | None = None
    status: int | None = None

    def __str__(self) -> str:
        text = f"[{self.kind.value}] {self.summary}"
        if self.detail:
            text = f"{text}: {self.detail}"
        return text


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of one lifecycle operation.

    ``state`` is what the caller should track from now on: the new snapshot on
    success, ``None`` when the remote object is absent, and the previously
    tracked value when the operation failed.
    """

    state: T | None
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def has_error(self) -> bool:
        return bool(self.diagnostics)


_SUMMARIES = {
    DiagnosticKind.ENCODE: "Unable to encode request",
    DiagnosticKind.TRANSPORT: "Unable to reach device",
    DiagnosticKind.UNEXPECTED_STATUS: "Device returned an unexpected status",
    DiagnosticKind.DECODE: "Unable to parse device response",
}


def translate(exc: PathfinderError, *, operation: str) -> tuple[Diagnostic, ...]:
    """Map an error raised during ``operation`` to one or more diagnostics."""
    if isinstance(exc, PlanValidationError):
        return tuple(
            Diagnostic(
                kind=DiagnosticKind.VALIDATION,
                summary=f"Invalid movement plan for {operation}",
                detail=problem,
            )
            for problem in exc.problems
        )
    if isinstance(exc, EncodeError):
        kind = DiagnosticKind.ENCODE
    elif isinstance(exc, TransportError):
        kind = DiagnosticKind.TRANSPORT
    elif isinstance(exc, UnexpectedStatusError):
        return (
            Diagnostic(
                kind=DiagnosticKind.UNEXPECTED_STATUS,
                summary=f"{_SUMMARIES[DiagnosticKind.UNEXPECTED_STATUS]} during {operation}",
                detail=str(exc),
                status=exc.status,
            ),
        )
    elif isinstance(exc, DecodeError):
        kind = DiagnosticKind.DECODE
    else:
        raise TypeError(f"No diagnostic mapping for {type(exc).__name__}") from exc
    return (Diagnostic(kind=kind, summary=f"{_SUMMARIES[kind]} during {operation}", detail=str(exc)),)


OPERATIONAL_ERRORS = (PlanValidationError, EncodeError, TransportError, UnexpectedStatusError, DecodeError)
