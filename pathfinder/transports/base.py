"""Transport interfaces."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class HTTPResponse:
    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def not_found(self) -> bool:
        return self.status == 404


class Transport(Protocol):
    def send(
        self,
        method: str,
        path: str,
        body: bytes = b"",
        *,
        cancel: threading.Event | None = None,
    ) -> HTTPResponse:
        """Perform one round trip against the device API."""
