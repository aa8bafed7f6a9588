"""HTTP transport implementation using httpx."""

from __future__ import annotations

import logging
import threading

import httpx

from pathfinder.core.errors import (
    ConfigValidationError,
    TransportCancelledError,
    TransportConnectError,
    TransportSendError,
    TransportTimeoutError,
)
from pathfinder.transports.base import HTTPResponse

LOGGER = logging.getLogger(__name__)
API_KEY_HEADER = "x-api-key"
_CANCEL_POLL_S = 0.05


class HTTPTransport:
    """Client bound to the device's base address.

    The underlying ``httpx.Client`` is built once and shared by every probe and
    the reconciler; nothing on it changes after construction.
    """

    def __init__(
        self,
        address: str,
        *,
        api_key: str | None = None,
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        address = (address or "").strip()
        if not address:
            raise ConfigValidationError("Device address must be set before any request is made.")
        self.address = address.rstrip("/")
        self.timeout_s = timeout_s
        headers = {"accept": "application/json"}
        if api_key:
            headers[API_KEY_HEADER] = api_key
        self._client = httpx.Client(
            base_url=self.address,
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    def send(
        self,
        method: str,
        path: str,
        body: bytes = b"",
        *,
        cancel: threading.Event | None = None,
    ) -> HTTPResponse:
        if cancel is not None and cancel.is_set():
            raise TransportCancelledError(f"{method} {path} cancelled before dispatch")

        headers = {"content-type": "application/json"} if body else None
        try:
            request = self._client.build_request(method, path, content=body or b"", headers=headers)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise TransportSendError(f"Could not build {method} request for {path}: {exc}") from exc

        LOGGER.debug("Sending %s request to: %s", request.method, request.url)
        if cancel is None:
            return self._round_trip(request, _InFlight())
        return self._cancellable_round_trip(request, cancel)

    def _cancellable_round_trip(self, request: httpx.Request, cancel: threading.Event) -> HTTPResponse:
        """Run the round trip on a worker thread and return as soon as ``cancel`` fires.

        On cancellation the in-flight response, if any, is closed; a worker still
        waiting for headers is abandoned and ends at the client timeout.
        """
        in_flight = _InFlight(cancel)
        worker = threading.Thread(
            target=in_flight.run,
            args=(self._round_trip, request),
            name=f"pathfinder-{request.method.lower()}",
            daemon=True,
        )
        worker.start()
        while not in_flight.done.wait(_CANCEL_POLL_S):
            if cancel.is_set():
                in_flight.abort()
                raise TransportCancelledError(f"{request.method} {request.url.path} cancelled in flight")
        if in_flight.error is not None:
            raise in_flight.error
        return in_flight.result

    def _round_trip(self, request: httpx.Request, in_flight: _InFlight) -> HTTPResponse:
        method, url = request.method, request.url
        try:
            response = self._client.send(request, stream=True)
            in_flight.attach(response)
            try:
                chunks: list[bytes] = []
                for chunk in response.iter_bytes():
                    if in_flight.cancelled:
                        raise TransportCancelledError(f"{method} {url.path} cancelled while reading response")
                    chunks.append(chunk)
                status = response.status_code
            finally:
                response.close()
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(f"{method} {url} timed out after {self.timeout_s}s") from exc
        except httpx.ConnectError as exc:
            raise TransportConnectError(f"Could not connect to {self.address}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportSendError(f"{method} {url} failed: {exc}") from exc

        payload = b"".join(chunks)
        LOGGER.debug("Received response %s (%d bytes)", status, len(payload))
        return HTTPResponse(status=status, body=payload)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HTTPTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class _InFlight:
    """Shared between a caller and the worker thread running its round trip."""

    def __init__(self, cancel: threading.Event | None = None) -> None:
        self._cancel = cancel
        self._lock = threading.Lock()
        self._response: httpx.Response | None = None
        self.done = threading.Event()
        self.result: HTTPResponse | None = None
        self.error: Exception | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    def attach(self, response: httpx.Response) -> None:
        with self._lock:
            self._response = response
        if self.cancelled:
            response.close()

    def abort(self) -> None:
        with self._lock:
            response = self._response
        if response is not None:
            response.close()

    def run(self, round_trip, request: httpx.Request) -> None:
        try:
            self.result = round_trip(request, self)
        except Exception as exc:
            self.error = exc
        finally:
            self.done.set()
