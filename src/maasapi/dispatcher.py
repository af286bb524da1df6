"""
Signed, retrying HTTP dispatch.

One dispatch is a send-and-classify cycle: sign, send, retry on 503, then
turn the result into a ``DispatchOutcome``:

- ``Success(body)`` for any status below 400
- ``Failure(FailureKind.SERVER, ServerError)`` for a status of 400 or above
- ``Failure(FailureKind.TRANSPORT, TransportError)`` when no response came back

Only 503 Service Unavailable is retried, at most ``retry_attempts`` times.
Transport failures are never retried.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, NoReturn, Union

import httpx

from maasapi.config import get_settings
from maasapi.exceptions import MAASError, ServerError, TransportError
from maasapi.logging import get_logger
from maasapi.models import PreparedRequest
from maasapi.signer import AnonymousSigner, RequestSigner

logger = get_logger(__name__)

RETRY_AFTER_HEADER = "Retry-After"


class FailureKind(str, Enum):
    """Why a dispatch failed."""

    TRANSPORT = "transport"
    SERVER = "server"


@dataclass(frozen=True)
class Success:
    """The server answered with a status below 400."""

    body: bytes
    status_code: int = 200

    ok = True

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def unwrap(self) -> bytes:
        return self.body


@dataclass(frozen=True)
class Failure:
    """No response, or a response with a status of 400 or above."""

    kind: FailureKind
    error: MAASError

    ok = False

    @property
    def server_error(self) -> ServerError | None:
        if self.kind is FailureKind.SERVER and isinstance(self.error, ServerError):
            return self.error
        return None

    def unwrap(self) -> NoReturn:
        raise self.error


DispatchOutcome = Union[Success, Failure]


class RequestCounter:
    """Thread-safe counter used to correlate request and response log lines."""

    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value


class Dispatcher:
    """
    Sends prepared requests through one shared ``httpx.Client``.

    Holds no per-request state, so one dispatcher can serve many threads.

    Example:
        >>> with Dispatcher(signer_for("a:b:c")) as dispatcher:
        ...     outcome = dispatcher.dispatch(
        ...         PreparedRequest.build("GET", "http://maas/MAAS/api/2.0/version/")
        ...     )
        ...     body = outcome.unwrap()
    """

    def __init__(
        self,
        signer: RequestSigner | None = None,
        *,
        retry_attempts: int | None = None,
        retry_after_max: float | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        counter: RequestCounter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            signer: Request signer (anonymous when None)
            retry_attempts: Retries allowed on 503 (settings.retry_attempts)
            retry_after_max: Longest Retry-After wait honoured, in seconds
            timeout: Read timeout in seconds (settings.request_timeout)
            transport: Custom httpx transport (tests use httpx.MockTransport)
            counter: Request id source for log correlation
            sleep: Called to wait out a Retry-After delay
        """
        settings = get_settings()
        self.signer: RequestSigner = signer or AnonymousSigner()
        self.retry_attempts = (
            settings.retry_attempts if retry_attempts is None else retry_attempts
        )
        if self.retry_attempts < 0:
            raise ValueError("retry_attempts must be >= 0")
        self.retry_after_max = (
            settings.retry_after_max if retry_after_max is None else retry_after_max
        )
        self.counter = counter or RequestCounter()
        self._sleep = sleep
        self._http = httpx.Client(
            timeout=httpx.Timeout(
                settings.request_timeout if timeout is None else timeout,
                connect=settings.connect_timeout,
            ),
            transport=transport,
            follow_redirects=True,
        )

    def dispatch(self, request: PreparedRequest) -> DispatchOutcome:
        """
        Send a request and classify the result.

        The same buffered body is resent on every attempt; at most
        ``retry_attempts + 1`` requests reach the network.
        """
        request_id = self.counter.next()
        logger.debug("request %x: %s %s", request_id, request.method, request.url)

        attempt = 0
        while True:
            outcome = self._send_once(request)
            error = outcome.server_error if isinstance(outcome, Failure) else None
            if (
                error is None
                or error.status_code != httpx.codes.SERVICE_UNAVAILABLE
                or attempt >= self.retry_attempts
            ):
                break
            attempt += 1
            delay = self._retry_delay(error)
            logger.debug(
                "response %x: 503, retry %d/%d in %.1fs",
                request_id,
                attempt,
                self.retry_attempts,
                delay,
            )
            if delay > 0:
                self._sleep(delay)

        if logger.isEnabledFor(logging.DEBUG):
            if isinstance(outcome, Failure):
                logger.debug("response %x: error: %s", request_id, outcome.error)
            else:
                logger.debug("response %x: %s", request_id, outcome.text)
        return outcome

    def _send_once(self, request: PreparedRequest) -> DispatchOutcome:
        if self._http.is_closed:
            return Failure(
                FailureKind.TRANSPORT,
                TransportError(request.url, cause=RuntimeError("dispatcher is closed")),
            )
        signed = self.signer.sign(request)
        try:
            with self._http.stream(
                signed.method,
                signed.url,
                headers=signed.headers,
                content=signed.body,
            ) as response:
                body = response.read()
        except (httpx.RequestError, httpx.InvalidURL) as e:
            return Failure(FailureKind.TRANSPORT, TransportError(request.url, cause=e))

        if response.status_code >= 400:
            error = ServerError(
                response.status_code,
                body.decode("utf-8", errors="replace"),
                response.headers,
            )
            return Failure(FailureKind.SERVER, error)
        return Success(body, response.status_code)

    def _retry_delay(self, error: ServerError) -> float:
        """Seconds to wait before retrying, from a numeric Retry-After."""
        value = error.headers.get(RETRY_AFTER_HEADER) or error.headers.get(
            RETRY_AFTER_HEADER.lower()
        )
        if not value:
            return 0.0
        try:
            seconds = float(int(value.strip()))
        except ValueError:
            return 0.0
        return max(0.0, min(seconds, self.retry_after_max))

    def close(self) -> None:
        """Close the HTTP client."""
        self._http.close()

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Dispatcher signer={self.signer!r} retry_attempts={self.retry_attempts}>"


__all__ = [
    "FailureKind",
    "Success",
    "Failure",
    "DispatchOutcome",
    "RequestCounter",
    "Dispatcher",
]
