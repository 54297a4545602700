"""HTTP dispatchers built on a shared httpx.Client.

Two modes share one implementation:
- HttpDispatcher sends every request immediately (unthrottled).
- RateLimitedDispatcher acquires a permit from its rate limiter first.

Neither retries. Non-2xx responses are returned, not raised.
"""

from __future__ import annotations

import logging
import time
from typing import Mapping

import httpx

from pantry.adapters.rate_limit.base import AbstractRateLimiter
from pantry.adapters.rate_limit.token_bucket import TokenBucketRateLimiter
from pantry.adapters.transport.base import AbstractDispatcher
from pantry.core.cancellation import CancellationToken
from pantry.core.errors import CancelledAppError, TransportAppError

logger = logging.getLogger(__name__)


class HttpDispatcher(AbstractDispatcher):
    """Dispatcher that sends requests directly through a reusable httpx.Client."""

    def __init__(
        self,
        *,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            http_client: Optional pre-built client (e.g. with a MockTransport).
                When omitted, a client is created and owned by the dispatcher.
            timeout_seconds: Per-request timeout; a shorter cancellation
                deadline takes precedence.
        """
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout_seconds)
        self._timeout_seconds = timeout_seconds

    @property
    def http_client(self) -> httpx.Client:
        return self._client

    def _admit(self, cancel: CancellationToken | None) -> None:
        """Admission hook run before every request. Unthrottled: no-op."""

    def dispatch(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        cancel: CancellationToken | None = None,
    ) -> httpx.Response:
        self._admit(cancel)
        return self._execute(method, url, content=content, headers=headers, cancel=cancel)

    def _execute(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None,
        headers: Mapping[str, str] | None,
        cancel: CancellationToken | None,
    ) -> httpx.Response:
        if cancel is not None and cancel.cancelled:
            raise CancelledAppError(
                code="cancelled",
                message="Cancelled before the request was sent",
                details={"method": method},
            )

        timeout = self._timeout_seconds
        remaining = cancel.remaining() if cancel is not None else None
        bounded_by_deadline = remaining is not None and remaining < timeout
        if bounded_by_deadline:
            timeout = remaining

        request = self._client.build_request(
            method,
            url,
            content=content,
            headers=headers,
            timeout=timeout,
        )

        started = time.perf_counter()
        try:
            response = self._client.send(request)
        except httpx.TimeoutException as exc:
            if bounded_by_deadline:
                raise CancelledAppError(
                    code="deadline_exceeded",
                    message="Cancellation deadline passed while waiting for the response",
                    details={"method": method, "timeout_seconds": timeout},
                ) from exc
            raise TransportAppError(
                code="transport_failure",
                message=f"Pantry request timed out: {exc}",
                details={"method": method, "timeout_seconds": timeout},
            ) from exc
        except httpx.RequestError as exc:
            raise TransportAppError(
                code="transport_failure",
                message=f"Pantry request failed: {exc}",
                details={"method": method},
            ) from exc

        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        if cancel is not None and cancel.cancel_requested:
            logger.info(
                "pantry.response_discarded",
                extra={"method": method, "status": response.status_code},
            )
            raise CancelledAppError(
                code="cancelled",
                message="Cancelled while the request was in flight",
                details={"method": method, "http_status": response.status_code},
            )

        logger.debug(
            "pantry.response",
            extra={
                "method": method,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class RateLimitedDispatcher(HttpDispatcher):
    """Dispatcher that admits each request through a shared rate limiter.

    Defaults to a token bucket of 1 permit per second with a burst of 2.
    """

    def __init__(
        self,
        *,
        limiter: AbstractRateLimiter | None = None,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        super().__init__(http_client=http_client, timeout_seconds=timeout_seconds)
        self._limiter = limiter or TokenBucketRateLimiter()

    @property
    def limiter(self) -> AbstractRateLimiter:
        return self._limiter

    def _admit(self, cancel: CancellationToken | None) -> None:
        permit = self._limiter.acquire(cancel=cancel)
        if permit.waited_seconds > 0:
            logger.debug(
                "pantry.request_admitted",
                extra={"waited_s": round(permit.waited_seconds, 3)},
            )
