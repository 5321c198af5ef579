"""
Request engine for the CHAGEE API.

Builds every attempt from caller-supplied token and region accessors,
enforces a wall-clock timeout, retries idempotent requests with capped
exponential backoff, and folds every outcome into a ``ResultEnvelope``.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from chagee_client.clients.hooks import ApiHooks
from chagee_client.clients.request_builder import build_request
from chagee_client.clients.response_normalizer import ResponseNormalizer
from chagee_client.clients.retry_policy import RetryPolicy
from chagee_client.config.settings import Settings
from chagee_client.models.common import (
    NETWORK_ERROR,
    RegionProfile,
    RequestEvent,
    ResponseEvent,
    ResultEnvelope,
)
from chagee_client.models.request import (
    READ_METHOD,
    WRITE_METHOD,
    HttpMethod,
    PreparedRequest,
    RequestDescriptor,
    RetryContext,
)
from chagee_client.utils.exceptions import RequestTimeoutError, TransportError
from chagee_client.utils.masking import mask_sensitive_data

logger = logging.getLogger(__name__)

TokenAccessor = Callable[[], str | None]
RegionAccessor = Callable[[], RegionProfile]


class ChageeClient:
    """
    Client for the CHAGEE HTTP/JSON API.

    Features:
    - Headers and base URL re-derived on every attempt, so a token refreshed
      between retries is honored
    - Per-attempt wall-clock timeout with cancellation of the in-flight call
    - Retries limited to reads and curated idempotent writes
    - Uniform ResultEnvelope for server errors, malformed bodies and
      transport failures; ``request`` never raises for these
    - Optional observability hooks that see every attempt
    """

    def __init__(
        self,
        token_accessor: TokenAccessor,
        region_accessor: RegionAccessor,
        hooks: ApiHooks | None = None,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token_accessor: Returns the current bearer token, or None
            region_accessor: Returns the active region profile
            hooks: Optional observability listener
            settings: Optional settings instance
            transport: Optional httpx transport, mainly for tests
        """
        self.settings = settings or Settings()
        self._get_token = token_accessor
        self._get_region = region_accessor
        self.hooks = hooks or ApiHooks()
        self.retry_policy = RetryPolicy(self.settings)
        self.normalizer = ResponseNormalizer(self.settings.request_timeout)

        self._transport = transport
        self._session: httpx.AsyncClient | None = None
        self._session_lock = asyncio.Lock()

        self._connection_limits = httpx.Limits(
            max_connections=20,
            max_keepalive_connections=10,
            keepalive_expiry=30.0,
        )
        # wait_for enforces the wall-clock bound; httpx phases share it
        self._timeout_config = httpx.Timeout(self.settings.request_timeout)

    async def __aenter__(self) -> "ChageeClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure the HTTP session is initialized."""
        if self._session is None:
            async with self._session_lock:
                if self._session is None:  # Double-check pattern
                    self._session = httpx.AsyncClient(
                        timeout=self._timeout_config,
                        limits=self._connection_limits,
                        transport=self._transport,
                        follow_redirects=True,
                    )
                    logger.debug(
                        "HTTP session initialized",
                        extra={
                            "timeout": self.settings.request_timeout,
                            "max_connections": self._connection_limits.max_connections,
                        },
                    )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            try:
                await self._session.aclose()
                logger.debug("HTTP session closed successfully")
            except httpx.HTTPError as e:
                logger.warning(f"Error closing HTTP session: {e}")
            finally:
                self._session = None

    async def get(self, path: str, base_url: str | None = None) -> ResultEnvelope:
        """Make a read request."""
        return await self.request(READ_METHOD, path, base_url=base_url)

    async def post(
        self, path: str, body: Any = None, base_url: str | None = None
    ) -> ResultEnvelope:
        """Make a write request with an optional JSON body."""
        return await self.request(WRITE_METHOD, path, body=body, base_url=base_url)

    async def request(
        self,
        method: HttpMethod,
        path: str,
        body: Any = None,
        base_url: str | None = None,
    ) -> ResultEnvelope:
        """
        Execute a call with timeout, retries and normalization.

        Args:
            method: ``GET`` for reads or ``POST`` for writes
            path: API path, or an absolute URL
            body: JSON-serializable body for writes
            base_url: Per-call override of the region's API base

        Returns:
            The final ResultEnvelope. Intermediate retry attempts are only
            visible through hooks. An unsupported method yields a
            ``NETWORK_ERROR`` envelope without any attempt.
        """
        try:
            descriptor = RequestDescriptor(
                method=str(method).upper(), path=path, body=body, base_url=base_url
            )
        except ValidationError as e:
            logger.error(
                f"Rejected request {method!r} {path!r}: {e.error_count()} invalid field(s)",
                extra={"method": str(method), "path": str(path)},
            )
            return ResultEnvelope(
                code=NETWORK_ERROR, message=f"Unsupported request: {method} {path}"
            )

        context = RetryContext(max_attempts=self.retry_policy.attempts_for(descriptor))

        for attempt in range(1, context.max_attempts + 1):
            context.attempt = attempt
            envelope, retryable = await self._execute_attempt(descriptor, attempt)
            if not retryable:
                return envelope

            context.record_failure(envelope)
            if not context.has_attempts_left:
                break

            delay = self.retry_policy.compute_backoff(attempt)
            logger.warning(
                f"Retryable failure {envelope.code} for {descriptor.method} "
                f"{descriptor.path}, retrying in {delay:.2f}s "
                f"(attempt {attempt}/{context.max_attempts})",
                extra={
                    "method": descriptor.method,
                    "path": descriptor.path,
                    "attempt": attempt,
                    "result_code": envelope.code,
                },
            )
            await asyncio.sleep(delay)

        if context.last_failure is None:
            logger.error(
                f"Retry loop for {descriptor.method} {descriptor.path} ended "
                "without recording a failure",
                extra={"max_attempts": context.max_attempts},
            )
            return self.normalizer.exhausted()

        logger.error(
            f"Request failed after {context.attempt} attempts: "
            f"{descriptor.method} {descriptor.path} - {context.last_failure.code}",
            extra={
                "method": descriptor.method,
                "path": descriptor.path,
                "total_attempts": context.attempt,
                "result_code": context.last_failure.code,
            },
        )
        return context.last_failure

    async def _execute_attempt(
        self, descriptor: RequestDescriptor, attempt: int
    ) -> tuple[ResultEnvelope, bool]:
        """
        Run one attempt and classify its outcome.

        Returns:
            The attempt's envelope and whether the failure is retryable
        """
        url = descriptor.path
        start = time.perf_counter()

        try:
            prepared = build_request(descriptor, self._get_region(), self._get_token())
            url = prepared.url
            self._log_request(prepared, descriptor, attempt)
            self._notify(
                "on_request",
                RequestEvent(
                    method=descriptor.method,
                    url=url,
                    attempt=attempt,
                    payload=descriptor.body,
                ),
            )
            status_code, body_text = await self._send(prepared)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            envelope = self.normalizer.from_error(e)
            retryable = isinstance(e, TransportError) and self.retry_policy.is_retryable_error(e)

            logger.warning(
                f"API Transport Failure: {descriptor.method} {url} - {envelope.code}: {e}",
                extra={
                    "method": descriptor.method,
                    "url": url,
                    "attempt": attempt,
                    "duration_ms": elapsed_ms,
                    "error_type": type(e).__name__,
                    "retryable": retryable,
                },
            )
            self._notify(
                "on_response",
                ResponseEvent(
                    method=descriptor.method,
                    url=url,
                    attempt=attempt,
                    status=0,
                    elapsed_ms=elapsed_ms,
                    envelope=envelope,
                ),
            )
            return envelope, retryable

        elapsed_ms = (time.perf_counter() - start) * 1000
        envelope = self.normalizer.from_response(status_code, body_text)

        self._log_response(descriptor, url, status_code, envelope, elapsed_ms, attempt)
        self._notify(
            "on_response",
            ResponseEvent(
                method=descriptor.method,
                url=url,
                attempt=attempt,
                status=status_code,
                elapsed_ms=elapsed_ms,
                envelope=envelope,
            ),
        )
        return envelope, self.retry_policy.is_retryable_status(status_code)

    async def _send(self, prepared: PreparedRequest) -> tuple[int, str]:
        """
        Issue one HTTP request under the wall-clock timeout.

        Returns:
            Status code and raw body text

        Raises:
            RequestTimeoutError: If the attempt exceeded the timeout
            TransportError: If no response could be obtained
        """
        await self._ensure_session()
        timeout = self.settings.request_timeout

        try:
            response = await asyncio.wait_for(
                self._session.request(
                    prepared.method,
                    prepared.url,
                    headers=prepared.headers,
                    content=prepared.content,
                ),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeoutError(timeout, details={"url": prepared.url}) from e
        except httpx.HTTPError as e:
            raise TransportError(
                str(e),
                details={"url": prepared.url, "error_type": type(e).__name__},
            ) from e

        return response.status_code, response.text

    def _notify(self, hook_name: str, event: RequestEvent | ResponseEvent) -> None:
        """Invoke a hook, logging instead of propagating its failures."""
        try:
            getattr(self.hooks, hook_name)(event)
        except Exception as e:
            logger.warning(f"Observability hook {hook_name} failed: {e}")

    def _log_request(
        self, prepared: PreparedRequest, descriptor: RequestDescriptor, attempt: int
    ) -> None:
        """Log outgoing request details with credentials masked."""
        logger.info(
            f"API Request: {prepared.method} {prepared.url} (attempt {attempt})",
            extra={
                "method": prepared.method,
                "url": prepared.url,
                "attempt": attempt,
                "request_size_bytes": len(prepared.content.encode("utf-8"))
                if prepared.content
                else 0,
                "json_data": mask_sensitive_data(descriptor.body),
                "headers": mask_sensitive_data(prepared.headers),
            },
        )

    def _log_response(
        self,
        descriptor: RequestDescriptor,
        url: str,
        status_code: int,
        envelope: ResultEnvelope,
        duration_ms: float,
        attempt: int,
    ) -> None:
        """Log response details."""
        log_data = {
            "method": descriptor.method,
            "url": url,
            "status_code": status_code,
            "result_code": envelope.code,
            "duration_ms": duration_ms,
            "attempt": attempt,
        }

        if status_code >= 400 or not envelope.ok:
            logger.warning(
                f"API Error Response: {descriptor.method} {url} - "
                f"{status_code} ({envelope.code})",
                extra=log_data,
            )
        else:
            logger.info(
                f"API Response: {descriptor.method} {url} - {status_code}",
                extra=log_data,
            )
