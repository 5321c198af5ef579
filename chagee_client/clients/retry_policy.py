"""
Retry policy for CHAGEE API requests.

Decides whether a request may be repeated at all (eligibility) and whether a
particular failure is worth another attempt (retryability), and computes the
backoff between attempts.
"""

import random

import httpx

from chagee_client.config.settings import Settings
from chagee_client.models.request import READ_METHOD, RequestDescriptor
from chagee_client.utils.exceptions import RequestTimeoutError

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

# Write endpoints the backend treats as idempotent lookups. Order creation,
# cancellation, cart changes and payment stay out of this list.
RETRYABLE_POST_PATH_PREFIXES = (
    "/api/navigation/store/list",
    "/api/navigation/store/getStoreWaitInfo",
    "/api/navigation/goods/storeGoodsMenu",
    "/api/navigation/goods/detail",
    "/api/navigation/goods/shoppingCart/get",
    "/api/navigation/payment/payResultList",
    "/api/navigation/order/price",
)

TRANSIENT_ERROR_MARKERS = ("network", "fetch", "timeout", "socket")


class RetryPolicy:
    """Idempotency-aware retry policy with capped exponential backoff."""

    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize retry policy.

        Args:
            settings: Optional settings instance supplying the attempt budget
                and backoff schedule
        """
        settings = settings or Settings()
        self.max_attempts = settings.max_attempts
        self.backoff_base = settings.retry_backoff
        self.backoff_jitter = settings.retry_jitter
        self.backoff_cap = settings.retry_backoff_cap

    @staticmethod
    def is_eligible(descriptor: RequestDescriptor) -> bool:
        """Check whether a request is safe to repeat."""
        if descriptor.method == READ_METHOD:
            return True
        return descriptor.path.startswith(RETRYABLE_POST_PATH_PREFIXES)

    def attempts_for(self, descriptor: RequestDescriptor) -> int:
        """Total attempts allowed for a request."""
        return self.max_attempts if self.is_eligible(descriptor) else 1

    @staticmethod
    def is_retryable_status(status_code: int) -> bool:
        """Check whether an HTTP status marks a transient failure."""
        return status_code in RETRYABLE_STATUS_CODES

    @staticmethod
    def is_retryable_error(error: BaseException) -> bool:
        """Check whether a transport-level error is transient."""
        if isinstance(error, RequestTimeoutError | httpx.TimeoutException):
            return True

        cause = error.__cause__
        if isinstance(error, httpx.NetworkError) or isinstance(cause, httpx.NetworkError):
            return True

        message = str(error).lower()
        return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)

    def compute_backoff(self, attempt: int) -> float:
        """
        Compute the wait before the next attempt.

        Args:
            attempt: 1-based number of the attempt that just failed

        Returns:
            Delay in seconds, never above the configured cap
        """
        base = self.backoff_base * (2 ** max(0, attempt - 1))
        jitter = random.uniform(0, self.backoff_jitter)
        return min(self.backoff_cap, base + jitter)
