"""
Observability hooks for the CHAGEE API client.

The client calls ``on_request`` before each attempt and ``on_response`` after
each attempt's outcome. Hooks only observe: the client guards every call, so a
failing hook can never change what a request returns.
"""

import logging
from collections import defaultdict, deque
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from chagee_client.models.common import RequestEvent, ResponseEvent

logger = logging.getLogger(__name__)


class ApiHooks:
    """Listener interface with no-op defaults."""

    def on_request(self, event: RequestEvent) -> None:
        """Called before an attempt is dispatched."""

    def on_response(self, event: ResponseEvent) -> None:
        """Called after an attempt completes or fails."""


class CallbackHooks(ApiHooks):
    """Adapt a pair of plain callables to the listener interface."""

    def __init__(
        self,
        on_request: Callable[[RequestEvent], Any] | None = None,
        on_response: Callable[[ResponseEvent], Any] | None = None,
    ) -> None:
        self._on_request = on_request
        self._on_response = on_response

    def on_request(self, event: RequestEvent) -> None:
        if self._on_request:
            self._on_request(event)

    def on_response(self, event: ResponseEvent) -> None:
        if self._on_response:
            self._on_response(event)


class HealthMonitor(ApiHooks):
    """Record request events and summarize client health."""

    def __init__(self, max_history: int = 1000) -> None:
        """
        Initialize health monitor.

        Args:
            max_history: Maximum number of events to keep
        """
        self.max_history = max_history
        self.events: deque[RequestEvent | ResponseEvent] = deque(maxlen=max_history)
        self.last_request: RequestEvent | None = None
        self.last_response: ResponseEvent | None = None
        self._responses: deque[tuple[datetime, ResponseEvent]] = deque(
            maxlen=max_history
        )
        self._error_counts: dict[str, int] = defaultdict(int)
        self._status_code_counts: dict[int, int] = defaultdict(int)
        self._endpoint_stats: dict[str, dict[str, Any]] = defaultdict(
            lambda: {
                "count": 0,
                "total_duration": 0.0,
                "error_count": 0,
                "avg_duration": 0.0,
            }
        )

    def on_request(self, event: RequestEvent) -> None:
        self.last_request = event
        self.events.append(event)

    def on_response(self, event: ResponseEvent) -> None:
        self.last_response = event
        self.events.append(event)
        self._responses.append((datetime.now(UTC), event))

        failed = not event.envelope.ok
        if failed:
            self._error_counts[event.envelope.code] += 1

        self._status_code_counts[event.status] += 1

        stats = self._endpoint_stats[f"{event.method} {event.url}"]
        stats["count"] += 1
        stats["total_duration"] += event.elapsed_ms
        if failed:
            stats["error_count"] += 1
        stats["avg_duration"] = stats["total_duration"] / stats["count"]

    def get_health_status(self) -> dict[str, Any]:
        """Get health status over the last five minutes of responses."""
        now = datetime.now(UTC)
        recent_window = now - timedelta(minutes=5)

        recent = [event for at, event in self._responses if at >= recent_window]
        recent_count = len(recent)
        recent_errors = sum(1 for event in recent if not event.envelope.ok)
        error_rate = (recent_errors / recent_count) if recent_count > 0 else 0

        if recent:
            avg_response_time = sum(event.elapsed_ms for event in recent) / recent_count
        else:
            avg_response_time = 0

        health_status = "healthy"
        if error_rate > 0.1:
            health_status = "degraded"
        elif error_rate > 0.05:
            health_status = "warning"

        return {
            "status": health_status,
            "total_responses": len(self._responses),
            "recent_responses": recent_count,
            "error_rate": error_rate,
            "avg_response_time_ms": avg_response_time,
            "error_counts": dict(self._error_counts),
            "status_code_counts": dict(self._status_code_counts),
            "top_endpoints": dict(
                sorted(
                    self._endpoint_stats.items(),
                    key=lambda x: x[1]["count"],
                    reverse=True,
                )[:10]
            ),
            "timestamp": now.isoformat(),
        }
