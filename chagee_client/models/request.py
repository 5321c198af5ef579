"""
Request-side models for the CHAGEE API client.

A ``RequestDescriptor`` describes one logical call; the client derives a
fresh ``PreparedRequest`` from it for every attempt and tracks progress in a
``RetryContext`` that lives only as long as the call.
"""

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from chagee_client.models.common import ResultEnvelope

HttpMethod = Literal["GET", "POST"]
READ_METHOD: HttpMethod = "GET"
WRITE_METHOD: HttpMethod = "POST"


class RequestDescriptor(BaseModel):
    """Immutable description of a logical call."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    path: str
    body: Any = None
    base_url: str | None = None

    @property
    def is_write(self) -> bool:
        return self.method == WRITE_METHOD


@dataclass(frozen=True)
class PreparedRequest:
    """Fully specified HTTP request for a single attempt."""

    method: str
    url: str
    headers: dict[str, str]
    content: str | None = None


@dataclass
class RetryContext:
    """Attempt bookkeeping for one logical call."""

    max_attempts: int
    attempt: int = 1
    last_failure: ResultEnvelope | None = None

    @property
    def has_attempts_left(self) -> bool:
        return self.attempt < self.max_attempts

    def record_failure(self, envelope: ResultEnvelope) -> None:
        self.last_failure = envelope
