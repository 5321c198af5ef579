"""
Response normalization for the CHAGEE API.

The backend is inconsistent about whether ``errcode`` appears in a body and
occasionally answers with plain text, so every outcome is folded into a
``ResultEnvelope`` here. Nothing in this module raises.
"""

import json
import logging
from typing import Any

import httpx

from chagee_client.models.common import (
    NETWORK_ERROR,
    NETWORK_TIMEOUT,
    ResultEnvelope,
)
from chagee_client.utils.exceptions import RequestTimeoutError

logger = logging.getLogger(__name__)

ENVELOPE_KEYS = ("errcode", "errmsg", "data")
UNEXPECTED_RESPONSE = "Unexpected response"
NETWORK_FAILED = "Network request failed."
RETRIES_EXHAUSTED = "Request failed after retries."


class ResponseNormalizer:
    """Fold raw HTTP responses and transport errors into result envelopes."""

    def __init__(self, timeout: float) -> None:
        """
        Initialize response normalizer.

        Args:
            timeout: Configured per-attempt timeout in seconds, quoted in
                timeout envelopes
        """
        self.timeout = timeout

    @staticmethod
    def from_response(status_code: int, body_text: str) -> ResultEnvelope:
        """
        Normalize a received HTTP response.

        Args:
            status_code: HTTP status of the response
            body_text: Raw response body

        Returns:
            ResultEnvelope; never raises
        """
        status = str(status_code)

        if not body_text:
            return ResultEnvelope(code=status, payload={})

        try:
            parsed = json.loads(body_text)
        except (ValueError, RecursionError):
            logger.debug(
                "Response body is not JSON",
                extra={"status_code": status_code, "body_length": len(body_text)},
            )
            return ResultEnvelope(code=status, message=body_text)

        if isinstance(parsed, dict):
            return ResponseNormalizer._from_mapping(parsed, status)

        return ResultEnvelope(
            code=status,
            message=parsed if isinstance(parsed, str) else UNEXPECTED_RESPONSE,
            payload=parsed,
        )

    @staticmethod
    def _from_mapping(parsed: dict[str, Any], status: str) -> ResultEnvelope:
        extras = {key: value for key, value in parsed.items() if key not in ENVELOPE_KEYS}

        code = parsed.get("errcode")
        fields = {
            "errcode": status if code is None else code,
            "errmsg": parsed.get("errmsg"),
            "data": parsed["data"] if "data" in parsed else parsed,
        }
        return ResultEnvelope.model_validate({**extras, **fields})

    def from_error(self, error: BaseException) -> ResultEnvelope:
        """
        Normalize a transport-level failure.

        Args:
            error: Exception raised while no response was obtained

        Returns:
            ResultEnvelope with a symbolic network code
        """
        if isinstance(error, RequestTimeoutError | httpx.TimeoutException):
            return ResultEnvelope(
                code=NETWORK_TIMEOUT,
                message=f"Request timed out after {round(self.timeout * 1000)}ms.",
            )

        return ResultEnvelope(code=NETWORK_ERROR, message=str(error) or NETWORK_FAILED)

    @staticmethod
    def exhausted() -> ResultEnvelope:
        """Fallback used only if a retry loop ends without recording a failure."""
        return ResultEnvelope(code=NETWORK_ERROR, message=RETRIES_EXHAUSTED)
