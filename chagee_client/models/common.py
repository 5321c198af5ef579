"""
Common data models for the CHAGEE API client.

Provides the uniform result envelope returned by every call, the region
profile consumed by the request builder, and the events passed to
observability hooks.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUCCESS_CODE = "0"
NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
NETWORK_ERROR = "NETWORK_ERROR"

TOKEN_KEYS = ("token", "accessToken", "authToken")
USER_ID_KEYS = ("userId", "uid", "id")


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


class ChageeBaseModel(BaseModel):
    """Base model for all CHAGEE client entities."""

    model_config = ConfigDict(
        extra="allow",  # Backend adds fields like traceId without notice
        populate_by_name=True,
        validate_assignment=True,
    )


class ResultEnvelope(ChageeBaseModel):
    """
    Uniform outcome of any API call.

    Mirrors the backend's own ``errcode``/``errmsg``/``data`` convention.
    ``code`` is ``"0"`` on success; any other value, including HTTP statuses
    and the symbolic ``NETWORK_TIMEOUT``/``NETWORK_ERROR`` codes, is a
    failure. Unknown keys from the server body are kept as extra fields.
    """

    code: str = Field(alias="errcode")
    message: str | None = Field(None, alias="errmsg")
    payload: Any = Field(None, alias="data")

    @field_validator("code", mode="before")
    @classmethod
    def _stringify_code(cls, value: Any) -> str:
        return str(value)

    @field_validator("message", mode="before")
    @classmethod
    def _stringify_message(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @property
    def ok(self) -> bool:
        """True when the backend reported success."""
        return self.code == SUCCESS_CODE

    def data_dict(self) -> dict[str, Any] | None:
        """Return the payload when it is a mapping, else None."""
        return self.payload if isinstance(self.payload, dict) else None

    def extract_token(self) -> str | None:
        """Pull a bearer token out of a login response payload."""
        data = self.data_dict()
        if not data:
            return None
        for key in TOKEN_KEYS:
            candidate = data.get(key)
            if isinstance(candidate, str) and candidate:
                return candidate
        return None

    def extract_user_id(self) -> str | None:
        """Pull the user identifier out of a customer/login payload."""
        data = self.data_dict()
        if not data:
            return None
        for key in USER_ID_KEYS:
            candidate = data.get(key)
            if isinstance(candidate, str) and candidate:
                return candidate
            if isinstance(candidate, int | float) and not isinstance(candidate, bool):
                return str(candidate)
        return None


class RegionProfile(ChageeBaseModel):
    """
    Region/locale context supplied by the caller.

    The client reads it through an accessor on every attempt and never caches
    it, so switching regions takes effect on the next request.
    """

    code: str
    api_base: str = Field(alias="apiBase")
    language: str = "en"
    channel_code: str = Field("", alias="channelCode")
    apv: str = ""
    aid: str = ""
    timezone_offset: str = Field("0", alias="timezoneOffset")
    device_timezone_region: str = Field("", alias="deviceTimeZoneRegion")
    accept_language: str = Field("en-US", alias="acceptLanguage")

    # Default request parameters for endpoint callers
    default_phone_code: str = Field("", alias="defaultPhoneCode")
    is_takeaway: bool = Field(False, alias="isTakeaway")
    sale_type: int = Field(1, alias="saleType")
    sale_channel: int = Field(1, alias="saleChannel")
    trade_channel: str = Field("", alias="tradeChannel")


class RequestEvent(ChageeBaseModel):
    """Emitted before each attempt is dispatched."""

    ts: str = Field(default_factory=utc_now_iso)
    method: str
    url: str
    attempt: int = 1
    payload: Any = None


class ResponseEvent(ChageeBaseModel):
    """Emitted after each attempt, including transport failures (status 0)."""

    ts: str = Field(default_factory=utc_now_iso)
    method: str
    url: str
    attempt: int = 1
    status: int
    elapsed_ms: float
    envelope: ResultEnvelope
