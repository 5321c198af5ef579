"""
Settings and configuration management for the CHAGEE API client.

Provides environment-based configuration using Pydantic settings for the
request engine (timeout, retry budget, backoff schedule), the default region
profile, and logging.
"""

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

from chagee_client.models.common import RegionProfile


class Settings(BaseSettings):
    """
    Configuration settings for the CHAGEE API client.

    Uses environment variables with CHAGEE_ prefix for configuration.
    """

    # Request engine
    request_timeout: float = Field(
        12.0, description="Wall-clock timeout per attempt in seconds", gt=0, le=300
    )
    max_attempts: int = Field(
        3, description="Total attempts for retry-eligible requests", ge=1, le=10
    )
    retry_backoff: float = Field(
        0.22, description="Base retry backoff in seconds", ge=0.0, le=60.0
    )
    retry_jitter: float = Field(
        0.12, description="Maximum random jitter added to each backoff", ge=0.0, le=10.0
    )
    retry_backoff_cap: float = Field(
        2.0, description="Upper bound for a single backoff wait", ge=0.0, le=60.0
    )

    # Region profile used when the caller does not supply its own accessor
    api_base: str = Field("", description="Base URL of the CHAGEE API")
    region_code: str = Field("", description="Region code sent in the region header")
    language: str = Field("en", description="Language header value")
    channel_code: str = Field("", description="Channel header value")
    apv: str = Field("", description="App version header value")
    aid: str = Field("", description="App id header value")
    timezone_offset: str = Field("0", description="Timezone offset header value")
    device_timezone_region: str = Field(
        "", description="Device timezone region header value"
    )
    accept_language: str = Field("en-US", description="Accept-Language header value")

    # Authentication
    token: str | None = Field(None, description="Bearer token for authorized calls")

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format string",
    )
    enable_structured_logging: bool = Field(
        False, description="Enable structured logging with JSON format"
    )

    model_config = ConfigDict(
        env_file=".env", env_prefix="CHAGEE_", case_sensitive=False, extra="ignore"
    )

    def get_client_config(self) -> dict[str, int | float]:
        """
        Get request engine configuration dictionary.

        Returns:
            Dictionary containing timeout and retry configuration
        """
        return {
            "timeout": self.request_timeout,
            "max_attempts": self.max_attempts,
            "retry_backoff": self.retry_backoff,
            "retry_jitter": self.retry_jitter,
            "retry_backoff_cap": self.retry_backoff_cap,
        }

    def get_region_profile(self) -> RegionProfile:
        """
        Build a region profile from the configured region fields.

        Returns:
            RegionProfile instance
        """
        return RegionProfile(
            code=self.region_code,
            api_base=self.api_base,
            language=self.language,
            channel_code=self.channel_code,
            apv=self.apv,
            aid=self.aid,
            timezone_offset=self.timezone_offset,
            device_timezone_region=self.device_timezone_region,
            accept_language=self.accept_language,
        )

    def validate_required_settings(self) -> list[str]:
        """
        Validate that all required settings are present.

        Returns:
            List of missing settings (empty if all present)
        """
        missing = []

        if not self.api_base:
            missing.append("CHAGEE_API_BASE")

        if not self.region_code:
            missing.append("CHAGEE_REGION_CODE")

        return missing


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
