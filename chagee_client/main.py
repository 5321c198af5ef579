"""
Application wiring for the CHAGEE API client.

Sets up logging from settings and builds a client whose token and region
accessors read the configured values.
"""

import json
import logging

from chagee_client.clients.base_client import ChageeClient
from chagee_client.clients.hooks import ApiHooks
from chagee_client.config.settings import Settings
from chagee_client.models.common import ResultEnvelope
from chagee_client.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(settings: Settings) -> None:
    """Setup logging configuration."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.enable_structured_logging:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logging.root.handlers = [handler]
    else:
        logging.basicConfig(level=level, format=settings.log_format)

    logging.getLogger().setLevel(level)


def create_client(
    settings: Settings, hooks: ApiHooks | None = None
) -> ChageeClient:
    """
    Create a client backed by the configured token and region.

    Args:
        settings: Settings instance
        hooks: Optional observability listener

    Returns:
        ChageeClient instance

    Raises:
        ConfigurationError: If required settings are missing
    """
    missing = settings.validate_required_settings()
    if missing:
        raise ConfigurationError(
            f"Missing required settings: {', '.join(missing)}",
            details={"missing": missing},
        )

    return ChageeClient(
        token_accessor=lambda: settings.token,
        region_accessor=settings.get_region_profile,
        hooks=hooks,
        settings=settings,
    )


async def run_call(
    settings: Settings,
    method: str,
    path: str,
    body: object = None,
) -> ResultEnvelope:
    """Perform a single call with a short-lived client against the configured base."""
    async with create_client(settings) as client:
        return await client.request(method, path, body=body)
