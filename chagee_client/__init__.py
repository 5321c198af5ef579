"""
CHAGEE API client.

Client-side request layer for the CHAGEE ordering backend: builds requests
the backend accepts, enforces timeouts, retries idempotent calls, and returns
a uniform ResultEnvelope for every outcome.
"""

from chagee_client.clients.base_client import ChageeClient
from chagee_client.clients.hooks import ApiHooks, CallbackHooks, HealthMonitor
from chagee_client.config.settings import Settings, get_settings
from chagee_client.models.common import RegionProfile, ResultEnvelope

__version__ = "0.1.0"

__all__ = [
    "ApiHooks",
    "CallbackHooks",
    "ChageeClient",
    "HealthMonitor",
    "RegionProfile",
    "ResultEnvelope",
    "Settings",
    "get_settings",
]
