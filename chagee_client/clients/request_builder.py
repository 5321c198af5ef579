"""
Request construction for the CHAGEE API.

The backend is undocumented and identifies clients by a fixed table of
device/locale headers; these values mirror what the official web client
sends. Everything here is a pure function of its inputs.
"""

import json
from typing import Any

from chagee_client.models.common import RegionProfile
from chagee_client.models.request import PreparedRequest, RequestDescriptor

ABSENT_TOKEN = "null"
JSON_CONTENT_TYPE = "application/json"

STATIC_BASE_HEADERS: dict[str, str] = {
    "ua": "Dart/2.12 (dart:io)",
    "debug": "1",
    "os": "web",
    "devicelanguage": "en",
    "screenwidth": "1280",
    "screenheight": "720",
    "devicebrand": "Web",
    "devicemodel": "Browser",
    "uuid": "null",
    "cid": "null",
    "avc": "320",
    "clientip": "",
    "colordepth": "",
    "browserinfo": (
        '{"javaenabled":false,"javascriptenabled":true,'
        '"language":"en","useragent":"Mozilla/5.0"}'
    ),
    "accept-language": "en-US",
}


def build_headers(region: RegionProfile, token: str | None) -> dict[str, str]:
    """Merge the static header table with region and auth fields."""
    return {
        **STATIC_BASE_HEADERS,
        "language": region.language,
        "region": region.code,
        "channel": region.channel_code,
        "apv": region.apv,
        "aid": region.aid,
        "timezoneoffset": region.timezone_offset,
        "devicetimezoneregion": region.device_timezone_region,
        "accept-language": region.accept_language,
        "authorization": token or ABSENT_TOKEN,
    }


def resolve_url(descriptor: RequestDescriptor, region: RegionProfile) -> str:
    """
    Resolve the absolute URL for a descriptor.

    A path that already carries a URL scheme is used as-is; otherwise it is
    appended to the per-call override or the region's API base.
    """
    if descriptor.path.startswith("http"):
        return descriptor.path
    base_url = descriptor.base_url or region.api_base
    return f"{base_url}{descriptor.path}"


def serialize_body(body: Any) -> str:
    """Serialize a request body to compact JSON text."""
    return json.dumps(body, ensure_ascii=False, separators=(",", ":"))


def build_request(
    descriptor: RequestDescriptor, region: RegionProfile, token: str | None
) -> PreparedRequest:
    """
    Produce a fully specified request for one attempt.

    Args:
        descriptor: The logical call being made
        region: Region profile read for this attempt
        token: Current bearer token, or None when signed out

    Returns:
        PreparedRequest with URL, headers and serialized body

    Raises:
        TypeError: If a write body cannot be serialized to JSON
    """
    headers = build_headers(region, token)
    content = None

    if descriptor.is_write:
        headers["content-type"] = JSON_CONTENT_TYPE
        if descriptor.body is not None:
            content = serialize_body(descriptor.body)

    return PreparedRequest(
        method=descriptor.method,
        url=resolve_url(descriptor, region),
        headers=headers,
        content=content,
    )
