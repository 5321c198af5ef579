"""Masking of credentials and personal data before they reach the logs."""

from typing import Any

MASK = "***MASKED***"

SENSITIVE_FIELDS = frozenset(
    {
        "authorization",
        "token",
        "password",
        "mobile",
        "phone",
        "sendobj",
        "verifycode",
    }
)


def mask_sensitive_data(data: Any, sensitive_fields: frozenset[str] | None = None) -> Any:
    """
    Return a copy of ``data`` with sensitive values replaced.

    A key is sensitive when any entry of ``sensitive_fields`` occurs in its
    lower-cased name, so ``accessToken`` and ``phoneCode`` are both masked.
    Lists and nested mappings are walked recursively; other values are
    returned unchanged.

    Args:
        data: Request body, header mapping, or any JSON-like value
        sensitive_fields: Override for the default field fragments

    Returns:
        Masked copy of the input
    """
    fields = SENSITIVE_FIELDS if sensitive_fields is None else sensitive_fields

    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(fragment in key_lower for fragment in fields):
                masked[key] = MASK
            else:
                masked[key] = mask_sensitive_data(value, fields)
        return masked
    if isinstance(data, list):
        return [mask_sensitive_data(item, fields) for item in data]
    return data
