r"""Validation and normalization of message analysis payloads.

Every function in this module is a pure transform. All failures are
raised as ``ChatAdsValidationError`` before any network activity.
"""

from __future__ import annotations

__all__ = [
    "EXTRA_FIELDS_KEYS",
    "FIELD_ALIASES",
    "build_payload",
    "normalize_optional_fields",
    "payload_from_message",
]

from collections.abc import Mapping
from typing import Any

from chatads.exceptions import ChatAdsValidationError
from chatads.models import RESERVED_PAYLOAD_KEYS

# Keys accepted for the free-form extra fields container
EXTRA_FIELDS_KEYS = ("extra_fields", "extraFields")

# Alias (lower-cased) -> canonical field name
FIELD_ALIASES: dict[str, str] = {
    "fillpriority": "quality",
    "fill_priority": "quality",
    "quality_tier": "quality",
    "ip_address": "ip",
    "ipaddress": "ip",
    "client_ip": "ip",
    "country_code": "country",
    "countrycode": "country",
    "locale": "language",
    "lang": "language",
}


def _extract_extra_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    extra: dict[str, Any] = {}
    for key in EXTRA_FIELDS_KEYS:
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, dict):
            msg = f"{key} must be a mapping, got {type(value).__name__}"
            raise ChatAdsValidationError(msg)
        extra.update(value)
    return extra


def build_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a caller payload and build the canonical request body.

    The message is trimmed and placed first. Every other field is copied
    in input order, skipping ``None`` values and the extra fields
    container, whose content is merged last.

    Args:
        payload: The caller payload. Must contain a non-empty ``message``.

    Returns:
        The canonical request body.

    Raises:
        ChatAdsValidationError: If the message is missing, not a string or
            blank, or if the extra fields redefine a reserved key.

    Example:
        ```pycon
        >>> from chatads.payload import build_payload
        >>> build_payload({"message": "  I need a CRM ", "country": "US", "ip": None})
        {'message': 'I need a CRM', 'country': 'US'}
        >>> build_payload({"message": "hi", "extra_fields": {"campaign": "spring"}})
        {'message': 'hi', 'campaign': 'spring'}

        ```
    """
    message = payload.get("message") if isinstance(payload, Mapping) else None
    if not isinstance(message, str) or not message.strip():
        msg = "payload.message must be a non-empty string"
        raise ChatAdsValidationError(msg)

    extra = _extract_extra_fields(payload)
    conflicts = [key for key in extra if key in RESERVED_PAYLOAD_KEYS]
    if conflicts:
        msg = f"extra_fields contains reserved keys: {', '.join(conflicts)}"
        raise ChatAdsValidationError(msg)

    body: dict[str, Any] = {"message": message.strip()}
    for key, value in payload.items():
        if key == "message" or key in EXTRA_FIELDS_KEYS or value is None:
            continue
        body[key] = value
    body.update(extra)
    return body


def normalize_optional_fields(options: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite aliased option names to their canonical field names.

    Lookups in ``FIELD_ALIASES`` are case-insensitive. Unknown names pass
    through unchanged. ``None`` values and the extra fields container are
    dropped.

    Args:
        options: The named options supplied with a bare message.

    Returns:
        The options keyed by canonical field names.

    Example:
        ```pycon
        >>> from chatads.payload import normalize_optional_fields
        >>> normalize_optional_fields({"fillPriority": "fast", "country_code": "US", "ip": None})
        {'quality': 'fast', 'country': 'US'}

        ```
    """
    normalized: dict[str, Any] = {}
    for key, value in options.items():
        if value is None or key in EXTRA_FIELDS_KEYS:
            continue
        normalized[FIELD_ALIASES.get(key.lower(), key)] = value
    return normalized


def payload_from_message(
    message: str, extra_fields: Mapping[str, Any] | None = None, **options: Any
) -> dict[str, Any]:
    r"""Build a caller payload from a bare message and named options.

    Args:
        message: The message to analyze.
        extra_fields: Optional free-form fields merged into the body.
        **options: Optional fields, possibly under an alias name.

    Returns:
        A payload suitable for ``build_payload``.
    """
    payload: dict[str, Any] = {"message": message, **normalize_optional_fields(options)}
    if extra_fields:
        payload["extra_fields"] = dict(extra_fields)
    return payload
