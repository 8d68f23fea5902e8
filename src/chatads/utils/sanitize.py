r"""Redacted views of request headers and bodies for debug logging.

Raw field values never reach a log record: headers are copied with the
API key truncated, and bodies are reduced to a type and length summary.
"""

from __future__ import annotations

__all__ = ["API_KEY_HEADER", "lowercase_headers", "sanitize_headers", "sanitize_payload"]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

API_KEY_HEADER = "x-api-key"


def lowercase_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Return a copy of ``headers`` with lower-cased names.

    Example:
        ```pycon
        >>> from chatads.utils import lowercase_headers
        >>> lowercase_headers({"X-Trace-Id": "abc"})
        {'x-trace-id': 'abc'}
        >>> lowercase_headers(None)
        {}

        ```
    """
    if not headers:
        return {}
    return {key.lower(): value for key, value in headers.items()}


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` with the API key truncated.

    Example:
        ```pycon
        >>> from chatads.utils import sanitize_headers
        >>> sanitize_headers({"x-api-key": "cak_test_key_123", "content-type": "application/json"})
        {'x-api-key': 'cak_...', 'content-type': 'application/json'}

        ```
    """
    return {
        key: f"{value[:4]}..." if key.lower() == API_KEY_HEADER else value
        for key, value in headers.items()
    }


def _describe(value: Any) -> dict[str, Any]:
    if value is None:
        return {"type": "null"}
    if isinstance(value, str):
        return {"type": "string", "length": len(value)}
    # bool is checked before int/float since it subclasses int
    if isinstance(value, bool):
        return {"type": "boolean"}
    if isinstance(value, (int, float)):
        return {"type": "number"}
    return {"type": "object"}


def sanitize_payload(body: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Summarize a request body by value type and string length.

    Example:
        ```pycon
        >>> from chatads.utils import sanitize_payload
        >>> sanitize_payload({"message": "I need a CRM", "override": True, "tags": ["a"]})
        {'message': {'type': 'string', 'length': 12}, 'override': {'type': 'boolean'}, 'tags': {'type': 'object'}}

        ```
    """
    return {key: _describe(value) for key, value in body.items()}
