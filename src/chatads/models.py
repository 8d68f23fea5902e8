r"""Request and response data shapes for the ChatAds message analysis API.

The response dataclasses are built from the parsed JSON body with
``from_dict`` methods that fill in defaults for missing sections, so
callers can rely on ``envelope.data.offers`` being a list and
``envelope.meta.request_id`` being a string.
"""

from __future__ import annotations

__all__ = [
    "RESERVED_PAYLOAD_KEYS",
    "UNKNOWN_REQUEST_ID",
    "AnalyzeData",
    "ErrorInfo",
    "FunctionItemPayload",
    "Offer",
    "ResponseEnvelope",
    "ResponseMeta",
    "UsageInfo",
    "is_logical_failure",
]

from dataclasses import dataclass, field
from typing import Any, Literal, TypedDict

UNKNOWN_REQUEST_ID = "unknown"

FillPriority = Literal["fast", "standard", "best"]
OfferStatus = Literal["filled", "partial_fill", "no_offers_found", "internal_error"]


class FunctionItemPayload(TypedDict, total=False):
    """Caller-supplied payload for a message analysis request.

    Only ``message`` is required. ``extra_fields`` is merged into the
    request body as-is, but may not redefine any of the fields below.
    """

    message: str
    ip: str
    country: str
    quality: FillPriority
    language: str
    extra_fields: dict[str, Any]


# Field names the API defines. Extra fields may not shadow them.
RESERVED_PAYLOAD_KEYS: frozenset[str] = frozenset(
    {"message", "ip", "country", "quality", "language"}
)


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


@dataclass(frozen=True)
class Offer:
    """One affiliate offer matched to the analyzed message."""

    link_text: str | None = None
    url: str | None = None
    confidence_level: str | None = None
    product: dict[str, Any] | None = None
    category: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Offer:
        known = {"link_text", "url", "confidence_level", "product", "category"}
        return cls(
            link_text=raw.get("link_text"),
            url=raw.get("url"),
            confidence_level=raw.get("confidence_level"),
            product=raw.get("product") if isinstance(raw.get("product"), dict) else None,
            category=raw.get("category"),
            extra={k: v for k, v in raw.items() if k not in known},
        )


@dataclass(frozen=True)
class AnalyzeData:
    """The ``data`` section of a response.

    Missing offers default to an empty list and missing counters to 0.
    """

    status: OfferStatus | str | None = None
    offers: list[Offer] = field(default_factory=list)
    requested: int = 0
    returned: int = 0

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> AnalyzeData:
        offers = raw.get("offers")
        return cls(
            status=raw.get("status"),
            offers=[Offer.from_dict(o) for o in offers if isinstance(o, dict)]
            if isinstance(offers, list)
            else [],
            requested=_as_int(raw.get("requested")),
            returned=_as_int(raw.get("returned")),
        )


@dataclass(frozen=True)
class ErrorInfo:
    """The ``error`` section of a response."""

    code: str
    message: str
    details: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ErrorInfo:
        details = raw.get("details")
        return cls(
            code=str(raw.get("code", "")),
            message=str(raw.get("message", "")),
            details=details if isinstance(details, dict) else None,
        )


@dataclass(frozen=True)
class UsageInfo:
    """Quota usage reported in the response metadata."""

    monthly_requests: int = 0
    free_tier_limit: int = 0
    free_tier_remaining: int = 0
    is_free_tier: bool = False
    has_credit_card: bool = False
    daily_requests: int | None = None
    daily_limit: int | None = None
    minute_requests: int | None = None
    minute_limit: int | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> UsageInfo:
        return cls(
            monthly_requests=_as_int(raw.get("monthly_requests")),
            free_tier_limit=_as_int(raw.get("free_tier_limit")),
            free_tier_remaining=_as_int(raw.get("free_tier_remaining")),
            is_free_tier=bool(raw.get("is_free_tier", False)),
            has_credit_card=bool(raw.get("has_credit_card", False)),
            daily_requests=raw.get("daily_requests"),
            daily_limit=raw.get("daily_limit"),
            minute_requests=raw.get("minute_requests"),
            minute_limit=raw.get("minute_limit"),
        )


@dataclass(frozen=True)
class ResponseMeta:
    """The ``meta`` section of a response."""

    request_id: str = UNKNOWN_REQUEST_ID
    processing_time_ms: float | None = None
    usage: UsageInfo | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ResponseMeta:
        request_id = raw.get("request_id")
        usage = raw.get("usage")
        return cls(
            request_id=request_id if isinstance(request_id, str) and request_id else UNKNOWN_REQUEST_ID,
            processing_time_ms=raw.get("processing_time_ms"),
            usage=UsageInfo.from_dict(usage) if isinstance(usage, dict) else None,
            extra={
                k: v
                for k, v in raw.items()
                if k not in {"request_id", "processing_time_ms", "usage"}
            },
        )


@dataclass(frozen=True)
class ResponseEnvelope:
    """Normalized response of a message analysis call.

    Attributes:
        data: The analysis result, defaulted when absent.
        error: The error section, if the server reported one.
        meta: The response metadata, with ``request_id`` defaulted to
            ``"unknown"``.
        success: The ``success`` flag, when the body carries one.
        raw: The parsed response body exactly as received.

    Example:
        ```pycon
        >>> from chatads.models import ResponseEnvelope
        >>> envelope = ResponseEnvelope.from_dict({"data": {"status": "no_offers_found"}})
        >>> envelope.data.offers
        []
        >>> envelope.meta.request_id
        'unknown'

        ```
    """

    data: AnalyzeData
    meta: ResponseMeta
    error: ErrorInfo | None = None
    success: bool | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ResponseEnvelope:
        error = raw.get("error")
        success = raw.get("success")
        return cls(
            data=AnalyzeData.from_dict(_as_dict(raw.get("data"))),
            meta=ResponseMeta.from_dict(_as_dict(raw.get("meta"))),
            error=ErrorInfo.from_dict(error) if isinstance(error, dict) and error else None,
            success=success if isinstance(success, bool) else None,
            raw=raw,
        )

    def to_dict(self) -> dict[str, Any]:
        r"""Return a shallow copy of the body as received."""
        return dict(self.raw)


def is_logical_failure(body: dict[str, Any]) -> bool:
    """Return whether a 2xx response body reports an application failure.

    A body is considered failed when its ``success`` flag is ``False`` or
    when it carries a non-empty ``error`` section.

    Example:
        ```pycon
        >>> from chatads.models import is_logical_failure
        >>> is_logical_failure({"data": {"status": "filled"}, "meta": {"request_id": "r"}})
        False
        >>> is_logical_failure({"error": {"code": "rate_limit", "message": "Too many"}})
        True
        >>> is_logical_failure({"success": False, "meta": {"request_id": "unknown"}})
        True

        ```
    """
    if body.get("success") is False:
        return True
    error = body.get("error")
    return isinstance(error, dict) and bool(error)
