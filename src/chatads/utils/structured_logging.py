r"""JSON rendering of the per-attempt request trace.

When ``ClientConfig.logger`` is set, the client emits one DEBUG record
per attempt on that logger. The request details (method, URL, attempt
number, redacted headers and body summary) travel as ``extra``
attributes of the record; ``StructuredFormatter`` turns each record into
a single line of JSON.

Example:
    ```python
    import logging
    from chatads import ChatAdsClient
    from chatads.utils import StructuredFormatter, set_correlation_id

    trace = logging.getLogger("chatads.trace")
    sink = logging.StreamHandler()
    sink.setFormatter(StructuredFormatter())
    trace.addHandler(sink)
    trace.setLevel(logging.DEBUG)

    client = ChatAdsClient(api_key="cak_...", base_url="https://api.getchatads.com", logger=trace)
    set_correlation_id("conversation-42")
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextvars
import json
import logging
import time
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "chatads_correlation_id", default=None
)

# Attributes every LogRecord carries; anything else came from ``extra``
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def get_correlation_id() -> str | None:
    """Return the correlation ID bound to the current context, if any.

    Example:
        ```pycon
        >>> from chatads.utils import get_correlation_id
        >>> get_correlation_id() is None
        True

        ```
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind ``correlation_id`` to the current context.

    Every record formatted by ``StructuredFormatter`` in this context
    carries it. Each asyncio task works on its own copy of the context,
    so concurrent calls can be traced independently.
    """
    _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class StructuredFormatter(logging.Formatter):
    """Formatter rendering each record as one JSON object.

    The object always holds ``timestamp``, ``level``, ``logger``,
    ``message``, ``module``, ``function`` and ``line``. It also holds
    ``correlation_id`` when one is bound, ``exception`` when the record
    carries exception info, and every attribute passed through
    ``extra``. Values JSON cannot encode are rendered with ``str``.

    Example:
        ```pycon
        >>> import json
        >>> import logging
        >>> from io import StringIO
        >>> from chatads.utils import StructuredFormatter
        >>> buffer = StringIO()
        >>> sink = logging.StreamHandler(buffer)
        >>> sink.setFormatter(StructuredFormatter())
        >>> trace = logging.getLogger("chatads.doctest")
        >>> trace.addHandler(sink)
        >>> trace.setLevel(logging.DEBUG)
        >>> trace.debug("ChatAds request", extra={"attempt": 0})
        >>> json.loads(buffer.getvalue())["attempt"]
        0

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        correlation_id = get_correlation_id()
        if correlation_id is not None:
            entry["correlation_id"] = correlation_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(
            {name: value for name, value in vars(record).items() if name not in _RECORD_ATTRIBUTES}
        )
        return json.dumps(entry, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        r"""Format the record time as ISO 8601 UTC with milliseconds."""
        stamp = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
        return f"{stamp}.{int(record.msecs):03d}Z"


def log_structured(logger: logging.Logger, level: int, message: str, **fields: Any) -> None:
    """Emit ``message`` on ``logger`` with ``fields`` attached as record
    attributes.

    Args:
        logger: The destination logger.
        level: The record level, e.g. ``logging.DEBUG``.
        message: The record message.
        **fields: Attributes attached to the record through ``extra``.
    """
    logger.log(level, message, extra=fields)
