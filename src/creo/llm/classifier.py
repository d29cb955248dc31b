"""Human-readable messages from heterogeneous vendor error bodies.

Vendors disagree on error envelopes:

- Gemini / OpenAI: ``{"error": {"message": "..."}}``
- some proxies:    ``{"message": "..."}``
- others:          ``{"error": "..."}``

classify_error() tries an ordered list of extractors, first hit wins,
and falls back to the raw body or a synthesized message. It never raises.
"""

import json
from collections.abc import Callable
from typing import Any

Extractor = Callable[[Any], str | None]


def _nested_error_message(data: Any) -> str | None:
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return _non_empty_str(error.get("message"))
    return None


def _top_level_message(data: Any) -> str | None:
    if isinstance(data, dict):
        return _non_empty_str(data.get("message"))
    return None


def _top_level_error(data: Any) -> str | None:
    if isinstance(data, dict):
        return _non_empty_str(data.get("error"))
    return None


EXTRACTORS: tuple[Extractor, ...] = (
    _nested_error_message,
    _top_level_message,
    _top_level_error,
)


def classify_error(
    raw_body: str | None,
    status: int | None = None,
    provider: str | None = None,
) -> str:
    """Extract an error message from a vendor error body.

    Args:
        raw_body: Response body text, possibly empty or not JSON.
        status: HTTP status, used only for the synthesized fallback.
        provider: Provider name, used only for the synthesized fallback.

    Returns:
        A non-empty message.
    """
    raw = raw_body or ""
    try:
        data: Any = json.loads(raw) if raw else None
    except (ValueError, RecursionError):
        data = None

    if data is not None:
        for extractor in EXTRACTORS:
            message = extractor(data)
            if message:
                return message

    if raw.strip():
        return raw
    return _synthesized(status, provider)


def _synthesized(status: int | None, provider: str | None) -> str:
    message = f"{provider or 'LLM'} API Error"
    if status:
        message += f" {status}"
    return message


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None
