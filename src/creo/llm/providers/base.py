"""Abstract provider adapter: translation + transport for one vendor."""

import abc
import json
import time
from collections.abc import Callable
from typing import Any

import httpx
import structlog

from creo.llm.schemas import (
    CanonicalRequest,
    CanonicalResponse,
    Provider,
    TransportResponse,
    Usage,
)

logger = structlog.get_logger()

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_OUTPUT_TOKENS = 2048
DEFAULT_TOP_P = 0.95


class ProviderAdapter(abc.ABC):
    """Base class for all vendor adapters.

    Each adapter implements three concerns:
    - to_payload() / normalize(): canonical <-> vendor wire format
    - endpoint() / auth_headers() / query_params(): HTTP addressing
    - parse_usage(): vendor token accounting -> Usage

    Gemini's wire format is the lingua franca: normalize() converts a
    vendor response into a Gemini-shaped payload, and returns the input
    unchanged when it does not recognize the shape.
    """

    provider: Provider

    def __init__(
        self,
        base_url: str,
        *,
        proxy_base_url: str | None = None,
        proxy_key_prefix: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._proxy_base_url = proxy_base_url.rstrip("/") if proxy_base_url else None
        self._proxy_key_prefix = proxy_key_prefix

    # -- translation ----------------------------------------------------

    @abc.abstractmethod
    def to_payload(self, request: CanonicalRequest, model: str) -> dict[str, Any]:
        """Convert a canonical request into the vendor request body."""
        ...

    @abc.abstractmethod
    def normalize(self, data: Any) -> Any:
        """Convert a vendor response into a Gemini-shaped payload."""
        ...

    @abc.abstractmethod
    def parse_usage(self, normalized: Any) -> Usage | None:
        """Extract token usage from a normalized payload."""
        ...

    def prepare_body(
        self, body: CanonicalRequest | dict[str, Any], model: str
    ) -> dict[str, Any]:
        """Produce the vendor body from a canonical or Gemini-shaped request."""
        if isinstance(body, CanonicalRequest):
            return self.to_payload(body, model)
        return self.to_payload(CanonicalRequest.from_gemini_payload(body), model)

    def to_response(
        self, raw_body: str, model: str, *, latency_ms: int = 0
    ) -> CanonicalResponse:
        """Translate a successful raw body into a CanonicalResponse.

        Never raises: a body that is not JSON, or JSON of an unexpected
        shape, yields an empty ``text`` with ``recognized=False``.
        """
        try:
            data: Any = json.loads(raw_body)
        except (ValueError, RecursionError):
            data = raw_body

        normalized = self.normalize(data)
        candidate = _first_candidate(normalized)
        if candidate is None:
            logger.warning(
                "llm_response_unrecognized_shape",
                provider=self.provider,
                model=model,
                payload_type=type(normalized).__name__,
            )
            return CanonicalResponse(
                text="",
                provider=self.provider,
                model=model,
                recognized=False,
                raw=normalized,
                latency_ms=latency_ms,
            )

        text, finish_reason = candidate
        return CanonicalResponse(
            text=text,
            provider=self.provider,
            model=model,
            usage=self.parse_usage(normalized),
            finish_reason=finish_reason,
            raw=normalized,
            latency_ms=latency_ms,
        )

    # -- transport ------------------------------------------------------

    @abc.abstractmethod
    def endpoint(self, api_key: str, model: str) -> str:
        """Full URL of the generation endpoint."""
        ...

    def auth_headers(self, api_key: str) -> dict[str, str]:
        return {}

    def query_params(self, api_key: str) -> dict[str, str]:
        return {}

    def uses_proxy(self, api_key: str) -> bool:
        """Whether the key carries the proxy credential prefix."""
        return bool(
            self._proxy_base_url
            and self._proxy_key_prefix
            and api_key.startswith(self._proxy_key_prefix)
        )

    def base_url_for(self, api_key: str) -> str:
        if self.uses_proxy(api_key) and self._proxy_base_url:
            return self._proxy_base_url
        return self._base_url

    async def send(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        model: str,
        payload: dict[str, Any],
        extra_headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        """Issue one HTTP call. No retry, no error interpretation.

        Raises:
            httpx.RequestError: when no usable response arrives (connection,
                timeout, redirect loop or undecodable body).
        """
        headers = {
            "Content-Type": "application/json",
            **self.auth_headers(api_key),
            **(extra_headers or {}),
        }
        with self._measure_latency() as timer:
            response = await client.post(
                self.endpoint(api_key, model),
                params=self.query_params(api_key) or None,
                headers=headers,
                content=json.dumps(payload),
            )
        return TransportResponse(
            status=response.status_code,
            body=response.text,
            headers=dict(response.headers),
            latency_ms=timer.elapsed_ms,
        )

    def _measure_latency(self) -> "_LatencyTimer":
        """Context manager for measuring call latency."""
        return _LatencyTimer()


def flatten_turns(
    request: CanonicalRequest, role_map: Callable[[str], str] | None = None
) -> list[dict[str, str]]:
    """Turn canonical turns into ``{role, content}`` messages.

    Never returns an empty list: no turns become one empty user message.
    """
    messages = [
        {
            "role": role_map(turn.role) if role_map else turn.role,
            "content": turn.text,
        }
        for turn in request.turns
    ]
    return messages or [{"role": "user", "content": ""}]


def as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0


def _first_candidate(payload: Any) -> tuple[str, str | None] | None:
    """Text and finish reason of the primary candidate of a Gemini payload."""
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        return None

    content = candidate.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    texts: list[str] = []
    if isinstance(parts, list):
        texts = [
            p["text"]
            for p in parts
            if isinstance(p, dict) and isinstance(p.get("text"), str)
        ]
    finish_reason = candidate.get("finishReason")
    if not isinstance(finish_reason, str):
        finish_reason = None
    return "\n".join(texts), finish_reason


class _LatencyTimer:
    """Simple latency measurement helper."""

    def __init__(self) -> None:
        self.start: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "_LatencyTimer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: object) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)
