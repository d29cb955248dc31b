"""Anthropic Claude adapter (messages API, direct or proxy)."""

from typing import Any

from creo.llm.providers.base import (
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_TEMPERATURE,
    ProviderAdapter,
    as_int,
    flatten_turns,
)
from creo.llm.schemas import CanonicalRequest, Provider, Usage

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicAdapter(ProviderAdapter):
    """Claude provider: ``x-api-key`` plus a pinned ``anthropic-version``."""

    provider = Provider.CLAUDE

    def __init__(
        self,
        base_url: str,
        *,
        proxy_base_url: str | None = None,
        proxy_key_prefix: str | None = None,
        anthropic_version: str = ANTHROPIC_VERSION,
    ) -> None:
        super().__init__(
            base_url,
            proxy_base_url=proxy_base_url,
            proxy_key_prefix=proxy_key_prefix,
        )
        self._anthropic_version = anthropic_version

    def to_payload(self, request: CanonicalRequest, model: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": flatten_turns(request, role_map=_claude_role),
            "max_tokens": (
                DEFAULT_MAX_OUTPUT_TOKENS
                if request.max_output_tokens is None
                else request.max_output_tokens
            ),
            "temperature": (
                DEFAULT_TEMPERATURE
                if request.temperature is None
                else request.temperature
            ),
        }
        if request.system_prompt:
            payload["system"] = request.system_prompt
        return payload

    def normalize(self, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("content"), list):
            return data
        text = "\n".join(
            block.get("text") or ""
            for block in data["content"]
            if isinstance(block, dict) and block.get("type") == "text"
        )
        return {
            "candidates": [
                {
                    "content": {"parts": [{"text": text}]},
                    "finishReason": data.get("stop_reason"),
                }
            ],
            "model": data.get("model"),
            "usage": data.get("usage"),
        }

    def parse_usage(self, normalized: Any) -> Usage | None:
        usage = normalized.get("usage") if isinstance(normalized, dict) else None
        if not isinstance(usage, dict):
            return None
        prompt_tokens = as_int(usage.get("input_tokens"))
        completion_tokens = as_int(usage.get("output_tokens"))
        return Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )

    def endpoint(self, api_key: str, model: str) -> str:
        return f"{self.base_url_for(api_key)}/messages"

    def auth_headers(self, api_key: str) -> dict[str, str]:
        return {
            "x-api-key": api_key,
            "anthropic-version": self._anthropic_version,
        }


def _claude_role(role: str) -> str:
    # Claude only knows "user" and "assistant"
    return "assistant" if role in ("model", "assistant") else "user"
