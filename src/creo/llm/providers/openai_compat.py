"""OpenAI chat-completions adapter (direct API or proxy)."""

from typing import Any

from creo.llm.providers.base import (
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
    ProviderAdapter,
    as_int,
    flatten_turns,
)
from creo.llm.schemas import CanonicalRequest, Provider, Usage


class OpenAICompatAdapter(ProviderAdapter):
    """Provider for the OpenAI API and OpenAI-compatible proxies.

    Keys starting with the proxy prefix are routed to the proxy
    base URL; the bearer header is the same for both.
    """

    provider = Provider.OPENAI

    def to_payload(self, request: CanonicalRequest, model: str) -> dict[str, Any]:
        messages = flatten_turns(request)
        if request.system_prompt:
            messages.insert(0, {"role": "system", "content": request.system_prompt})
        return {
            "model": model,
            "messages": messages,
            "temperature": _or(request.temperature, DEFAULT_TEMPERATURE),
            "max_tokens": _or(request.max_output_tokens, DEFAULT_MAX_OUTPUT_TOKENS),
            "top_p": _or(request.top_p, DEFAULT_TOP_P),
        }

    def normalize(self, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            return data
        choice = choices[0] if isinstance(choices[0], dict) else {}
        message = choice.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        return {
            "candidates": [
                {
                    "content": {"parts": [{"text": content or ""}]},
                    "finishReason": choice.get("finish_reason"),
                }
            ],
            "model": data.get("model"),
            "usage": data.get("usage"),
        }

    def parse_usage(self, normalized: Any) -> Usage | None:
        usage = normalized.get("usage") if isinstance(normalized, dict) else None
        if not isinstance(usage, dict):
            return None
        return Usage(
            prompt_tokens=as_int(usage.get("prompt_tokens")),
            completion_tokens=as_int(usage.get("completion_tokens")),
            total_tokens=as_int(usage.get("total_tokens")),
        )

    def endpoint(self, api_key: str, model: str) -> str:
        return f"{self.base_url_for(api_key)}/chat/completions"

    def auth_headers(self, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}


def _or(value: Any, default: Any) -> Any:
    return default if value is None else value
