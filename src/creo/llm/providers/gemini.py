"""Google Gemini adapter (generateContent REST API).

Gemini's format is the canonical wire format, so normalize() is a
pass-through and legacy Gemini-shaped bodies are sent verbatim.
"""

from typing import Any

from creo.llm.providers.base import ProviderAdapter, as_int
from creo.llm.schemas import CanonicalRequest, Provider, Usage


class GeminiAdapter(ProviderAdapter):
    """Gemini provider: API key in the ``key`` query parameter."""

    provider = Provider.GEMINI

    def to_payload(self, request: CanonicalRequest, model: str) -> dict[str, Any]:
        contents = [
            {"role": turn.role, "parts": [{"text": part} for part in turn.parts]}
            for turn in request.turns
        ]
        generation_config: dict[str, Any] = {}
        if request.temperature is not None:
            generation_config["temperature"] = request.temperature
        if request.max_output_tokens is not None:
            generation_config["maxOutputTokens"] = request.max_output_tokens
        if request.top_p is not None:
            generation_config["topP"] = request.top_p
        if request.top_k is not None:
            generation_config["topK"] = request.top_k

        payload: dict[str, Any] = {
            "contents": contents or [{"role": "user", "parts": [{"text": ""}]}],
        }
        if generation_config:
            payload["generationConfig"] = generation_config
        if request.system_prompt:
            payload["systemInstruction"] = {
                "parts": [{"text": request.system_prompt}],
            }
        return payload

    def prepare_body(
        self, body: CanonicalRequest | dict[str, Any], model: str
    ) -> dict[str, Any]:
        if isinstance(body, CanonicalRequest):
            return self.to_payload(body, model)
        return body

    def normalize(self, data: Any) -> Any:
        return data

    def parse_usage(self, normalized: Any) -> Usage | None:
        meta = normalized.get("usageMetadata") if isinstance(normalized, dict) else None
        if not isinstance(meta, dict):
            return None
        return Usage(
            prompt_tokens=as_int(meta.get("promptTokenCount")),
            completion_tokens=as_int(meta.get("candidatesTokenCount")),
            total_tokens=as_int(meta.get("totalTokenCount")),
        )

    def endpoint(self, api_key: str, model: str) -> str:
        return f"{self._base_url}/models/{model}:generateContent"

    def query_params(self, api_key: str) -> dict[str, str]:
        return {"key": api_key}
