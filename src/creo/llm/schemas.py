"""Shared schemas for the LLM gateway.

Provider-agnostic request/response types plus the options and result
of a single gateway call. All of them are created fresh per call.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class Provider(StrEnum):
    """Supported LLM backends."""

    GEMINI = "gemini"
    OPENAI = "openai"
    CLAUDE = "claude"


class ErrorKind(StrEnum):
    """Terminal failure classes of a gateway call."""

    RATE_LIMITED = "rate_limited"  # 429/503 with no attempts left
    HTTP = "http"  # any other non-2xx status
    NETWORK = "network"  # no response at all (status 0)
    TIMEOUT = "timeout"  # caller deadline expired


class PromptTurn(BaseModel):
    """One role-tagged turn; multi-part turns are newline-joined by translators."""

    role: str = "user"
    parts: list[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.parts)


class CanonicalRequest(BaseModel):
    """Vendor-independent "generate text" request.

    Sampling fields left as None are filled with per-vendor defaults
    by the translators.
    """

    provider: Provider | None = None
    model: str = ""
    turns: list[PromptTurn] = Field(default_factory=list)
    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None
    system_prompt: str | None = None
    extra_headers: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_prompt(
        cls,
        prompt: str,
        *,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> "CanonicalRequest":
        """Build a single-turn user request."""
        return cls(
            turns=[PromptTurn(role="user", parts=[prompt])],
            system_prompt=system_prompt,
            **kwargs,
        )

    @classmethod
    def from_gemini_payload(cls, payload: dict[str, Any]) -> "CanonicalRequest":
        """Parse a Gemini-shaped body (the legacy request format).

        Contents without a ``parts`` list are skipped, parts without
        text contribute an empty string.
        """
        turns: list[PromptTurn] = []
        contents = payload.get("contents")
        if isinstance(contents, list):
            for content in contents:
                if not isinstance(content, dict):
                    continue
                parts = content.get("parts")
                if not isinstance(parts, list):
                    continue
                turns.append(
                    PromptTurn(
                        role=content.get("role") or "user",
                        parts=[_part_text(p) for p in parts],
                    )
                )

        config = payload.get("generationConfig")
        if not isinstance(config, dict):
            config = {}

        system_prompt = None
        instruction = payload.get("systemInstruction")
        if isinstance(instruction, dict) and isinstance(
            instruction.get("parts"), list
        ):
            system_prompt = "\n".join(_part_text(p) for p in instruction["parts"])

        return cls(
            turns=turns,
            temperature=config.get("temperature"),
            max_output_tokens=config.get("maxOutputTokens"),
            top_p=config.get("topP"),
            top_k=config.get("topK"),
            system_prompt=system_prompt or None,
        )


def _part_text(part: Any) -> str:
    if isinstance(part, dict):
        return part.get("text") or ""
    return ""


class Usage(BaseModel):
    """Token accounting reported by the vendor."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CanonicalResponse(BaseModel):
    """Unified response from any provider.

    ``raw`` holds the Gemini-shaped normalized payload, or the vendor
    payload untouched when its shape was not recognized (``recognized``
    is then False and ``text`` is empty).
    """

    text: str
    provider: Provider
    model: str
    usage: Usage | None = None
    finish_reason: str | None = None
    recognized: bool = True
    raw: Any = None
    latency_ms: int = 0
    finished_at: datetime = Field(default_factory=datetime.now)


class TransportResponse(BaseModel):
    """What a transport adapter hands back: status, body, headers."""

    status: int
    body: str
    headers: dict[str, str] = Field(default_factory=dict)
    latency_ms: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class RetryOptions(BaseModel):
    """Input of one gateway call.

    ``body`` is either a canonical request or a Gemini-shaped mapping
    kept for backward compatibility.
    """

    api_key: SecretStr
    model: str
    provider: Provider | None = None
    # mappings must not be coerced into CanonicalRequest
    body: dict[str, Any] | CanonicalRequest = Field(union_mode="left_to_right")
    max_retries: int = Field(default=2, ge=0)
    initial_delay_ms: int = Field(default=500, ge=0)
    backoff_multiplier: float = Field(default=2.0, gt=1)
    max_delay_ms: int = Field(default=60_000, gt=0)
    extra_headers: dict[str, str] = Field(default_factory=dict)
    deadline_s: float | None = Field(default=None, gt=0)

    @field_validator("provider", mode="before")
    @classmethod
    def _auto_means_unset(cls, value: Any) -> Any:
        # "auto" is the selector value for "let the model name decide"
        if isinstance(value, str) and value.lower() == "auto":
            return None
        return value


class RetryResult(BaseModel):
    """Terminal outcome of one gateway call. Never mutated after return."""

    model_config = ConfigDict(frozen=True)

    response: CanonicalResponse | None = None
    status: int | None = None
    error_message: str | None = None
    error_kind: ErrorKind | None = None
    attempts: int = Field(ge=1)
    was_rate_limited: bool = False
    provider: Provider
    model: str

    @property
    def ok(self) -> bool:
        return self.response is not None
