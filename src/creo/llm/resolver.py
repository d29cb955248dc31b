"""Provider selection from an explicit choice or the model name."""

from creo.llm.schemas import Provider


def detect_provider(model: str) -> Provider:
    """Guess the provider from a model identifier.

    ``gpt-*`` or anything mentioning openai -> OpenAI, ``claude-*`` or
    anything mentioning anthropic -> Claude, everything else -> Gemini.
    """
    name = model.lower()
    if name.startswith("gpt-") or "openai" in name:
        return Provider.OPENAI
    if name.startswith("claude-") or "anthropic" in name:
        return Provider.CLAUDE
    return Provider.GEMINI


def resolve_provider(model: str, provider: Provider | None = None) -> Provider:
    """Explicit provider wins; otherwise detect from the model name."""
    if provider is not None:
        return provider
    return detect_provider(model)
