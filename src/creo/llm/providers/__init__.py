"""LLM provider adapters.

PROVIDER_REGISTRY maps each Provider to its adapter class. To add a
new provider:

1. Add a member to Provider in schemas.py
2. Create a module in this package implementing ProviderAdapter
3. Add entries to PROVIDER_REGISTRY below and to PROVIDER_CONFIGS
   in factory.py

The retry controller only talks to ProviderAdapter, so it needs no change.
"""

from creo.llm.providers.anthropic import AnthropicAdapter
from creo.llm.providers.base import ProviderAdapter
from creo.llm.providers.gemini import GeminiAdapter
from creo.llm.providers.openai_compat import OpenAICompatAdapter
from creo.llm.schemas import Provider

PROVIDER_REGISTRY: dict[Provider, type[ProviderAdapter]] = {
    Provider.GEMINI: GeminiAdapter,
    Provider.OPENAI: OpenAICompatAdapter,
    Provider.CLAUDE: AnthropicAdapter,
}

__all__ = [
    "PROVIDER_REGISTRY",
    "AnthropicAdapter",
    "GeminiAdapter",
    "OpenAICompatAdapter",
    "ProviderAdapter",
]
