"""Adapter factory -- builds one adapter per provider from Settings.

Uses PROVIDER_REGISTRY for extensibility. Adding a new provider
requires only a new entry in PROVIDER_CONFIGS.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import SecretStr

from creo.config import Settings
from creo.llm.providers import PROVIDER_REGISTRY, ProviderAdapter
from creo.llm.schemas import Provider


@dataclass(frozen=True)
class ProviderFactoryConfig:
    """Typed configuration for creating a provider adapter."""

    get_api_key: Callable[[Settings], SecretStr | None]
    get_default_model: Callable[[Settings], str]
    get_base_url: Callable[[Settings], str]
    # Gemini has no proxy endpoint
    proxy_capable: bool = False
    get_extra_kwargs: Callable[[Settings], dict[str, Any]] = field(
        default=lambda s: {}
    )


PROVIDER_CONFIGS: dict[Provider, ProviderFactoryConfig] = {
    Provider.GEMINI: ProviderFactoryConfig(
        get_api_key=lambda s: s.gemini_api_key,
        get_default_model=lambda s: s.gemini_default_model,
        get_base_url=lambda s: s.gemini_base_url,
    ),
    Provider.OPENAI: ProviderFactoryConfig(
        get_api_key=lambda s: s.openai_api_key,
        get_default_model=lambda s: s.openai_default_model,
        get_base_url=lambda s: s.openai_base_url,
        proxy_capable=True,
    ),
    Provider.CLAUDE: ProviderFactoryConfig(
        get_api_key=lambda s: s.anthropic_api_key,
        get_default_model=lambda s: s.anthropic_default_model,
        get_base_url=lambda s: s.anthropic_base_url,
        proxy_capable=True,
        get_extra_kwargs=lambda s: {"anthropic_version": s.anthropic_version},
    ),
}


def create_adapters(settings: Settings) -> dict[Provider, ProviderAdapter]:
    """Instantiate an adapter for every registered provider.

    Adapters hold no credentials, so all of them are created regardless
    of which API keys are configured.
    """
    adapters: dict[Provider, ProviderAdapter] = {}
    for provider, adapter_cls in PROVIDER_REGISTRY.items():
        config = PROVIDER_CONFIGS[provider]
        kwargs: dict[str, Any] = dict(config.get_extra_kwargs(settings))
        if config.proxy_capable:
            kwargs["proxy_base_url"] = settings.proxy_base_url
            kwargs["proxy_key_prefix"] = settings.proxy_key_prefix
        adapters[provider] = adapter_cls(config.get_base_url(settings), **kwargs)
    return adapters


def api_key_for(settings: Settings, provider: Provider) -> SecretStr | None:
    return PROVIDER_CONFIGS[provider].get_api_key(settings)


def default_model_for(settings: Settings, provider: Provider) -> str:
    return PROVIDER_CONFIGS[provider].get_default_model(settings)
