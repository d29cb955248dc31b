"""One-stop facade for the LLM gateway.

Usage::

    from creo.config import get_settings
    from creo.llm import create_gateway

    async with create_gateway(get_settings()) as gateway:
        result = await gateway.generate("Outline a Python course", model="gpt-4o-mini")
        if result.ok:
            print(result.response.text)
"""

import warnings
from types import TracebackType
from typing import Any

import httpx
import structlog

from creo.config import Settings, get_settings
from creo.errors import MissingApiKeyError
from creo.llm.factory import api_key_for, create_adapters, default_model_for
from creo.llm.resolver import resolve_provider
from creo.llm.retry import LogCallback, RetryController, SleepFn
from creo.llm.schemas import (
    CanonicalRequest,
    Provider,
    RetryOptions,
    RetryResult,
)

logger = structlog.get_logger()


class LLMGateway:
    """Settings-backed entry point wrapping a RetryController.

    Owns its httpx.AsyncClient unless one is injected; close it with
    ``aclose()`` or use the gateway as an async context manager.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
        *,
        sleep: SleepFn | None = None,
        log_callback: LogCallback | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.llm_request_timeout_s
        )
        controller_kwargs: dict[str, Any] = {}
        if sleep is not None:
            controller_kwargs["sleep"] = sleep
        self._controller = RetryController(
            create_adapters(settings),
            self._client,
            max_jitter_ms=settings.llm_max_jitter_ms,
            default_deadline_s=settings.llm_call_deadline_s,
            log_callback=log_callback,
            **controller_kwargs,
        )

    async def call(self, options: RetryOptions) -> RetryResult:
        """Run one call with caller-supplied options."""
        return await self._controller.call(options)

    async def generate(
        self,
        prompt: str,
        *,
        provider: Provider | None = None,
        model: str | None = None,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
        deadline_s: float | None = None,
    ) -> RetryResult:
        """Single-prompt call using configured keys, models and retry policy.

        Without a model, the provider's default model is used (Gemini
        when no provider is given either).

        Raises:
            MissingApiKeyError: if no key is configured for the provider.
        """
        if model:
            resolved = resolve_provider(model, provider)
        else:
            resolved = provider or Provider.GEMINI
            model = default_model_for(self._settings, resolved)

        api_key = api_key_for(self._settings, resolved)
        if api_key is None:
            raise MissingApiKeyError(resolved)

        options = RetryOptions(
            api_key=api_key,
            model=model,
            provider=resolved,
            body=CanonicalRequest.from_prompt(
                prompt,
                system_prompt=system_prompt,
                temperature=temperature,
                max_output_tokens=max_output_tokens,
            ),
            max_retries=self._settings.llm_max_retries,
            initial_delay_ms=self._settings.llm_initial_delay_ms,
            backoff_multiplier=self._settings.llm_backoff_multiplier,
            max_delay_ms=self._settings.llm_max_delay_ms,
            deadline_s=deadline_s,
        )
        return await self.call(options)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "LLMGateway":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_gateway(
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    *,
    log_callback: LogCallback | None = None,
) -> LLMGateway:
    """Assemble an LLMGateway from settings.

    Args:
        settings: Gateway settings; defaults to the cached get_settings().
        client: Shared HTTP client; the gateway creates and owns one if omitted.
        log_callback: Awaited once per call with the terminal RetryResult.
    """
    settings = settings or get_settings()
    gateway = LLMGateway(settings, client, log_callback=log_callback)
    logger.info(
        "llm_gateway_created",
        configured_keys=[
            p.value for p in Provider if api_key_for(settings, p) is not None
        ],
        max_retries=settings.llm_max_retries,
        deadline_s=settings.llm_call_deadline_s,
    )
    return gateway


async def call_llm_with_retry(
    options: RetryOptions,
    *,
    client: httpx.AsyncClient | None = None,
) -> RetryResult:
    """Call an LLM with provider detection and retry.

    Endpoints, jitter and the default deadline come from get_settings();
    everything else comes from ``options``.
    """
    async with LLMGateway(get_settings(), client) as gateway:
        return await gateway.call(options)


async def call_gemini_with_retry(
    options: RetryOptions,
    *,
    client: httpx.AsyncClient | None = None,
) -> RetryResult:
    """Deprecated: use call_llm_with_retry() for multi-provider support."""
    warnings.warn(
        "call_gemini_with_retry() is deprecated, use call_llm_with_retry()",
        DeprecationWarning,
        stacklevel=2,
    )
    return await call_llm_with_retry(
        options.model_copy(update={"provider": Provider.GEMINI}),
        client=client,
    )
