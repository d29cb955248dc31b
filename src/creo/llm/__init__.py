"""LLM gateway: canonical schemas, provider adapters, retry, facade.

Quick start::

    from creo.llm import CanonicalRequest, RetryOptions, call_llm_with_retry

    result = await call_llm_with_retry(
        RetryOptions(
            api_key=key,
            model="claude-3-5-sonnet-20241022",
            body=CanonicalRequest.from_prompt(prompt),
        )
    )
"""

from creo.llm.classifier import classify_error
from creo.llm.gateway import (
    LLMGateway,
    call_gemini_with_retry,
    call_llm_with_retry,
    create_gateway,
)
from creo.llm.resolver import detect_provider, resolve_provider
from creo.llm.retry import RetryController
from creo.llm.schemas import (
    CanonicalRequest,
    CanonicalResponse,
    ErrorKind,
    PromptTurn,
    Provider,
    RetryOptions,
    RetryResult,
    Usage,
)

__all__ = [
    "CanonicalRequest",
    "CanonicalResponse",
    "ErrorKind",
    "LLMGateway",
    "PromptTurn",
    "Provider",
    "RetryController",
    "RetryOptions",
    "RetryResult",
    "Usage",
    "call_gemini_with_retry",
    "call_llm_with_retry",
    "classify_error",
    "create_gateway",
    "detect_provider",
    "resolve_provider",
]
