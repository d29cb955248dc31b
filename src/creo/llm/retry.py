"""RetryController -- same-provider retry loop for one gateway call.

State machine per call:

    Attempting -> Success                      (2xx, translated and returned)
    Attempting -> TransientFailure -> Backoff  (429/503 or network error,
                                                attempts left)
    Attempting -> FatalFailure                 (anything else, or no
                                                attempts left)

Backoff honors ``Retry-After`` on 429/503, otherwise grows as
``initial_delay_ms * backoff_multiplier ** attempt_index`` up to
``max_delay_ms``; a random jitter of up to ``max_jitter_ms`` is added
before sleeping.
"""

import asyncio
import math
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx
import structlog

from creo.errors import InvalidRequestError
from creo.llm.classifier import classify_error
from creo.llm.providers.base import ProviderAdapter
from creo.llm.resolver import resolve_provider
from creo.llm.schemas import (
    CanonicalRequest,
    ErrorKind,
    Provider,
    RetryOptions,
    RetryResult,
)

logger = structlog.get_logger()

RATE_LIMIT_STATUSES: frozenset[int] = frozenset({429, 503})
NETWORK_ERROR_STATUS = 0
DEFAULT_MAX_JITTER_MS = 250
DEFAULT_MAX_DELAY_MS = 60_000

SleepFn = Callable[[float], Awaitable[None]]
LogCallback = Callable[[RetryResult], Awaitable[None]]


def parse_retry_after(
    value: str | None, *, now: datetime | None = None
) -> int | None:
    """Convert a ``Retry-After`` header into a delay in milliseconds.

    Accepts delta-seconds (``"2"``, ``"1.5"``) or an HTTP-date. Dates in
    the past give 0. Returns None when the header is absent or unparsable.
    """
    if value is None or not value.strip():
        return None
    value = value.strip()

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            return None
        return max(int(seconds * 1000), 0)

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    current = now or datetime.now(UTC)
    return max(int((when - current).total_seconds() * 1000), 0)


def backoff_delay_ms(
    initial_delay_ms: int,
    backoff_multiplier: float,
    attempt_index: int,
    max_delay_ms: int = DEFAULT_MAX_DELAY_MS,
) -> int:
    """Exponential delay before the retry that follows ``attempt_index``.

    Bounded by ``max_delay_ms``.
    """
    try:
        delay = initial_delay_ms * backoff_multiplier**attempt_index
    except OverflowError:
        return max_delay_ms
    return min(round(delay), max_delay_ms)


@dataclass
class _CallState:
    """Mutable bookkeeping of one in-flight call."""

    provider: Provider
    model: str
    attempts: int = 0
    status: int | None = None
    error_message: str | None = None
    was_rate_limited: bool = False


class RetryController:
    """Dispatches a call to the resolved provider with retry and backoff.

    Holds no per-call state: concurrent calls share only the read-only
    adapters and HTTP client.
    """

    def __init__(
        self,
        adapters: dict[Provider, ProviderAdapter],
        client: httpx.AsyncClient,
        *,
        max_jitter_ms: int = DEFAULT_MAX_JITTER_MS,
        default_deadline_s: float | None = None,
        sleep: SleepFn = asyncio.sleep,
        random_fn: Callable[[], float] = random.random,
        log_callback: LogCallback | None = None,
    ) -> None:
        self._adapters = adapters
        self._client = client
        self._max_jitter_ms = max_jitter_ms
        self._default_deadline_s = default_deadline_s
        self._sleep = sleep
        self._random = random_fn
        self._log_callback = log_callback

    async def call(self, options: RetryOptions) -> RetryResult:
        """Run one gateway call to completion.

        Raises:
            InvalidRequestError: if the call cannot be constructed. This
                happens before any network activity; vendor and network
                failures are reported in the returned RetryResult.
        """
        api_key = options.api_key.get_secret_value()
        if not api_key:
            raise InvalidRequestError("api_key is required")
        if not options.model:
            raise InvalidRequestError("model is required")

        body = options.body
        extra_headers: dict[str, str] = {}
        requested = options.provider
        if isinstance(body, CanonicalRequest):
            requested = requested or body.provider
            extra_headers.update(body.extra_headers)
        extra_headers.update(options.extra_headers)

        provider = resolve_provider(options.model, requested)
        adapter = self._adapters.get(provider)
        if adapter is None:
            raise InvalidRequestError(f"No adapter registered for '{provider}'")
        payload = adapter.prepare_body(body, options.model)

        state = _CallState(provider=provider, model=options.model)
        deadline_s = options.deadline_s or self._default_deadline_s
        logger.info(
            "llm_call_started",
            provider=provider,
            model=options.model,
            max_attempts=options.max_retries + 1,
            via_proxy=adapter.uses_proxy(api_key),
        )

        attempts = self._run_attempts(
            adapter, api_key, options, payload, extra_headers, state
        )
        if deadline_s is None:
            result = await attempts
        else:
            try:
                async with asyncio.timeout(deadline_s):
                    result = await attempts
            except TimeoutError:
                logger.warning(
                    "llm_call_deadline_exceeded",
                    provider=provider,
                    model=options.model,
                    attempts=state.attempts,
                    deadline_s=deadline_s,
                )
                result = RetryResult(
                    status=None,
                    error_message=f"{provider} call exceeded {deadline_s}s deadline",
                    error_kind=ErrorKind.TIMEOUT,
                    attempts=max(state.attempts, 1),
                    was_rate_limited=state.was_rate_limited,
                    provider=provider,
                    model=options.model,
                )

        if self._log_callback:
            await self._log_callback(result)
        return result

    # -- internal: attempt loop -----------------------------------------

    async def _run_attempts(
        self,
        adapter: ProviderAdapter,
        api_key: str,
        options: RetryOptions,
        payload: dict[str, Any],
        extra_headers: dict[str, str],
        state: _CallState,
    ) -> RetryResult:
        total_attempts = options.max_retries + 1
        attempt_index = 0
        while True:
            state.attempts = attempt_index + 1
            has_budget = state.attempts < total_attempts

            try:
                transport = await adapter.send(
                    self._client, api_key, options.model, payload, extra_headers
                )
            except (httpx.RequestError, OSError) as exc:
                state.status = NETWORK_ERROR_STATUS
                state.error_message = str(exc) or type(exc).__name__
                if not has_budget:
                    logger.warning(
                        "llm_call_failed",
                        provider=state.provider,
                        model=state.model,
                        status=state.status,
                        attempts=state.attempts,
                        error=state.error_message,
                    )
                    return self._failure(state, ErrorKind.NETWORK)

                delay_ms = backoff_delay_ms(
                    options.initial_delay_ms,
                    options.backoff_multiplier,
                    attempt_index,
                    options.max_delay_ms,
                )
                logger.warning(
                    "llm_call_network_error",
                    provider=state.provider,
                    model=state.model,
                    attempt=state.attempts,
                    max_attempts=total_attempts,
                    delay_ms=delay_ms,
                    error=state.error_message,
                )
                await self._backoff(delay_ms)
                attempt_index += 1
                continue

            state.status = transport.status
            if transport.ok:
                response = adapter.to_response(
                    transport.body, options.model, latency_ms=transport.latency_ms
                )
                logger.info(
                    "llm_call_succeeded",
                    provider=state.provider,
                    model=state.model,
                    attempts=state.attempts,
                    latency_ms=transport.latency_ms,
                    was_rate_limited=state.was_rate_limited,
                )
                return RetryResult(
                    response=response,
                    status=transport.status,
                    attempts=state.attempts,
                    was_rate_limited=state.was_rate_limited,
                    provider=state.provider,
                    model=state.model,
                )

            state.error_message = classify_error(
                transport.body, transport.status, state.provider
            )
            rate_limited = transport.status in RATE_LIMIT_STATUSES
            if rate_limited:
                state.was_rate_limited = True

            if rate_limited and has_budget:
                delay_ms = parse_retry_after(transport.header("retry-after"))
                if delay_ms is None:
                    delay_ms = backoff_delay_ms(
                        options.initial_delay_ms,
                        options.backoff_multiplier,
                        attempt_index,
                        options.max_delay_ms,
                    )
                logger.warning(
                    "llm_call_rate_limited",
                    provider=state.provider,
                    model=state.model,
                    status=transport.status,
                    attempt=state.attempts,
                    max_attempts=total_attempts,
                    delay_ms=delay_ms,
                )
                await self._backoff(delay_ms)
                attempt_index += 1
                continue

            logger.warning(
                "llm_call_failed",
                provider=state.provider,
                model=state.model,
                status=transport.status,
                attempts=state.attempts,
                error=state.error_message,
            )
            return self._failure(
                state, ErrorKind.RATE_LIMITED if rate_limited else ErrorKind.HTTP
            )

    async def _backoff(self, delay_ms: int) -> None:
        jitter_ms = int(self._random() * self._max_jitter_ms)
        await self._sleep((delay_ms + jitter_ms) / 1000)

    @staticmethod
    def _failure(state: _CallState, error_kind: ErrorKind) -> RetryResult:
        return RetryResult(
            response=None,
            status=state.status,
            error_message=state.error_message,
            error_kind=error_kind,
            attempts=state.attempts,
            was_rate_limited=state.was_rate_limited,
            provider=state.provider,
            model=state.model,
        )
