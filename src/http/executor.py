# src/http/executor.py - v1
"""Request executor: retry/backoff around one remote call.

Status taxonomy:
  - 2xx/3xx            -> returned to the caller
  - 429                -> retried; waits Retry-After when given, else backoff
  - other 4xx          -> raised immediately (AuthError, QuotaError, ValidationError)
  - 5xx, transport     -> retried with exponential backoff (NetworkError)

When retries run out the last error is raised. Trace ids from any response
seen during the call are appended to error messages.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from transbatch.core.errors import (
    AuthError,
    NetworkError,
    QuotaError,
    RateLimitError,
    TranslationError,
    ValidationError,
)
from transbatch.http.retry import RetryPolicy, RetryState, parse_retry_after

logger = logging.getLogger(__name__)

TRACE_ID_HEADER = "x-trace-id"

Sleep = Callable[[float], Awaitable[Any]]


class RequestExecutor:
    """Execute an HTTP call under a RetryPolicy.

    The executor holds no per-call state, so one instance can serve many
    concurrent calls.
    """

    def __init__(self, policy: RetryPolicy | None = None, sleep: Sleep | None = None) -> None:
        self._policy = policy or RetryPolicy()
        self._sleep = sleep or asyncio.sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(
        self,
        fn: Callable[..., Awaitable[httpx.Response]],
        *args: Any,
        label: str = "request",
        **kwargs: Any,
    ) -> httpx.Response:
        """Call ``fn(*args, **kwargs)`` until it succeeds or retries run out.

        ``fn`` must return the response without raising for status.

        Raises:
            TranslationError: One of the taxonomy kinds, carrying the trace id.
        """
        policy = self._policy
        state = RetryState()

        while True:
            cause: BaseException | None = None
            try:
                response = await fn(*args, **kwargs)
            except httpx.TransportError as exc:
                cause = exc
                state.last_error = NetworkError(
                    f"Network error: {_describe_transport_error(exc)}{state.trace_suffix()}",
                    trace_id=state.trace_id,
                )
                delay = policy.backoff_delay(state.attempt)
            else:
                trace_id = response.headers.get(TRACE_ID_HEADER)
                if trace_id:
                    state.trace_id = trace_id

                status = response.status_code
                if status < 400:
                    return response

                state.last_error = classify_response(response, state.trace_id)
                if status == 429:
                    delay = parse_retry_after(
                        response.headers.get("retry-after"), policy.retry_after_max_s,
                    )
                    if delay is None:
                        delay = policy.backoff_delay(state.attempt)
                elif status < 500:
                    raise state.last_error
                else:
                    delay = policy.backoff_delay(state.attempt)

            if state.attempt >= policy.max_retries:
                logger.warning(
                    "%s failed after %d attempts: %s",
                    label, state.attempt + 1, state.last_error,
                )
                if cause is not None:
                    raise state.last_error from cause
                raise state.last_error

            state.attempt += 1
            logger.warning(
                "%s - %s (attempt %d/%d), retrying in %.1fs",
                label, type(state.last_error).__name__,
                state.attempt, policy.max_retries, delay,
            )
            await self._sleep(delay)


def classify_response(response: httpx.Response, trace_id: str | None = None) -> TranslationError:
    """Map an error response to its taxonomy kind."""
    status = response.status_code
    suffix = f" (Trace ID: {trace_id})" if trace_id else ""
    message = _error_message(response)

    if status in (401, 403):
        return AuthError(
            f"Authentication failed: Invalid API key{suffix}", status=status, trace_id=trace_id,
        )
    if status == 456:
        return QuotaError(
            f"Quota exceeded: Character limit reached{suffix}", status=status, trace_id=trace_id,
        )
    if status == 429:
        return RateLimitError(
            f"Rate limit exceeded: Too many requests{suffix}", status=status, trace_id=trace_id,
        )
    if status == 503:
        return NetworkError(
            f"Service temporarily unavailable: Please try again later{suffix}",
            status=status, trace_id=trace_id,
        )
    if status >= 500:
        return NetworkError(
            f"Server error ({status}): {message}{suffix}", status=status, trace_id=trace_id,
        )
    return ValidationError(f"API error: {message}{suffix}", status=status, trace_id=trace_id)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


def _describe_transport_error(exc: httpx.TransportError) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return f"request timed out ({exc})"
    if isinstance(exc, httpx.ConnectError):
        return f"connection failed ({exc})"
    return str(exc) or type(exc).__name__
