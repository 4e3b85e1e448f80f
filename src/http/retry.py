# src/http/retry.py - v1
"""Retry policy: backoff schedule, Retry-After parsing, per-call state.

Delays are in seconds. The schedule is
``min(initial_delay_s * 2**attempt, max_delay_s)`` with ``attempt`` 0-based;
a 429 carrying a parseable ``Retry-After`` uses that value instead, clamped
to ``[0, retry_after_max_s]``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from transbatch.config.settings import Settings
    from transbatch.core.errors import TranslationError


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration shared by every call of one executor."""

    max_retries: int = 3
    initial_delay_s: float = 1.0
    max_delay_s: float = 10.0
    retry_after_max_s: float = 60.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay_s < 0 or self.max_delay_s < 0:
            raise ValueError("retry delays must be >= 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_retries=settings.max_retries,
            initial_delay_s=settings.retry_initial_delay_s,
            max_delay_s=settings.retry_max_delay_s,
            retry_after_max_s=settings.retry_after_max_s,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Exponential delay before retry number ``attempt + 1``."""
        return min(self.initial_delay_s * (2 ** attempt), self.max_delay_s)


@dataclass
class RetryState:
    """Mutable state of a single executor call; never shared between calls."""

    attempt: int = 0
    last_error: TranslationError | None = None
    trace_id: str | None = None

    def trace_suffix(self) -> str:
        return f" (Trace ID: {self.trace_id})" if self.trace_id else ""


def parse_retry_after(
    value: str | None,
    max_seconds: float = 60.0,
    now: datetime | None = None,
) -> float | None:
    """Parse a ``Retry-After`` header into a delay in seconds.

    Accepts delta-seconds (``"2"``, ``"1.5"``) or an HTTP-date. Returns None
    when the header is missing or unparseable.
    """
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        return None

    try:
        seconds = float(stripped)
    except ValueError:
        seconds = None
    if seconds is not None:
        if math.isnan(seconds) or math.isinf(seconds):
            return None
        return max(0.0, min(seconds, max_seconds))

    try:
        dt = parsedate_to_datetime(stripped)
    except (TypeError, ValueError, IndexError):
        return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    current = now or datetime.now(timezone.utc)
    delta = (dt - current).total_seconds()
    return max(0.0, min(delta, max_seconds))
