# src/core/errors.py - v1
"""Error taxonomy for remote calls and file-local failures.

Remote errors (auth, quota, rate limit, network, validation) are raised by
the request executor once its retry policy gives up. File-local errors are
attached to a single file's outcome and never abort a run. Each class
carries the CLI exit code used when it surfaces as a fatal error.
"""

from __future__ import annotations


class TranslationError(Exception):
    """Base class for every error raised by transbatch."""

    exit_code: int = 1
    default_suggestion: str | None = None

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        *,
        status: int | None = None,
        trace_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion or self.default_suggestion
        self.status = status
        self.trace_id = trace_id


class AuthError(TranslationError):
    """Credential or permission failure (HTTP 401/403, missing key)."""

    exit_code = 2
    default_suggestion = "Set DEEPL_API_KEY in the environment or .env file"


class RateLimitError(TranslationError):
    """HTTP 429 still returned after all retries."""

    exit_code = 3
    default_suggestion = "Wait a moment and retry, or lower --concurrency"


class QuotaError(TranslationError):
    """Usage limit for the billing period reached (HTTP 456)."""

    exit_code = 4
    default_suggestion = "Check your character usage or upgrade your plan"


class NetworkError(TranslationError):
    """5xx response or transport failure (refused, reset, timeout, DNS)."""

    exit_code = 5
    default_suggestion = "Check your internet connection and proxy settings"


class ValidationError(TranslationError):
    """Rejected request or malformed input (other 4xx)."""

    exit_code = 6


class ConfigurationError(TranslationError):
    """Invalid configuration detected before any work starts."""

    exit_code = 7


class FileLocalError(ValidationError):
    """Failure scoped to a single input file."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class EmptyFileError(FileLocalError):
    def __init__(self, path: str) -> None:
        super().__init__(path, "Cannot translate empty file")


class FileTooLargeError(FileLocalError):
    def __init__(self, path: str, size: int, limit: int) -> None:
        super().__init__(
            path,
            f"File too large: {size} bytes exceeds the {limit} byte limit per request",
        )
        self.size = size
        self.limit = limit


class CountMismatchError(FileLocalError):
    """A batch response whose length differs from the request."""

    def __init__(self, sent: int, received: int, path: str = "") -> None:
        super().__init__(
            path,
            f"Translation count mismatch: sent {sent} texts but received {received}",
        )
        self.sent = sent
        self.received = received


class FileReadError(FileLocalError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(path, f"Failed to read file (read error): {reason}")


class FileWriteError(FileLocalError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(path, f"Failed to write output (write error): {reason}")


class OutputCollisionError(FileLocalError):
    """Two different inputs of one run resolve to the same output path."""

    def __init__(self, path: str, output_path: str, claimed_by: str) -> None:
        super().__init__(
            path,
            f"Output path collision: {output_path} is already written for {claimed_by}",
        )
        self.output_path = output_path
        self.claimed_by = claimed_by
