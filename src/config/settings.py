# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: API access,
retry policy, batch limits and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from transbatch.core.errors import ConfigurationError
from transbatch.core.models import MAX_TEXT_BYTES, TRANSLATE_BATCH_SIZE

MAX_CONCURRENCY = 100


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === DeepL API ===
    deepl_api_key: str = ""
    deepl_use_pro: bool = False
    deepl_api_url: str = ""
    http_timeout_s: float = 30.0

    # === Retry policy ===
    max_retries: int = 3
    retry_initial_delay_s: float = 1.0
    retry_max_delay_s: float = 10.0
    retry_after_max_s: float = 60.0

    # === Batching ===
    batch_concurrency: int = 5
    batch_max_texts: int = TRANSLATE_BATCH_SIZE
    batch_max_bytes: int = MAX_TEXT_BYTES
    batchable_extensions: str = ".txt,.md"
    structured_extensions: str = ".json,.yaml,.yml"
    preserve_code: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("batch_max_texts", "batch_max_bytes")
    @classmethod
    def validate_positive_limit(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("batch limits must be >= 1")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("max_retries must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not 1 <= self.batch_concurrency <= MAX_CONCURRENCY:
            errors.append(f"BATCH_CONCURRENCY must be between 1 and {MAX_CONCURRENCY}")

        if self.retry_initial_delay_s > self.retry_max_delay_s:
            errors.append("RETRY_INITIAL_DELAY_S must be <= RETRY_MAX_DELAY_S")

        if self.batch_max_texts > TRANSLATE_BATCH_SIZE:
            errors.append(f"BATCH_MAX_TEXTS cannot exceed {TRANSLATE_BATCH_SIZE}")

        if self.batch_max_bytes > MAX_TEXT_BYTES:
            errors.append(f"BATCH_MAX_BYTES cannot exceed {MAX_TEXT_BYTES}")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def batchable_extensions_list(self) -> list[str]:
        """Parse comma-separated batchable extensions."""
        return _parse_extensions(self.batchable_extensions)

    @property
    def structured_extensions_list(self) -> list[str]:
        """Parse comma-separated structured-file extensions."""
        return _parse_extensions(self.structured_extensions)


def _parse_extensions(value: str) -> list[str]:
    result = []
    for raw in value.split(","):
        ext = raw.strip().lower()
        if not ext:
            continue
        result.append(ext if ext.startswith(".") else f".{ext}")
    return result


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If cross-field validation fails.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
