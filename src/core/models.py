# src/core/models.py - v1
"""Core data types: translation options/results, file entries, batch units,
per-file outcomes and the aggregated batch result.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# DeepL limits per /v2/translate request.
TRANSLATE_BATCH_SIZE = 50
MAX_TEXT_BYTES = 131072


# === Remote call types ===


class TranslationOptions(BaseModel):
    """Per-run translation parameters forwarded to the backend."""

    target_lang: str
    source_lang: str | None = None
    formality: str | None = None
    glossary_id: str | None = None
    context: str | None = None
    preserve_formatting: bool | None = None
    model_type: str | None = None

    @field_validator("target_lang")
    @classmethod
    def validate_target_lang(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("target_lang is required")
        return v.strip()


class TranslationResult(BaseModel):
    """One translated text as returned by a backend."""

    text: str
    detected_source_lang: str | None = None
    billed_characters: int | None = None
    model_type_used: str | None = None


# === Planning types ===


class FileEntry(BaseModel):
    """A read input file, immutable once masked.

    ``byte_size`` is the UTF-8 size of ``masked_content``: that is what is
    sent over the wire and what batch limits are measured against.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    raw_content: str
    masked_content: str
    token_table: dict[str, str] = Field(default_factory=dict)
    byte_size: int

    @property
    def extension(self) -> str:
        return PurePath(self.path).suffix.lower()


class BatchUnit(BaseModel):
    """Files whose texts travel together in one remote call."""

    entries: list[FileEntry] = Field(default_factory=list)
    cumulative_bytes: int = 0

    @property
    def size(self) -> int:
        return len(self.entries)

    @property
    def files(self) -> list[str]:
        return [e.path for e in self.entries]


# === Outcomes ===


class SuccessfulOutcome(BaseModel):
    kind: Literal["successful"] = "successful"
    file: str
    output_path: str


class FailedOutcome(BaseModel):
    kind: Literal["failed"] = "failed"
    file: str
    error: str


class SkippedOutcome(BaseModel):
    kind: Literal["skipped"] = "skipped"
    file: str
    reason: str


Outcome = Annotated[
    Union[SuccessfulOutcome, FailedOutcome, SkippedOutcome],
    Field(discriminator="kind"),
]


class BatchResult(BaseModel):
    """Per-file outcomes of one run, bucketed by kind.

    Buckets are append-only and follow completion order, not input order.
    """

    successful: list[SuccessfulOutcome] = Field(default_factory=list)
    failed: list[FailedOutcome] = Field(default_factory=list)
    skipped: list[SkippedOutcome] = Field(default_factory=list)
    billed_characters: int = 0

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.failed) + len(self.skipped)

    def add(self, outcome: SuccessfulOutcome | FailedOutcome | SkippedOutcome) -> None:
        if isinstance(outcome, SuccessfulOutcome):
            self.successful.append(outcome)
        elif isinstance(outcome, FailedOutcome):
            self.failed.append(outcome)
        else:
            self.skipped.append(outcome)


class BatchStatistics(BaseModel):
    total: int
    successful: int
    failed: int
    skipped: int
    billed_characters: int = 0


class ProgressInfo(BaseModel):
    """Snapshot passed to ``on_progress`` after each file's outcome."""

    completed: int
    total: int
    current: str | None = None
