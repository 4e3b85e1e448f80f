# src/batch/models.py - v2
"""Batch run options and internal work items."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Union

from transbatch.core.models import BatchUnit, FileEntry, ProgressInfo

if TYPE_CHECKING:
    from transbatch.backends.base_backend import BaseFileTranslator
    from transbatch.core.cancellation import CancellationToken

ProgressCallback = Callable[[ProgressInfo], None]


@dataclass
class BatchOptions:
    """Per-run options for translate_files().

    Attributes:
        output_dir: Directory for translated files (default: next to input).
        output_pattern: Filename pattern using {name}, {lang}, {ext}.
        base_dir: Input root whose sub-directory layout is mirrored.
        concurrency: Worker pool size for this run (default: service value).
        on_progress: Called once per file as its outcome is recorded.
        abort_signal: Cancellation token checked before each dispatch.
    """

    output_dir: str | Path | None = None
    output_pattern: str | None = None
    base_dir: str | Path | None = None
    concurrency: int | None = None
    on_progress: ProgressCallback | None = None
    abort_signal: CancellationToken | None = None


@dataclass
class DirectoryOptions(BatchOptions):
    """Options for translate_directory(): discovery on top of BatchOptions."""

    recursive: bool = True
    pattern: str = "*"


@dataclass
class UnitWorkItem:
    """A batch unit sent to the backend in one translate_batch() call."""

    label: str
    unit: BatchUnit

    @property
    def files(self) -> list[str]:
        return self.unit.files


@dataclass
class FileWorkItem:
    """A single file handed to a per-file translator."""

    label: str
    entry: FileEntry
    translator: BaseFileTranslator

    @property
    def files(self) -> list[str]:
        return [self.entry.path]


WorkItem = Union[UnitWorkItem, FileWorkItem]
