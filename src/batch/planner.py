# src/batch/planner.py - v1
"""Batch planner: partition read files into count/byte-bounded units.

Rules, applied per file in input order:
  1. masked size > max_bytes         -> rejected ("file too large")
  2. empty or whitespace-only        -> rejected ("empty")
  3. extension not batchable         -> routed to the per-file path
  4. otherwise appended to the current unit; a new unit starts when the
     file would push the unit past max_texts entries or max_bytes bytes.

Planning is pure: it never reads files or contacts the backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence, TypeVar

from transbatch.core.errors import EmptyFileError, FileLocalError, FileTooLargeError
from transbatch.core.models import MAX_TEXT_BYTES, TRANSLATE_BATCH_SIZE, BatchUnit, FileEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BATCHABLE_EXTENSIONS: frozenset[str] = frozenset({".txt", ".md"})


@dataclass
class RejectedFile:
    entry: FileEntry
    error: FileLocalError


@dataclass
class BatchPlan:
    """Output of BatchPlanner.plan()."""

    batch_units: list[BatchUnit] = field(default_factory=list)
    routed_elsewhere: list[FileEntry] = field(default_factory=list)
    rejected: list[RejectedFile] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return (
            sum(u.size for u in self.batch_units)
            + len(self.routed_elsewhere)
            + len(self.rejected)
        )


class BatchPlanner:
    """Group eligible files into BatchUnits.

    Args:
        max_texts: Maximum entries per unit.
        max_bytes: Maximum cumulative masked bytes per unit (and per file).
        batchable_extensions: Extensions eligible for batching (lowercase,
            with leading dot). Anything else is routed to the per-file path.
    """

    def __init__(
        self,
        max_texts: int = TRANSLATE_BATCH_SIZE,
        max_bytes: int = MAX_TEXT_BYTES,
        batchable_extensions: Iterable[str] = DEFAULT_BATCHABLE_EXTENSIONS,
    ) -> None:
        if max_texts < 1:
            raise ValueError("max_texts must be >= 1")
        if max_bytes < 1:
            raise ValueError("max_bytes must be >= 1")
        self._max_texts = max_texts
        self._max_bytes = max_bytes
        self._batchable = frozenset(e.lower() for e in batchable_extensions)

    @property
    def max_texts(self) -> int:
        return self._max_texts

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def is_batchable(self, entry: FileEntry) -> bool:
        return entry.extension in self._batchable

    def plan(self, entries: Sequence[FileEntry]) -> BatchPlan:
        result = BatchPlan()
        current: BatchUnit | None = None

        for entry in entries:
            if entry.byte_size > self._max_bytes:
                result.rejected.append(RejectedFile(
                    entry, FileTooLargeError(entry.path, entry.byte_size, self._max_bytes),
                ))
                continue
            if not entry.raw_content.strip():
                result.rejected.append(RejectedFile(entry, EmptyFileError(entry.path)))
                continue
            if not self.is_batchable(entry):
                result.routed_elsewhere.append(entry)
                continue

            if current is None or not self._fits(current, entry):
                current = BatchUnit()
                result.batch_units.append(current)
            current.entries.append(entry)
            current.cumulative_bytes += entry.byte_size

        logger.debug(
            "Planned %d files: %d units, %d per-file, %d rejected",
            len(entries), len(result.batch_units),
            len(result.routed_elsewhere), len(result.rejected),
        )
        return result

    def _fits(self, unit: BatchUnit, entry: FileEntry) -> bool:
        return (
            unit.size + 1 <= self._max_texts
            and unit.cumulative_bytes + entry.byte_size <= self._max_bytes
        )


def chunk_by_limits(
    items: Sequence[T],
    size_of: Callable[[T], int],
    max_items: int = TRANSLATE_BATCH_SIZE,
    max_bytes: int = MAX_TEXT_BYTES,
) -> list[list[T]]:
    """Split ``items`` in order into chunks honoring both limits.

    An item larger than ``max_bytes`` on its own still gets a chunk of one;
    callers that must refuse such items check before chunking.
    """
    chunks: list[list[T]] = []
    current: list[T] = []
    current_bytes = 0
    for item in items:
        size = size_of(item)
        if current and (len(current) >= max_items or current_bytes + size > max_bytes):
            chunks.append(current)
            current = []
            current_bytes = 0
        current.append(item)
        current_bytes += size
    if current:
        chunks.append(current)
    return chunks
