# src/batch/aggregator.py - v1
"""Result aggregator: reconcile remote results into per-file outcomes.

Every file ends in exactly one bucket (successful, failed, skipped) and
triggers exactly one progress callback, whether it travelled alone or
inside a batch unit.

Batch reconciliation is positional and all-or-nothing per unit: if the
result count differs from the request count, no file of that unit may be
marked successful. Write failures stay local to their file, and so does a
second, different input that resolves to an output path already claimed
in this run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Sequence

from transbatch.batch.models import ProgressCallback
from transbatch.core.errors import CountMismatchError, OutputCollisionError
from transbatch.core.models import (
    BatchResult,
    BatchUnit,
    FailedOutcome,
    FileEntry,
    ProgressInfo,
    SkippedOutcome,
    SuccessfulOutcome,
    TranslationResult,
)
from transbatch.storage.base_output_writer import BaseOutputWriter
from transbatch.text.placeholder import PlaceholderCodec

logger = logging.getLogger(__name__)

OutputResolver = Callable[[str], Path]


class ResultAggregator:
    """Collect outcomes for one run and write translated outputs.

    Args:
        total: Number of input files in the run.
        writer: Output writer used for translated files.
        resolve_output: Maps an input path to its output path.
        codec: Codec used to restore masked spans.
        on_progress: Optional per-file progress callback.
    """

    def __init__(
        self,
        total: int,
        writer: BaseOutputWriter,
        resolve_output: OutputResolver,
        codec: PlaceholderCodec | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._total = total
        self._writer = writer
        self._resolve_output = resolve_output
        self._codec = codec or PlaceholderCodec()
        self._on_progress = on_progress
        self._completed = 0
        self._result = BatchResult()
        self._claimed: dict[Path, Path] = {}

    @property
    def result(self) -> BatchResult:
        return self._result

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def total(self) -> int:
        return self._total

    # --- Outcome recording ---

    def record_success(self, file: str, output_path: str | Path) -> None:
        self._record(SuccessfulOutcome(file=file, output_path=str(output_path)))

    def record_failure(self, file: str, error: BaseException | str) -> None:
        message = error if isinstance(error, str) else _error_message(error)
        self._record(FailedOutcome(file=file, error=message))

    def record_skip(self, file: str, reason: str) -> None:
        self._record(SkippedOutcome(file=file, reason=reason))

    def skip_all(self, files: Iterable[str], reason: str) -> None:
        for file in files:
            self.record_skip(file, reason)

    def _record(self, outcome: SuccessfulOutcome | FailedOutcome | SkippedOutcome) -> None:
        self._result.add(outcome)
        self._completed += 1
        if self._on_progress is not None:
            self._on_progress(ProgressInfo(
                completed=self._completed, total=self._total, current=outcome.file,
            ))

    # --- Work item completion ---

    def fail_unit(self, unit: BatchUnit, error: BaseException) -> None:
        """Attribute a remote-call failure to every file of the unit."""
        message = _error_message(error)
        for entry in unit.entries:
            self.record_failure(entry.path, message)

    async def complete_unit(
        self,
        unit: BatchUnit,
        results: Sequence[TranslationResult],
    ) -> None:
        """Map results to files in request order, then write each output."""
        if len(results) != unit.size:
            mismatch = CountMismatchError(sent=unit.size, received=len(results))
            logger.warning(
                "Discarding batch of %d files: %s", unit.size, mismatch,
            )
            self.fail_unit(unit, mismatch)
            return

        for entry, result in zip(unit.entries, results):
            if result.billed_characters:
                self._result.billed_characters += result.billed_characters
            text = self._codec.unmask(result.text, entry.token_table)
            await self.complete_file(entry, text)

    async def complete_file(self, entry: FileEntry, translated: str) -> None:
        """Write one translated file and record its outcome."""
        output_path = self._resolve_output(entry.path)
        source = Path(entry.path).resolve()
        owner = self._claimed.setdefault(Path(output_path).resolve(), source)
        if owner != source:
            collision = OutputCollisionError(entry.path, str(output_path), str(owner))
            logger.warning("%s", collision)
            self.record_failure(entry.path, collision)
            return
        try:
            await self._writer.write_text(str(output_path), translated)
        except Exception as exc:
            logger.warning("Failed to write %s: %s", output_path, exc)
            self.record_failure(entry.path, exc)
            return
        self.record_success(entry.path, output_path)


def _error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__
