# src/batch/scheduler.py - v1
"""Concurrency scheduler: read, plan and dispatch one translation run.

Run phases:
  1. Validate the run configuration (raises before any I/O).
  2. Classify paths; unsupported ones are skipped without being read.
  3. Read and mask the remaining files.
  4. Plan batch units; rejected files are recorded as failed.
  5. Dispatch work items (batch units first, then per-file items) through a
     fixed pool of workers sharing one iterator.

The cancellation token is checked before every dispatch. Work already in
flight is never interrupted: a dispatched unit runs to completion, and
everything not yet dispatched is skipped with reason "Aborted".
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from functools import partial
from pathlib import Path
from typing import Iterator, Sequence

from transbatch.backends.base_backend import BaseFileTranslator, TranslationBackend
from transbatch.batch.aggregator import ResultAggregator
from transbatch.batch.models import BatchOptions, FileWorkItem, UnitWorkItem, WorkItem
from transbatch.batch.planner import BatchPlan, BatchPlanner
from transbatch.batch.scanner import SupportedFilePredicate
from transbatch.config.settings import MAX_CONCURRENCY
from transbatch.core.cancellation import ABORTED_REASON, CancellationToken
from transbatch.core.errors import ConfigurationError, FileReadError
from transbatch.core.models import BatchResult, FileEntry, TranslationOptions
from transbatch.logging.context import (
    reset_run_context,
    set_run_context,
    set_unit_context,
)
from transbatch.storage.base_output_writer import BaseOutputWriter
from transbatch.storage.layout import output_path_for
from transbatch.storage.local_writer import LocalWriter
from transbatch.text.placeholder import PlaceholderCodec

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5
UNSUPPORTED_REASON = "Unsupported file type"


def validate_concurrency(concurrency: int) -> int:
    """Return ``concurrency`` if within 1..MAX_CONCURRENCY.

    Raises:
        ConfigurationError: If out of range or not an integer.
    """
    if isinstance(concurrency, bool) or not isinstance(concurrency, int):
        raise ConfigurationError(f"Concurrency must be an integer, got {concurrency!r}")
    if not 1 <= concurrency <= MAX_CONCURRENCY:
        raise ConfigurationError(
            f"Concurrency must be between 1 and {MAX_CONCURRENCY}, got {concurrency}",
            "Use --concurrency with a value like 5",
        )
    return concurrency


class ConcurrencyScheduler:
    """Bounded-parallel dispatcher for one or more translation runs.

    Args:
        backend: Remote translation backend used for batch units.
        planner: Batch planner (default limits: 50 texts, 128 KiB).
        codec: Placeholder codec applied to every read file.
        writer: File reader/writer for inputs and outputs.
        file_translators: Per-file translators for non-batchable formats.
        predicate: Decides which paths are translatable at all.
        concurrency: Default worker pool size.
    """

    def __init__(
        self,
        backend: TranslationBackend,
        planner: BatchPlanner | None = None,
        codec: PlaceholderCodec | None = None,
        writer: BaseOutputWriter | None = None,
        file_translators: Sequence[BaseFileTranslator] = (),
        predicate: SupportedFilePredicate | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self._backend = backend
        self._planner = planner or BatchPlanner()
        self._codec = codec or PlaceholderCodec()
        self._writer = writer or LocalWriter()
        self._file_translators = list(file_translators)
        self._predicate = predicate or SupportedFilePredicate()
        self._concurrency = validate_concurrency(concurrency)

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def run(
        self,
        files: Sequence[str | Path],
        options: TranslationOptions,
        batch_options: BatchOptions | None = None,
    ) -> BatchResult:
        """Translate ``files`` and return one outcome per input path."""
        batch_options = batch_options or BatchOptions()
        concurrency = validate_concurrency(
            batch_options.concurrency
            if batch_options.concurrency is not None
            else self._concurrency
        )

        run_id = uuid.uuid4().hex[:12]
        context_token = set_run_context(run_id)
        try:
            return await self._run(run_id, files, options, batch_options, concurrency)
        finally:
            reset_run_context(context_token)

    async def _run(
        self,
        run_id: str,
        files: Sequence[str | Path],
        options: TranslationOptions,
        batch_options: BatchOptions,
        concurrency: int,
    ) -> BatchResult:
        token = batch_options.abort_signal
        paths = [str(f) for f in files]
        resolve_output = partial(
            output_path_for,
            target_lang=options.target_lang,
            output_dir=batch_options.output_dir,
            pattern=batch_options.output_pattern,
            base_dir=batch_options.base_dir,
        )
        aggregator = ResultAggregator(
            total=len(paths),
            writer=self._writer,
            resolve_output=resolve_output,
            codec=self._codec,
            on_progress=batch_options.on_progress,
        )
        if not paths:
            return aggregator.result

        if _is_aborted(token):
            logger.info("Run %s aborted before start: skipping %d files", run_id, len(paths))
            aggregator.skip_all(paths, ABORTED_REASON)
            return aggregator.result

        supported: list[str] = []
        for path in paths:
            if self._predicate.is_supported_file(path):
                supported.append(path)
            else:
                aggregator.record_skip(path, UNSUPPORTED_REASON)

        entries = await self._load_entries(supported, concurrency, aggregator)
        plan = self._planner.plan(entries)
        for rejected in plan.rejected:
            aggregator.record_failure(rejected.entry.path, rejected.error)

        items = self._build_work_items(plan, aggregator)
        logger.info(
            "Run %s: %d files, %d batch units, %d per-file items, concurrency=%d",
            run_id, len(paths), len(plan.batch_units),
            len(items) - len(plan.batch_units), concurrency,
        )

        shared: Iterator[WorkItem] = iter(items)
        workers = [
            self._worker(shared, options, aggregator, token)
            for _ in range(min(concurrency, len(items)))
        ]
        await asyncio.gather(*workers)

        result = aggregator.result
        logger.info(
            "Run %s finished: %d successful, %d failed, %d skipped",
            run_id, len(result.successful), len(result.failed), len(result.skipped),
        )
        return result

    # --- Reading ---

    async def _load_entries(
        self,
        paths: list[str],
        concurrency: int,
        aggregator: ResultAggregator,
    ) -> list[FileEntry]:
        semaphore = asyncio.Semaphore(concurrency)

        async def load(path: str) -> FileEntry | FileReadError:
            async with semaphore:
                try:
                    content = await self._writer.read_text(path)
                except FileReadError as exc:
                    return exc
            masked, table = self._codec.mask(content)
            return FileEntry(
                path=path,
                raw_content=content,
                masked_content=masked,
                token_table=table,
                byte_size=len(masked.encode("utf-8")),
            )

        loaded = await asyncio.gather(*(load(p) for p in paths))
        entries: list[FileEntry] = []
        for path, item in zip(paths, loaded):
            if isinstance(item, FileReadError):
                logger.warning("Cannot read %s: %s", path, item)
                aggregator.record_failure(path, item)
            else:
                entries.append(item)
        return entries

    # --- Dispatch ---

    def _build_work_items(
        self, plan: BatchPlan, aggregator: ResultAggregator,
    ) -> list[WorkItem]:
        items: list[WorkItem] = [
            UnitWorkItem(label=f"unit-{i}", unit=unit)
            for i, unit in enumerate(plan.batch_units, start=1)
        ]
        for entry in plan.routed_elsewhere:
            translator = self._translator_for(entry.extension)
            if translator is None:
                aggregator.record_skip(entry.path, UNSUPPORTED_REASON)
                continue
            items.append(FileWorkItem(
                label=f"file-{len(items) + 1}", entry=entry, translator=translator,
            ))
        return items

    def _translator_for(self, extension: str) -> BaseFileTranslator | None:
        for translator in self._file_translators:
            if translator.handles(extension):
                return translator
        return None

    async def _worker(
        self,
        items: Iterator[WorkItem],
        options: TranslationOptions,
        aggregator: ResultAggregator,
        token: CancellationToken | None,
    ) -> None:
        for item in items:
            if _is_aborted(token):
                aggregator.skip_all(item.files, ABORTED_REASON)
                continue
            if isinstance(item, UnitWorkItem):
                await self._dispatch_unit(item, options, aggregator)
            else:
                await self._dispatch_file(item, options, aggregator)

    async def _dispatch_unit(
        self,
        item: UnitWorkItem,
        options: TranslationOptions,
        aggregator: ResultAggregator,
    ) -> None:
        unit = item.unit
        set_unit_context(item.label)
        texts = [entry.masked_content for entry in unit.entries]
        try:
            results = await self._backend.translate_batch(texts, options)
        except Exception as exc:
            logger.warning("%s failed for %d files: %s", item.label, unit.size, exc)
            aggregator.fail_unit(unit, exc)
            return
        logger.debug("%s returned %d results", item.label, len(results))
        await aggregator.complete_unit(unit, results)

    async def _dispatch_file(
        self,
        item: FileWorkItem,
        options: TranslationOptions,
        aggregator: ResultAggregator,
    ) -> None:
        entry = item.entry
        set_unit_context(item.label, file=entry.path)
        try:
            translated = await item.translator.translate_entry(entry, options)
        except Exception as exc:
            logger.warning("Per-file translation failed: %s", exc)
            aggregator.record_failure(entry.path, exc)
            return
        await aggregator.complete_file(entry, translated)


def _is_aborted(token: CancellationToken | None) -> bool:
    return token is not None and token.aborted

