# src/api/facade.py - v2
"""Public API facade: single entry point for batch translation.

Usage:
    from transbatch.api.facade import BatchTranslationService

    async with BatchTranslationService.from_settings() as service:
        result = await service.translate_directory(
            "docs", TranslationOptions(target_lang="es"),
            DirectoryOptions(output_dir="out"),
        )
        print(get_statistics(result))
"""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Sequence

from transbatch.backends.backend_factory import create_backend
from transbatch.backends.base_backend import TranslationBackend
from transbatch.backends.plain_text import PLAIN_TEXT_EXTENSIONS, PlainTextFileTranslator
from transbatch.backends.structured import StructuredFileTranslator
from transbatch.batch.models import BatchOptions, DirectoryOptions
from transbatch.batch.planner import BatchPlanner
from transbatch.batch.scanner import FileScanner, SupportedFilePredicate
from transbatch.batch.scheduler import ConcurrencyScheduler
from transbatch.config.settings import Settings
from transbatch.core.models import BatchResult, BatchStatistics, TranslationOptions
from transbatch.storage.base_output_writer import BaseOutputWriter
from transbatch.text.placeholder import PlaceholderCodec

logger = logging.getLogger(__name__)


class BatchTranslationService:
    """Translate file lists and directory trees through one scheduler.

    Args:
        scheduler: Configured scheduler (backend, planner, codec, writer).
        scanner: File discovery for translate_directory().
    """

    def __init__(
        self,
        scheduler: ConcurrencyScheduler,
        scanner: FileScanner | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._scanner = scanner or FileScanner()
        self._backend: TranslationBackend | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        backend: TranslationBackend | None = None,
        writer: BaseOutputWriter | None = None,
    ) -> BatchTranslationService:
        """Wire the default stack from settings.

        Args:
            settings: Global settings. Loaded from .env if None.
            backend: Translation backend. Created from settings if None.
            writer: File reader/writer. Local filesystem if None.
        """
        settings = settings or Settings()
        owned = backend is None
        backend = backend or create_backend(settings)

        batchable = settings.batchable_extensions_list
        structured = settings.structured_extensions_list
        codec = PlaceholderCodec(preserve_code=settings.preserve_code)
        predicate = SupportedFilePredicate(
            set(batchable) | set(structured) | PLAIN_TEXT_EXTENSIONS
        )
        planner = BatchPlanner(
            max_texts=settings.batch_max_texts,
            max_bytes=settings.batch_max_bytes,
            batchable_extensions=batchable,
        )
        translators = [
            StructuredFileTranslator(
                backend,
                codec=codec,
                max_texts=settings.batch_max_texts,
                max_bytes=settings.batch_max_bytes,
                extensions=frozenset(structured),
            ),
            PlainTextFileTranslator(backend),
        ]
        scheduler = ConcurrencyScheduler(
            backend,
            planner=planner,
            codec=codec,
            writer=writer,
            file_translators=translators,
            predicate=predicate,
            concurrency=settings.batch_concurrency,
        )
        service = cls(scheduler, FileScanner(predicate))
        if owned:
            service._backend = backend
        return service

    async def translate_files(
        self,
        files: Sequence[str | Path],
        options: TranslationOptions,
        batch_options: BatchOptions | None = None,
    ) -> BatchResult:
        """Translate an explicit list of files.

        File-level problems end up in the result's ``failed`` or ``skipped``
        bucket; only invalid run configuration raises.
        """
        return await self._scheduler.run(files, options, batch_options)

    async def translate_directory(
        self,
        directory: str | Path,
        options: TranslationOptions,
        dir_options: DirectoryOptions | None = None,
    ) -> BatchResult:
        """Discover supported files under ``directory`` and translate them.

        Outputs mirror the input tree under ``output_dir`` when one is set.

        Raises:
            ValidationError: If ``directory`` does not exist.
        """
        dir_options = dir_options or DirectoryOptions()
        root = Path(directory)
        files = self._scanner.scan(
            root, recursive=dir_options.recursive, pattern=dir_options.pattern,
        )
        logger.info("Translating %d files from %s", len(files), root)

        run_options = BatchOptions(
            **{f.name: getattr(dir_options, f.name) for f in fields(BatchOptions)}
        )
        if run_options.base_dir is None:
            run_options.base_dir = root
        return await self.translate_files(files, options, run_options)

    @staticmethod
    def get_statistics(result: BatchResult) -> BatchStatistics:
        return get_statistics(result)

    async def aclose(self) -> None:
        """Close the backend if this service created it."""
        if self._backend is not None:
            await self._backend.aclose()
            self._backend = None

    async def __aenter__(self) -> BatchTranslationService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def get_statistics(result: BatchResult) -> BatchStatistics:
    """Summarize a BatchResult as counts per bucket."""
    return BatchStatistics(
        total=result.total,
        successful=len(result.successful),
        failed=len(result.failed),
        skipped=len(result.skipped),
        billed_characters=result.billed_characters,
    )
