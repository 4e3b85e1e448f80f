# src/backends/base_backend.py - v1
"""Abstract translation backend interface.

The batch engine depends only on this interface, so tests can plug in a
deterministic stub without touching the network.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from transbatch.core.errors import CountMismatchError
from transbatch.core.models import FileEntry, TranslationOptions, TranslationResult


class TranslationBackend(ABC):
    """Remote translation capability: single text and batched texts."""

    @abstractmethod
    async def translate_batch(
        self,
        texts: list[str],
        options: TranslationOptions,
    ) -> list[TranslationResult]:
        """Translate several texts in one remote call.

        Returns:
            Results in request order, same length as ``texts``.

        Raises:
            TranslationError: Remote failure after retries.
        """

    async def translate(
        self,
        text: str,
        options: TranslationOptions,
    ) -> TranslationResult:
        """Translate a single text. Default implementation uses translate_batch."""
        results = await self.translate_batch([text], options)
        if len(results) != 1:
            raise CountMismatchError(sent=1, received=len(results))
        return results[0]

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g. deepl)."""


class BaseFileTranslator(ABC):
    """Per-file translator for formats that cannot be batched as plain text.

    Receives the already-read FileEntry and returns the translated file
    content; writing the output stays with the caller.
    """

    @property
    @abstractmethod
    def extensions(self) -> frozenset[str]:
        """Lowercase extensions (with leading dot) this translator handles."""

    @abstractmethod
    async def translate_entry(
        self,
        entry: FileEntry,
        options: TranslationOptions,
    ) -> str:
        """Translate one file's content."""

    def handles(self, extension: str) -> bool:
        return extension.lower() in self.extensions
