# src/backends/plain_text.py - v1
"""Per-file translator for plain text that is not batched.

Used when a text extension is excluded from batching (for example
``BATCHABLE_EXTENSIONS=.md`` leaves ``.txt`` on the per-file path). The
already-masked content goes through the backend's single-text call.
"""

from __future__ import annotations

from transbatch.backends.base_backend import BaseFileTranslator, TranslationBackend
from transbatch.core.models import FileEntry, TranslationOptions
from transbatch.text.placeholder import PlaceholderCodec

PLAIN_TEXT_EXTENSIONS: frozenset[str] = frozenset({".txt", ".md"})


class PlainTextFileTranslator(BaseFileTranslator):
    """Translate a whole text file with one ``translate`` call."""

    def __init__(
        self,
        backend: TranslationBackend,
        extensions: frozenset[str] = PLAIN_TEXT_EXTENSIONS,
    ) -> None:
        self._backend = backend
        self._extensions = frozenset(e.lower() for e in extensions)

    @property
    def extensions(self) -> frozenset[str]:
        return self._extensions

    async def translate_entry(self, entry: FileEntry, options: TranslationOptions) -> str:
        result = await self._backend.translate(entry.masked_content, options)
        return PlaceholderCodec.unmask(result.text, entry.token_table)
