# src/batch/scanner.py - v2
"""File discovery and the supported-file predicate.

Discovery globs a directory (recursively by default) and keeps only files
the predicate accepts. The predicate checks the extension and, for paths
that exist, that they resolve to a regular file of a supported type.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from transbatch.batch.planner import DEFAULT_BATCHABLE_EXTENSIONS
from transbatch.core.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_STRUCTURED_EXTENSIONS: frozenset[str] = frozenset({".json", ".yaml", ".yml"})


class SupportedFilePredicate:
    """Decide whether a path is a translatable file.

    A path that does not exist yet passes on its extension alone; reading
    it later fails with a read error. Existing paths must be regular files
    whose resolved target also has a supported extension.
    """

    def __init__(
        self,
        extensions: Iterable[str] = DEFAULT_BATCHABLE_EXTENSIONS | DEFAULT_STRUCTURED_EXTENSIONS,
    ) -> None:
        self._extensions = frozenset(e.lower() for e in extensions)

    @property
    def extensions(self) -> frozenset[str]:
        return self._extensions

    def is_supported_file(self, path: str | Path) -> bool:
        p = Path(path)
        if p.suffix.lower() not in self._extensions:
            return False
        if not os.path.lexists(p):
            return True
        try:
            real = p.resolve(strict=True)
        except OSError:
            return False
        if real.suffix.lower() not in self._extensions:
            return False
        return real.is_file()

    __call__ = is_supported_file


class FileScanner:
    """Discover translatable files under a directory."""

    def __init__(self, predicate: SupportedFilePredicate | None = None) -> None:
        self._predicate = predicate or SupportedFilePredicate()

    def scan(
        self,
        root: Path,
        recursive: bool = True,
        pattern: str = "*",
    ) -> list[str]:
        """List supported files under ``root`` matching ``pattern``.

        Hidden files and directories (leading dot) are ignored.

        Raises:
            ValidationError: If ``root`` does not exist or is not a directory.
        """
        if not root.exists():
            raise ValidationError(f"Directory not found: {root}")
        if not root.is_dir():
            raise ValidationError(f"Not a directory: {root}")

        pattern_fn = root.rglob if recursive else root.glob
        found: list[str] = []
        for path in sorted(pattern_fn(pattern)):
            if not path.is_file():
                continue
            if any(part.startswith(".") for part in path.relative_to(root).parts):
                continue
            if not self._predicate.is_supported_file(path):
                continue
            found.append(str(path.resolve()))

        logger.info(
            "Scanned %s: found %d supported files (recursive=%s, pattern=%s)",
            root, len(found), recursive, pattern,
        )
        return found
