# src/storage/local_writer.py - v3
"""Local filesystem reader/writer (default backend).

Reads refuse symlinks. Writes go to a uniquely named temp file next to the
target and are renamed into place, so an interrupted run never leaves a
half-written output and concurrent writes to one path never share a temp file.
Blocking calls run in a worker thread to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

from transbatch.core.errors import FileReadError, FileWriteError
from transbatch.storage.base_output_writer import BaseOutputWriter

TMP_SUFFIX = ".tmp"
OUTPUT_MODE = 0o644


class LocalWriter(BaseOutputWriter):
    """Read and write files on the local filesystem."""

    def __init__(self, base_path: str | None = None) -> None:
        """Initialize with optional base path.

        Args:
            base_path: Root directory for relative paths. If None, paths are
                used as given.
        """
        self._base = Path(base_path) if base_path else None

    def _resolve(self, path: str) -> Path:
        """Resolve a path relative to base_path."""
        if self._base is not None:
            return self._base / path
        return Path(path)

    async def read_text(self, path: str) -> str:
        return await asyncio.to_thread(safe_read_text, self._resolve(path))

    async def write_text(self, path: str, content: str) -> None:
        await asyncio.to_thread(atomic_write_text, self._resolve(path), content)

    async def exists(self, path: str) -> bool:
        return self._resolve(path).exists()


def safe_read_text(path: Path) -> str:
    """Read UTF-8 text after verifying the path is not a symlink."""
    try:
        if path.is_symlink():
            raise FileReadError(
                str(path), "symlinks are not supported for security reasons",
            )
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileReadError(str(path), "input file not found") from None
    except UnicodeDecodeError as exc:
        raise FileReadError(str(path), f"not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise FileReadError(str(path), exc.strerror or str(exc)) from exc


def atomic_write_text(path: Path, content: str) -> None:
    """Write via a temp file and rename; the temp file is removed on failure."""
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f"{path.name}.", suffix=TMP_SUFFIX,
        )
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(tmp_path, OUTPUT_MODE)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise FileWriteError(str(path), exc.strerror or str(exc)) from exc
