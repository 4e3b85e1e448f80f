# src/storage/base_output_writer.py - v2
"""Abstract file I/O interface used by the batch engine."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseOutputWriter(ABC):
    """Unified interface for reading inputs and writing translated outputs."""

    @abstractmethod
    async def read_text(self, path: str) -> str:
        """Read a UTF-8 input file.

        Raises:
            FileReadError: Missing file, symlink, or undecodable content.
        """

    @abstractmethod
    async def write_text(self, path: str, content: str) -> None:
        """Write a UTF-8 output file, creating parent directories.

        Raises:
            FileWriteError: The output could not be written.
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if path exists."""
