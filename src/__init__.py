"""transbatch: resilient batch translation of text files."""

from transbatch.version import __version__

__all__ = ["__version__"]
