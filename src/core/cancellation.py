# src/core/cancellation.py - v1
"""Cooperative cancellation: a read-only token and the source that aborts it.

The engine only ever reads ``token.aborted``; aborting is the caller's job
(e.g. the CLI on SIGINT, or a watch loop starting a newer run).
"""

from __future__ import annotations

ABORTED_REASON = "Aborted"


class CancellationToken:
    """Read-only view of a cancellation flag."""

    __slots__ = ("_aborted", "_reason")

    def __init__(self) -> None:
        self._aborted = False
        self._reason: str | None = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> str | None:
        return self._reason

    def __repr__(self) -> str:
        return f"CancellationToken(aborted={self._aborted}, reason={self._reason!r})"


class CancellationSource:
    """Owner side of a CancellationToken.

    Aborting is one-way: once cancelled the token stays aborted and later
    calls keep the first reason.
    """

    def __init__(self) -> None:
        self.token = CancellationToken()

    def cancel(self, reason: str | None = None) -> None:
        token = self.token
        if token._aborted:
            return
        token._reason = reason
        token._aborted = True

    @property
    def cancelled(self) -> bool:
        return self.token.aborted
