# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides a deterministic in-memory translation backend, translation
options and helpers to lay out input files under tmp_path.
No network access: remote calls are stubbed or served by httpx.MockTransport.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from transbatch.backends.base_backend import TranslationBackend
from transbatch.core.models import TranslationOptions, TranslationResult
from transbatch.logging.context import clear_context


class StubBackend(TranslationBackend):
    """Records every call and returns ``[<lang>] <text>`` per input.

    Args:
        fail_with: Exception raised on every call (after recording it).
        drop_last: Return one result fewer than requested.
        on_call: Hook invoked with the texts before results are built.
    """

    def __init__(
        self,
        fail_with: Exception | None = None,
        drop_last: bool = False,
        on_call: Callable[[list[str]], None] | None = None,
    ) -> None:
        self.calls: list[list[str]] = []
        self.single_calls: list[str] = []
        self.fail_with = fail_with
        self.drop_last = drop_last
        self.on_call = on_call

    @property
    def provider_name(self) -> str:
        return "stub"

    async def translate_batch(
        self, texts: list[str], options: TranslationOptions,
    ) -> list[TranslationResult]:
        self.calls.append(list(texts))
        if self.on_call is not None:
            self.on_call(texts)
        if self.fail_with is not None:
            raise self.fail_with
        results = [
            TranslationResult(
                text=f"[{options.target_lang}] {t}",
                detected_source_lang="en",
                billed_characters=len(t),
            )
            for t in texts
        ]
        return results[:-1] if self.drop_last else results

    async def translate(self, text: str, options: TranslationOptions) -> TranslationResult:
        self.single_calls.append(text)
        return await super().translate(text, options)


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def stub_backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def options() -> TranslationOptions:
    return TranslationOptions(target_lang="es")


@pytest.fixture
def make_files(tmp_path: Path) -> Callable[..., list[str]]:
    """Create files under tmp_path/input: ``make_files({"a.txt": "Hi"})``."""

    def _make(contents: dict[str, str], root: Path | None = None) -> list[str]:
        base = root or tmp_path / "input"
        paths = []
        for name, text in contents.items():
            path = base / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            paths.append(str(path))
        return paths

    return _make


@pytest.fixture
def make_backend() -> Callable[..., StubBackend]:
    """Factory for StubBackend with custom behavior."""
    return StubBackend
