# tests/unit/test_main.py - v2
"""Tests for main.py - CLI entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from transbatch.core.errors import AuthError
from transbatch.core.models import BatchResult, FailedOutcome, SuccessfulOutcome
from transbatch.main import _build_parser, main, merge_results


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self, capsys):
        parser = _build_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_translate_subcommand(self):
        parser = _build_parser()
        args = parser.parse_args([
            "translate", "docs", "a.txt", "--to", "es", "--from", "en",
            "-o", "/tmp/out", "--concurrency", "3", "--no-recursive",
        ])
        assert args.command == "translate"
        assert args.paths == [Path("docs"), Path("a.txt")]
        assert args.target_lang == "es"
        assert args.source_lang == "en"
        assert args.output == Path("/tmp/out")
        assert args.concurrency == 3
        assert args.no_recursive is True

    def test_defaults(self):
        args = _build_parser().parse_args(["translate", "a.txt", "--to", "de"])
        assert args.pattern == "*"
        assert args.output is None
        assert args.output_pattern is None
        assert args.concurrency is None

    def test_target_required(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["translate", "a.txt"])

    def test_invalid_formality(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["translate", "a.txt", "--to", "de", "--formality", "rude"])


# ---------------------------------------------------------------------------
# main() tests
# ---------------------------------------------------------------------------

def _service(result: BatchResult) -> MagicMock:
    service = MagicMock()
    service.translate_files = AsyncMock(return_value=result)
    service.translate_directory = AsyncMock(return_value=result)
    service.__aenter__ = AsyncMock(return_value=service)
    service.__aexit__ = AsyncMock(return_value=None)
    return service


class TestMain:
    def test_no_command_shows_help(self, capsys):
        assert main([]) == 1

    def test_success_exit_zero(self, tmp_path, capsys):
        result = BatchResult(successful=[SuccessfulOutcome(file="a.txt", output_path="a.es.txt")])
        service = _service(result)
        with patch("transbatch.main.BatchTranslationService.from_settings", return_value=service):
            code = main(["translate", str(tmp_path / "a.txt"), "--to", "es"])
        assert code == 0
        service.translate_files.assert_awaited_once()
        assert "Successful:  1" in capsys.readouterr().out

    def test_failed_files_exit_one(self, tmp_path, capsys):
        result = BatchResult(failed=[FailedOutcome(file="a.txt", error="Cannot translate empty file")])
        with patch(
            "transbatch.main.BatchTranslationService.from_settings", return_value=_service(result),
        ):
            code = main(["translate", str(tmp_path / "a.txt"), "--to", "es"])
        assert code == 1
        assert "Cannot translate empty file" in capsys.readouterr().out

    def test_directory_uses_translate_directory(self, tmp_path):
        service = _service(BatchResult())
        with patch("transbatch.main.BatchTranslationService.from_settings", return_value=service):
            main(["translate", str(tmp_path), "--to", "es", "--no-recursive", "--pattern", "*.md"])
        _, _, dir_options = service.translate_directory.await_args.args
        assert dir_options.recursive is False
        assert dir_options.pattern == "*.md"
        service.translate_files.assert_not_awaited()

    def test_fatal_error_uses_exit_code(self, tmp_path, capsys):
        with patch(
            "transbatch.main.BatchTranslationService.from_settings",
            side_effect=AuthError("API key is required"),
        ):
            code = main(["translate", str(tmp_path / "a.txt"), "--to", "es"])
        assert code == 2
        err = capsys.readouterr().err
        assert "API key is required" in err
        assert "DEEPL_API_KEY" in err

    def test_keyboard_interrupt(self, tmp_path):
        with patch("transbatch.main.asyncio.run", side_effect=KeyboardInterrupt):
            assert main(["translate", str(tmp_path / "a.txt"), "--to", "es"]) == 130


class TestMergeResults:
    def test_merge(self):
        a = BatchResult(successful=[SuccessfulOutcome(file="a", output_path="a.es")], billed_characters=3)
        b = BatchResult(failed=[FailedOutcome(file="b", error="x")], billed_characters=4)
        merged = merge_results([a, b])
        assert merged.total == 2
        assert merged.billed_characters == 7
