# src/main.py - v2
"""CLI entry point: translate files and directories.

Usage:
    transbatch translate <path>... --to <lang> [options]

Exit codes: 0 all files handled, 1 some files failed, 2-7 fatal
TranslationError (see transbatch.core.errors), 130 interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from transbatch.api.facade import BatchTranslationService, get_statistics
from transbatch.batch.models import BatchOptions, DirectoryOptions
from transbatch.config.settings import load_settings
from transbatch.core.cancellation import CancellationSource
from transbatch.core.errors import TranslationError
from transbatch.core.models import BatchResult, ProgressInfo, TranslationOptions
from transbatch.logging.logger import setup_logging
from transbatch.version import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED_FILES = 1
EXIT_INTERRUPTED = 130


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except TranslationError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        if exc.suggestion:
            print(f"Suggestion: {exc.suggestion}", file=sys.stderr)
        return exc.exit_code
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="transbatch",
        description=f"transbatch v{__version__} - batch file translation",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    p_translate = subparsers.add_parser(
        "translate", help="Translate files and/or directories",
    )
    p_translate.add_argument(
        "paths", nargs="+", type=Path, help="Files or directories to translate",
    )
    p_translate.add_argument(
        "--to", dest="target_lang", required=True,
        help="Target language code (e.g. es, de, pt-BR)",
    )
    p_translate.add_argument(
        "--from", dest="source_lang", default=None,
        help="Source language code (auto-detected if omitted)",
    )
    p_translate.add_argument(
        "--formality", default=None,
        choices=["default", "more", "less", "prefer_more", "prefer_less"],
        help="Formality level",
    )
    p_translate.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output directory (default: next to each input)",
    )
    p_translate.add_argument(
        "--output-pattern", default=None,
        help="Output filename pattern using {name}, {lang}, {ext}",
    )
    p_translate.add_argument(
        "--pattern", default="*",
        help="Glob applied when scanning directories (default: *)",
    )
    p_translate.add_argument(
        "--no-recursive", action="store_true",
        help="Do not descend into sub-directories",
    )
    p_translate.add_argument(
        "--concurrency", type=int, default=None,
        help="Parallel remote calls (default: BATCH_CONCURRENCY, 5)",
    )
    p_translate.set_defaults(func=_cmd_translate)

    return parser


async def _cmd_translate(args: argparse.Namespace) -> int:
    """Translate every given path and print a summary."""
    settings = load_settings()
    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    _quiet_http_loggers()

    options = TranslationOptions(
        target_lang=args.target_lang,
        source_lang=args.source_lang,
        formality=args.formality,
    )
    source = CancellationSource()
    _install_interrupt_handler(source)

    files = [p for p in args.paths if not p.is_dir()]
    directories = [p for p in args.paths if p.is_dir()]
    common = {
        "output_dir": args.output,
        "output_pattern": args.output_pattern,
        "concurrency": args.concurrency,
        "on_progress": _print_progress,
        "abort_signal": source.token,
    }

    results: list[BatchResult] = []
    async with BatchTranslationService.from_settings(settings) as service:
        if files:
            results.append(await service.translate_files(
                files, options, BatchOptions(**common),
            ))
        for directory in directories:
            results.append(await service.translate_directory(
                directory, options,
                DirectoryOptions(
                    **common, recursive=not args.no_recursive, pattern=args.pattern,
                ),
            ))

    result = merge_results(results)
    _print_summary(result)

    if source.cancelled:
        return EXIT_INTERRUPTED
    return EXIT_FAILED_FILES if result.failed else EXIT_OK


def merge_results(results: list[BatchResult]) -> BatchResult:
    """Combine the results of several runs into one."""
    merged = BatchResult()
    for result in results:
        merged.successful.extend(result.successful)
        merged.failed.extend(result.failed)
        merged.skipped.extend(result.skipped)
        merged.billed_characters += result.billed_characters
    return merged


def _install_interrupt_handler(source: CancellationSource) -> None:
    """Route SIGINT to the cancellation source instead of killing the loop."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(
            signal.SIGINT, source.cancel, "Interrupted by user",
        )
    except NotImplementedError:
        # Windows event loops: Ctrl+C raises KeyboardInterrupt instead.
        logger.debug("Signal handlers not supported on this platform")


def _print_progress(info: ProgressInfo) -> None:
    print(f"[{info.completed}/{info.total}] {info.current}", file=sys.stderr)


def _print_summary(result: BatchResult) -> None:
    """Print a human-readable summary of a BatchResult."""
    stats = get_statistics(result)
    print("\nTranslation complete:")
    print(f"  Total:       {stats.total}")
    print(f"  Successful:  {stats.successful}")
    print(f"  Failed:      {stats.failed}")
    print(f"  Skipped:     {stats.skipped}")
    if stats.billed_characters:
        print(f"  Billed:      {stats.billed_characters} characters")
    for outcome in result.failed:
        print(f"  x {outcome.file}: {outcome.error}")


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage before settings are loaded."""
    setup_logging(level="DEBUG" if verbose else "INFO")
    _quiet_http_loggers()


def _quiet_http_loggers() -> None:
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
