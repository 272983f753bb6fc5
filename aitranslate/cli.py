"""Command line interface for the AI Translate catalog filler."""

from __future__ import annotations

import argparse
import asyncio
import pathlib
import sys
from typing import Iterable, Optional

from .configuration import get_settings, resolve_settings
from .errors import (
    AITranslateError,
    CatalogFormatError,
    PersistenceError,
    TranslationProviderConfigurationError,
)
from .translator import Outcome, TranslationRunner, TranslationSummary

VERSION = "1.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-translate",
        description="A command line tool that performs translation of xcstrings.",
        epilog=(
            "examples:\n"
            "  ai-translate /path/to/your/Localizable.xcstrings\n"
            "  ai-translate /path/to/your/Localizable.xcstrings -v -f"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "input_file",
        help="Path to the .xcstrings catalog to fill in.",
    )
    parser.add_argument(
        "-l",
        "--languages",
        help=(
            "A comma separated list of language codes (must match the language "
            "codes used by xcstrings)."
        ),
    )
    parser.add_argument(
        "-k",
        "--openai-key",
        help="Your OpenAI API key, see: https://platform.openai.com/api-keys",
    )
    parser.add_argument(
        "--host",
        help="Your OpenAI proxy host.",
    )
    parser.add_argument(
        "-m",
        "--model",
        help="Model identifier, e.g. gpt-4o-mini or gpt-4o (default: gpt-4o-mini).",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Translation provider identifier: openai, azure_openai or echo.",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        help="Number of concurrent translation requests, 1-20 (default: 5).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for a single translation request (default: 30).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "-s",
        "--skip-backup",
        action="store_true",
        help=(
            "By default a backup of the input will be created. When this flag is "
            "provided, the backup is skipped."
        ),
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help=(
            "Forces all strings to be translated, even if an existing translation "
            "is present."
        ),
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def execute_translation(
    args: argparse.Namespace,
) -> tuple[int, TranslationSummary | None, str | None]:
    """Execute a translation run and return the exit code, summary, and message."""

    input_path = pathlib.Path(args.input_file).expanduser().resolve()
    if not input_path.is_file():
        return 1, None, f"Input file not found: {input_path}"

    try:
        settings = resolve_settings(
            input_path=input_path,
            config=get_settings(),
            languages=args.languages,
            api_key=args.openai_key,
            host=args.host,
            model=args.model,
            concurrency=args.concurrency,
            request_timeout=args.timeout,
            provider=args.provider,
            verbose=args.verbose,
            skip_backup=args.skip_backup,
            force=args.force,
            provider_debug=args.debug_provider,
        )
    except TranslationProviderConfigurationError as exc:
        return 1, None, str(exc)

    runner = TranslationRunner(settings=settings)

    try:
        summary = asyncio.run(runner.run())
    except CatalogFormatError as exc:
        return 1, None, str(exc)
    except TranslationProviderConfigurationError as exc:
        return 1, None, str(exc)
    except PersistenceError as exc:
        return 1, None, f"{exc}\nTranslation stopped; completed languages were saved."
    except AITranslateError as exc:
        return 1, None, str(exc)
    except KeyboardInterrupt:
        return 2, None, "Translation interrupted by user."
    except Exception as exc:
        error_message = (
            f"{exc}\n"
            "An unexpected error occurred. Please rerun with --verbose for more details."
        )
        return 1, None, error_message

    return 0, summary, None


def format_duration(seconds: float) -> str:
    """Render an elapsed time such as ``1 hour, 2 minutes, 5 seconds``."""

    remaining = int(round(seconds))
    hours, remaining = divmod(remaining, 3600)
    minutes, secs = divmod(remaining, 60)
    parts = []
    for value, unit in ((hours, "hour"), (minutes, "minute"), (secs, "second")):
        if value or (unit == "second" and not parts):
            parts.append(f"{value} {unit}{'' if value == 1 else 's'}")
    return ", ".join(parts)


def print_summary(summary: TranslationSummary) -> None:
    """Output a friendly report once processing completes."""

    print("\n[✅] 100%")
    print(f"  Catalog:         {summary.input_path}")
    print(f"  Source language: {summary.source_language}")
    print(f"  Languages:       {', '.join(summary.languages)}")
    print(
        f"  Provider:        {summary.provider_name}"
        + (f" ({summary.model})" if summary.model else "")
    )
    print(f"  Entries:         {summary.total_entries}")
    print(
        "  Units:           "
        f"{summary.total(Outcome.TRANSLATED)} translated, "
        f"{summary.total(Outcome.COPIED) + summary.total(Outcome.PASSTHROUGH)} copied, "
        f"{summary.total(Outcome.SKIPPED)} already done, "
        f"{summary.total(Outcome.UNSUPPORTED)} unsupported, "
        f"{summary.total(Outcome.FAILED)} failed"
    )
    print(f"  Checkpoints:     {summary.checkpoints}")
    print(f"[⏰] Translations time: {format_duration(summary.elapsed_seconds)}")
    if summary.total_errors:
        print("  Notes:")
        for message in summary.error_messages:
            print(f"    - {message}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    exit_code, summary, message = execute_translation(args)

    if message:
        print(message)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
