"""Command-line interface for proofreading a Markdown file.

Findings are printed as soon as each batch of sentences has been corrected.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import AsyncIterator, Callable, TextIO

from .config import ProofreaderConfiguration, resolve_api_key
from .diff import format_diff_markdown
from .exceptions import PreconditionError, ProofreaderError
from .llm.provider import LLMProviderError, ProviderStatus
from .llm.provider_registry import available_providers
from .models import CorrectionRecord
from .pipeline.orchestrator import create_service, proofread
from .session import Finding, ReviewSession, Selection

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = {".md", ".markdown"}
EXIT_PRECONDITION = 2
EXIT_INTERRUPTED = 130


def _line_range(value: str) -> tuple[int, int]:
    """Parse ``START:END`` (1-based, inclusive) into zero-based line indices."""
    start_text, sep, end_text = value.partition(":")
    try:
        start = int(start_text)
        end = int(end_text) if sep and end_text else start
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected START:END, got {value!r}") from exc
    if start < 1 or end < start:
        raise argparse.ArgumentTypeError(f"invalid line range {value!r}")
    return start - 1, end - 1


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="markdown-proofreader",
        description="Proofread Japanese prose in a Markdown file using LLMs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Proofread a whole file
  markdown-proofreader notes.md

  # Only lines 10 to 25, applying every suggestion back to the file
  markdown-proofreader notes.md --lines 10:25 --apply --yes

Environment Variables:
  PROOFREADER_API_KEY            API key for the primary provider
  PROOFREADER_CONCURRENCY        Max concurrent LLM requests (default: 10)
  LLM_PRIMARY                    Primary LLM provider (default: gemini)
  LLM_FALLBACK                   Fallback providers (comma-separated)
  GEMINI_MIN_REQUEST_INTERVAL    Min seconds between Gemini requests (default: 0)
  GEMINI_MAX_RETRIES             Retry attempts for 429 rate limit errors (default: 0)
        """,
    )
    parser.add_argument("file", type=Path, help="Markdown file to proofread")
    parser.add_argument(
        "--lines",
        type=_line_range,
        help="Only proofread lines START:END (1-based, inclusive)",
    )
    parser.add_argument("--api-key", help="API key (default: PROOFREADER_API_KEY)")
    parser.add_argument(
        "--provider",
        choices=available_providers(),
        help="Primary LLM provider (default: gemini or LLM_PRIMARY)",
    )
    parser.add_argument("--dotenv", type=Path, help="Path to .env file for API keys")
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Max concurrent LLM requests (default: 10 or PROOFREADER_CONCURRENCY)",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format: readable findings or one JSON record per line",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Write all suggested corrections back to the file",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Do not ask for confirmation before calling the (paid) LLM API",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level (default: WARNING)",
    )
    return parser.parse_args(args)


def _report_provider(name: str, status: ProviderStatus, error: Exception | None) -> None:
    if status is ProviderStatus.SUCCESS:
        logger.debug("Provider %s succeeded", name)
    else:
        logger.info("Provider %s reported %s: %s", name, status.value, error)


def _print_finding(path: Path, finding: Finding, out: TextIO) -> None:
    start = finding.range.starts_at
    print(
        f"{path}:{start.line_index + 1}:{start.column_index + 1}: {'; '.join(finding.errors)}",
        file=out,
    )
    print(f"    {format_diff_markdown(finding.original_sentence, finding.corrected_sentence)}", file=out)


def confirm(prompt: str, *, input_fn: Callable[[str], str] = input) -> bool:
    try:
        answer = input_fn(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def check_preconditions(args: argparse.Namespace) -> tuple[str, Selection]:
    """Read the file and build the selection, raising PreconditionError on bad input."""
    path: Path = args.file
    if not path.is_file():
        raise PreconditionError(f"File not found: {path}")
    if path.suffix.lower() not in MARKDOWN_SUFFIXES:
        raise PreconditionError(f"Not a Markdown file: {path}")

    # newline="" keeps CRLF endings intact for --apply
    with path.open(encoding="utf-8", newline="") as handle:
        text = handle.read()
    if args.lines is not None:
        selection = Selection.from_lines(text, *args.lines)
    else:
        selection = Selection.full(text)
    return text, selection


async def run_review(
    records: AsyncIterator[CorrectionRecord],
    session: ReviewSession,
    *,
    path: Path,
    output_format: str,
    out: TextIO,
) -> None:
    """Consume the correction stream, printing findings as they arrive."""
    async for record in records:
        finding = session.record(record)
        if output_format == "json":
            payload = record.to_dict()
            payload["range"] = session.selection.to_document_range(record.range).to_dict()
            print(json.dumps(payload, ensure_ascii=False), file=out, flush=True)
        elif finding is not None:
            _print_finding(path, finding, out)
        logger.info("Processed through line %s", session.last_processed_line)


def main(argv: list[str] | None = None, *, out: TextIO | None = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    args = parse_args(argv)
    out = out or sys.stdout
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        config = ProofreaderConfiguration.from_env(
            dotenv_path=args.dotenv,
            concurrency=args.concurrency,
            primary_provider=args.provider,
        )
        api_key = resolve_api_key(args.api_key)
        if api_key is None:
            raise PreconditionError(
                "API key is not set. Pass --api-key or set PROOFREADER_API_KEY."
            )
        text, selection = check_preconditions(args)
        session = ReviewSession.for_text(text, selection)
    except (PreconditionError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_PRECONDITION

    if not args.yes and not confirm("This review calls a paid LLM API. Continue?"):
        print("Aborted.", file=sys.stderr)
        return 1

    try:
        service = create_service(api_key, config, reporter=_report_provider)
        records = proofread(selection.extract(text), api_key, config=config, service=service)
        asyncio.run(
            run_review(records, session, path=args.file, output_format=args.format, out=out)
        )
    except KeyboardInterrupt:
        print(f"\nInterrupted; {len(session.findings)} finding(s) reported so far.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except (ProofreaderError, LLMProviderError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    pending = session.pending()
    if args.format == "text":
        print(f"\n{len(pending)} finding(s) in {session.records_seen} sentence(s).", file=out)

    if args.apply and pending:
        with args.file.open("w", encoding="utf-8", newline="") as handle:
            handle.write(session.apply(text))
        print(f"Applied {len(pending)} correction(s) to {args.file}", file=out)

    return 0
