"""Command-line interface for bilingual-srt."""

from __future__ import annotations

import asyncio
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .cache import TranslationCache
from .client import TranslationClient
from .config import TranslatorConfig
from .errors import SrtTranslateError
from .models import OutputMode, SrtDocument
from .orchestrator import BatchOrchestrator, BatchProgress
from .parser import save_srt, validate_srt_file
from .translators import ENGINE_INFO, PLANNED_ENGINES


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )
    # httpx 每个请求都会打 INFO 日志
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bilingual-srt",
        description="Translate SRT subtitles into bilingual or translated-only files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s translate video.srt                       # Bilingual output
  %(prog)s translate video.srt out.srt --mode translated_only
  %(prog)s translate video.srt --engine tencent      # Use Tencent Cloud MT
  %(prog)s serve --port 8000                         # Start the HTTP API
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    tr = sub.add_parser("translate", help="Translate an SRT file")
    tr.add_argument("input_path", help="Input SRT file path")
    tr.add_argument("output_path", nargs='?', default=None, help="Output SRT file path")
    tr.add_argument(
        "-e", "--engine",
        choices=sorted(set(ENGINE_INFO) | PLANNED_ENGINES),
        default=None,
        help="Translation engine (default: google or SRT_ENGINE)",
    )
    tr.add_argument(
        "-m", "--mode",
        choices=[m.value for m in OutputMode],
        default=OutputMode.BILINGUAL.value,
        help="Output mode",
    )
    tr.add_argument("--batch-size", type=int, default=None, help="Entries per batch")
    tr.add_argument("--delay", type=float, default=None, help="Seconds between batches")
    tr.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    tr.add_argument("--source-lang", default=None)
    tr.add_argument("--target-lang", default=None)
    tr.add_argument("--openai-model", default=None)

    sv = sub.add_parser("serve", help="Run the HTTP API")
    sv.add_argument("--host", default=None)
    sv.add_argument("--port", type=int, default=None)

    return parser


def default_output_path(in_path: Path, mode: OutputMode) -> Path:
    return in_path.with_name(mode.filename)


async def translate_file(args: argparse.Namespace) -> int:
    """Translate one SRT file. Returns the exit code."""
    logger = logging.getLogger(__name__)
    config = TranslatorConfig.from_args(args)

    error = config.validate()
    if error:
        logger.error(error)
        return 1

    in_path = Path(args.input_path).expanduser().resolve()
    error = validate_srt_file(in_path)
    if error:
        logger.error(error)
        return 1

    logger.info(f"Reading: {in_path}")
    document = SrtDocument.from_text(in_path.read_text(encoding="utf-8-sig"))
    if not document.entries:
        logger.error("No valid subtitle entries found")
        return 1
    logger.info(f"Parsed {len(document)} subtitle entries")

    mode = OutputMode.parse(args.mode)
    client = TranslationClient(TranslationCache(config.cache_ttl), config)
    orchestrator = BatchOrchestrator(
        client, batch_size=config.batch_size, delay=config.batch_delay
    )

    try:
        # 引擎配置错误时尽早退出
        client.translator(config.engine)

        with tqdm(total=len(document.pending_entries()), desc="Translating", unit="entry") as bar:
            def on_progress(progress: BatchProgress) -> None:
                bar.update(progress.current - bar.n)
                bar.set_postfix(ok=progress.succeeded, failed=progress.failed)

            summary = await orchestrator.run(document, config.engine, on_progress=on_progress)
    except SrtTranslateError as e:
        logger.error(f"{e.message}")
        if e.detail:
            logger.debug(f"Detail: {e.detail}")
        return 1
    finally:
        await client.aclose()

    for message in summary.errors:
        logger.warning(message)

    out_path = Path(args.output_path) if args.output_path else default_output_path(in_path, mode)
    save_srt(document.entries, out_path, mode)

    status = document.status()
    logger.info(
        f"Done! {status.translated}/{status.total} translated, "
        f"{status.failed} failed. Saved to {out_path}"
    )
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "serve":
        from .web import main as serve
        serve(args.host, args.port)
        return

    try:
        exit_code = asyncio.run(translate_file(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
