# src/main.py — v2
"""CLI entry point: serve, analyze, stats commands.

Usage:
    readlearn serve [--host HOST] [--port PORT]
    readlearn analyze <file> [--url URL] [--language fr] [--no-cache]
    readlearn stats [--hours 24]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from readlearn.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="readlearn",
        description=f"readlearn v{__version__} - CEFR article analysis backend",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=None, help="Bind host (default: APP_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: APP_PORT)")
    p_serve.set_defaults(func=_cmd_serve)

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Classify the CEFR level of a text file",
    )
    p_analyze.add_argument("file", type=Path, help="Path to a UTF-8 text file")
    p_analyze.add_argument("--url", default=None, help="Source URL of the text")
    p_analyze.add_argument(
        "--language", default=None,
        help="ISO 639-1 language code (default: DEFAULT_LANGUAGE)",
    )
    p_analyze.add_argument(
        "--no-cache", action="store_true",
        help="Skip cache lookups (results are still cached)",
    )
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- stats ---
    p_stats = subparsers.add_parser("stats", help="Show cache and usage statistics")
    p_stats.add_argument(
        "--hours", type=int, default=24,
        help="Usage window in hours (default: 24)",
    )
    p_stats.set_defaults(func=_cmd_stats)

    return parser


def _cmd_serve(args: argparse.Namespace) -> int:
    """Run the FastAPI app under uvicorn."""
    import uvicorn

    from readlearn.api.app import create_app
    from readlearn.config.settings import load_settings

    settings = load_settings()
    app = create_app(settings=settings)
    uvicorn.run(
        app,
        host=args.host or settings.app_host,
        port=args.port or settings.app_port,
        log_config=None,
    )
    return 0


def _cmd_analyze(args: argparse.Namespace) -> int:
    """Classify a single file and print the JSON result."""
    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    text = file_path.read_text(encoding="utf-8")
    if not text.strip():
        logger.error("File is empty: %s", file_path)
        return 1

    result = asyncio.run(
        _run_analyze(text, args.url, args.language, use_cache=not args.no_cache)
    )
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


async def _run_analyze(
    text: str, url: str | None, language: str | None, use_cache: bool
) -> dict:
    from readlearn.api.service import build_service

    service = build_service()
    try:
        await service.startup()
        response = await service.analyze(
            text, url=url, language=language, use_cache=use_cache
        )
        return response.to_public_dict()
    finally:
        service.close()


def _cmd_stats(args: argparse.Namespace) -> int:
    """Print cache and usage statistics as JSON."""
    print(json.dumps(asyncio.run(_run_stats(args.hours)), indent=2, default=str))
    return 0


async def _run_stats(hours: int) -> dict:
    from readlearn.api.service import build_service

    service = build_service()
    try:
        return await service.stats(hours=hours)
    finally:
        service.close()


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sentence_transformers").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
