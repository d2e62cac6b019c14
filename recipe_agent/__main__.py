"""
Entry point: python -m recipe_agent (or recipe-extract)

  recipe-extract extract URL [-o FILE] [--compact] [--summary] [--no-ai] [-t SECONDS] [-v]
  recipe-extract batch URL [URL ...] [-o DIR] [--concurrency N] [--no-ai] [-v]
  recipe-extract image PATH [-o FILE] [--compact] [--summary] [-v]

JSON goes to stdout (or the -o file). On failure the error and any warnings
go to stderr and the exit status is 1.
"""
import argparse
import asyncio
import base64
import logging
import mimetypes
import re
import sys
from pathlib import Path

from dotenv import load_dotenv

from recipe_agent.config import Settings
from recipe_agent.extractor import RecipeExtractor
from recipe_agent.format import format_summary
from recipe_agent.models import ExtractionResult, Recipe

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r"[^\w\u0590-\u05FF\s-]")


def sanitize_filename(name: str) -> str:
    """Lowercase, keep Hebrew/alphanumeric/dash, spaces to dashes, at most 100 chars."""
    cleaned = _UNSAFE_FILENAME_RE.sub("", name.lower())
    cleaned = re.sub(r"\s+", "-", cleaned.strip())[:100]
    return cleaned or "recipe"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if getattr(args, "no_ai", False):
        settings = settings.replace(ai_enabled=False)
    if getattr(args, "timeout", None):
        settings = settings.replace(fetch_timeout=args.timeout)
    return settings


def _render(recipe: Recipe, compact: bool, summary: bool) -> str:
    if summary:
        return format_summary(recipe)
    return recipe.model_dump_json(indent=None if compact else 2)


def _report_failure(result: ExtractionResult) -> None:
    print(f"Error: {result.error}", file=sys.stderr)
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)


def _emit(result: ExtractionResult, args: argparse.Namespace) -> int:
    if not result.success or result.recipe is None:
        _report_failure(result)
        return 1
    for warning in result.warnings:
        logger.warning(warning)
    output = _render(result.recipe, args.compact, args.summary)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        logger.info("Saved to %s", args.output)
    else:
        print(output)
    return 0


async def _extract(args: argparse.Namespace) -> int:
    async with RecipeExtractor(_settings(args)) as extractor:
        result = await extractor.extract(args.url)
    return _emit(result, args)


async def _image(args: argparse.Namespace) -> int:
    path = Path(args.path)
    if not path.is_file():
        print(f"Error: no such file: {path}", file=sys.stderr)
        return 1
    mime_type = mimetypes.guess_type(path.name)[0] or ""
    image_b64 = base64.b64encode(path.read_bytes()).decode("ascii")
    async with RecipeExtractor(_settings(args)) as extractor:
        result = await extractor.extract_image(image_b64, mime_type)
    return _emit(result, args)


async def _batch(args: argparse.Namespace) -> int:
    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    limit = asyncio.Semaphore(max(1, args.concurrency))

    async with RecipeExtractor(_settings(args)) as extractor:

        async def one(url: str) -> bool:
            async with limit:
                logger.info("Processing: %s", url)
                result = await extractor.extract(url)
            if not result.success or result.recipe is None:
                logger.error("Failed: %s (%s)", url, result.error)
                return False
            path = out_dir / f"{sanitize_filename(result.recipe.title)}.json"
            path.write_text(result.recipe.model_dump_json(indent=2), encoding="utf-8")
            logger.info("Saved: %s", path)
            return True

        outcomes = await asyncio.gather(*(one(url) for url in args.urls))

    succeeded = sum(outcomes)
    failed = len(outcomes) - succeeded
    print(f"Done! {succeeded} succeeded, {failed} failed")
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="recipe-extract", description="Extract Hebrew/English recipes")
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Extract a recipe from a URL")
    extract.add_argument("url")
    extract.add_argument("-o", "--output", help="Write JSON to this file instead of stdout")
    extract.add_argument("--compact", action="store_true", help="Single-line JSON")
    extract.add_argument("--summary", action="store_true", help="Human-readable summary instead of JSON")
    extract.add_argument("--no-ai", action="store_true", help="Structured data only, no model calls")
    extract.add_argument("-t", "--timeout", type=float, help="Fetch timeout in seconds")
    extract.add_argument("-v", "--verbose", action="store_true")

    batch = sub.add_parser("batch", help="Extract several URLs into a directory of JSON files")
    batch.add_argument("urls", nargs="+")
    batch.add_argument("-o", "--output-dir", default="./recipes")
    batch.add_argument("--concurrency", type=int, default=2)
    batch.add_argument("--no-ai", action="store_true")
    batch.add_argument("-t", "--timeout", type=float)
    batch.add_argument("-v", "--verbose", action="store_true")

    image = sub.add_parser("image", help="Extract a recipe from a photo or screenshot")
    image.add_argument("path")
    image.add_argument("-o", "--output")
    image.add_argument("--compact", action="store_true")
    image.add_argument("--summary", action="store_true")
    image.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    handlers = {"extract": _extract, "batch": _batch, "image": _image}
    sys.exit(asyncio.run(handlers[args.command](args)))


if __name__ == "__main__":
    main()
