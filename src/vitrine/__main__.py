"""Command-line entry point: ``python -m vitrine PROMPT [PROMPT ...]``."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import json
import logging
import sys

from vitrine import generate_images, regenerate_single
from vitrine.config import get_settings
from vitrine.errors import VitrineError


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="vitrine",
        description="Generate product images from prompts and print the results as JSON.",
    )
    parser.add_argument("prompts", nargs="+", help="one prompt per image")
    parser.add_argument(
        "--type",
        dest="image_type",
        default=None,
        help="regenerate a single image of this type (exactly one prompt)",
    )
    parser.add_argument(
        "--mock", action="store_true", help="use the offline mock provider"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


async def _run(args: argparse.Namespace) -> object:
    settings = get_settings()
    if args.mock:
        settings = replace(settings, use_mock=True)
    if args.image_type is not None:
        if len(args.prompts) != 1:
            raise SystemExit("--type takes exactly one prompt")
        return await regenerate_single(
            args.prompts[0], args.image_type, settings=settings
        )
    result = await generate_images(args.prompts, settings=settings)
    return {"status": result.status, "data": result.to_payload()}


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        payload = asyncio.run(_run(args))
    except VitrineError as exc:
        message = f"error: {exc}"
        if exc.hint:
            message += f"\nhint: {exc.hint}"
        print(message, file=sys.stderr)
        return 2
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
