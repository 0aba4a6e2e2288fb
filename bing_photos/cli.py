"""Command-line entry point for the Bing photo fetcher."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Sequence

from .archive import NoImagesFoundError
from .config import (
    DEFAULT_OUTPUT_DIR,
    MARKETS,
    MAX_BYTES,
    MAX_DOWNLOAD_BYTES,
    MAX_FETCH_DAYS,
    TARGET_COUNT,
    FetchConfig,
)
from .pipeline import run_pipeline

logger = logging.getLogger("bing_photos.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Download recent Bing images of the day across markets and store "
            "them as a numbered JPEG set within a per-file size budget."
        ),
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_DIR,
        type=Path,
        help="Directory where the numbered JPEG files are written",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=TARGET_COUNT,
        help="Number of images to store",
    )
    parser.add_argument(
        "--max-bytes",
        type=int,
        default=MAX_BYTES,
        help="Largest allowed size of a stored file; bigger images are re-encoded",
    )
    parser.add_argument(
        "--max-download-bytes",
        type=int,
        default=MAX_DOWNLOAD_BYTES,
        help="Abort downloads whose body exceeds this many bytes",
    )
    parser.add_argument(
        "--max-days",
        type=int,
        default=MAX_FETCH_DAYS,
        help="How many days back to search the archive",
    )
    parser.add_argument(
        "--market",
        dest="markets",
        action="append",
        default=None,
        help="Market to query (repeatable); defaults to the built-in list",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: wait indefinitely)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(list(sys.argv[1:] if argv is None else argv))
    for flag, value in (
        ("--count", args.count),
        ("--max-bytes", args.max_bytes),
        ("--max-download-bytes", args.max_download_bytes),
        ("--max-days", args.max_days),
    ):
        if value < 1:
            parser.error(f"{flag} must be at least 1")
    return args


def build_config(args: argparse.Namespace) -> FetchConfig:
    return FetchConfig(
        output_root=Path(args.output).resolve(),
        target_count=args.count,
        max_bytes=args.max_bytes,
        max_download_bytes=args.max_download_bytes,
        markets=list(args.markets or MARKETS),
        max_fetch_days=args.max_days,
        request_timeout=args.timeout,
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = build_config(args)
    overall_start = time.perf_counter()
    try:
        summary = run_pipeline(config)
    except NoImagesFoundError as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unexpected error while fetching photos")
        return 1

    logger.debug(
        "Run finished in %.2fs (%d/%d stored)",
        time.perf_counter() - overall_start,
        summary.saved,
        summary.target_count,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
