"""High-level orchestration for collecting, downloading and storing photos."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import requests

from .archive import collect_images
from .compress import compress_to_limit
from .config import FetchConfig
from .images import candidate_urls, download_with_limit
from .models import ImageCandidate, RunSummary
from .search import Accepted, Outcome, Rejected, find_first

logger = logging.getLogger("bing_photos")


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def store_image(
    session: requests.Session,
    url: str,
    out_path: Path,
    config: FetchConfig,
) -> Outcome[int]:
    """Download one URL to ``out_path`` and bring it within the storage budget.

    Returns the stored size on success. A rejected URL never leaves behind
    a file written by this call.
    """
    try:
        result = download_with_limit(
            session,
            url,
            out_path,
            config.max_download_bytes,
            timeout=config.request_timeout,
        )
    except requests.RequestException as exc:
        logger.warning("Download failed: %s: %s", url, exc)
        return Rejected(f"error: {exc}")
    except OSError as exc:
        logger.warning("Could not write %s: %s", out_path, exc)
        _discard(out_path)
        return Rejected(f"error: {exc}")

    if not result.ok:
        logger.debug("Rejected %s (%s)", url, result.reason)
        return Rejected(result.reason)

    size = out_path.stat().st_size
    if size <= config.max_bytes:
        return Accepted(size)

    try:
        compressed = compress_to_limit(out_path, config.max_bytes)
    except (OSError, ValueError, SyntaxError) as exc:
        logger.warning("Re-encoding failed: %s: %s", url, exc)
        _discard(out_path)
        return Rejected(f"encode-failed: {exc}")
    if isinstance(compressed, Rejected):
        logger.debug("Could not fit %s under %d bytes: %s", url, config.max_bytes, compressed.reason)
        _discard(out_path)
        return compressed

    settings = compressed.value
    logger.debug(
        "Re-encoded %s from %d to %d bytes (width=%d, quality=%d)",
        out_path.name,
        size,
        settings.size,
        settings.width,
        settings.quality,
    )
    return Accepted(settings.size)


def save_images(
    session: requests.Session,
    images: List[ImageCandidate],
    config: FetchConfig,
) -> int:
    """Store candidates as ``1.jpg``..``N.jpg``; failed slots reuse their number."""
    saved = 0
    for candidate in images:
        if saved >= config.target_count:
            break
        out_path = config.output_root / f"{saved + 1}.jpg"

        def attempt(url: str) -> Outcome[str]:
            stored = store_image(session, url, out_path, config)
            if isinstance(stored, Accepted):
                return Accepted(url)
            return stored

        outcome = find_first(candidate_urls(candidate, config), attempt)
        if isinstance(outcome, Accepted):
            saved += 1
            logger.info("Saved %d/%d: %s", saved, config.target_count, outcome.value)
        else:
            logger.warning(
                "Skipped (too large or unavailable): %s",
                candidate.url_base or candidate.url,
            )
    return saved


def run_pipeline(
    config: FetchConfig,
    session: Optional[requests.Session] = None,
) -> RunSummary:
    """Collect archive candidates and write the numbered photo set."""
    config.output_root.mkdir(parents=True, exist_ok=True)
    own_session = session is None
    session = session or requests.Session()
    try:
        images = collect_images(session, config)
        saved = save_images(session, images, config)
    finally:
        if own_session:
            session.close()

    summary = RunSummary(saved=saved, target_count=config.target_count, output_dir=config.output_root)
    logger.info("Finished. Saved %d images to %s", summary.saved, summary.output_dir)
    if not summary.complete:
        logger.warning(
            "Only %d images met the size limit of %d bytes.", summary.saved, config.max_bytes
        )
    return summary
