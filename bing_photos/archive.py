"""Archive metadata retrieval and candidate collection."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set
from urllib.parse import urlencode, urljoin

import requests

from .config import FetchConfig
from .models import ImageCandidate

logger = logging.getLogger("bing_photos.archive")


class ArchiveFetchError(RuntimeError):
    """Raised when the archive endpoint answers with a non-200 status."""


class NoImagesFoundError(RuntimeError):
    """Raised when no candidate was discovered for any day or market."""


def build_archive_url(base_url: str, idx: int, n: int, market: str) -> str:
    query = urlencode({"format": "js", "idx": idx, "n": n, "mkt": market})
    return f"{base_url}?{query}"


def build_image_url(image_host: str, url_base: str, size: str) -> str:
    return f"{image_host}{url_base}_{size}.jpg"


def fetch_json(
    session: requests.Session,
    url: str,
    timeout: Optional[float] = None,
) -> Any:
    """GET a JSON document; non-200 responses raise ``ArchiveFetchError``."""
    resp = session.get(url, timeout=timeout)
    if resp.status_code != 200:
        resp.close()
        raise ArchiveFetchError(f"Request failed: {resp.status_code}")
    return resp.json()


def extract_images(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, dict) and isinstance(payload.get("images"), list):
        return payload["images"]
    return []


def candidate_from_item(item: Any, image_host: str) -> Optional[ImageCandidate]:
    """Build a candidate from an archive entry, or None without a usable URL."""
    if not isinstance(item, dict):
        return None
    raw_url = item.get("url")
    if not raw_url or not isinstance(raw_url, str):
        return None
    url_base = item.get("urlbase")
    if not url_base or not isinstance(url_base, str):
        url_base = None
    return ImageCandidate(url=urljoin(image_host, raw_url), url_base=url_base)


class ImageCollector:
    """Ordered, deduplicated accumulator of image candidates."""

    def __init__(self, target_count: int) -> None:
        self.target_count = target_count
        self.images: List[ImageCandidate] = []
        self._seen: Set[str] = set()

    def __len__(self) -> int:
        return len(self.images)

    @property
    def is_full(self) -> bool:
        return len(self.images) >= self.target_count

    def add(self, candidate: Optional[ImageCandidate]) -> bool:
        if candidate is None or self.is_full:
            return False
        key = candidate.dedupe_key
        if key in self._seen:
            return False
        self._seen.add(key)
        self.images.append(candidate)
        return True

    def padded(self) -> List[ImageCandidate]:
        """Return the collected images cycled up to exactly ``target_count``."""
        if not self.images:
            return []
        original = list(self.images)
        return [original[i % len(original)] for i in range(self.target_count)]


def collect_images(
    session: requests.Session,
    config: FetchConfig,
) -> List[ImageCandidate]:
    """Walk day offsets and markets until enough unique candidates are found."""
    collector = ImageCollector(config.target_count)
    idx = 0
    while not collector.is_full and idx < config.max_fetch_days:
        for market in config.markets:
            url = build_archive_url(config.archive_url, idx, config.batch_size, market)
            try:
                payload = fetch_json(session, url, timeout=config.request_timeout)
            except (requests.RequestException, ArchiveFetchError, ValueError) as exc:
                logger.warning(
                    "Archive fetch failed at idx=%d market=%s: %s", idx, market, exc
                )
                continue

            items = extract_images(payload)
            logger.debug("idx=%d market=%s returned %d item(s)", idx, market, len(items))
            for item in items:
                collector.add(candidate_from_item(item, config.image_host))
                if collector.is_full:
                    break
            if collector.is_full:
                break
        idx += config.batch_size

    if not collector.images:
        raise NoImagesFoundError("No images found from Bing archive.")

    if not collector.is_full:
        logger.warning(
            "Found %d unique image(s); repeating them to reach %d",
            len(collector),
            config.target_count,
        )
        return collector.padded()
    return list(collector.images)
