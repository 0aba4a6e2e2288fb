"""Size-capped image downloading and validation utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import requests
from filetype import guess

from .archive import build_image_url
from .config import FetchConfig
from .models import DownloadResult, DownloadStatus, ImageCandidate

logger = logging.getLogger("bing_photos.images")

CHUNK_SIZE = 64 * 1024


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def candidate_urls(candidate: ImageCandidate, config: FetchConfig) -> List[str]:
    """Canonical URL first, then the fixed-size renditions built from url_base."""
    urls = [candidate.url]
    if candidate.url_base:
        for size in config.size_candidates:
            url = build_image_url(config.image_host, candidate.url_base, size)
            if url not in urls:
                urls.append(url)
    return urls


def download_with_limit(
    session: requests.Session,
    url: str,
    dest: Path,
    max_bytes: int,
    timeout: Optional[float] = None,
) -> DownloadResult:
    """Stream ``url`` into memory and write it to ``dest`` if it fits ``max_bytes``.

    Nothing is written unless the whole body was received within the limit
    and looks like an image. Transport errors propagate to the caller.
    """
    with session.get(url, stream=True, timeout=timeout) as resp:
        if resp.status_code != 200:
            return DownloadResult(DownloadStatus.BAD_STATUS, status_code=resp.status_code)

        length_header = resp.headers.get("Content-Length")
        if length_header and length_header.isdigit() and int(length_header) > max_bytes:
            logger.debug("%s advertises %s bytes (limit %d)", url, length_header, max_bytes)
            return DownloadResult(DownloadStatus.TOO_LARGE, status_code=resp.status_code)

        chunks: List[bytes] = []
        total = 0
        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            total += len(chunk)
            if total > max_bytes:
                logger.debug("%s exceeded %d bytes while streaming", url, max_bytes)
                resp.close()
                return DownloadResult(DownloadStatus.TOO_LARGE, status_code=resp.status_code)
            chunks.append(chunk)

    data = b"".join(chunks)
    if not detect_image_format(data):
        return DownloadResult(DownloadStatus.NOT_IMAGE, status_code=200)

    dest.write_bytes(data)
    return DownloadResult(DownloadStatus.OK, bytes_written=total, status_code=200)
