"""Configuration objects and constants for the photo fetcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

ARCHIVE_URL = "https://www.bing.com/HPImageArchive.aspx"
IMAGE_HOST = "https://www.bing.com"
DEFAULT_OUTPUT_DIR = Path("public/photos")

TARGET_COUNT = 50
MAX_BYTES = 500 * 1024
MAX_DOWNLOAD_BYTES = 10 * 1024 * 1024
BATCH_SIZE = 1
MAX_FETCH_DAYS = 8

MARKETS: Tuple[str, ...] = (
    "zh-CN", "en-US", "en-GB", "ja-JP", "de-DE", "fr-FR", "it-IT", "es-ES",
    "pt-BR", "pt-PT", "ko-KR", "zh-TW", "ru-RU", "nl-NL", "sv-SE", "da-DK",
    "fi-FI", "no-NO", "pl-PL", "tr-TR", "th-TH", "id-ID", "vi-VN", "hi-IN",
    "ar-SA", "he-IL", "cs-CZ", "hu-HU", "el-GR", "ro-RO", "uk-UA", "bg-BG",
)
SIZE_CANDIDATES: Tuple[str, ...] = ("800x600", "640x480", "400x240")


@dataclass
class FetchConfig:
    """Top-level settings that control discovery, download and encoding."""

    output_root: Path = DEFAULT_OUTPUT_DIR
    target_count: int = TARGET_COUNT
    max_bytes: int = MAX_BYTES
    max_download_bytes: int = MAX_DOWNLOAD_BYTES
    markets: List[str] = field(default_factory=lambda: list(MARKETS))
    batch_size: int = BATCH_SIZE
    max_fetch_days: int = MAX_FETCH_DAYS
    size_candidates: List[str] = field(default_factory=lambda: list(SIZE_CANDIDATES))
    archive_url: str = ARCHIVE_URL
    image_host: str = IMAGE_HOST
    request_timeout: Optional[float] = None
