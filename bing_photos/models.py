"""Data models used throughout the fetch pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ImageCandidate:
    """Image reference discovered in the archive metadata."""

    url: str
    url_base: Optional[str] = None

    @property
    def dedupe_key(self) -> str:
        return self.url_base or self.url


class DownloadStatus(Enum):
    OK = "ok"
    TOO_LARGE = "too-large"
    BAD_STATUS = "status"
    NOT_IMAGE = "not-image"


@dataclass
class DownloadResult:
    """Outcome of a size-capped download."""

    status: DownloadStatus
    bytes_written: int = 0
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is DownloadStatus.OK

    @property
    def reason(self) -> str:
        if self.status is DownloadStatus.BAD_STATUS:
            return f"status:{self.status_code}"
        return self.status.value


@dataclass(frozen=True)
class EncodeSettings:
    """Re-encoding parameters that brought an image under budget."""

    width: int
    quality: int
    size: int


@dataclass
class RunSummary:
    """Totals reported at the end of a run."""

    saved: int
    target_count: int
    output_dir: Path

    @property
    def complete(self) -> bool:
        return self.saved >= self.target_count
