"""Re-encode oversized images until they fit a byte budget."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

from PIL import Image

from .models import EncodeSettings
from .search import Accepted, Outcome, Rejected, find_first

logger = logging.getLogger("bing_photos.compress")

COMMON_WIDTHS: Tuple[int, ...] = (1000, 900, 800, 700, 640, 560, 480, 400)
QUALITIES: Tuple[int, ...] = (80, 70, 60, 55, 50, 45, 40, 35)


def width_ladder(source_width: int, common: Sequence[int] = COMMON_WIDTHS) -> List[int]:
    """Source width followed by the common widths below it, without repeats."""
    widths: List[int] = []
    for width in (source_width, *common):
        if 0 < width <= source_width and width not in widths:
            widths.append(width)
    return widths


def encode_grid(
    widths: Iterable[int],
    qualities: Sequence[int] = QUALITIES,
) -> Iterator[Tuple[int, int]]:
    """Yield (width, quality) pairs, largest width first, best quality first."""
    for width in widths:
        for quality in qualities:
            yield width, quality


def encode_jpeg(image: Image.Image, width: int, quality: int) -> bytes:
    """Resize to ``width`` (never enlarging) and encode as an optimized JPEG."""
    src_width, src_height = image.size
    if width < src_width:
        height = max(1, round(src_height * width / float(src_width)))
        image = image.resize((width, height), Image.Resampling.LANCZOS)
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True, progressive=True)
    return buffer.getvalue()


def _load_rgb(data: bytes) -> Image.Image:
    with Image.open(io.BytesIO(data)) as raw_image:
        raw_image.load()
        if raw_image.mode != "RGB":
            return raw_image.convert("RGB")
        return raw_image.copy()


def compress_to_limit(
    path: Path,
    max_bytes: int,
    qualities: Sequence[int] = QUALITIES,
) -> Outcome[EncodeSettings]:
    """Rewrite ``path`` with the least lossy encoding that is within ``max_bytes``.

    Widths are tried from the source width downwards; at each width every
    quality is tried before the width shrinks. The file is left untouched
    when the image cannot be decoded or no setting meets the budget.
    """
    data = path.read_bytes()
    try:
        image = _load_rgb(data)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        logger.debug("Cannot decode %s: %s", path, exc)
        return Rejected(f"decode-failed: {exc}")

    def attempt(setting: Tuple[int, int]) -> Outcome[EncodeSettings]:
        width, quality = setting
        encoded = encode_jpeg(image, width, quality)
        logger.debug("%s at width=%d quality=%d -> %d bytes", path.name, width, quality, len(encoded))
        if len(encoded) > max_bytes:
            return Rejected(f"over-budget: {len(encoded)} bytes")
        path.write_bytes(encoded)
        return Accepted(EncodeSettings(width=width, quality=quality, size=len(encoded)))

    outcome = find_first(encode_grid(width_ladder(image.width), qualities), attempt)
    if isinstance(outcome, Rejected):
        return Rejected(f"budget-unreachable: {outcome.reason}")
    return outcome
