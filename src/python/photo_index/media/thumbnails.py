"""Thumbnail generation for classification and color extraction.

Thumbnails are cached on disk by content hash, so repeated indexing runs
only render a thumbnail once per file content.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageOps

from photo_index.errors import DecodeError

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 85


@dataclass(frozen=True)
class ThumbnailType:
    """Size and crop of a thumbnail kind.

    ``centering`` is the Pillow ImageOps.fit centering of the crop.
    """
    width: int
    height: int
    centering: Tuple[float, float] = (0.5, 0.5)


THUMBNAIL_TYPES = {
    "tile_224": ThumbnailType(224, 224, (0.5, 0.5)),
    "left_224": ThumbnailType(224, 224, (0.0, 0.5)),
    "right_224": ThumbnailType(224, 224, (1.0, 0.5)),
}


def thumbnail_path(thumbnails_root: Path, file_hash: str, kind: str) -> Path:
    """Cache location of a thumbnail: <root>/<h0>/<h1>/<h2>/<hash>_<kind>.jpg"""
    return (
        thumbnails_root / file_hash[0:1] / file_hash[1:2] / file_hash[2:3]
        / f"{file_hash}_{kind}.jpg"
    )


def create_thumbnail(source: Path, destination: Path, kind: str, quality: int = DEFAULT_QUALITY) -> Path:
    """
    Render a thumbnail of the given kind.

    Args:
        source: Image to read
        destination: JPEG file to write
        kind: Key of THUMBNAIL_TYPES
        quality: JPEG quality (1-100)

    Returns:
        The destination path.

    Raises:
        DecodeError: If the kind is unknown or the source cannot be decoded.
    """
    thumb_type = THUMBNAIL_TYPES.get(kind)
    if thumb_type is None:
        raise DecodeError(f"unknown thumbnail type: {kind}")

    try:
        with Image.open(source) as img:
            img = ImageOps.exif_transpose(img)
            if img.mode != "RGB":
                img = img.convert("RGB")

            size = (thumb_type.width, thumb_type.height)
            img = ImageOps.fit(img, size, Image.Resampling.LANCZOS, centering=thumb_type.centering)

            destination.parent.mkdir(parents=True, exist_ok=True)
            img.save(destination, "JPEG", quality=quality, optimize=True)
    except (OSError, Image.DecompressionBombError) as e:
        raise DecodeError(f"could not create {kind} thumbnail for {source}: {e}") from e

    logger.debug("created %s thumbnail %s", kind, destination)

    return destination
