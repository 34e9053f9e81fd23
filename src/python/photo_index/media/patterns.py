"""
Filename patterns shared by the files of one capture event.

Related files (RAW + JPEG + motion video + XMP sidecar) are recognized by a
common base name:

1. Google Pixel RAW: PXL_20251210_200246684.RAW-01.COVER.jpg
2. Multi-extension sidecars: IMG_1234.CR2.xmp
3. Numbered derivatives: IMG_1234_001.jpg, IMG_1234_002.jpg
4. Plain extensions: IMG_1234.jpg, IMG_1234.CR2, IMG_1234.MOV
"""

import re
from typing import Tuple

_PIXEL_RAW = re.compile(r"\.RAW-", re.IGNORECASE)
_DERIVATIVE = re.compile(r"^(.+?)(_\d{3})$")


def extract_base_name(filename: str) -> Tuple[str, str]:
    """
    Split a filename into (base_name, suffix).

    Examples:
        >>> extract_base_name("IMG_1234.CR2")
        ('IMG_1234', '.CR2')

        >>> extract_base_name("IMG_1234_001.jpg")
        ('IMG_1234', '_001.jpg')

        >>> extract_base_name("PXL_20251210_200246684.RAW-01.COVER.jpg")
        ('PXL_20251210_200246684', '.RAW-01.COVER.jpg')

        >>> extract_base_name("IMG_1234.CR2.xmp")
        ('IMG_1234', '.CR2.xmp')
    """
    if _PIXEL_RAW.search(filename):
        base_name = _PIXEL_RAW.split(filename)[0]
        return base_name, filename[len(base_name):]

    # Everything before the first dot; hidden files keep their leading dot
    prefix = filename[: len(filename) - len(filename.lstrip("."))]
    stem = prefix + filename[len(prefix):].split(".", 1)[0]

    match = _DERIVATIVE.match(stem)
    base_name = match[1] if match else stem

    return base_name, filename[len(base_name):]


def is_hidden(filename: str) -> bool:
    """Check if a file or directory name is hidden (dot prefix)."""
    return filename.startswith(".")
