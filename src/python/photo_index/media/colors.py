"""
Dominant color and luminance extraction.

An image is reduced to a 3x3 grid. Each cell is mapped to the nearest of
sixteen named colors; the palette and luminance strings hold one hex digit
per cell.
"""

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from PIL import Image

from photo_index.errors import DecodeError

GRID_SIZE = 3

NAMED_COLORS: List[Tuple[str, Tuple[int, int, int]]] = [
    ("black", (33, 33, 33)),
    ("grey", (158, 158, 158)),
    ("brown", (121, 85, 72)),
    ("gold", (255, 193, 7)),
    ("white", (245, 245, 245)),
    ("purple", (156, 39, 176)),
    ("blue", (33, 150, 243)),
    ("cyan", (0, 188, 212)),
    ("teal", (0, 150, 136)),
    ("green", (76, 175, 80)),
    ("lime", (205, 220, 57)),
    ("yellow", (255, 235, 59)),
    ("magenta", (216, 27, 96)),
    ("orange", (255, 152, 0)),
    ("red", (244, 67, 54)),
    ("pink", (240, 98, 146)),
]


@dataclass
class ColorPalette:
    """
    Color descriptors of an image.

    Attributes:
        main_color: Name of the most frequent named color
        colors: Palette index per grid cell, as hex digits (e.g. "e4411e444")
        luminance: Luminance per grid cell, 0-f per digit
        chroma: Average saturation, 0-100
    """
    main_color: str
    colors: str
    luminance: str
    chroma: int


def nearest_color(rgb: Tuple[int, int, int]) -> int:
    """Index of the named color closest to rgb (squared euclidean distance)."""
    r, g, b = rgb
    return min(
        range(len(NAMED_COLORS)),
        key=lambda i: (NAMED_COLORS[i][1][0] - r) ** 2
        + (NAMED_COLORS[i][1][1] - g) ** 2
        + (NAMED_COLORS[i][1][2] - b) ** 2,
    )


def extract_colors(image_path: Path) -> ColorPalette:
    """
    Compute the ColorPalette of an image (usually a small thumbnail).

    Raises:
        DecodeError: If the image cannot be decoded.
    """
    try:
        with Image.open(image_path) as img:
            grid = img.convert("RGB").resize((GRID_SIZE, GRID_SIZE), Image.Resampling.BOX)
            pixels = [grid.getpixel((x, y)) for y in range(GRID_SIZE) for x in range(GRID_SIZE)]
    except (OSError, Image.DecompressionBombError) as e:
        raise DecodeError(f"could not extract colors from {image_path}: {e}") from e

    indexes = [nearest_color(p) for p in pixels]
    luminance = [int((0.2126 * r + 0.7152 * g + 0.0722 * b) / 16) for r, g, b in pixels]
    chroma = sum(max(p) - min(p) for p in pixels) / len(pixels)

    main_index = Counter(indexes).most_common(1)[0][0]

    return ColorPalette(
        main_color=NAMED_COLORS[main_index][0],
        colors="".join(f"{i:x}" for i in indexes),
        luminance="".join(f"{min(v, 15):x}" for v in luminance),
        chroma=round(chroma * 100 / 255),
    )
