"""Media decoding layer: formats, EXIF, thumbnails, colors and file groups."""

from photo_index.media.colors import ColorPalette, extract_colors
from photo_index.media.enums import Capability, FileFormat, FileType
from photo_index.media.exif import ExifData, extract_exif
from photo_index.media.grouper import find_related_files
from photo_index.media.media_file import MediaFile
from photo_index.media.patterns import extract_base_name, is_hidden

__all__ = [
    "Capability",
    "ColorPalette",
    "ExifData",
    "FileFormat",
    "FileType",
    "MediaFile",
    "extract_base_name",
    "extract_colors",
    "extract_exif",
    "find_related_files",
    "is_hidden",
]
