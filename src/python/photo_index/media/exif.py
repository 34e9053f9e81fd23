"""
EXIF metadata extraction.

- RAW and HEIC/HEIF files: exifread
- Standard formats (JPEG, PNG, TIFF, WebP): Pillow

Extraction failures raise DecodeError; callers decide whether a missing
field matters.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import exifread
from PIL import ExifTags, Image

from photo_index.errors import DecodeError
from photo_index.media.enums import FileFormat

logger = logging.getLogger(__name__)

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"


@dataclass
class ExifData:
    """
    Metadata read from a file's EXIF block.

    Attributes:
        captured_at: When the photo was taken (DateTimeOriginal)
        sub_second: Sub-second part of the capture time, if recorded
        camera_make: Camera manufacturer
        camera_model: Camera model name
        lens_make: Lens manufacturer
        lens_model: Lens model name
        focal_length: Focal length in millimeters
        aperture: F-number
        gps_latitude: Latitude in decimal degrees
        gps_longitude: Longitude in decimal degrees
        artist: Artist / copyright owner
        orientation: EXIF orientation (1-8)
        width: Pixel width as recorded in EXIF
        height: Pixel height as recorded in EXIF
    """
    captured_at: Optional[datetime] = None
    sub_second: Optional[str] = None
    camera_make: Optional[str] = None
    camera_model: Optional[str] = None
    lens_make: Optional[str] = None
    lens_model: Optional[str] = None
    focal_length: int = 0
    aperture: float = 0.0
    gps_latitude: Optional[float] = None
    gps_longitude: Optional[float] = None
    artist: Optional[str] = None
    orientation: int = 1
    width: int = 0
    height: int = 0

    @property
    def has_location(self) -> bool:
        """True if the file carries usable GPS coordinates."""
        if self.gps_latitude is None or self.gps_longitude is None:
            return False
        return not (self.gps_latitude == 0 and self.gps_longitude == 0)


def extract_exif(file_path: Path) -> ExifData:
    """
    Extract EXIF metadata from an image file.

    Raises:
        DecodeError: If the file is missing, empty, unreadable or has no EXIF.
    """
    if not file_path.is_file():
        raise DecodeError(f"file not found: {file_path}")

    if file_path.stat().st_size == 0:
        raise DecodeError(f"file is empty: {file_path}")

    file_format = FileFormat.from_filename(file_path.name)

    if file_format.is_raw or file_format in (FileFormat.HEIC, FileFormat.HEIF):
        return _extract_with_exifread(file_path)

    return _extract_with_pillow(file_path)


def _extract_with_exifread(file_path: Path) -> ExifData:
    try:
        with open(file_path, "rb") as f:
            tags = exifread.process_file(f, details=False)
    except Exception as e:
        raise DecodeError(f"exifread failed on {file_path}: {e}") from e

    if not tags:
        raise DecodeError(f"no EXIF data in {file_path}")

    latitude, longitude = _parse_exifread_gps(tags)

    return ExifData(
        captured_at=_parse_datetime(
            tags.get("EXIF DateTimeOriginal")
            or tags.get("Image DateTime")
            or tags.get("EXIF DateTimeDigitized")
        ),
        sub_second=_clean_string(tags.get("EXIF SubSecTimeOriginal")),
        camera_make=_clean_string(tags.get("Image Make")),
        camera_model=_clean_string(tags.get("Image Model")),
        lens_make=_clean_string(tags.get("EXIF LensMake")),
        lens_model=_clean_string(tags.get("EXIF LensModel")),
        focal_length=int(_first_number(tags.get("EXIF FocalLength"))),
        aperture=round(_first_number(tags.get("EXIF FNumber")), 1),
        gps_latitude=latitude,
        gps_longitude=longitude,
        artist=_clean_string(tags.get("Image Artist")),
        orientation=int(_first_number(tags.get("Image Orientation")) or 1),
        width=int(_first_number(tags.get("EXIF ExifImageWidth"))),
        height=int(_first_number(tags.get("EXIF ExifImageLength"))),
    )


def _extract_with_pillow(file_path: Path) -> ExifData:
    try:
        with Image.open(file_path) as img:
            exif = img.getexif()
            base = {ExifTags.TAGS.get(k, k): v for k, v in exif.items()}
            details = {ExifTags.TAGS.get(k, k): v for k, v in exif.get_ifd(ExifTags.IFD.Exif).items()}
            gps = {ExifTags.GPSTAGS.get(k, k): v for k, v in exif.get_ifd(ExifTags.IFD.GPSInfo).items()}
    except Exception as e:
        raise DecodeError(f"Pillow failed on {file_path}: {e}") from e

    if not base and not details:
        raise DecodeError(f"no EXIF data in {file_path}")

    latitude, longitude = _parse_gps_coords(gps)

    return ExifData(
        captured_at=_parse_datetime(
            details.get("DateTimeOriginal")
            or base.get("DateTime")
            or details.get("DateTimeDigitized")
        ),
        sub_second=_clean_string(details.get("SubsecTimeOriginal")),
        camera_make=_clean_string(base.get("Make")),
        camera_model=_clean_string(base.get("Model")),
        lens_make=_clean_string(details.get("LensMake")),
        lens_model=_clean_string(details.get("LensModel")),
        focal_length=int(_first_number(details.get("FocalLength"))),
        aperture=round(_first_number(details.get("FNumber")), 1),
        gps_latitude=latitude,
        gps_longitude=longitude,
        artist=_clean_string(base.get("Artist")),
        orientation=int(_first_number(base.get("Orientation")) or 1),
        width=int(_first_number(details.get("ExifImageWidth"))),
        height=int(_first_number(details.get("ExifImageHeight"))),
    )


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an EXIF "YYYY:MM:DD HH:MM:SS" value (string or exifread tag)."""
    if not value:
        return None

    try:
        return datetime.strptime(str(value).strip().rstrip("\x00"), EXIF_DATETIME_FORMAT)
    except (ValueError, TypeError) as e:
        logger.debug("Failed to parse datetime '%s': %s", value, e)
        return None


def _to_float(value: Any) -> float:
    """Convert a Pillow IFDRational, exifread Ratio or (num, den) pair to float."""
    if isinstance(value, tuple):
        return value[0] / value[1] if value[1] else 0.0
    if hasattr(value, "num") and hasattr(value, "den"):
        return value.num / value.den if value.den else 0.0
    return float(value)


def _first_number(value: Any) -> float:
    """First numeric value of an EXIF field, 0 when absent or unparsable."""
    if value is None:
        return 0.0

    values = getattr(value, "values", value)
    if isinstance(values, list):
        if not values:
            return 0.0
        values = values[0]

    try:
        return _to_float(values)
    except (TypeError, ValueError, ZeroDivisionError):
        return 0.0


def _dms_to_decimal(dms: Tuple, ref: str) -> float:
    """
    Convert degrees/minutes/seconds to decimal degrees.

    Args:
        dms: (degrees, minutes, seconds), each a number, rational or pair
        ref: 'N', 'S', 'E' or 'W'
    """
    degrees, minutes, seconds = (_to_float(v) for v in dms)
    decimal = degrees + minutes / 60 + seconds / 3600

    if ref.strip().upper()[:1] in {"S", "W"}:
        decimal = -decimal

    return decimal


def _parse_gps_coords(gps_info: Dict) -> Tuple[Optional[float], Optional[float]]:
    """Parse (latitude, longitude) from a Pillow GPS IFD."""
    try:
        lat = gps_info.get("GPSLatitude")
        lat_ref = gps_info.get("GPSLatitudeRef")
        lon = gps_info.get("GPSLongitude")
        lon_ref = gps_info.get("GPSLongitudeRef")

        if not all([lat, lat_ref, lon, lon_ref]):
            return None, None

        return _dms_to_decimal(lat, lat_ref), _dms_to_decimal(lon, lon_ref)
    except (TypeError, ValueError, ZeroDivisionError) as e:
        logger.debug("Failed to parse GPS coordinates: %s", e)
        return None, None


def _parse_exifread_gps(tags: Dict) -> Tuple[Optional[float], Optional[float]]:
    """Parse (latitude, longitude) from exifread tags."""
    try:
        lat = tags.get("GPS GPSLatitude")
        lat_ref = tags.get("GPS GPSLatitudeRef")
        lon = tags.get("GPS GPSLongitude")
        lon_ref = tags.get("GPS GPSLongitudeRef")

        if not all([lat, lat_ref, lon, lon_ref]):
            return None, None

        return (
            _dms_to_decimal(tuple(lat.values), str(lat_ref.values)),
            _dms_to_decimal(tuple(lon.values), str(lon_ref.values)),
        )
    except (AttributeError, TypeError, ValueError, ZeroDivisionError) as e:
        logger.debug("Failed to parse exifread GPS coordinates: %s", e)
        return None, None


def _clean_string(value: Any) -> Optional[str]:
    """Strip whitespace and trailing NULs; empty strings become None."""
    if value is None:
        return None

    value = str(value).strip().rstrip("\x00").strip()

    return value or None
