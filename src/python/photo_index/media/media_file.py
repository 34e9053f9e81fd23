"""
MediaFile: one physical file on disk and everything the indexer derives from it.

Metadata is lazy-loaded and cached per instance: the content hash, EXIF
block and capture date are computed at most once, however many components
ask for them.
"""

import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple, Union

from PIL import Image

from photo_index.errors import DecodeError, GeocodeError, RelatedFilesError
from photo_index.geo import Geocoder, LocationInfo
from photo_index.media.colors import ColorPalette, extract_colors
from photo_index.media.enums import Capability, FileFormat, FileType
from photo_index.media.exif import ExifData, extract_exif
from photo_index.media.grouper import find_related_files
from photo_index.media.patterns import extract_base_name
from photo_index.media.thumbnails import create_thumbnail, thumbnail_path
from photo_index.utils import parse_date_from_filename

logger = logging.getLogger(__name__)

HASH_CHUNK_SIZE = 65536
CANONICAL_DATE_FORMAT = "%Y%m%d_%H%M%S"


class MediaFile:
    """
    A file below the originals root.

    Attributes:
        path: Path to the file
        format: FileFormat detected from the extension
    """

    def __init__(self, path: Union[str, Path]):
        path = Path(path)

        if not path.is_file():
            raise DecodeError(f"not a file: {path}")

        self.path = path
        self.format = FileFormat.from_filename(path.name)
        self._hash: Optional[str] = None
        self._exif: Optional[ExifData] = None
        self._exif_error: Optional[DecodeError] = None
        self._size: Optional[Tuple[int, int]] = None
        self._date_created: Optional[datetime] = None
        self._canonical_name: Optional[str] = None

    def __repr__(self) -> str:
        return f"MediaFile({str(self.path)!r})"

    @property
    def filename(self) -> str:
        """Full path as a string; the key of the visited set."""
        return str(self.path)

    @property
    def base_name(self) -> str:
        return extract_base_name(self.path.name)[0]

    @property
    def file_type(self) -> FileType:
        return self.format.file_type

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    @property
    def is_photo(self) -> bool:
        return self.format.is_image

    @property
    def is_jpeg(self) -> bool:
        return self.format == FileFormat.JPEG

    @property
    def capabilities(self) -> Capability:
        return self.format.capabilities

    def can(self, capability: Capability) -> bool:
        """Check whether this file offers a capability."""
        return capability in self.capabilities

    def relative_filename(self, root: Union[str, Path]) -> str:
        """Path relative to root (POSIX separators), or the full path outside root."""
        try:
            return self.path.relative_to(root).as_posix()
        except ValueError:
            return str(self.path)

    def hash(self) -> str:
        """SHA-1 of the file content (hex). Raises OSError if unreadable."""
        if self._hash is None:
            digest = hashlib.sha1()
            with open(self.path, "rb") as f:
                for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
                    digest.update(chunk)
            self._hash = digest.hexdigest()

        return self._hash

    def exif_data(self) -> ExifData:
        """
        EXIF metadata of this file.

        Raises:
            DecodeError: If the file has no readable EXIF.
        """
        if self._exif is None and self._exif_error is None:
            if not self.can(Capability.EXIF):
                self._exif_error = DecodeError(f"{self.format.value} files carry no EXIF: {self.path.name}")
            else:
                try:
                    self._exif = extract_exif(self.path)
                except DecodeError as e:
                    self._exif_error = e

        if self._exif_error is not None:
            raise self._exif_error

        return self._exif

    def _exif_or_empty(self) -> ExifData:
        try:
            return self.exif_data()
        except DecodeError:
            return ExifData()

    def date_created(self) -> datetime:
        """Capture time: EXIF, else a date in the filename, else the file mtime."""
        if self._date_created is None:
            self._date_created = (
                self._exif_or_empty().captured_at
                or parse_date_from_filename(self.path.name)
                or datetime.fromtimestamp(self.path.stat().st_mtime)
            )

        return self._date_created

    def canonical_name_from_file(self) -> str:
        """
        Stable identity of the photo this file shows: capture time plus the
        first eight hex digits of the content hash (%Y%m%d_%H%M%S_<HASH8>).

        Two frames shot in the same second stay two photos. Files of one
        capture group share the name of their main file, see RecordMerger.
        """
        if self._canonical_name is None:
            date = self.date_created().strftime(CANONICAL_DATE_FORMAT)
            self._canonical_name = f"{date}_{self.hash()[:8].upper()}"

        return self._canonical_name

    def _pixel_size(self) -> Tuple[int, int]:
        if self._size is None:
            width, height = 0, 0

            if self.can(Capability.DECODABLE):
                try:
                    with Image.open(self.path) as img:
                        width, height = img.size
                except (OSError, Image.DecompressionBombError) as e:
                    logger.debug("could not read size of %s: %s", self.path, e)

            # RAW files: trust the size recorded in EXIF
            if width <= 0 or height <= 0:
                exif = self._exif_or_empty()
                width, height = exif.width, exif.height

            # Orientations 5-8 are rotated by 90 degrees
            if self.orientation() > 4:
                width, height = height, width

            self._size = (max(width, 0), max(height, 0))

        return self._size

    def width(self) -> int:
        return self._pixel_size()[0]

    def height(self) -> int:
        return self._pixel_size()[1]

    def aspect_ratio(self) -> float:
        width, height = self._pixel_size()
        if width <= 0 or height <= 0:
            return 0.0
        return round(width / height, 2)

    def orientation(self) -> int:
        return self._exif_or_empty().orientation or 1

    def camera_model(self) -> str:
        return self._exif_or_empty().camera_model or ""

    def camera_make(self) -> str:
        return self._exif_or_empty().camera_make or ""

    def lens_model(self) -> str:
        return self._exif_or_empty().lens_model or ""

    def lens_make(self) -> str:
        return self._exif_or_empty().lens_make or ""

    def focal_length(self) -> int:
        return self._exif_or_empty().focal_length

    def aperture(self) -> float:
        return self._exif_or_empty().aperture

    def thumbnail(self, thumbnails_root: Path, kind: str) -> Path:
        """
        Path of a cached thumbnail, rendering it first if needed.

        Raises:
            DecodeError: If this file cannot be decoded.
        """
        if not self.can(Capability.DECODABLE):
            raise DecodeError(f"cannot render thumbnails of {self.format.value} files: {self.path.name}")

        destination = thumbnail_path(Path(thumbnails_root), self.hash(), kind)
        if destination.exists():
            return destination

        return create_thumbnail(self.path, destination, kind)

    def colors(self, thumbnails_root: Path) -> ColorPalette:
        """Color palette of this file, computed from its tile thumbnail."""
        return extract_colors(self.thumbnail(thumbnails_root, "tile_224"))

    def related_files(self) -> Tuple[List["MediaFile"], "MediaFile"]:
        """
        The capture group of this file.

        Returns:
            Tuple of (related, main). When this file is the main file,
            ``main`` is this instance. Siblings of unknown format (notes,
            exports of other tools) are left out of ``related``.

        Raises:
            RelatedFilesError: If the group cannot be resolved.
        """
        related_paths, main_path = find_related_files(self.path)

        main = self if main_path == self.path else MediaFile(main_path)
        related = [self if p == self.path else MediaFile(p) for p in related_paths]
        related = [m for m in related if m.can(Capability.RELATED_FILES)]

        return related, main

    def jpeg(self) -> "MediaFile":
        """
        The JPEG representation of this file: itself, or a JPEG in its group.

        Raises:
            DecodeError: If there is no JPEG in the group.
        """
        if self.is_jpeg:
            return self

        try:
            related, main = self.related_files()
        except (RelatedFilesError, DecodeError) as e:
            raise DecodeError(f"no JPEG for {self.path.name}: {e}") from e

        for candidate in [main] + related:
            if candidate.is_jpeg:
                return candidate

        raise DecodeError(f"no JPEG for {self.path.name}")

    def location(self, geocoder: Geocoder) -> LocationInfo:
        """
        Precise location from the embedded GPS coordinates.

        Raises:
            GeocodeError: If there are no coordinates or they cannot be resolved.
        """
        exif = self._exif_or_empty()

        if not exif.has_location:
            raise GeocodeError(f"no GPS coordinates in {self.path.name}")

        return geocoder.reverse(exif.gps_latitude, exif.gps_longitude)
