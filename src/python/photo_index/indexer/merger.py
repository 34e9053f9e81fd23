"""
RecordMerger: upsert the Photo and File records for one physical file.

A new canonical name creates a Photo, enriched with EXIF, classifier tags,
location and a default title. An existing Photo is only refreshed when its
last update is older than the staleness threshold, so repeated scans do not
re-extract metadata over and over, and curated fields (title, favorite)
are never touched.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from photo_index.db.models import File, Photo
from photo_index.db.store import CatalogStore
from photo_index.errors import MergeError
from photo_index.indexer.location import LocationResolver
from photo_index.indexer.outcome import attempt
from photo_index.indexer.tags import TagResolver
from photo_index.indexer.title import compose_title
from photo_index.media.enums import Capability, FileType
from photo_index.media.media_file import MediaFile

logger = logging.getLogger(__name__)

DEFAULT_STALENESS = timedelta(minutes=10)


class MergeResult(Enum):
    ADDED = "added"
    UPDATED = "updated"


class RecordMerger:
    """
    Args:
        store: Catalog store
        originals_root: Root that File.file_name is relative to
        thumbnails_root: Thumbnail cache directory
        tag_resolver: Resolves classifier tags
        location_resolver: Resolves precise or approximate locations
        staleness: Minimum age of a Photo before it is refreshed
        clock: Returns the current time
    """

    def __init__(
        self,
        store: CatalogStore,
        originals_root: Path,
        thumbnails_root: Path,
        tag_resolver: TagResolver,
        location_resolver: LocationResolver,
        staleness: timedelta = DEFAULT_STALENESS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.originals_root = Path(originals_root)
        self.thumbnails_root = Path(thumbnails_root)
        self.tag_resolver = tag_resolver
        self.location_resolver = location_resolver
        self.staleness = staleness
        self.clock = clock

    def merge_file(self, media_file: MediaFile, main: Optional[MediaFile] = None) -> MergeResult:
        """
        Merge one file into the catalog and commit.

        Args:
            media_file: The file to merge
            main: Main file of its group; the Photo identity is derived from
                it so every file of a group lands on the same Photo.

        Raises:
            MergeError: If anything failed while merging. The file's changes
                are rolled back.
        """
        try:
            result = self._merge(media_file, main or media_file)
            self.store.commit()
        except Exception as e:
            self.store.rollback()
            raise MergeError(
                f'could not merge "{media_file.relative_filename(self.originals_root)}": {e}'
            ) from e

        return result

    def is_stale(self, photo: Photo) -> bool:
        return photo.updated_at is None or self.clock() - photo.updated_at > self.staleness

    def _merge(self, media_file: MediaFile, main: MediaFile) -> MergeResult:
        canonical_name = main.canonical_name_from_file()

        photo = self.store.find_photo(canonical_name)

        if photo is None:
            photo = self._create_photo(media_file, canonical_name)
        elif self.is_stale(photo):
            self._refresh_photo(photo, media_file)

        return self._upsert_file(photo, media_file)

    def _create_photo(self, media_file: MediaFile, canonical_name: str) -> Photo:
        photo = Photo(photo_canonical_name=canonical_name, photo_favorite=False, photo_title="")
        tags = []

        jpeg = attempt("jpeg", media_file.jpeg)
        if jpeg.ok:
            self._apply_exif(photo, jpeg.value)
            tags = self.tag_resolver.resolve_tags(jpeg.value)

        self.location_resolver.resolve(photo, media_file, tags)
        photo.tags = tags

        self._apply_equipment(photo, media_file)
        photo.taken_at = media_file.date_created()

        if not photo.photo_title:
            photo.photo_title = compose_title(photo.location, tags, photo.camera, photo.taken_at)

        logger.debug('title: "%s"', photo.photo_title)

        now = self.clock()
        photo.created_at = now
        photo.updated_at = now

        return self.store.create(photo)

    def _refresh_photo(self, photo: Photo, media_file: MediaFile) -> None:
        jpeg = attempt("jpeg", media_file.jpeg)
        if jpeg.ok:
            self._apply_equipment(photo, media_file)
            self._apply_exif(photo, jpeg.value)

        if photo.location_id is None:
            self.location_resolver.approximate(photo, photo.taken_at)

        photo.updated_at = self.clock()
        self.store.save(photo)

    def _apply_exif(self, photo: Photo, jpeg: MediaFile) -> None:
        if not jpeg.can(Capability.EXIF):
            return

        exif = attempt("exif", jpeg.exif_data)
        if exif.ok:
            photo.photo_lat = exif.value.gps_latitude
            photo.photo_long = exif.value.gps_longitude
            photo.photo_artist = exif.value.artist

    def _apply_equipment(self, photo: Photo, media_file: MediaFile) -> None:
        photo.camera = self.store.first_or_create_camera(media_file.camera_model(), media_file.camera_make())
        photo.lens = self.store.first_or_create_lens(media_file.lens_model(), media_file.lens_make())
        photo.photo_focal_length = media_file.focal_length()
        photo.photo_aperture = media_file.aperture()

    def _is_primary(self, photo: Photo, media_file: MediaFile, relative_name: str, file_hash: str) -> bool:
        if media_file.file_type is not FileType.JPEG:
            return False

        primary = self.store.primary_jpeg(photo.id)
        if primary is None:
            return True

        return relative_name == primary.file_name or file_hash == primary.file_hash

    def _upsert_file(self, photo: Photo, media_file: MediaFile) -> MergeResult:
        file_hash = media_file.hash()
        relative_name = media_file.relative_filename(self.originals_root)
        is_primary = self._is_primary(photo, media_file, relative_name, file_hash)

        file = self.store.find_file(file_hash, relative_name)
        exists = file is not None
        if file is None:
            file = File()

        file.photo_id = photo.id
        file.file_name = relative_name
        file.file_hash = file_hash
        file.file_type = media_file.file_type.value
        file.file_mime = media_file.mime_type
        file.file_orientation = media_file.orientation()
        file.file_primary = is_primary
        file.file_missing = False

        if media_file.can(Capability.DECODABLE):
            colors = attempt("colors", media_file.colors, self.thumbnails_root)
            if colors.ok:
                file.file_main_color = colors.value.main_color
                file.file_colors = colors.value.colors
                file.file_luminance = colors.value.luminance
                file.file_chroma = colors.value.chroma

        width, height = media_file.width(), media_file.height()
        if width > 0 and height > 0:
            file.file_width = width
            file.file_height = height
            file.file_aspect_ratio = media_file.aspect_ratio()
            file.file_portrait = width < height

        file.updated_at = self.clock()

        if exists:
            self.store.save(file)
            return MergeResult.UPDATED

        file.created_at = file.updated_at
        self.store.create(file)
        return MergeResult.ADDED
