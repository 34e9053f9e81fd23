"""
CatalogStore: the catalog operations the indexer needs.

All shared entities (Tag, Camera, Lens, Location, Country) are fetched with
lookup-or-create semantics. The insert runs inside a SAVEPOINT; if another
writer created the same natural key first, the unique constraint fires and
the existing row is returned instead.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Type, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from photo_index.db.models import UNKNOWN, Camera, Country, File, Lens, Location, Photo, Tag
from photo_index.geo import LocationInfo
from photo_index.media.enums import FileType

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_COUNTRY_CODE = "zz"


class CatalogStore:
    """Catalog access bound to one SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    def _first_or_create(self, model: Type[T], defaults: Optional[Dict[str, Any]] = None, **keys: Any) -> T:
        stmt = select(model).filter_by(**keys)

        instance = self.session.scalars(stmt).first()
        if instance is not None:
            return instance

        instance = model(**keys, **(defaults or {}))
        try:
            with self.session.begin_nested():
                self.session.add(instance)
        except IntegrityError:
            logger.debug("%s %s was created concurrently, reloading", model.__name__, keys)
            instance = self.session.scalars(stmt).one()

        return instance

    def first_or_create_tag(self, label: str) -> Tag:
        return self._first_or_create(Tag, tag_label=label.lower())

    def first_or_create_camera(self, model: str, make: str) -> Camera:
        return self._first_or_create(Camera, camera_model=model or UNKNOWN, camera_make=make or UNKNOWN)

    def first_or_create_lens(self, model: str, make: str) -> Lens:
        return self._first_or_create(Lens, lens_model=model or UNKNOWN, lens_make=make or UNKNOWN)

    def first_or_create_country(self, code: str, name: str) -> Country:
        return self._first_or_create(
            Country,
            defaults={"country_name": name or UNKNOWN},
            country_code=(code or UNKNOWN_COUNTRY_CODE).lower(),
        )

    def first_or_create_location(self, info: LocationInfo, country: Optional[Country] = None) -> Location:
        return self._first_or_create(
            Location,
            defaults={
                "loc_name": info.name,
                "loc_city": info.city,
                "loc_county": info.county,
                "loc_country": info.country,
                "loc_category": info.category,
                "loc_type": info.type,
                "loc_source": info.source_id,
                "country": country,
            },
            loc_lat=info.latitude,
            loc_lng=info.longitude,
        )

    def find_photo(self, canonical_name: str) -> Optional[Photo]:
        stmt = select(Photo).where(Photo.photo_canonical_name == canonical_name)
        return self.session.scalars(stmt).first()

    def nearest_photo(self, taken_at: datetime, exclude_id: Optional[int] = None) -> Optional[Photo]:
        """
        The photo captured closest to taken_at (by day, then by time).

        Uses two ordered range queries, one on each side of taken_at.
        """
        before = select(Photo).where(Photo.taken_at <= taken_at).order_by(Photo.taken_at.desc()).limit(1)
        after = select(Photo).where(Photo.taken_at > taken_at).order_by(Photo.taken_at.asc()).limit(1)

        if exclude_id is not None:
            before = before.where(Photo.id != exclude_id)
            after = after.where(Photo.id != exclude_id)

        candidates = [
            photo for photo in (self.session.scalars(before).first(), self.session.scalars(after).first())
            if photo is not None
        ]
        if not candidates:
            return None

        return min(
            candidates,
            key=lambda p: (
                abs((p.taken_at.date() - taken_at.date()).days),
                abs((p.taken_at - taken_at).total_seconds()),
            ),
        )

    def primary_jpeg(self, photo_id: int) -> Optional[File]:
        stmt = select(File).where(
            File.photo_id == photo_id,
            File.file_type == FileType.JPEG.value,
            File.file_primary.is_(True),
        )
        return self.session.scalars(stmt).first()

    def find_file(self, file_hash: str, file_name: str) -> Optional[File]:
        stmt = (
            select(File)
            .where(or_(File.file_hash == file_hash, File.file_name == file_name))
            .order_by(File.id)
        )
        return self.session.scalars(stmt).first()

    def create(self, instance: T) -> T:
        self.session.add(instance)
        self.session.flush()
        return instance

    def save(self, instance: T) -> T:
        self.session.add(instance)
        self.session.flush()
        return instance

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def counts(self) -> Dict[str, int]:
        """Number of rows per catalog entity."""
        return {
            model.__tablename__: self.session.scalar(select(func.count()).select_from(model))
            for model in (Photo, File, Tag, Camera, Lens, Location, Country)
        }
