"""
SQLAlchemy models for the photo catalog.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

UNKNOWN = "Unknown"


class Base(DeclarativeBase):
    pass


photos_tags = Table(
    "photos_tags",
    Base.metadata,
    Column("photo_id", ForeignKey("photos.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    # Always lowercase
    tag_label: Mapped[str] = mapped_column(String, unique=True)

    def __repr__(self) -> str:
        return f"Tag({self.tag_label!r})"


class Camera(Base):
    __tablename__ = "cameras"

    id: Mapped[int] = mapped_column(primary_key=True)
    camera_model: Mapped[str] = mapped_column(String)
    camera_make: Mapped[str] = mapped_column(String)

    __table_args__ = (
        UniqueConstraint("camera_model", "camera_make", name="uq_camera_identity"),
    )

    def __str__(self) -> str:
        model = "" if self.camera_model == UNKNOWN else (self.camera_model or "")
        make = "" if self.camera_make == UNKNOWN else (self.camera_make or "")

        if not model:
            return make or UNKNOWN
        if not make or model.lower().startswith(make.lower()):
            return model
        return f"{make} {model}"


class Lens(Base):
    __tablename__ = "lenses"

    id: Mapped[int] = mapped_column(primary_key=True)
    lens_model: Mapped[str] = mapped_column(String)
    lens_make: Mapped[str] = mapped_column(String)

    __table_args__ = (
        UniqueConstraint("lens_model", "lens_make", name="uq_lens_identity"),
    )

    def __str__(self) -> str:
        if self.lens_model and self.lens_model != UNKNOWN:
            return self.lens_model
        return UNKNOWN


class Country(Base):
    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(primary_key=True)
    country_code: Mapped[str] = mapped_column(String, unique=True)
    country_name: Mapped[str] = mapped_column(String)


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Natural key: rounded coordinates
    loc_lat: Mapped[float] = mapped_column(Float)
    loc_lng: Mapped[float] = mapped_column(Float)

    loc_name: Mapped[str] = mapped_column(String, default="")
    loc_city: Mapped[str] = mapped_column(String, default="")
    loc_county: Mapped[str] = mapped_column(String, default="")
    loc_country: Mapped[str] = mapped_column(String, default="")
    loc_category: Mapped[str] = mapped_column(String, default="")
    loc_type: Mapped[str] = mapped_column(String, default="")
    loc_source: Mapped[str] = mapped_column(String, default="")

    country_id: Mapped[Optional[int]] = mapped_column(ForeignKey("countries.id"))
    country: Mapped[Optional[Country]] = relationship()

    __table_args__ = (
        UniqueConstraint("loc_lat", "loc_lng", name="uq_location_coordinates"),
    )


class Photo(Base):
    __tablename__ = "photos"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Core Identity
    photo_canonical_name: Mapped[str] = mapped_column(String, unique=True)
    taken_at: Mapped[datetime] = mapped_column(DateTime, index=True)

    # User Metadata
    photo_title: Mapped[str] = mapped_column(String, default="")
    photo_favorite: Mapped[bool] = mapped_column(Boolean, default=False)

    # EXIF
    photo_lat: Mapped[Optional[float]] = mapped_column(Float)
    photo_long: Mapped[Optional[float]] = mapped_column(Float)
    photo_artist: Mapped[Optional[str]] = mapped_column(String)
    photo_focal_length: Mapped[int] = mapped_column(Integer, default=0)
    photo_aperture: Mapped[float] = mapped_column(Float, default=0.0)

    camera_id: Mapped[Optional[int]] = mapped_column(ForeignKey("cameras.id"))
    lens_id: Mapped[Optional[int]] = mapped_column(ForeignKey("lenses.id"))
    location_id: Mapped[Optional[int]] = mapped_column(ForeignKey("locations.id"))
    country_id: Mapped[Optional[int]] = mapped_column(ForeignKey("countries.id"))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    camera: Mapped[Optional[Camera]] = relationship()
    lens: Mapped[Optional[Lens]] = relationship()
    location: Mapped[Optional[Location]] = relationship()
    country: Mapped[Optional[Country]] = relationship()
    tags: Mapped[List[Tag]] = relationship(secondary=photos_tags)
    files: Mapped[List["File"]] = relationship(back_populates="photo")


class File(Base):
    __tablename__ = "files"

    id: Mapped[int] = mapped_column(primary_key=True)
    photo_id: Mapped[int] = mapped_column(ForeignKey("photos.id"), index=True)

    # Identity: either one matches an existing row
    file_name: Mapped[str] = mapped_column(String, unique=True)
    file_hash: Mapped[str] = mapped_column(String, index=True)

    file_type: Mapped[str] = mapped_column(String)
    file_mime: Mapped[str] = mapped_column(String, default="")
    file_orientation: Mapped[int] = mapped_column(Integer, default=1)
    file_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    file_missing: Mapped[bool] = mapped_column(Boolean, default=False)

    # Dimensions
    file_width: Mapped[int] = mapped_column(Integer, default=0)
    file_height: Mapped[int] = mapped_column(Integer, default=0)
    file_aspect_ratio: Mapped[float] = mapped_column(Float, default=0.0)
    file_portrait: Mapped[bool] = mapped_column(Boolean, default=False)

    # Colors
    file_main_color: Mapped[str] = mapped_column(String, default="")
    file_colors: Mapped[str] = mapped_column(String, default="")
    file_luminance: Mapped[str] = mapped_column(String, default="")
    file_chroma: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    photo: Mapped[Photo] = relationship(back_populates="files")
