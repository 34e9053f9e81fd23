"""Catalog store: SQLAlchemy models, sessions and lookup-or-create access."""

from photo_index.db.models import Base, Camera, Country, File, Lens, Location, Photo, Tag
from photo_index.db.session import create_catalog_engine, create_schema, make_session_factory, session_scope
from photo_index.db.store import CatalogStore

__all__ = [
    "Base",
    "Camera",
    "CatalogStore",
    "Country",
    "File",
    "Lens",
    "Location",
    "Photo",
    "Tag",
    "create_catalog_engine",
    "create_schema",
    "make_session_factory",
    "session_scope",
]
