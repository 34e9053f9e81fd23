"""
photo-index - keep a photo catalog in sync with a directory of originals.

Core Concepts:
- Photo: one logical photo, identified by its canonical name
- File: a physical file showing a Photo (RAW, JPEG, sidecar, ...)
- Related files: the files of one capture event, merged into one Photo

Usage:
    from photo_index.db import CatalogStore, create_catalog_engine, create_schema

    engine = create_catalog_engine("sqlite:///photo_index.db")
    create_schema(engine)
    # see photo_index.indexer for wiring the indexers
"""

from photo_index.__version__ import __version__
from photo_index.errors import (
    ClassifierError,
    DecodeError,
    GeocodeError,
    MergeError,
    PhotoIndexError,
    RelatedFilesError,
)
from photo_index.indexer import GroupIndexer, MergeResult, RecordMerger, TreeIndexer
from photo_index.media import MediaFile

__all__ = [
    "__version__",
    # Errors
    "ClassifierError",
    "DecodeError",
    "GeocodeError",
    "MergeError",
    "PhotoIndexError",
    "RelatedFilesError",
    # Indexer
    "GroupIndexer",
    "MergeResult",
    "RecordMerger",
    "TreeIndexer",
    # Media
    "MediaFile",
]
