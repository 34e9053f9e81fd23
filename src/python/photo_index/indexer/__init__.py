"""
Catalog indexing: walk the originals tree and merge every photo group into
the catalog.

Components are wired together by constructor injection:

    tags = TagResolver(store, classifier, thumbnails_root)
    locations = LocationResolver(store, geocoder, tags)
    merger = RecordMerger(store, originals_root, thumbnails_root, tags, locations)
    tree = TreeIndexer(originals_root, GroupIndexer(merger, originals_root))
    indexed = tree.index_all()
"""

from photo_index.indexer.group import GroupIndexer
from photo_index.indexer.location import LocationResolver
from photo_index.indexer.merger import MergeResult, RecordMerger
from photo_index.indexer.outcome import Outcome, Status, attempt
from photo_index.indexer.tags import TagResolver
from photo_index.indexer.title import compose_title
from photo_index.indexer.tree import TreeIndexer

__all__ = [
    "GroupIndexer",
    "LocationResolver",
    "MergeResult",
    "Outcome",
    "RecordMerger",
    "Status",
    "TagResolver",
    "TreeIndexer",
    "attempt",
    "compose_title",
]
