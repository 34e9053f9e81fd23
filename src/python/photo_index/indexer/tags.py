"""
TagResolver: semantic tags for a photo.

Labels come from the image classifier run on one (square photos) or three
(center, left and right crops) thumbnails. Labels far weaker than the best
one are dropped as noise.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence

from photo_index.classifier import Classifier, Label
from photo_index.db.models import Tag
from photo_index.db.store import CatalogStore
from photo_index.errors import ClassifierError
from photo_index.indexer.outcome import Outcome, attempt
from photo_index.media.media_file import MediaFile

logger = logging.getLogger(__name__)

SQUARE_THUMBNAILS = ("tile_224",)
WIDE_THUMBNAILS = ("tile_224", "left_224", "right_224")
DEFAULT_THRESHOLD_DIVISOR = 3.0


class TagResolver:
    """
    Resolve classifier labels and location names into catalog Tags.

    Args:
        store: Catalog store used for Tag lookup-or-create
        classifier: Image classifier
        thumbnails_root: Thumbnail cache directory
        threshold_divisor: Keep labels with probability > best / divisor
        workers: Thumbnails classified in parallel; 1 classifies sequentially
    """

    def __init__(
        self,
        store: CatalogStore,
        classifier: Classifier,
        thumbnails_root: Path,
        threshold_divisor: float = DEFAULT_THRESHOLD_DIVISOR,
        workers: int = 1,
    ):
        self.store = store
        self.classifier = classifier
        self.thumbnails_root = Path(thumbnails_root)
        self.threshold_divisor = threshold_divisor
        self.workers = max(1, workers)

    def resolve_tags(self, media_file: MediaFile) -> List[Tag]:
        """Tags for a photo, strongest label first. Never raises on classifier errors."""
        start = time.monotonic()

        kinds = SQUARE_THUMBNAILS if media_file.aspect_ratio() == 1 else WIDE_THUMBNAILS

        labels: List[Label] = []
        for outcome in self._classify(media_file, kinds):
            labels.extend(outcome.value_or([]))

        labels.sort(key=lambda l: l.probability, reverse=True)

        tags: List[Tag] = []
        if labels:
            cutoff = labels[0].probability / self.threshold_divisor
            for label in labels:
                if label.probability > cutoff:
                    self.append_tag(tags, label.label)

        logger.info(
            "finding %d labels for %s took %.2fs",
            len(labels), media_file.filename, time.monotonic() - start,
        )

        return tags

    def append_tag(self, tags: List[Tag], label: Optional[str]) -> List[Tag]:
        """
        Append the Tag for label unless it is empty or already in tags.

        Labels are lowercased; the Tag row is looked up or created.
        Returns the (mutated) tags list.
        """
        if not label:
            return tags

        label = label.strip().lower()
        if not label:
            return tags

        if any(tag.tag_label == label for tag in tags):
            return tags

        tags.append(self.store.first_or_create_tag(label))

        return tags

    def _classify_thumbnail(self, media_file: MediaFile, kind: str) -> List[Label]:
        thumbnail = media_file.thumbnail(self.thumbnails_root, kind)

        try:
            return list(self.classifier.classify(thumbnail))
        except ClassifierError:
            raise
        except Exception as e:
            raise ClassifierError(f"classifier failed on {thumbnail.name}: {e}") from e

    def _classify(self, media_file: MediaFile, kinds: Sequence[str]) -> List[Outcome[List[Label]]]:
        # Results are returned in thumbnail order regardless of completion order
        if self.workers > 1 and len(kinds) > 1:
            with ThreadPoolExecutor(max_workers=min(self.workers, len(kinds))) as pool:
                futures = [
                    pool.submit(attempt, f"classify {kind}", self._classify_thumbnail, media_file, kind)
                    for kind in kinds
                ]
                return [future.result() for future in futures]

        return [attempt(f"classify {kind}", self._classify_thumbnail, media_file, kind) for kind in kinds]
