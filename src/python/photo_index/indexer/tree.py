"""
TreeIndexer: walk the originals root and index every photo group once.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Set, Union

from photo_index.errors import DecodeError
from photo_index.indexer.group import GroupIndexer
from photo_index.media.media_file import MediaFile
from photo_index.media.patterns import is_hidden

logger = logging.getLogger(__name__)


class TreeIndexer:
    """
    Args:
        originals_root: Directory tree to index
        group_indexer: Merges one capture group
        media_factory: Builds a MediaFile from a path
    """

    def __init__(
        self,
        originals_root: Union[str, Path],
        group_indexer: GroupIndexer,
        media_factory: Callable[[str], MediaFile] = MediaFile,
    ):
        self.originals_root = Path(originals_root)
        self.group_indexer = group_indexer
        self.media_factory = media_factory
        self.visited: Set[str] = set()

    def index_all(self) -> Set[str]:
        """
        Index every photo below the originals root.

        Returns:
            Relative filenames (POSIX separators) indexed in this pass.
        """
        self.visited = set()

        if not self.originals_root.is_dir():
            logger.warning("originals root does not exist: %s", self.originals_root)
            return set()

        for dirpath, dirnames, filenames in os.walk(self.originals_root, onerror=self._on_walk_error):
            # Prune hidden directories in place so os.walk does not descend
            dirnames[:] = sorted(d for d in dirnames if not is_hidden(d))

            for name in sorted(filenames):
                if is_hidden(name):
                    continue

                filename = str(Path(dirpath) / name)
                if filename in self.visited:
                    continue

                self._index_file(filename)

        return {self._relative(filename) for filename in self.visited}

    def _index_file(self, filename: str) -> None:
        try:
            media_file = self.media_factory(filename)
        except (DecodeError, OSError) as e:
            logger.debug("skipping %s: %s", filename, e)
            return

        if not media_file.is_photo:
            return

        indexed = self.group_indexer.index_group(media_file, self.visited)
        self.visited.update(indexed)

    def _relative(self, filename: str) -> str:
        try:
            return Path(filename).relative_to(self.originals_root).as_posix()
        except ValueError:
            return filename

    def _on_walk_error(self, error: OSError) -> None:
        logger.warning("could not read %s: %s", error.filename, error)
