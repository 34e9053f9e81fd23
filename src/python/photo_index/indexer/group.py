"""
GroupIndexer: merge one capture group (e.g. RAW + JPEG + sidecar) as a unit.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Set

from photo_index.errors import DecodeError, MergeError, RelatedFilesError
from photo_index.indexer.merger import RecordMerger
from photo_index.media.media_file import MediaFile

logger = logging.getLogger(__name__)


class GroupIndexer:
    def __init__(self, merger: RecordMerger, originals_root: Path):
        self.merger = merger
        self.originals_root = Path(originals_root)

    def index_group(self, media_file: MediaFile, visited: Optional[Set[str]] = None) -> Dict[str, bool]:
        """
        Merge the main file of media_file's group, then its related files.

        Args:
            media_file: Any file of the group
            visited: Filenames already indexed in this pass; these are not
                merged again. Updated in place.

        Returns:
            Dict of filename -> True for every file processed in this call.
            Empty if the group could not be resolved.
        """
        if visited is None:
            visited = set()

        try:
            related, main = media_file.related_files()
        except (RelatedFilesError, DecodeError) as e:
            logger.warning('could not index "%s": %s', media_file.relative_filename(self.originals_root), e)
            return {}

        indexed: Dict[str, bool] = {}

        self._merge(main, main, "main", indexed, visited)

        for related_file in related:
            if related_file.filename in indexed or related_file.filename in visited:
                continue
            self._merge(related_file, main, "related", indexed, visited)

        return indexed

    def _merge(
        self,
        media_file: MediaFile,
        main: MediaFile,
        role: str,
        indexed: Dict[str, bool],
        visited: Set[str],
    ) -> None:
        relative_name = media_file.relative_filename(self.originals_root)

        try:
            result = self.merger.merge_file(media_file, main=main)
        except MergeError as e:
            logger.error("%s", e)
        else:
            logger.info('%s %s %s file "%s"', result.value, role, media_file.file_type.value, relative_name)

        indexed[media_file.filename] = True
        visited.add(media_file.filename)
