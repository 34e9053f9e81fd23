"""
Find the files that belong to the same capture event.

A capture event (RAW + JPEG + motion video + XMP sidecar) is the set of
non-hidden files in one directory sharing a base name. The "main" file of a
group is its JPEG when there is one, otherwise its first photo file.
"""

from pathlib import Path
from typing import List, Tuple

from photo_index.errors import RelatedFilesError
from photo_index.media.enums import FileFormat
from photo_index.media.patterns import extract_base_name, is_hidden


def list_group(file_path: Path) -> List[Path]:
    """
    All files in file_path's directory sharing its base name, sorted by name.

    Raises:
        RelatedFilesError: If the directory cannot be listed.
    """
    base_name, _ = extract_base_name(file_path.name)

    try:
        siblings = [
            p for p in file_path.parent.iterdir()
            if not is_hidden(p.name) and p.is_file() and extract_base_name(p.name)[0] == base_name
        ]
    except OSError as e:
        raise RelatedFilesError(f"cannot list {file_path.parent}: {e}") from e

    if file_path not in siblings:
        siblings.append(file_path)

    return sorted(siblings, key=lambda p: p.name)


def choose_main(paths: List[Path]) -> Path:
    """
    Pick the representative file of a group.

    Prefers the JPEG with the shortest name (IMG_1234.jpg over
    IMG_1234_001.jpg), then any other photo file.

    Raises:
        RelatedFilesError: If the group contains no photo at all.
    """
    formats = {p: FileFormat.from_filename(p.name) for p in paths}

    jpegs = [p for p in paths if formats[p] == FileFormat.JPEG]
    if jpegs:
        return min(jpegs, key=lambda p: (len(p.name), p.name))

    photos = [p for p in paths if formats[p].is_image]
    if photos:
        return photos[0]

    raise RelatedFilesError(f"no photo among {', '.join(p.name for p in paths)}")


def find_related_files(file_path: Path) -> Tuple[List[Path], Path]:
    """
    Resolve the group of file_path.

    Returns:
        Tuple of (related, main) where related excludes main.

    Raises:
        RelatedFilesError: If the group cannot be listed or has no photo.
    """
    group = list_group(file_path)
    main = choose_main(group)

    return [p for p in group if p != main], main
