"""
Exception types raised while indexing media.

Enrichment errors (decode, geolocation, classification) are expected during
normal operation and never abort a merge. MergeError marks a catalog write
that failed for one physical file.
"""


class PhotoIndexError(Exception):
    """Base class for all photo-index errors."""

    #: Whether a failure of this kind means "nothing to do" rather than "broken".
    skippable = True


class DecodeError(PhotoIndexError):
    """The file cannot be decoded, or carries no usable metadata."""


class RelatedFilesError(PhotoIndexError):
    """The related-files group of a file could not be resolved."""


class GeocodeError(PhotoIndexError):
    """No precise location could be determined for a set of coordinates."""


class ClassifierError(PhotoIndexError):
    """The image classifier failed for a thumbnail."""

    skippable = False


class MergeError(PhotoIndexError):
    """Writing the Photo/File records for a file to the catalog failed."""

    skippable = False
