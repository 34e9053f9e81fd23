"""Enumerations describing media files."""

from enum import Enum, Flag, auto
from pathlib import Path


class FileType(Enum):
    """
    Coarse file type stored in the catalog.

    Several FileFormats collapse into one FileType (every camera RAW format
    is stored as "raw"). JPEG is the canonical displayable type: only JPEG
    files can become the primary file of a photo.
    """
    JPEG = "jpg"
    RAW = "raw"
    HEIF = "heif"
    PNG = "png"
    TIFF = "tiff"
    WEBP = "webp"
    XMP = "xmp"
    VIDEO = "video"
    OTHER = "other"


class Capability(Flag):
    """
    What can be done with a media file.

    Components ask a MediaFile for capabilities instead of branching on its
    concrete format.
    """
    NONE = 0
    DECODABLE = auto()      # Pillow can open it (thumbnails, colors, size)
    EXIF = auto()           # may carry EXIF metadata
    RELATED_FILES = auto()  # belongs to the capture group of its siblings


class FileFormat(Enum):
    """
    Known file formats, detected from the file extension.

    Grouped by type:
    - RAW formats: Camera-specific raw files
    - Standard formats: Common image formats
    - Metadata formats: Sidecar files
    - Video formats: Motion photo companions and clips
    """
    # RAW formats
    CR2 = "cr2"      # Canon RAW 2
    CR3 = "cr3"      # Canon RAW 3
    NEF = "nef"      # Nikon RAW
    ARW = "arw"      # Sony RAW
    DNG = "dng"      # Adobe Digital Negative
    RAF = "raf"      # Fujifilm RAW
    ORF = "orf"      # Olympus RAW
    RW2 = "rw2"      # Panasonic RAW

    # Standard image formats
    JPEG = "jpg"
    PNG = "png"
    TIFF = "tiff"
    HEIC = "heic"
    HEIF = "heif"
    WEBP = "webp"

    # Metadata/sidecar formats
    XMP = "xmp"
    THM = "thm"

    # Video formats
    MP4 = "mp4"
    MOV = "mov"
    AVI = "avi"

    UNKNOWN = "unknown"

    @classmethod
    def from_extension(cls, extension: str) -> "FileFormat":
        """
        Get FileFormat from a file extension.

        Args:
            extension: File extension (with or without leading dot)

        Returns:
            The matching FileFormat, or UNKNOWN if not recognized
        """
        ext = extension.lower().lstrip(".")

        if ext in {"jpg", "jpeg"}:
            return cls.JPEG
        if ext in {"tif", "tiff"}:
            return cls.TIFF

        for fmt in cls:
            if fmt.value == ext:
                return fmt

        return cls.UNKNOWN

    @classmethod
    def from_filename(cls, filename: str) -> "FileFormat":
        """
        Get FileFormat from a filename or file path.

        Examples:
            >>> FileFormat.from_filename("photo.jpg")
            FileFormat.JPEG
            >>> FileFormat.from_filename("/photos/2025/01/IMG_1234.CR2")
            FileFormat.CR2
        """
        return cls.from_extension(Path(filename).suffix)

    @property
    def is_raw(self) -> bool:
        """Check if this format is a camera RAW format."""
        return self in (
            FileFormat.CR2, FileFormat.CR3, FileFormat.NEF,
            FileFormat.ARW, FileFormat.DNG, FileFormat.RAF,
            FileFormat.ORF, FileFormat.RW2,
        )

    @property
    def is_image(self) -> bool:
        """Check if this format is a photo (RAW or standard)."""
        return self in (
            FileFormat.JPEG, FileFormat.PNG, FileFormat.TIFF,
            FileFormat.HEIC, FileFormat.HEIF, FileFormat.WEBP,
        ) or self.is_raw

    @property
    def is_video(self) -> bool:
        """Check if this format is a video format."""
        return self in (FileFormat.MP4, FileFormat.MOV, FileFormat.AVI)

    @property
    def file_type(self) -> FileType:
        """The catalog FileType for this format."""
        if self.is_raw:
            return FileType.RAW
        if self.is_video:
            return FileType.VIDEO
        return _FILE_TYPES.get(self, FileType.OTHER)

    @property
    def mime_type(self) -> str:
        """MIME type for this format."""
        if self.is_raw:
            return f"image/x-{self.value}"
        return _MIME_TYPES.get(self, "application/octet-stream")

    @property
    def capabilities(self) -> Capability:
        """Capabilities a file of this format offers."""
        if self == FileFormat.UNKNOWN:
            return Capability.NONE

        caps = Capability.RELATED_FILES
        if self in (FileFormat.JPEG, FileFormat.PNG, FileFormat.TIFF, FileFormat.WEBP):
            caps |= Capability.DECODABLE
        if self.is_image:
            caps |= Capability.EXIF
        return caps


_FILE_TYPES = {
    FileFormat.JPEG: FileType.JPEG,
    FileFormat.PNG: FileType.PNG,
    FileFormat.TIFF: FileType.TIFF,
    FileFormat.HEIC: FileType.HEIF,
    FileFormat.HEIF: FileType.HEIF,
    FileFormat.WEBP: FileType.WEBP,
    FileFormat.XMP: FileType.XMP,
}

_MIME_TYPES = {
    FileFormat.JPEG: "image/jpeg",
    FileFormat.PNG: "image/png",
    FileFormat.TIFF: "image/tiff",
    FileFormat.HEIC: "image/heic",
    FileFormat.HEIF: "image/heif",
    FileFormat.WEBP: "image/webp",
    FileFormat.XMP: "application/rdf+xml",
    FileFormat.THM: "image/jpeg",
    FileFormat.MP4: "video/mp4",
    FileFormat.MOV: "video/quicktime",
    FileFormat.AVI: "video/x-msvideo",
}
