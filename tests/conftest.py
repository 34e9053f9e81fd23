"""Pytest configuration and shared fixtures."""

import hashlib
import struct
import zlib
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest
from PIL import Image

from photo_index.classifier import Label
from photo_index.db import CatalogStore, create_catalog_engine, create_schema, make_session_factory
from photo_index.errors import DecodeError, GeocodeError
from photo_index.geo import LocationInfo
from photo_index.indexer import GroupIndexer, LocationResolver, RecordMerger, TagResolver, TreeIndexer
from photo_index.media import Capability, ColorPalette, ExifData, FileType

START = datetime(2021, 7, 4, 12, 0, 0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += timedelta(minutes=minutes)


class FakeClassifier:
    """Returns the same labels for every thumbnail and records the calls."""

    def __init__(self, labels: Optional[List[Tuple[str, float]]] = None):
        self.labels = [Label(label, probability) for label, probability in (labels or [])]
        self.calls: List[Path] = []

    def classify(self, image_path: Path) -> List[Label]:
        self.calls.append(image_path)
        return list(self.labels)


class FakeGeocoder:
    """Resolves only the coordinates it knows about."""

    def __init__(self, places: Optional[Dict[Tuple[float, float], LocationInfo]] = None):
        self.places = places or {}
        self.calls = 0

    def reverse(self, latitude: float, longitude: float) -> LocationInfo:
        self.calls += 1
        try:
            return self.places[(latitude, longitude)]
        except KeyError:
            raise GeocodeError(f"no place at {latitude}, {longitude}")


class FakeMediaFile:
    """
    In-memory stand-in for MediaFile.

    Every attribute the indexer reads can be set through the constructor;
    groups are wired with link_group().
    """

    def __init__(
        self,
        root: Path,
        name: str,
        file_type: FileType = FileType.JPEG,
        canonical_name: str = "20210704_120000_00000001",
        taken_at: datetime = START,
        content_hash: Optional[str] = None,
        camera: Tuple[str, str] = ("EOS R5", "Canon"),
        lens: Tuple[str, str] = ("RF24-70mm F2.8 L IS USM", "Canon"),
        exif: Optional[ExifData] = None,
        coordinates: Optional[Tuple[float, float]] = None,
        size: Tuple[int, int] = (4000, 3000),
        palette: Optional[ColorPalette] = None,
    ):
        self.root = Path(root)
        self.path = self.root / name
        self.file_type = file_type
        self.canonical_name = canonical_name
        self.taken_at = taken_at
        self.content_hash = content_hash or hashlib.sha1(name.encode("utf-8")).hexdigest()
        self.camera = camera
        self.lens = lens
        self.exif = exif if exif is not None else ExifData(captured_at=taken_at, artist="Jane Doe")
        self.coordinates = coordinates
        self.size = size
        self.palette = palette or ColorPalette("blue", "666666666", "888888888", 40)
        self.group: Optional[Tuple[List["FakeMediaFile"], "FakeMediaFile"]] = None
        self.group_error: Optional[Exception] = None

    @property
    def filename(self) -> str:
        return str(self.path)

    @property
    def is_photo(self) -> bool:
        return self.file_type in (FileType.JPEG, FileType.RAW, FileType.HEIF, FileType.PNG)

    @property
    def is_jpeg(self) -> bool:
        return self.file_type is FileType.JPEG

    @property
    def mime_type(self) -> str:
        return "image/jpeg" if self.is_jpeg else "image/x-cr2"

    def can(self, capability: Capability) -> bool:
        if capability is Capability.DECODABLE:
            return self.is_jpeg
        return True

    def relative_filename(self, root) -> str:
        return self.path.relative_to(root).as_posix()

    def hash(self) -> str:
        return self.content_hash

    def canonical_name_from_file(self) -> str:
        return self.canonical_name

    def date_created(self) -> datetime:
        return self.taken_at

    def exif_data(self) -> ExifData:
        return self.exif

    def width(self) -> int:
        return self.size[0]

    def height(self) -> int:
        return self.size[1]

    def aspect_ratio(self) -> float:
        return round(self.size[0] / self.size[1], 2) if self.size[1] else 0.0

    def orientation(self) -> int:
        return 1

    def camera_model(self) -> str:
        return self.camera[0]

    def camera_make(self) -> str:
        return self.camera[1]

    def lens_model(self) -> str:
        return self.lens[0]

    def lens_make(self) -> str:
        return self.lens[1]

    def focal_length(self) -> int:
        return 50

    def aperture(self) -> float:
        return 2.8

    def thumbnail(self, thumbnails_root: Path, kind: str) -> Path:
        if not self.is_jpeg:
            raise DecodeError("not decodable")
        return Path(thumbnails_root) / f"{self.content_hash}_{kind}.jpg"

    def colors(self, thumbnails_root: Path) -> ColorPalette:
        return self.palette

    def related_files(self):
        if self.group_error is not None:
            raise self.group_error
        if self.group is None:
            return [], self
        return self.group

    def jpeg(self) -> "FakeMediaFile":
        if self.is_jpeg:
            return self
        related, main = self.related_files()
        for candidate in [main] + related:
            if candidate.is_jpeg:
                return candidate
        raise DecodeError(f"no JPEG for {self.path.name}")

    def location(self, geocoder) -> LocationInfo:
        if self.coordinates is None:
            raise GeocodeError(f"no GPS coordinates in {self.path.name}")
        return geocoder.reverse(*self.coordinates)


def link_group(main: FakeMediaFile, *related: FakeMediaFile) -> None:
    """Make main and related one capture group."""
    members = [main, *related]
    for member in members:
        member.group = ([m for m in members if m is not main], main)


@pytest.fixture
def engine():
    """In-memory SQLite catalog with all tables."""
    engine = create_catalog_engine("sqlite://")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    session = make_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def store(session) -> CatalogStore:
    return CatalogStore(session)


@pytest.fixture
def originals(tmp_path: Path) -> Path:
    path = tmp_path / "originals"
    path.mkdir()
    return path


@pytest.fixture
def thumbnails(tmp_path: Path) -> Path:
    return tmp_path / "thumbnails"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier([("cat", 0.9), ("dog", 0.31), ("animal", 0.05)])


@pytest.fixture
def paris() -> LocationInfo:
    return LocationInfo(
        latitude=48.8584,
        longitude=2.2945,
        name="Tour Eiffel",
        city="Paris",
        county="Paris",
        country="France",
        country_code="fr",
        category="tourism",
        type="attraction",
        source_id="5013364",
    )


@pytest.fixture
def geocoder(paris: LocationInfo) -> FakeGeocoder:
    return FakeGeocoder({(paris.latitude, paris.longitude): paris})


@pytest.fixture
def tag_resolver(store, classifier, thumbnails) -> TagResolver:
    return TagResolver(store, classifier, thumbnails)


@pytest.fixture
def location_resolver(store, geocoder, tag_resolver) -> LocationResolver:
    return LocationResolver(store, geocoder, tag_resolver)


@pytest.fixture
def merger(store, originals, thumbnails, tag_resolver, location_resolver, clock) -> RecordMerger:
    return RecordMerger(store, originals, thumbnails, tag_resolver, location_resolver, clock=clock)


@pytest.fixture
def group_indexer(merger, originals) -> GroupIndexer:
    return GroupIndexer(merger, originals)


@pytest.fixture
def tree_indexer(originals, group_indexer) -> TreeIndexer:
    return TreeIndexer(originals, group_indexer)


@pytest.fixture
def fake_media(originals: Path) -> Callable[..., FakeMediaFile]:
    """Factory for FakeMediaFile objects below the originals root."""

    def make(name: str, **kwargs) -> FakeMediaFile:
        return FakeMediaFile(originals, name, **kwargs)

    return make


@pytest.fixture
def make_jpeg() -> Callable[..., Path]:
    """Write a small real JPEG, optionally with top-level EXIF tags."""

    def make(
        path: Path,
        size: Tuple[int, int] = (64, 48),
        color: Tuple[int, int, int] = (33, 150, 243),
        exif: Optional[Dict[int, object]] = None,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new("RGB", size, color)

        kwargs = {}
        if exif:
            data = Image.Exif()
            for tag, value in exif.items():
                data[tag] = value
            kwargs["exif"] = data.tobytes()

        img.save(path, "JPEG", **kwargs)
        return path

    return make


@pytest.fixture
def group() -> Callable[..., None]:
    """link_group(main, *related) as a fixture."""
    return link_group


@pytest.fixture
def make_oversized_png() -> Callable[[Path], Path]:
    """Write a PNG whose header declares 30000x30000 pixels, above Pillow's bomb limit."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    def make(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        header = struct.pack(">IIBBBBB", 30000, 30000, 8, 2, 0, 0, 0)
        path.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IEND", b""))
        return path

    return make
