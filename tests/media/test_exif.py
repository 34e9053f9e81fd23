"""Unit tests for media.exif module."""

from datetime import datetime
from fractions import Fraction
from types import SimpleNamespace
from unittest.mock import MagicMock, Mock, patch

import pytest
from PIL import ExifTags

from photo_index.errors import DecodeError
from photo_index.media.exif import (
    ExifData,
    _dms_to_decimal,
    _first_number,
    _parse_datetime,
    _parse_gps_coords,
    extract_exif,
)


class TestExifData:
    """Tests for ExifData class."""

    def test_exifdata_creation_empty(self):
        """Test creating empty ExifData."""
        exif = ExifData()

        assert exif.captured_at is None
        assert exif.camera_make is None
        assert exif.focal_length == 0
        assert exif.aperture == 0.0
        assert exif.orientation == 1

    @pytest.mark.parametrize("lat,lng,expected", [
        (None, None, False),
        (48.85, None, False),
        (0.0, 0.0, False),
        (48.85, 2.29, True),
        (0.0, 2.29, True),
    ])
    def test_has_location(self, lat, lng, expected):
        """Test only real coordinates count as a location."""
        assert ExifData(gps_latitude=lat, gps_longitude=lng).has_location is expected


class TestExtractExif:
    """Tests for extract_exif() function."""

    def test_real_jpeg_top_level_tags(self, tmp_path, make_jpeg):
        """Test Make, Model, DateTime and Artist are read from a real JPEG."""
        path = make_jpeg(tmp_path / "IMG_0001.jpg", exif={
            ExifTags.Base.Make: "Canon",
            ExifTags.Base.Model: "Canon EOS R5",
            ExifTags.Base.DateTime: "2021:07:04 12:00:00",
            ExifTags.Base.Artist: "Jane Doe",
            ExifTags.Base.Orientation: 6,
        })

        exif = extract_exif(path)

        assert exif.camera_make == "Canon"
        assert exif.camera_model == "Canon EOS R5"
        assert exif.captured_at == datetime(2021, 7, 4, 12, 0, 0)
        assert exif.artist == "Jane Doe"
        assert exif.orientation == 6

    def test_jpeg_without_exif(self, tmp_path, make_jpeg):
        """Test a JPEG without EXIF raises DecodeError."""
        path = make_jpeg(tmp_path / "plain.jpg")

        with pytest.raises(DecodeError, match="no EXIF"):
            extract_exif(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises DecodeError."""
        with pytest.raises(DecodeError):
            extract_exif(tmp_path / "missing.jpg")

    def test_empty_file(self, tmp_path):
        """Test an empty file raises DecodeError."""
        path = tmp_path / "empty.jpg"
        path.touch()

        with pytest.raises(DecodeError, match="empty"):
            extract_exif(path)

    def test_corrupted_jpeg(self, tmp_path):
        """Test a file that is not really a JPEG raises DecodeError."""
        path = tmp_path / "corrupted.jpg"
        path.write_bytes(b"This is not a valid JPEG file")

        with pytest.raises(DecodeError):
            extract_exif(path)

    def test_detail_and_gps_ifds(self, tmp_path):
        """Test lens, exposure and GPS values from the nested IFDs."""
        path = tmp_path / "IMG_0001.jpg"
        path.write_bytes(b"jpeg")

        ifds = {
            ExifTags.IFD.Exif: {
                0x9003: "2021:07:04 12:00:00",  # DateTimeOriginal
                0x9291: "123",                  # SubsecTimeOriginal
                0xA433: "Canon",                # LensMake
                0xA434: "RF24-70mm F2.8 L IS USM",
                0x920A: Fraction(50, 1),        # FocalLength
                0x829D: Fraction(28, 10),       # FNumber
            },
            ExifTags.IFD.GPSInfo: {
                1: "N",
                2: (48, 51, Fraction(3024, 100)),
                3: "E",
                4: (2, 17, Fraction(4020, 100)),
            },
        }

        mock_exif = MagicMock()
        mock_exif.items.return_value = [(0x010F, "Canon"), (0x0110, "Canon EOS R5")]
        mock_exif.get_ifd.side_effect = lambda tag: ifds.get(tag, {})

        mock_img = MagicMock()
        mock_img.getexif.return_value = mock_exif
        mock_img.__enter__ = Mock(return_value=mock_img)
        mock_img.__exit__ = Mock(return_value=False)

        with patch("photo_index.media.exif.Image.open", return_value=mock_img):
            exif = extract_exif(path)

        assert exif.captured_at == datetime(2021, 7, 4, 12, 0, 0)
        assert exif.sub_second == "123"
        assert exif.lens_make == "Canon"
        assert exif.lens_model == "RF24-70mm F2.8 L IS USM"
        assert exif.focal_length == 50
        assert exif.aperture == 2.8
        assert exif.gps_latitude == pytest.approx(48.8584, abs=1e-4)
        assert exif.gps_longitude == pytest.approx(2.2945, abs=1e-4)

    def test_raw_uses_exifread(self, tmp_path):
        """Test RAW files are read with exifread."""
        path = tmp_path / "IMG_0001.CR2"
        path.write_bytes(b"raw")

        tags = {
            "Image Make": "Canon",
            "Image Model": "Canon EOS R5",
            "EXIF DateTimeOriginal": "2021:07:04 12:00:00",
            "EXIF FocalLength": SimpleNamespace(values=[Fraction(35, 1)]),
            "EXIF FNumber": SimpleNamespace(values=[Fraction(18, 10)]),
            "EXIF ExifImageWidth": SimpleNamespace(values=[8192]),
            "EXIF ExifImageLength": SimpleNamespace(values=[5464]),
        }

        with patch("photo_index.media.exif.exifread.process_file", return_value=tags) as process:
            exif = extract_exif(path)

        process.assert_called_once()
        assert exif.camera_model == "Canon EOS R5"
        assert exif.captured_at == datetime(2021, 7, 4, 12, 0, 0)
        assert exif.focal_length == 35
        assert exif.aperture == 1.8
        assert (exif.width, exif.height) == (8192, 5464)

    def test_raw_without_tags(self, tmp_path):
        """Test a RAW without EXIF raises DecodeError."""
        path = tmp_path / "IMG_0001.NEF"
        path.write_bytes(b"raw")

        with patch("photo_index.media.exif.exifread.process_file", return_value={}):
            with pytest.raises(DecodeError):
                extract_exif(path)


class TestHelpers:
    """Tests for the value parsing helpers."""

    @pytest.mark.parametrize("value,expected", [
        ("2021:07:04 12:00:00", datetime(2021, 7, 4, 12, 0, 0)),
        ("2021:07:04 12:00:00\x00", datetime(2021, 7, 4, 12, 0, 0)),
        ("0000:00:00 00:00:00", None),
        ("", None),
        (None, None),
    ])
    def test_parse_datetime(self, value, expected):
        assert _parse_datetime(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (None, 0.0),
        (Fraction(28, 10), 2.8),
        ((28, 10), 2.8),
        ((1, 0), 0.0),
        ([Fraction(50, 1)], 50.0),
        ([], 0.0),
        ("abc", 0.0),
    ])
    def test_first_number(self, value, expected):
        assert _first_number(value) == pytest.approx(expected)

    def test_dms_to_decimal_south_west(self):
        """Test southern and western references are negative."""
        assert _dms_to_decimal((33, 52, 0), "S") == pytest.approx(-33.8667, abs=1e-4)
        assert _dms_to_decimal((151, 12, 0), "W") == pytest.approx(-151.2, abs=1e-4)

    def test_parse_gps_incomplete(self):
        """Test incomplete GPS data yields no coordinates."""
        assert _parse_gps_coords({"GPSLatitude": (48, 51, 30)}) == (None, None)
