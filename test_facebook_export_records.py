#!/usr/bin/env python3
"""
Tests for the facebook_export_records module.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from date_fix_errors import IoError, MissingExifSnapshot, ParseError
from export_test_helpers import photo_json, write_album_file, write_json, write_misc_file
from facebook_export_records import (
    ALBUM_DIRECTORY,
    ExifSnapshot,
    PhotoRecord,
    discover_album_files,
    load_album,
    load_misc,
    parse_photo_record,
    resolve_image_path,
)


class TestPhotoRecordParsing:
    """Test suite for parsing single photo objects."""

    def test_parse_album_photo_with_title(self):
        """Parse a photo object carrying a title."""
        # Arrange
        data = photo_json("media/a.jpg", 1600000000, 1650000000, title="Beach")

        # Act
        record = parse_photo_record(data)

        # Assert
        assert record.uri == "media/a.jpg"
        assert record.creation_timestamp == 1600000000
        assert record.title == "Beach"
        assert record.backup_uri == "https://backup.example/media/a.jpg"
        assert record.exif_data == [ExifSnapshot("1.2.3.4", 1650000000)]

    def test_parse_misc_photo_without_title(self):
        """Parse a photo object without a title leaves title unset."""
        # Act
        record = parse_photo_record(photo_json("media/b.jpg", 1600000000, 1))

        # Assert
        assert record.title is None

    def test_missing_taken_timestamp_defaults_to_zero(self):
        """Parse defaults an absent taken_timestamp to zero."""
        # Act
        record = parse_photo_record(photo_json("media/c.jpg", 1600000000))

        # Assert
        assert record.taken_timestamp() == 0

    def test_only_first_snapshot_is_consulted(self):
        """Taken timestamp comes from the first EXIF snapshot only."""
        # Arrange
        record = PhotoRecord(
            uri="a.jpg",
            creation_timestamp=1,
            exif_data=[ExifSnapshot("1.1.1.1", 100), ExifSnapshot("2.2.2.2", 200)],
        )

        # Act & Assert
        assert record.taken_timestamp() == 100

    def test_empty_exif_data_raises_missing_snapshot(self):
        """Empty exif_data raises MissingExifSnapshot instead of falling back."""
        # Arrange
        data = photo_json("media/d.jpg", 1600000000)
        data["media_metadata"]["photo_metadata"]["exif_data"] = []
        record = parse_photo_record(data)

        # Act & Assert
        with pytest.raises(MissingExifSnapshot, match="media/d.jpg"):
            record.taken_timestamp()

    @pytest.mark.parametrize("missing_field", ["uri", "creation_timestamp", "media_metadata"])
    def test_missing_required_field_raises(self, missing_field):
        """Parse rejects photo objects missing a required field."""
        # Arrange
        data = photo_json("media/e.jpg", 1600000000)
        del data[missing_field]

        # Act & Assert
        with pytest.raises(ParseError, match=missing_field):
            parse_photo_record(data)

    def test_missing_upload_ip_raises(self):
        """Parse rejects EXIF snapshots without upload_ip."""
        # Arrange
        data = photo_json("media/f.jpg", 1600000000)
        del data["media_metadata"]["photo_metadata"]["exif_data"][0]["upload_ip"]

        # Act & Assert
        with pytest.raises(ParseError, match="upload_ip"):
            parse_photo_record(data)

    def test_null_taken_timestamp_raises(self):
        """Parse rejects an explicit null taken_timestamp instead of reading it as zero."""
        # Arrange
        data = photo_json("media/h.jpg", 1600000000)
        data["media_metadata"]["photo_metadata"]["exif_data"][0]["taken_timestamp"] = None

        # Act & Assert
        with pytest.raises(ParseError, match="taken_timestamp"):
            parse_photo_record(data)

    @pytest.mark.parametrize("bad_value", ["1600000000", 1.5, True, None])
    def test_wrong_timestamp_type_raises(self, bad_value):
        """Parse rejects creation timestamps that are not integers."""
        # Arrange
        data = photo_json("media/g.jpg", 1600000000)
        data["creation_timestamp"] = bad_value

        # Act & Assert
        with pytest.raises(ParseError, match="creation_timestamp"):
            parse_photo_record(data)


class TestCollectionLoading:
    """Test suite for loading album and uncategorized photo files."""

    def setup_method(self):
        """Set up an empty export root."""
        self.export_root = Path(tempfile.mkdtemp())

    def teardown_method(self):
        """Clean up after each test."""
        shutil.rmtree(self.export_root)

    def test_load_album(self):
        """Load an album file with its metadata and photos."""
        # Arrange
        album_file = write_album_file(
            self.export_root,
            "holidays.json",
            [photo_json("media/a.jpg", 1600000000, 1650000000, title="A")],
        )

        # Act
        album = load_album(album_file)

        # Assert
        assert album.name == "Holidays"
        assert album.description == ""
        assert album.last_modified_timestamp == 1600000500
        assert [photo.uri for photo in album.photos] == ["media/a.jpg"]

    def test_load_album_missing_file_raises(self):
        """Load album raises ParseError for a missing file."""
        # Act & Assert
        with pytest.raises(ParseError, match="Could not read"):
            load_album(self.export_root / "missing.json")

    def test_load_album_invalid_json_raises(self):
        """Load album raises ParseError for malformed JSON."""
        # Arrange
        album_file = self.export_root / "broken.json"
        album_file.write_text("{not json", encoding="utf-8")

        # Act & Assert
        with pytest.raises(ParseError, match="Invalid JSON"):
            load_album(album_file)

    def test_load_album_missing_name_raises(self):
        """Load album raises ParseError when the album has no name."""
        # Arrange
        album_file = self.export_root / "nameless.json"
        write_json(
            album_file,
            {"photos": [], "last_modified_timestamp": 1, "description": ""},
        )

        # Act & Assert
        with pytest.raises(ParseError, match="name"):
            load_album(album_file)

    def test_load_album_rejects_one_bad_photo(self):
        """Load album fails as a whole when any photo is malformed."""
        # Arrange
        bad_photo = photo_json("media/b.jpg", 1600000000)
        del bad_photo["uri"]
        album_file = write_album_file(
            self.export_root,
            "mixed.json",
            [photo_json("media/a.jpg", 1600000000), bad_photo],
        )

        # Act & Assert
        with pytest.raises(ParseError, match=r"photos\[1\]"):
            load_album(album_file)

    def test_load_misc_reads_fixed_location(self):
        """Load misc reads the uncategorized photos file under the export root."""
        # Arrange
        write_misc_file(
            self.export_root,
            [photo_json("media/x.jpg", 1600000000), photo_json("media/y.jpg", 1)],
        )

        # Act
        misc_collection = load_misc(self.export_root)

        # Assert
        assert [photo.uri for photo in misc_collection.photos] == [
            "media/x.jpg",
            "media/y.jpg",
        ]

    def test_load_misc_missing_file_raises(self):
        """Load misc raises ParseError when the export has no uncategorized file."""
        # Act & Assert
        with pytest.raises(ParseError):
            load_misc(self.export_root)

    def test_load_misc_wrong_key_raises(self):
        """Load misc raises ParseError when other_photos_v2 is absent."""
        # Arrange
        write_json(
            self.export_root / "your_facebook_activity/posts/your_uncategorized_photos.json",
            {"photos": []},
        )

        # Act & Assert
        with pytest.raises(ParseError, match="other_photos_v2"):
            load_misc(self.export_root)

    def test_resolve_image_path_joins_export_root(self):
        """Image paths are the record uri relative to the export root."""
        # Arrange
        record = PhotoRecord(uri="your_facebook_activity/posts/media/a.jpg", creation_timestamp=1)

        # Act & Assert
        assert resolve_image_path(self.export_root, record) == (
            self.export_root / "your_facebook_activity/posts/media/a.jpg"
        )


class TestAlbumDiscovery:
    """Test suite for finding album files."""

    def setup_method(self):
        """Set up an export root with an album directory."""
        self.export_root = Path(tempfile.mkdtemp())
        self.album_directory = self.export_root / ALBUM_DIRECTORY
        self.album_directory.mkdir(parents=True)

    def teardown_method(self):
        """Clean up after each test."""
        shutil.rmtree(self.export_root)

    def test_discover_returns_only_json_files(self):
        """Discover returns the three .json files and never the .txt file."""
        # Arrange
        for file_name in ["0.json", "1.json", "2.json", "notes.txt"]:
            (self.album_directory / file_name).write_text("{}", encoding="utf-8")

        # Act
        album_files = discover_album_files(self.export_root)

        # Assert
        assert sorted(path.name for path in album_files) == ["0.json", "1.json", "2.json"]

    def test_discover_extension_is_case_sensitive(self):
        """Discover ignores files whose extension is not exactly json."""
        # Arrange
        (self.album_directory / "upper.JSON").write_text("{}", encoding="utf-8")
        (self.album_directory / "backup.json.bak").write_text("{}", encoding="utf-8")

        # Act & Assert
        assert discover_album_files(self.export_root) == []

    def test_discover_skips_directories(self):
        """Discover skips subdirectories even when named like JSON files."""
        # Arrange
        (self.album_directory / "nested.json").mkdir()

        # Act & Assert
        assert discover_album_files(self.export_root) == []

    def test_discover_missing_directory_raises(self):
        """Discover raises IoError when the album directory is absent."""
        # Arrange
        shutil.rmtree(self.album_directory)

        # Act & Assert
        with pytest.raises(IoError, match="album directory"):
            discover_album_files(self.export_root)
