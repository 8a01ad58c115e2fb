#!/usr/bin/env python3
"""
Facebook Export Records

Parses the photo collections of a Facebook data export: the per-album JSON
files and the uncategorized ("miscellaneous") photos file.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from date_fix_errors import IoError, MissingExifSnapshot, ParseError

# Fixed locations relative to the export root
MISC_PHOTOS_FILE = Path("your_facebook_activity/posts/your_uncategorized_photos.json")
ALBUM_DIRECTORY = Path("your_facebook_activity/posts/album")
ALBUM_FILE_SUFFIX = ".json"


@dataclass(frozen=True)
class ExifSnapshot:
    """EXIF values Facebook captured when the photo was uploaded."""

    upload_ip: str
    taken_timestamp: int = 0


@dataclass(frozen=True)
class PhotoRecord:
    """A single photo entry of an album or of the uncategorized photos."""

    uri: str
    creation_timestamp: int
    exif_data: List[ExifSnapshot] = field(default_factory=list)
    backup_uri: Optional[str] = None
    title: Optional[str] = None

    def taken_timestamp(self) -> int:
        """Return the taken timestamp of the first EXIF snapshot."""
        if not self.exif_data:
            raise MissingExifSnapshot(f"No EXIF snapshot recorded for {self.uri}")
        return self.exif_data[0].taken_timestamp


@dataclass(frozen=True)
class Album:
    """A named album with its photos."""

    name: str
    description: str
    last_modified_timestamp: int
    photos: List[PhotoRecord]


@dataclass(frozen=True)
class MiscCollection:
    """Photos that were not posted to any album."""

    photos: List[PhotoRecord]


def _require(data: dict, key: str, expected_type: type, context: str) -> Any:
    """Fetch a required key and check its type."""
    if key not in data:
        raise ParseError(f"{context}: missing field '{key}'")
    return _check_type(data[key], expected_type, f"{context}.{key}")


def _optional(data: dict, key: str, expected_type: type, context: str) -> Any:
    """Fetch an optional key, checking its type when present."""
    value = data.get(key)
    if value is None:
        return None
    return _check_type(value, expected_type, f"{context}.{key}")


def _check_type(value: Any, expected_type: type, context: str) -> Any:
    # bool is a subclass of int but never a valid timestamp
    if isinstance(value, bool) and expected_type is not bool:
        raise ParseError(f"{context}: expected {expected_type.__name__}, got bool")
    if not isinstance(value, expected_type):
        raise ParseError(
            f"{context}: expected {expected_type.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def _parse_exif_snapshot(data: Any, context: str) -> ExifSnapshot:
    data = _check_type(data, dict, context)
    # Absent means "not recorded"; an explicit null is malformed
    if "taken_timestamp" in data:
        taken_timestamp = _require(data, "taken_timestamp", int, context)
    else:
        taken_timestamp = 0
    return ExifSnapshot(
        upload_ip=_require(data, "upload_ip", str, context),
        taken_timestamp=taken_timestamp,
    )


def parse_photo_record(data: Any, context: str = "photo") -> PhotoRecord:
    """
    Build a PhotoRecord from one photo object of an export document.

    Args:
        data: Decoded JSON object
        context: Location of the object, used in error messages

    Returns:
        Parsed PhotoRecord

    Raises:
        ParseError: If a required field is missing or has the wrong type
    """
    data = _check_type(data, dict, context)

    media_metadata = _require(data, "media_metadata", dict, context)
    photo_metadata = _require(
        media_metadata, "photo_metadata", dict, f"{context}.media_metadata"
    )
    exif_context = f"{context}.media_metadata.photo_metadata.exif_data"
    raw_exif_data = _require(
        photo_metadata, "exif_data", list, f"{context}.media_metadata.photo_metadata"
    )

    return PhotoRecord(
        uri=_require(data, "uri", str, context),
        creation_timestamp=_require(data, "creation_timestamp", int, context),
        exif_data=[
            _parse_exif_snapshot(snapshot, f"{exif_context}[{index}]")
            for index, snapshot in enumerate(raw_exif_data)
        ],
        backup_uri=_optional(data, "backup_uri", str, context),
        title=_optional(data, "title", str, context),
    )


def _parse_photo_list(data: dict, key: str, context: str) -> List[PhotoRecord]:
    raw_photos = _require(data, key, list, context)
    return [
        parse_photo_record(photo, f"{context}.{key}[{index}]")
        for index, photo in enumerate(raw_photos)
    ]


def parse_json_file(file_path: Path) -> Any:
    """
    Read and decode a JSON document.

    Raises:
        ParseError: If the file is missing, unreadable or not valid JSON
    """
    try:
        with open(file_path, "r", encoding="utf-8") as json_file:
            return json.load(json_file)
    except OSError as e:
        raise ParseError(f"Could not read {file_path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Invalid JSON in {file_path}: {e}") from e


def load_album(file_path) -> Album:
    """
    Load one album JSON file.

    Args:
        file_path: Path to the album document

    Returns:
        Parsed Album

    Raises:
        ParseError: If the file is missing, unreadable or structurally invalid
    """
    file_path = Path(file_path)
    data = _check_type(parse_json_file(file_path), dict, str(file_path))
    context = file_path.name

    return Album(
        name=_require(data, "name", str, context),
        description=_require(data, "description", str, context),
        last_modified_timestamp=_require(data, "last_modified_timestamp", int, context),
        photos=_parse_photo_list(data, "photos", context),
    )


def load_misc(export_root) -> MiscCollection:
    """
    Load the uncategorized photos of an export.

    Args:
        export_root: Top-level directory of the export

    Returns:
        Parsed MiscCollection

    Raises:
        ParseError: If the file is missing, unreadable or structurally invalid
    """
    file_path = Path(export_root) / MISC_PHOTOS_FILE
    data = _check_type(parse_json_file(file_path), dict, str(file_path))
    return MiscCollection(
        photos=_parse_photo_list(data, "other_photos_v2", file_path.name)
    )


def discover_album_files(export_root) -> List[Path]:
    """
    List the album JSON files of an export.

    Only files whose extension is exactly '.json' are returned, in directory
    enumeration order. Entries that cannot be inspected are skipped.

    Args:
        export_root: Top-level directory of the export

    Returns:
        List of album file paths

    Raises:
        IoError: If the album directory does not exist or cannot be listed
    """
    album_directory = Path(export_root) / ALBUM_DIRECTORY

    try:
        directory_entries = list(album_directory.iterdir())
    except OSError as e:
        raise IoError(f"Could not list album directory {album_directory}: {e}") from e

    album_files = []
    for entry in directory_entries:
        try:
            if entry.suffix == ALBUM_FILE_SUFFIX and entry.is_file():
                album_files.append(entry)
        except OSError:
            continue

    return album_files


def resolve_image_path(export_root, record: PhotoRecord) -> Path:
    """Return the on-disk location of a record's image."""
    return Path(export_root) / record.uri
