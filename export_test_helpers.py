"""
Builders for small Facebook exports and test images used across the tests.
"""

import json
import struct
from pathlib import Path

import piexif
from PIL import Image

from facebook_export_records import ALBUM_DIRECTORY, MISC_PHOTOS_FILE


def photo_json(uri, creation_timestamp, taken_timestamp=None, title=None):
    """Build one photo object the way Facebook exports it."""
    exif_snapshot = {"upload_ip": "1.2.3.4"}
    if taken_timestamp is not None:
        exif_snapshot["taken_timestamp"] = taken_timestamp

    photo = {
        "uri": uri,
        "creation_timestamp": creation_timestamp,
        "media_metadata": {"photo_metadata": {"exif_data": [exif_snapshot]}},
        "backup_uri": f"https://backup.example/{uri}",
    }
    if title is not None:
        photo["title"] = title
    return photo


def write_json(file_path: Path, document):
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(json.dumps(document), encoding="utf-8")


def write_misc_file(export_root: Path, photos):
    write_json(export_root / MISC_PHOTOS_FILE, {"other_photos_v2": photos})


def write_album_file(export_root: Path, file_name: str, photos, name="Holidays"):
    file_path = export_root / ALBUM_DIRECTORY / file_name
    write_json(
        file_path,
        {
            "name": name,
            "photos": photos,
            "last_modified_timestamp": 1600000500,
            "description": "",
        },
    )
    return file_path


def _new_image(color=(200, 30, 30)) -> Image.Image:
    return Image.new("RGB", (8, 8), color=color)


def create_jpeg(file_path: Path, exif_tags=None):
    """
    Create a small JPEG, optionally carrying EXIF tags.

    Args:
        file_path: Where to write the image
        exif_tags: piexif dictionary such as {"0th": {...}, "Exif": {...}}
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    image = _new_image()
    if exif_tags:
        image.save(file_path, "JPEG", exif=piexif.dump(exif_tags))
    else:
        image.save(file_path, "JPEG")
    return file_path


def create_mpo(file_path: Path):
    """Create a two-frame MPO, the JPEG variant many phone cameras write."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    _new_image().save(
        file_path,
        "MPO",
        save_all=True,
        append_images=[_new_image(color=(30, 30, 200))],
    )
    return file_path


def create_webp(file_path: Path):
    """Create a small WebP without an EXIF chunk."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    _new_image().save(file_path, "WEBP")
    return file_path


def create_jpeg_with_corrupt_exif(file_path: Path):
    """Create a JPEG whose EXIF block claims more IFD entries than it holds."""
    create_jpeg(file_path)
    jpeg_data = file_path.read_bytes()

    # TIFF header pointing at an IFD with 5 entries and no entry data
    exif_payload = b"Exif\x00\x00" + b"II*\x00" + struct.pack("<IH", 8, 5)
    app1_segment = b"\xff\xe1" + struct.pack(">H", len(exif_payload) + 2) + exif_payload

    file_path.write_bytes(jpeg_data[:2] + app1_segment + jpeg_data[2:])
    return file_path
