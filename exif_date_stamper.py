#!/usr/bin/env python3
"""
EXIF Date Stamper

Writes the original capture date (EXIF DateTimeOriginal) into images in place,
leaving every other EXIF tag as it was.
"""

import struct
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

import piexif
from PIL import Image, UnidentifiedImageError

from capture_date_utils import format_exif_datetime, parse_exif_datetime
from date_fix_errors import IoError, TagWriteError, UnsupportedFormat

# Containers piexif can insert an EXIF block into; MPO is a JPEG with extra frames
WRITABLE_IMAGE_FORMATS = {"JPEG", "MPO", "WEBP"}


class ExifTagContext:
    """
    Pending EXIF tags waiting to be merged into an image file.

    One context can be reused for many files, but it is not safe to share
    between threads: setting tags and writing them is not atomic.
    """

    def __init__(self):
        self.pending_exif_tags: Dict[int, str] = {}

    def clear(self):
        """Drop all pending tags."""
        self.pending_exif_tags.clear()

    def set_capture_date(self, exif_date: str):
        """Set the DateTimeOriginal tag to an already formatted EXIF date."""
        self.pending_exif_tags[piexif.ExifIFD.DateTimeOriginal] = exif_date

    def write_to_file(self, file_path: Path):
        """
        Merge the pending tags into the file's existing EXIF block.

        Args:
            file_path: Path to a JPEG or WebP image

        Raises:
            IoError: If the file cannot be read or written
            UnsupportedFormat: If the file is not an image piexif can write to
            TagWriteError: If the EXIF block cannot be decoded or encoded
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            raise IoError(f"Image file not found: {file_path}")

        image_format, has_exif = detect_image_format(file_path)
        if image_format not in WRITABLE_IMAGE_FORMATS:
            raise UnsupportedFormat(
                f"Cannot write EXIF to {image_format} image: {file_path}"
            )

        if image_format == "WEBP" and not has_exif:
            # piexif cannot load a WebP that has no EXIF chunk yet
            exif_dict = empty_exif_dict()
        else:
            exif_dict = load_exif_dict(file_path)
        exif_dict.setdefault("Exif", {}).update(self.pending_exif_tags)

        try:
            exif_bytes = piexif.dump(exif_dict)
        except (ValueError, TypeError, struct.error) as e:
            raise TagWriteError(f"Could not encode EXIF for {file_path}: {e}") from e

        try:
            piexif.insert(exif_bytes, str(file_path))
        except piexif.InvalidImageDataError as e:
            raise UnsupportedFormat(f"Cannot write EXIF to {file_path}: {e}") from e
        except struct.error as e:
            # EXIF segment larger than a JPEG APP1 marker can hold
            raise TagWriteError(f"EXIF block too large for {file_path}: {e}") from e
        except OSError as e:
            raise IoError(f"Could not write EXIF to {file_path}: {e}") from e


def empty_exif_dict() -> dict:
    """Return a piexif dictionary with no tags."""
    return {"0th": {}, "Exif": {}, "GPS": {}, "Interop": {}, "1st": {}, "thumbnail": None}


def detect_image_format(file_path: Path) -> Tuple[str, bool]:
    """Return the Pillow format name of an image and whether it carries EXIF."""
    try:
        with Image.open(file_path) as image:
            return image.format or "UNKNOWN", "exif" in image.info
    except UnidentifiedImageError as e:
        raise UnsupportedFormat(f"Not a recognised image: {file_path}") from e
    except Image.DecompressionBombError as e:
        raise UnsupportedFormat(f"Image too large to open safely: {file_path}") from e
    except OSError as e:
        raise IoError(f"Could not open image {file_path}: {e}") from e


def load_exif_dict(file_path: Path) -> dict:
    """Load the EXIF block of an image as a piexif dictionary."""
    try:
        return piexif.load(str(file_path))
    except piexif.InvalidImageDataError as e:
        raise UnsupportedFormat(f"Cannot read EXIF from {file_path}: {e}") from e
    except OSError as e:
        raise IoError(f"Could not read {file_path}: {e}") from e
    except (ValueError, struct.error) as e:
        raise TagWriteError(f"Corrupt EXIF block in {file_path}: {e}") from e


def read_capture_date(image_path) -> Optional[str]:
    """Return the DateTimeOriginal string of an image, or None if unset."""
    exif_dict = load_exif_dict(Path(image_path))
    date_value = exif_dict.get("Exif", {}).get(piexif.ExifIFD.DateTimeOriginal)
    if date_value is None:
        return None
    if isinstance(date_value, bytes):
        date_value = date_value.decode("ascii", errors="replace")
    return date_value.rstrip("\x00")


def stamp(context: ExifTagContext, image_path, timestamp: datetime) -> str:
    """
    Stamp an image's original capture date in place.

    Args:
        context: Tag context used to build the EXIF changes
        image_path: Path to the image file
        timestamp: Canonical capture time

    Returns:
        The EXIF date string that was written

    Raises:
        TagWriteError: If the value read back from the file differs
    """
    exif_date = format_exif_datetime(timestamp)

    context.clear()
    context.set_capture_date(exif_date)
    context.write_to_file(Path(image_path))

    written_date = read_capture_date(image_path)
    if parse_exif_datetime(written_date or "") != parse_exif_datetime(exif_date):
        raise TagWriteError(
            f"Capture date did not persist in {image_path}: "
            f"expected {exif_date}, found {written_date}"
        )

    return exif_date
