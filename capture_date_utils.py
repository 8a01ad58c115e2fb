#!/usr/bin/env python3
"""
Capture Date Utilities
Shared functions for choosing and formatting the original capture date of a photo.
"""

from datetime import datetime, timezone
from typing import Optional

from date_fix_errors import TimestampOutOfRange

EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"


def timestamp_to_datetime(seconds: int) -> datetime:
    """
    Convert whole seconds since the Unix epoch to an aware UTC datetime.

    Args:
        seconds: Seconds since 1970-01-01T00:00:00Z

    Returns:
        Datetime in UTC

    Raises:
        TimestampOutOfRange: If the value does not map to a calendar date
    """
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise TimestampOutOfRange(f"Timestamp out of range: {seconds}") from e


def resolve_capture_timestamp(creation: int, taken: int) -> datetime:
    """
    Pick the canonical capture time of a photo.

    A taken timestamp of 0 means none was recorded at upload, so the creation
    timestamp is used instead. Any other taken value wins, even if implausible.

    Args:
        creation: Creation timestamp from the export record
        taken: Taken timestamp from the first upload-time EXIF snapshot

    Returns:
        Canonical capture time in UTC
    """
    if taken == 0:
        return timestamp_to_datetime(creation)
    return timestamp_to_datetime(taken)


def format_exif_datetime(timestamp: datetime) -> str:
    """
    Format a datetime as an EXIF date string: 'YYYY:MM:DD HH:MM:SS'

    Aware datetimes are converted to UTC first; the result has no timezone suffix.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)

    # strftime does not zero-pad years below 1000 on every platform
    if timestamp.year < 1000:
        raise TimestampOutOfRange(
            f"Year {timestamp.year} cannot be written as an EXIF date"
        )

    return timestamp.strftime(EXIF_DATETIME_FORMAT)


def parse_exif_datetime(date_string: str) -> Optional[datetime]:
    """Parse EXIF datetime string to a UTC datetime, or None if malformed."""
    try:
        parsed = datetime.strptime(date_string.strip().rstrip("\x00"), EXIF_DATETIME_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)
