#!/usr/bin/env python3
"""
Date Fix Errors

Exception classes raised while repairing capture dates of a Facebook export.
"""


class DateFixError(Exception):
    """Base class for every error raised by the date fixer."""

    pass


class ParseError(DateFixError):
    """Exception raised when an export JSON document is missing or malformed."""

    pass


class IoError(DateFixError):
    """Exception raised when a file or directory cannot be read or written."""

    pass


class TimestampOutOfRange(DateFixError):
    """Exception raised when a timestamp does not map to a calendar date."""

    pass


class UnsupportedFormat(DateFixError):
    """Exception raised when an image container cannot carry EXIF data."""

    pass


class TagWriteError(DateFixError):
    """Exception raised when the EXIF block cannot be encoded."""

    pass


class MissingExifSnapshot(DateFixError):
    """Exception raised when a photo record has no EXIF snapshot."""

    pass
