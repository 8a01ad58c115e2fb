#!/usr/bin/env python3
"""
Facebook Export Date Fixer

Restores the original capture date of every photo in a Facebook data export.
Facebook strips EXIF dates on upload; the export keeps them in JSON instead.
This tool writes them back into the images as EXIF DateTimeOriginal.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from capture_date_utils import resolve_capture_timestamp
from date_fix_errors import DateFixError
from exif_date_stamper import ExifTagContext, stamp
from facebook_export_records import (
    PhotoRecord,
    discover_album_files,
    load_album,
    load_misc,
    resolve_image_path,
)


@dataclass
class PhotoResult:
    """Outcome of stamping a single photo."""

    record: PhotoRecord
    image_path: Path
    exif_date: Optional[str] = None
    error: Optional[DateFixError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class RunSummary:
    """Outcome of a whole run."""

    photo_results: List[PhotoResult] = field(default_factory=list)
    album_errors: List[DateFixError] = field(default_factory=list)

    @property
    def stamped_count(self) -> int:
        return sum(1 for result in self.photo_results if result.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.photo_results) - self.stamped_count

    @property
    def succeeded(self) -> bool:
        return self.failed_count == 0 and not self.album_errors

    @property
    def errors(self) -> List[str]:
        messages = [str(error) for error in self.album_errors]
        messages.extend(
            str(result.error) for result in self.photo_results if not result.succeeded
        )
        return messages


class FacebookDateFixer:
    """Main class for stamping capture dates across a Facebook export."""

    def __init__(self, export_root: str, fail_fast: bool = True, verbose: bool = False):
        """
        Initialize the date fixer.

        Args:
            export_root: Top-level directory of the Facebook export
            fail_fast: If True, the first error aborts the run; otherwise
                failures are collected in the run summary
            verbose: If True, print a line for every stamped photo
        """
        self.export_root = Path(export_root)
        if not self.export_root.exists():
            raise ValueError(f"Export root does not exist: {export_root}")

        self.fail_fast = fail_fast
        self.verbose = verbose
        self.tag_context = ExifTagContext()

    def process_photo(self, record: PhotoRecord) -> PhotoResult:
        """
        Resolve and stamp the capture date of one photo.

        Args:
            record: Photo record from the export

        Returns:
            PhotoResult describing what was written or what went wrong

        Raises:
            DateFixError: In fail-fast mode, on any failure
        """
        image_path = resolve_image_path(self.export_root, record)
        result = PhotoResult(record=record, image_path=image_path)

        try:
            capture_time = resolve_capture_timestamp(
                record.creation_timestamp, record.taken_timestamp()
            )
            result.exif_date = stamp(self.tag_context, image_path, capture_time)
        except DateFixError as e:
            if self.fail_fast:
                raise
            result.error = e
            return result

        if self.verbose:
            print(f"Stamped: {image_path} -> {result.exif_date}")

        return result

    def process_photos(self, photos: List[PhotoRecord], summary: RunSummary):
        """Stamp every photo of a collection, recording results in the summary."""
        for record in photos:
            summary.photo_results.append(self.process_photo(record))

    def run(self) -> RunSummary:
        """
        Stamp the uncategorized photos, then every album.

        The uncategorized photos file and the album directory must both be
        readable; a failure there always aborts the run.

        Returns:
            RunSummary with one result per processed photo
        """
        summary = RunSummary()

        misc_collection = load_misc(self.export_root)
        album_files = discover_album_files(self.export_root)

        self.process_photos(misc_collection.photos, summary)

        for album_file in album_files:
            try:
                album = load_album(album_file)
            except DateFixError as e:
                if self.fail_fast:
                    raise
                summary.album_errors.append(e)
                continue

            if self.verbose:
                print(f"Album: {album.name} ({len(album.photos)} photos)")
            self.process_photos(album.photos, summary)

        return summary


def main():
    """Main entry point for the script."""
    parser = argparse.ArgumentParser(
        description="Restore original capture dates in a Facebook data export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /path/to/facebook-export               # Stop at the first error
  %(prog)s /path/to/facebook-export --keep-going  # Stamp what can be stamped
        """,
    )

    parser.add_argument(
        "export_root", help="Top-level directory of the Facebook export"
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Record failures and continue instead of stopping at the first one",
    )

    parsed_arguments = parser.parse_args()

    try:
        fixer = FacebookDateFixer(
            parsed_arguments.export_root,
            fail_fast=not parsed_arguments.keep_going,
            verbose=True,
        )
        summary = fixer.run()
    except (ValueError, DateFixError) as error:
        print(f"Error: {error}", file=sys.stderr)
        sys.exit(1)

    print()
    print("=" * 60)
    print("SUMMARY:")
    print(f"Photos stamped: {summary.stamped_count}")
    print(f"Photos failed: {summary.failed_count}")
    print(f"Albums failed to load: {len(summary.album_errors)}")

    if summary.errors:
        print()
        print(f"\033[91mERRORS ENCOUNTERED ({len(summary.errors)}):\033[0m")
        for error in summary.errors:
            print(f"\033[91m  {error}\033[0m")

    sys.exit(0 if summary.succeeded else 1)


if __name__ == "__main__":
    main()
