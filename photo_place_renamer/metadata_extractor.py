"""
Metadata extraction module for photo files.

This module reads the embedded EXIF container of a photo and normalizes
the parts the renamer needs: the GPS position and the capture timestamps.
A file without readable metadata is a normal input and yields an empty
record rather than an error.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple, Union

import exifread

# exifread field type codes
FIELD_TYPE_ASCII = 2
FIELD_TYPES_RATIONAL = (5, 10)

LATITUDE_TAG = 'GPS GPSLatitude'
LATITUDE_REF_TAG = 'GPS GPSLatitudeRef'
LONGITUDE_TAG = 'GPS GPSLongitude'
LONGITUDE_REF_TAG = 'GPS GPSLongitudeRef'

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
NORMALIZED_DATE_FORMAT = "%Y.%m.%d %H.%M.%S"

# Capture, digitized, modified
DATE_TAGS = ('EXIF DateTimeOriginal', 'EXIF DateTimeDigitized', 'Image DateTime')


class CoordinatePair(NamedTuple):
    """A position in decimal degrees."""
    latitude: float
    longitude: float

    @property
    def key(self) -> str:
        """Canonical cache key: both components at 6 decimal places."""
        return f"{self.latitude:.6f},{self.longitude:.6f}"


class CaptureRecord(NamedTuple):
    """Normalized metadata of a single file."""
    coordinates: Optional[CoordinatePair] = None
    dates: Tuple[str, ...] = ()
    metadata_found: bool = False

    @property
    def creation_date(self) -> Optional[str]:
        """Earliest normalized timestamp, or None when no field contributed."""
        if not self.dates:
            return None
        return min(self.dates)


def dms_to_decimal(values: Sequence[Any]) -> Optional[float]:
    """
    Convert a degrees/minutes/seconds triple to decimal degrees.

    Args:
        values: Three rational components

    Returns:
        deg + min/60 + sec/3600, or None if the triple is malformed
    """
    if len(values) != 3:
        return None
    try:
        degrees, minutes, seconds = (float(v) for v in values)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return degrees + minutes / 60.0 + seconds / 3600.0


def normalize_timestamp(value: str) -> Optional[str]:
    """
    Turn '2023:08:14 12:30:00' into '2023.08.14 12.30.00'.

    Returns:
        Normalized timestamp, or None for placeholders such as
        '    :  :     :  :  ' or '0000:00:00 00:00:00'
    """
    try:
        parsed = datetime.strptime(value.strip(), EXIF_DATE_FORMAT)
    except ValueError:
        return None
    return parsed.strftime(NORMALIZED_DATE_FORMAT)


class MetadataExtractor:
    """
    Extracts GPS coordinates and capture timestamps from photo files.

    Wraps exifread; only the typed value of a handful of tags is used.
    """

    def __init__(self):
        """Initialize the metadata extractor."""
        self.logger = logging.getLogger(__name__)

    def extract(self, file_path: Union[str, Path]) -> CaptureRecord:
        """
        Extract a normalized capture record from a file.

        Args:
            file_path: Path to the photo file

        Returns:
            CaptureRecord with optional coordinates and timestamps

        Raises:
            OSError: If the file cannot be opened
        """
        with open(file_path, 'rb') as f:
            try:
                tags = exifread.process_file(f, details=False)
            except Exception as e:
                self.logger.debug(f"Could not parse metadata container of {file_path}: {e}")
                return CaptureRecord()

        if not tags:
            self.logger.debug(f"No metadata found in {file_path}")
            return CaptureRecord()

        coordinates = self._get_coordinates(tags)
        dates = self._get_dates(tags)

        if coordinates:
            self.logger.debug(
                f"GPS found in {file_path}: ({coordinates.latitude:.6f}, {coordinates.longitude:.6f})"
            )
        else:
            self.logger.debug(f"No usable GPS data in {file_path}")

        return CaptureRecord(coordinates=coordinates, dates=dates, metadata_found=True)

    def _get_coordinates(self, tags: Dict[str, Any]) -> Optional[CoordinatePair]:
        """Both components or nothing; a partial position is not usable."""
        latitude = self._get_rational_triple(tags, LATITUDE_TAG)
        longitude = self._get_rational_triple(tags, LONGITUDE_TAG)
        if latitude is None or longitude is None:
            return None

        if self._get_text(tags, LATITUDE_REF_TAG) == 'S':
            latitude = -latitude
        if self._get_text(tags, LONGITUDE_REF_TAG) == 'W':
            longitude = -longitude

        return CoordinatePair(latitude, longitude)

    def _get_rational_triple(self, tags: Dict[str, Any], name: str) -> Optional[float]:
        tag = tags.get(name)
        if tag is None or getattr(tag, 'field_type', None) not in FIELD_TYPES_RATIONAL:
            return None

        values = getattr(tag, 'values', None)
        if not values:
            return None

        decimal = dms_to_decimal(values)
        if decimal is None:
            self.logger.debug(f"Malformed coordinate triple in '{name}': {values!r}")
        return decimal

    def _get_text(self, tags: Dict[str, Any], name: str) -> Optional[str]:
        tag = tags.get(name)
        if tag is None or getattr(tag, 'field_type', None) != FIELD_TYPE_ASCII:
            return None

        value = getattr(tag, 'values', None)
        if not isinstance(value, str):
            return None

        value = value.replace('\x00', '').strip()
        return value or None

    def _get_dates(self, tags: Dict[str, Any]) -> Tuple[str, ...]:
        dates = []
        for name in DATE_TAGS:
            value = self._get_text(tags, name)
            if value is None:
                continue
            normalized = normalize_timestamp(value)
            if normalized is None:
                self.logger.debug(f"Ignoring malformed timestamp in '{name}': {value!r}")
                continue
            if normalized not in dates:
                dates.append(normalized)
        return tuple(dates)
