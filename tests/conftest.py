"""Pytest configuration and fixtures."""

import json
from fractions import Fraction
from pathlib import Path
from typing import Dict, List, Optional

import exifread
import pytest

ASCII = 2
RATIONAL = 5
SHORT = 3

KRAKOW_LAT = [Fraction(50), Fraction(3), Fraction(430092, 10000)]
KRAKOW_LON = [Fraction(19), Fraction(56), Fraction(14928, 1000)]
KRAKOW_KEY = "50.061947,19.937480"


class FakeTag:
    """Stand-in for exifread's IfdTag: only the typed value is used."""

    def __init__(self, field_type: int, values):
        self.field_type = field_type
        self.values = values

    def __repr__(self):
        return f"FakeTag({self.field_type}, {self.values!r})"


def gps_tags(lat=KRAKOW_LAT, lon=KRAKOW_LON, lat_ref="N", lon_ref="E") -> Dict[str, FakeTag]:
    tags = {}
    if lat is not None:
        tags["GPS GPSLatitude"] = FakeTag(RATIONAL, lat)
        tags["GPS GPSLatitudeRef"] = FakeTag(ASCII, lat_ref)
    if lon is not None:
        tags["GPS GPSLongitude"] = FakeTag(RATIONAL, lon)
        tags["GPS GPSLongitudeRef"] = FakeTag(ASCII, lon_ref)
    return tags


def date_tags(original=None, digitized=None, modified=None) -> Dict[str, FakeTag]:
    tags = {}
    for name, value in (("EXIF DateTimeOriginal", original),
                        ("EXIF DateTimeDigitized", digitized),
                        ("Image DateTime", modified)):
        if value is not None:
            tags[name] = FakeTag(ASCII, value)
    return tags


def google_response(*components: dict, status: str = "OK") -> str:
    return json.dumps({
        "results": [{"address_components": list(components)}] if components else [],
        "status": status,
    })


def municipality(long_name: Optional[str] = "Kraków", short_name: Optional[str] = "Kraków") -> dict:
    component = {"types": ["administrative_area_level_3", "political"]}
    if long_name is not None:
        component["long_name"] = long_name
    if short_name is not None:
        component["short_name"] = short_name
    return component


class FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code


class FakeSession:
    """Records requested URLs and answers with canned bodies."""

    def __init__(self, body: str = None, responses: Dict[str, FakeResponse] = None,
                 error: Exception = None):
        self.body = body if body is not None else google_response(municipality())
        self.responses = responses or {}
        self.error = error
        self.urls: List[str] = []

    def get(self, url: str, **kwargs):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        for key, response in self.responses.items():
            if f"latlng={key}&" in url:
                return response
        return FakeResponse(self.body)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_exif(monkeypatch):
    """Serve exif tags by file name instead of parsing the file.

    Returns the dict to fill: file name -> tags, or an exception to raise.
    """
    by_name: Dict[str, object] = {}

    def process_file(fh, *args, **kwargs):
        entry = by_name.get(Path(fh.name).name, {})
        if isinstance(entry, Exception):
            raise entry
        return entry

    monkeypatch.setattr(exifread, "process_file", process_file)
    return by_name


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    """A directory with three photos and a hidden file.

    Structure:
        photos/
        ├── .hidden
        ├── a.jpg
        ├── b.jpg
        └── c.JPG
    """
    photos = tmp_path / "photos"
    photos.mkdir()
    for name in ("a.jpg", "b.jpg", "c.JPG", ".hidden"):
        (photos / name).write_bytes(b"fake jpg data " + name.encode())
    return photos


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "cache.json"
