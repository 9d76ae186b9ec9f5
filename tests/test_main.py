"""End-to-end tests for photo_place_renamer.main."""

import io
import json
import sys

import pytest
import requests

from photo_place_renamer.geocode_cache import GeocodeCache
from photo_place_renamer.logger import Logger
from photo_place_renamer.main import APPLY_TOKEN, PhotoRenamer, main, parse_args

from conftest import KRAKOW_KEY, FakeSession, date_tags, google_response, gps_tags


@pytest.fixture
def tagged_photos(fake_exif, photo_dir):
    """a.jpg: Kraków + date, b.jpg: date only, c.JPG: nothing readable."""
    fake_exif["a.jpg"] = {**gps_tags(), **date_tags(original="2023:08:14 12:30:00")}
    fake_exif["b.jpg"] = date_tags(original="2023:08:14 12:31:00")
    fake_exif["c.JPG"] = ValueError("not an image")
    return photo_dir


def make_renamer(cache, session, out, naming="sequence"):
    return PhotoRenamer("KEY", cache, naming=naming, session=session, logger=Logger("ERROR"), out=out)


class TestParseArgs:

    def test_preview_by_default(self):
        args = parse_args(["/photos", "KEY"])
        assert args.input_directory == "/photos"
        assert args.api_key == "KEY"
        assert args.apply_token is None
        assert args.naming == "sequence"

    def test_apply_token(self):
        assert parse_args(["/photos", "KEY", APPLY_TOKEN]).apply_token == "wykonaj"

    @pytest.mark.parametrize("argv", [[], ["/photos"]])
    def test_missing_arguments(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(argv)
        assert excinfo.value.code == 2
        assert "required" in capsys.readouterr().err


class TestPhotoRenamer:

    def test_preview(self, tagged_photos, cache_path):
        cache = GeocodeCache.load(cache_path)
        session = FakeSession()
        out = io.StringIO()

        renamed = make_renamer(cache, session, out).run(tagged_photos, apply_changes=False)

        assert renamed == 0
        assert sorted(p.name for p in tagged_photos.iterdir()) == [".hidden", "a.jpg", "b.jpg", "c.JPG"]
        lines = out.getvalue().splitlines()
        assert lines[:3] == [
            f"{tagged_photos / 'a.jpg'} -> {tagged_photos / '0001_2023.08.14 12.30.00_Kraków.jpg'}",
            f"{tagged_photos / 'b.jpg'} -> {tagged_photos / '0002_2023.08.14 12.31.00.jpg'}",
            f"{tagged_photos / 'c.JPG'} -> {tagged_photos / '0003.JPG'}",
        ]
        assert lines[3] == "Files without place: 2"
        assert lines[4:] == [
            f"\t{tagged_photos / 'b.jpg'} (no coordinates)",
            f"\t{tagged_photos / 'c.JPG'} (no metadata)",
        ]

    def test_cache_saved_before_renames(self, tagged_photos, cache_path):
        out = io.StringIO()
        make_renamer(GeocodeCache.load(cache_path), FakeSession(), out).run(tagged_photos)

        saved = json.loads(cache_path.read_text(encoding="utf-8"))
        assert saved == {"latlon": {KRAKOW_KEY: "Kraków"}}

    def test_apply(self, tagged_photos, cache_path):
        out = io.StringIO()
        renamed = make_renamer(GeocodeCache.load(cache_path), FakeSession(), out).run(
            tagged_photos, apply_changes=True)

        assert renamed == 3
        assert sorted(p.name for p in tagged_photos.iterdir()) == [
            ".hidden",
            "0001_2023.08.14 12.30.00_Kraków.jpg",
            "0002_2023.08.14 12.31.00.jpg",
            "0003.JPG",
        ]

    def test_second_run_uses_cache(self, fake_exif, photo_dir, cache_path):
        fake_exif["a.jpg"] = gps_tags()
        fake_exif["b.jpg"] = gps_tags()
        first = FakeSession()
        make_renamer(GeocodeCache.load(cache_path), first, io.StringIO()).run(photo_dir)
        assert len(first.urls) == 1

        second = FakeSession(error=AssertionError("network must not be used"))
        out = io.StringIO()
        make_renamer(GeocodeCache.load(cache_path), second, out).run(photo_dir)

        assert second.urls == []
        assert f"{photo_dir / '0002_Kraków.jpg'}" in out.getvalue()

    def test_failing_coordinate_not_retried(self, fake_exif, photo_dir, cache_path):
        fake_exif["a.jpg"] = gps_tags()
        first = FakeSession(body=google_response(status="ZERO_RESULTS"))
        out = io.StringIO()
        make_renamer(GeocodeCache.load(cache_path), first, out).run(photo_dir)

        assert f"\t{photo_dir / 'a.jpg'} (not found)" in out.getvalue().splitlines()

        second = FakeSession(error=AssertionError("network must not be used"))
        make_renamer(GeocodeCache.load(cache_path), second, io.StringIO()).run(photo_dir)
        assert second.urls == []

    def test_original_naming(self, tagged_photos, cache_path):
        out = io.StringIO()
        make_renamer(GeocodeCache.load(cache_path), FakeSession(), out, naming="original").run(
            tagged_photos, apply_changes=True)

        assert sorted(p.name for p in tagged_photos.iterdir()) == [".hidden", "a_Kraków.jpg", "b.jpg", "c.JPG"]
        assert f"{tagged_photos / 'b.jpg'} -> {tagged_photos / 'b.jpg'} (unchanged)" in out.getvalue()

    def test_transport_failure_aborts_without_saving(self, tagged_photos, cache_path):
        session = FakeSession(error=requests.ConnectionError("offline"))
        renamer = make_renamer(GeocodeCache.load(cache_path), session, io.StringIO())

        with pytest.raises(requests.ConnectionError):
            renamer.run(tagged_photos, apply_changes=True)

        assert not cache_path.exists()
        assert (tagged_photos / "a.jpg").exists()


class TestMain:

    @pytest.fixture
    def program_dir(self, tmp_path, monkeypatch):
        program = tmp_path / "bin"
        program.mkdir()
        monkeypatch.setattr(sys, "argv", [str(program / "photo-place-renamer")])
        return program

    def test_preview_exit_code(self, tagged_photos, program_dir, monkeypatch, capsys):
        monkeypatch.setattr(requests, "Session", FakeSession)

        with pytest.raises(SystemExit) as excinfo:
            main([str(tagged_photos), "KEY", "nie"])

        assert excinfo.value.code == 0
        assert "0001_2023.08.14 12.30.00_Kraków.jpg" in capsys.readouterr().out
        assert (tagged_photos / "a.jpg").exists()
        assert (program_dir / "cache.json").exists()

    def test_apply_token(self, tagged_photos, program_dir, monkeypatch):
        monkeypatch.setattr(requests, "Session", FakeSession)

        with pytest.raises(SystemExit) as excinfo:
            main([str(tagged_photos), "KEY", APPLY_TOKEN])

        assert excinfo.value.code == 0
        assert (tagged_photos / "0003.JPG").exists()

    def test_fatal_error(self, tmp_path, program_dir, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "missing"), "KEY"])

        assert excinfo.value.code == 1
        assert "Fatal error" in capsys.readouterr().err
