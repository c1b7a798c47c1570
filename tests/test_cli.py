"""Tests for the command-line interface."""

import json

import pytest

from trackpick import cli
from trackpick.formatters import format_default, format_json_list
from trackpick.models import Selection


@pytest.fixture
def fake_ingest(monkeypatch, stream):
    def _ingest(path, config=None, caption_dir=None):
        if "missing" in path:
            raise FileNotFoundError(f"File not found: {path}")
        return Selection(
            media_path=path,
            video=[stream(0, codec_name="h264", width=1920, height=1080)],
            audio=[stream(1, "audio", codec_name="ac3", language="eng")],
            subtitle=[
                stream(3, "subtitle", codec_name="hdmv_pgs_subtitle", language="eng").with_caption_file(
                    "/tmp/movie.3.srt"
                )
            ],
        )

    monkeypatch.setattr(cli, "ingest_file", _ingest)


class TestCLI:
    """Test CLI output modes."""

    def test_default_listing(self, fake_ingest, capsys):
        assert cli.main(["/media/movie.mkv"]) == 0
        out = capsys.readouterr().out
        assert "File: movie.mkv" in out
        assert "## SUBTITLE (1)" in out
        assert "-> /tmp/movie.3.srt" in out

    def test_quiet(self, fake_ingest, capsys):
        assert cli.main(["-q", "/media/movie.mkv"]) == 0
        assert capsys.readouterr().out.strip() == "movie.mkv | v:0 | a:1 | s:3"

    def test_command(self, fake_ingest, capsys):
        assert cli.main(["--command", "/media/movie.mkv"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("ffmpeg ")
        assert "-map 1:0" in out

    def test_json_report(self, fake_ingest, tmp_path, capsys):
        report = tmp_path / "report.json"
        assert cli.main(["-q", "-o", str(report), "/media/movie.mkv"]) == 0
        data = json.loads(report.read_text(encoding="utf-8"))
        assert data[0]["subtitle"][0]["caption_file"] == "/tmp/movie.3.srt"

    def test_missing_file_sets_exit_code(self, fake_ingest, capsys):
        assert cli.main(["/media/missing.mkv", "/media/movie.mkv"]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_bad_config(self, fake_ingest, tmp_path, capsys):
        path = tmp_path / "rules.yaml"
        path.write_text("selection:\n  video:\n    - duration: avg\n", encoding="utf-8")
        assert cli.main(["-c", str(path), "/media/movie.mkv"]) == 2
        assert "duration" in capsys.readouterr().err

    def test_requires_files(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_status(self, capsys):
        assert cli.main(["--status"]) == 0
        assert "ffprobe" in capsys.readouterr().out


class TestDefaultFormatter:
    """Test the human-readable listing."""

    def test_skipped_extractions_reported(self, stream):
        selection = Selection(
            media_path="/media/movie.mkv",
            subtitle=[stream(2, "subtitle", codec_name="subrip", language="eng")],
            extraction_failures=[3],
        )

        out = format_default(selection)

        assert "Foreign audio search skipped streams [3]" in out

    def test_no_failure_line_when_clean(self, stream):
        out = format_default(Selection(media_path="/media/movie.mkv"))

        assert "skipped" not in out


class TestJsonFormatter:
    """Test the JSON selection report."""

    def test_report_lists_selections_in_order(self, stream):
        selections = [
            Selection(
                media_path=f"/media/{name}.mkv",
                subtitle=[stream(2, "subtitle", codec_name="subrip")],
                extraction_failures=[3],
                caption_failures={4: "frame 1 has no OCR text line"},
            )
            for name in ("a", "b")
        ]

        data = json.loads(format_json_list(selections))

        assert [d["media_path"] for d in data] == ["/media/a.mkv", "/media/b.mkv"]
        assert data[0]["subtitle"][0]["kind"] == "subtitle"
        assert data[0]["extraction_failures"] == [3]
        assert data[0]["caption_failures"] == {"4": "frame 1 has no OCR text line"}
