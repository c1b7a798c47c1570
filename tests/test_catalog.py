"""Tests for the catalog builder."""

import pytest

from trackpick.catalog import build_catalog, parse_stream
from trackpick.exceptions import MalformedProbeData
from trackpick.models import StreamKind


class TestBuildCatalog:
    """Test build_catalog."""

    def test_partition_by_kind(self, probe_data):
        """Streams land in their kind's set, source order preserved."""
        catalog = build_catalog(probe_data)

        assert [s.index for s in catalog.video] == [0, 1]
        assert [s.index for s in catalog.audio] == [2, 3, 4]
        assert [s.index for s in catalog.subtitle] == [5, 6, 7, 8]
        assert catalog.nb_streams == 9

    def test_attachments_ignored(self, probe_data):
        catalog = build_catalog(probe_data)
        all_indices = [s.index for s in catalog.video + catalog.audio + catalog.subtitle]
        assert 9 not in all_indices

    def test_stable_partition_of_interleaved_streams(self):
        probe = {
            "streams": [
                {"index": 0, "codec_type": "subtitle", "codec_name": "subrip"},
                {"index": 1, "codec_type": "audio", "codec_name": "aac"},
                {"index": 2, "codec_type": "subtitle", "codec_name": "ass"},
                {"index": 3, "codec_type": "audio", "codec_name": "ac3"},
            ]
        }
        catalog = build_catalog(probe)
        assert [s.index for s in catalog.subtitle] == [0, 2]
        assert [s.index for s in catalog.audio] == [1, 3]
        assert catalog.video == []

    def test_format_block_kept(self, probe_data):
        catalog = build_catalog(probe_data)
        assert catalog.format["format_name"] == "matroska,webm"

    def test_missing_stream_list(self):
        with pytest.raises(MalformedProbeData):
            build_catalog({"format": {}})

    def test_stream_list_not_a_list(self):
        with pytest.raises(MalformedProbeData):
            build_catalog({"streams": {"index": 0}})

    def test_not_a_mapping(self):
        with pytest.raises(MalformedProbeData):
            build_catalog(None)

    def test_stream_without_index(self):
        with pytest.raises(MalformedProbeData):
            build_catalog({"streams": [{"codec_type": "video"}]})

    def test_duplicate_index(self):
        probe = {
            "streams": [
                {"index": 1, "codec_type": "video"},
                {"index": 1, "codec_type": "audio"},
            ]
        }
        with pytest.raises(MalformedProbeData, match="duplicate"):
            build_catalog(probe)

    def test_empty_stream_list(self):
        catalog = build_catalog({"streams": []})
        assert catalog.nb_streams == 0


class TestParseStream:
    """Test per-stream field normalization."""

    def test_numeric_fields(self):
        stream = parse_stream(
            {"index": 3, "codec_name": "hevc", "width": 3840, "height": "2160", "duration": "5025.3"},
            StreamKind.VIDEO,
        )
        assert stream.width == 3840
        assert stream.height == 2160
        assert stream.duration == pytest.approx(5025.3)

    def test_unparsable_duration_is_undefined(self):
        stream = parse_stream({"index": 0, "duration": "N/A"}, StreamKind.VIDEO)
        assert stream.duration is None
        assert stream.comparable_duration is None

    def test_nan_duration_is_undefined(self):
        stream = parse_stream({"index": 0, "duration": "nan"}, StreamKind.VIDEO)
        assert stream.duration is None

    def test_frame_count_tag_fallback(self):
        stream = parse_stream(
            {"index": 0, "tags": {"NUMBER_OF_FRAMES": "1440"}}, StreamKind.VIDEO
        )
        assert stream.duration is None
        assert stream.frame_count == 1440
        assert stream.comparable_duration == 1440.0

    def test_language_suffixed_frame_count(self):
        stream = parse_stream(
            {"index": 0, "tags": {"NUMBER_OF_FRAMES-eng": "99"}}, StreamKind.VIDEO
        )
        assert stream.frame_count == 99

    def test_declared_duration_wins(self):
        stream = parse_stream(
            {"index": 0, "duration": "12.5", "tags": {"NUMBER_OF_FRAMES": "300"}},
            StreamKind.VIDEO,
        )
        assert stream.comparable_duration == 12.5

    def test_language_and_title_from_tags(self):
        stream = parse_stream(
            {"index": 5, "codec_name": "subrip", "tags": {"language": "eng", "title": "Forced"}},
            StreamKind.SUBTITLE,
        )
        assert stream.language == "eng"
        assert stream.title == "Forced"

    def test_boolean_index_rejected(self):
        with pytest.raises(MalformedProbeData):
            parse_stream({"index": True}, StreamKind.VIDEO)
