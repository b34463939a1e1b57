"""Property-based tests for captions (Properties 7-9)."""

import pytest
from hypothesis import given, settings

from clipgraph.captions.compositor import CaptionCompositor
from clipgraph.captions.timing import format_srt_time, parse_timestamp
from clipgraph.timeline.composition import Composition
from tests.property.conftest import generate_captions

pytestmark = pytest.mark.property


def _with_captions(captions) -> Composition:
    comp = Composition().add_caption_track("en")
    for text, start, end in captions:
        comp = comp.add_caption("en", text, start, end)
    return comp


class TestCaptionProperties:
    @given(captions=generate_captions())
    @settings(max_examples=30, deadline=5000)
    def test_property_7_srt_round_trip(self, captions):
        """Property 7: Exported SRT parses back to the same captions in start order."""
        comp = _with_captions(captions)
        parsed = CaptionCompositor().parse(comp.export_captions("en"), "srt")
        expected = sorted(captions, key=lambda c: c[1])
        assert [(c.text, c.start_time, c.end_time) for c in parsed] == expected

    @given(captions=generate_captions())
    @settings(max_examples=30, deadline=5000)
    def test_property_8_track_sorted_by_start(self, captions):
        """Property 8: Track views list captions in non-decreasing start order."""
        starts = [c.start_time for c in _with_captions(captions).get_caption_track("en").captions]
        assert starts == sorted(starts)

    @given(captions=generate_captions())
    @settings(max_examples=30, deadline=5000)
    def test_property_9_timestamps_round_trip(self, captions):
        """Property 9: Millisecond timestamps survive formatting and parsing."""
        for _, start, end in captions:
            assert parse_timestamp(format_srt_time(start)) == start
            assert parse_timestamp(format_srt_time(end)) == end
