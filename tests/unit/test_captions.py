"""Tests for caption timing, export, import and drawtext rendering."""

import json

import pytest

from clipgraph.captions.compositor import CaptionCompositor
from clipgraph.captions.timing import (
    format_ass_time,
    format_srt_time,
    format_vtt_time,
    parse_timestamp,
    reading_duration,
    word_timings,
)
from clipgraph.models.captions import CaptionTrack
from clipgraph.models.errors import CaptionError
from clipgraph.models.styles import Position, TextAnimation, TextStyle
from clipgraph.rendering.expressions import escape_text, normalize_color, resolve_position


@pytest.fixture
def compositor(settings):
    return CaptionCompositor(settings)


class TestTiming:
    def test_srt_time(self):
        assert format_srt_time(3661.5) == "01:01:01,500"

    def test_vtt_time(self):
        assert format_vtt_time(1.25) == "00:00:01.250"

    def test_ass_time(self):
        assert format_ass_time(3661.5) == "1:01:01.50"

    def test_rounds_to_milliseconds(self):
        assert format_srt_time(0.0004) == "00:00:00,000"
        assert format_srt_time(2.9996) == "00:00:03,000"

    def test_parse(self):
        assert parse_timestamp("00:00:01,500") == 1.5
        assert parse_timestamp("01:02:03.004") == 3723.004

    def test_parse_short_vtt_form(self):
        assert parse_timestamp("00:01.250") == 1.25

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_timestamp("1 second")

    def test_reading_duration(self):
        assert reading_duration("one two three four five six seven eight nine ten") == 3.0
        assert reading_duration("hi") == 1.0
        assert reading_duration("word " * 100) == 7.0

    def test_word_timings(self):
        assert word_timings("a b", 1, words_per_second=2) == [("a", 1, 1.5), ("b", 1.5, 2.0)]


class TestExport:
    def test_srt_per_track(self, bilingual):
        expected = "1\n00:00:01,000 --> 00:00:03,000\nHello there\n\n"
        assert bilingual.export_captions("en") == expected
        assert bilingual.export_captions("es") == "1\n00:00:01,000 --> 00:00:03,000\nHola\n\n"

    def test_vtt(self, bilingual):
        assert bilingual.export_captions("en", "vtt") == (
            "WEBVTT\n\n00:00:01.000 --> 00:00:03.000\nHello there\n\n"
        )

    def test_ass(self, bilingual):
        content = bilingual.export_captions("en", "ass")
        assert content.startswith("[Script Info]\n")
        assert "Style: Default,Arial,32," in content
        assert content.endswith(
            "Dialogue: 0,0:00:01.00,0:00:03.00,Default,,0,0,0,,Hello there\n"
        )

    def test_json(self, bilingual):
        data = json.loads(bilingual.export_captions("es", "json"))
        assert data["language"] == "es"
        assert data["language_name"] == "Spanish"
        assert data["captions"][0]["text"] == "Hola"

    def test_numbering_follows_start_order(self, bilingual):
        comp = bilingual.add_caption("en", "Intro", 0, 0.5)
        lines = comp.export_captions("en").split("\n")
        assert lines[:3] == ["1", "00:00:00,000 --> 00:00:00,500", "Intro"]
        assert lines[4] == "2"

    def test_unsupported_format(self, bilingual):
        with pytest.raises(CaptionError, match="Unsupported caption format"):
            bilingual.export_captions("en", "sbv")


class TestImport:
    def test_srt_round_trip(self, compositor, bilingual):
        srt = bilingual.export_captions("en")
        captions = compositor.parse(srt, "srt")
        assert [(c.text, c.start_time, c.end_time) for c in captions] == [("Hello there", 1, 3)]

    def test_vtt_skips_header_and_notes(self, compositor):
        vtt = (
            "WEBVTT\n\n"
            "NOTE written by hand\n\n"
            "00:01.000 --> 00:02.000 align:start\n"
            "First line\nSecond line\n"
        )
        captions = compositor.parse(vtt, "vtt")
        assert len(captions) == 1
        assert captions[0].text == "First line\nSecond line"
        assert captions[0].end_time == 2

    def test_windows_line_endings(self, compositor):
        srt = "1\r\n00:00:01,000 --> 00:00:02,000\r\nHi\r\n\r\n"
        assert compositor.parse(srt, "srt")[0].text == "Hi"

    def test_bad_cue(self, compositor):
        with pytest.raises(CaptionError, match="Invalid srt cue"):
            compositor.parse("1\nnever --> later\nHi\n", "srt")

    def test_ass_import_unsupported(self, compositor):
        with pytest.raises(CaptionError):
            compositor.parse("[Script Info]", "ass")

    def test_json_round_trip(self, compositor, bilingual):
        content = bilingual.export_captions("en", "json")
        assert compositor.parse(content, "json")[0].text == "Hello there"

    def test_invalid_json(self, compositor):
        with pytest.raises(CaptionError, match="Invalid caption JSON"):
            compositor.parse('{"captions": "nope"}', "json")


class TestTracks:
    def test_track_view(self, bilingual):
        track = bilingual.get_caption_track("en")
        assert track.language_name == "English"
        assert [c.id for c in track.captions] == ["en-1"]

    def test_ids_follow_start_order(self, bilingual):
        comp = bilingual.add_caption("en", "Intro", 0, 0.5)
        track = comp.get_caption_track("en")
        assert [(c.id, c.text) for c in track.captions] == [
            ("en-1", "Intro"),
            ("en-2", "Hello there"),
        ]

    def test_tracks_in_registration_order(self, bilingual):
        assert [t.language for t in bilingual.caption_tracks()] == ["en", "es"]

    def test_statistics(self, compositor, bilingual):
        stats = compositor.statistics(bilingual.get_caption_track("en"))
        assert stats.caption_count == 1
        assert stats.total_duration == 2
        assert stats.average_duration == 2
        assert stats.words_per_minute == pytest.approx(60)

    def test_statistics_empty(self, compositor):
        stats = compositor.statistics(CaptionTrack(id="en", language="en"))
        assert stats.caption_count == 0
        assert stats.words_per_minute == 0


class TestDrawtext:
    def test_plain(self, compositor):
        node = compositor.drawtext("Hi", TextStyle(font_size=30), "top-left", 1, 3)
        assert node == (
            "drawtext=text='Hi':fontsize=30:fontcolor=white:x=50:y=50:enable='between(t,1,3)'"
        )

    def test_custom_margin(self, compositor):
        node = compositor.drawtext("Hi", TextStyle(), "bottom-right", 0, 2, margin=10)
        assert "x=w-text_w-10:y=h-text_h-10" in node

    def test_open_ended(self, compositor):
        assert "enable=" not in compositor.drawtext("Hi", TextStyle(), "center", 0, None)
        assert "enable='gte(t,4)'" in compositor.drawtext("Hi", TextStyle(), "center", 4, None)

    def test_box_and_shadow(self, compositor):
        style = TextStyle(background_color="rgba(0,0,0,0.8)", padding=8, shadow_x=3)
        node = compositor.drawtext("Hi", style, "center", 0, 1)
        assert "box=1:boxcolor=0x000000@0.8:boxborderw=8" in node
        assert "shadowcolor=black:shadowx=3:shadowy=2" in node

    def test_fade_in(self, compositor):
        animation = TextAnimation(type="fade-in", duration=0.5)
        node = compositor.drawtext("Hi", TextStyle(), "center", 1, 3, animation)
        assert "alpha='if(lt(t,1),0,if(lt(t,1.5),(t-1)/0.5,1))'" in node

    def test_animation_clamped_to_window(self, compositor):
        animation = TextAnimation(type="fade-out", duration=5)
        node = compositor.drawtext("Hi", TextStyle(), "center", 0, 2, animation)
        assert "alpha='if(lt(t,0),1,if(lt(t,2),(2-t)/2,0))'" in node

    def test_slide_in(self, compositor):
        animation = TextAnimation(type="slide-in", duration=1)
        node = compositor.drawtext("Hi", TextStyle(), "center", 0, 3, animation)
        assert "x='if(lt(t,1),-text_w+" in node

    def test_zoom_in(self, compositor):
        animation = TextAnimation(type="zoom-in", duration=1)
        node = compositor.drawtext("Hi", TextStyle(font_size=40), "center", 0, 3, animation)
        assert "fontsize='if(lt(t,1),max(1,40*max(t-0,0)/1),40)'" in node

    def test_typewriter(self, compositor):
        animation = TextAnimation(type="typewriter", duration=3)
        node = compositor.drawtext("abc", TextStyle(), "center", 0, 5, animation)
        parts = node.split(",drawtext=")
        assert len(parts) == 3
        assert "text='a'" in parts[0]
        assert "enable='gte(t,0)*lt(t,1)'" in parts[0]
        assert "text='abc'" in parts[2]
        assert parts[2].endswith("enable='between(t,2,5)'")

    def test_typewriter_steps_capped(self, compositor, settings):
        animation = TextAnimation(type="typewriter", duration=2)
        node = compositor.drawtext("x" * 100, TextStyle(), "center", 0, 4, animation)
        assert node.count("drawtext=") == settings.typewriter_max_steps

    def test_caption_track_style(self, compositor, bilingual):
        layer = bilingual.layers[1]
        track = bilingual.options.caption_tracks[0]
        node = compositor.text_filter(layer, track)
        assert "font='Arial'" in node
        assert "y=h-text_h-50" in node


class TestExpressions:
    def test_escape(self):
        assert escape_text("It's 50%: ok") == "It\u2019s 50\\%\\: ok"

    def test_apostrophe_keeps_quoted_value_closed(self):
        escaped = escape_text("Don't stop")
        assert "'" not in escaped
        assert escaped == "Don\u2019t stop"

    def test_colors(self):
        assert normalize_color("#FFAA00") == "0xffaa00"
        assert normalize_color("rgba(0,0,0,0.5)") == "0x000000@0.5"
        assert normalize_color("red") == "red"
        assert normalize_color("#ffffff", opacity=0.5) == "0xffffff@0.5"

    def test_named_positions(self):
        assert resolve_position("center", 20) == ("(W-w)/2", "(H-h)/2")
        assert resolve_position("bottom-right", 20) == ("W-w-20", "H-h-20")

    def test_unknown_position_is_center(self):
        assert resolve_position("middle-ish", 20) == ("(W-w)/2", "(H-h)/2")

    def test_explicit_position(self):
        position = Position(x="50%", y=100, anchor="center")
        assert resolve_position(position, 20) == ("(W*0.5)-w/2", "100-h/2")
