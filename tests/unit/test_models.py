"""Tests for all Pydantic data models."""

import pytest
from pydantic import ValidationError

from clipgraph.models.captions import Caption, CaptionTrackConfig
from clipgraph.models.codecs import CompatibilityReport, VideoCodecOptions
from clipgraph.models.command import CompiledCommand, InputBinding
from clipgraph.models.errors import (
    CaptionError,
    ClipgraphError,
    CodecError,
    CompositionError,
    ErrorResponse,
)
from clipgraph.models.layers import AudioLayer, TextLayer, VideoLayer
from clipgraph.models.options import GlobalOptions, TrimRange
from clipgraph.models.styles import AnimationType, Position, TextStyle
from clipgraph.models.transitions import Direction, Easing, TransitionSpec, TransitionType

# --- Layers ---


class TestLayers:
    def test_valid_video(self):
        layer = VideoLayer(source="a.mp4", start_time=2, duration=5)
        assert layer.kind == "video"
        assert layer.end_time == 7

    def test_open_ended_layer_has_no_end(self):
        assert VideoLayer(source="a.mp4").end_time is None

    def test_zero_duration_rejected(self):
        with pytest.raises(ValidationError):
            VideoLayer(source="a.mp4", duration=0)

    def test_negative_start_rejected(self):
        with pytest.raises(ValidationError):
            AudioLayer(source="a.mp3", start_time=-1)

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            VideoLayer(source="a.mp4", opacity=0.5)

    def test_trim_order(self):
        with pytest.raises(ValidationError):
            VideoLayer(source="a.mp4", trim_start=5, trim_end=2)

    def test_position_pair_coerced(self):
        layer = VideoLayer(source="a.mp4", position=(100, "50%"))
        assert layer.position == Position(x=100, y="50%")

    def test_position_pair_wrong_length(self):
        with pytest.raises(ValidationError):
            VideoLayer(source="a.mp4", position=(1, 2, 3))

    def test_bad_percentage_rejected(self):
        with pytest.raises(ValidationError):
            Position(x="half", y=0)

    def test_layers_are_frozen(self):
        layer = TextLayer(source="hi", duration=2)
        with pytest.raises(ValidationError):
            layer.start_time = 4


# --- Enums ---


class TestDegradingEnums:
    def test_unknown_transition_is_fade(self):
        assert TransitionType("sparkle") == TransitionType.FADE

    def test_unknown_easing_is_linear(self):
        assert Easing("bouncy") == Easing.LINEAR

    def test_unknown_direction_is_right(self):
        assert Direction("diagonal") == Direction.RIGHT

    def test_unknown_animation_is_fade_in(self):
        assert AnimationType("spin") == AnimationType.FADE_IN

    def test_spec_accepts_unknown_type(self):
        assert TransitionSpec(type="warp").type == TransitionType.FADE


# --- Styles ---


class TestTextStyle:
    def test_merged_overrides_only_set_fields(self):
        base = TextStyle(font_size=32, color="#ffffff", stroke_width=2)
        merged = base.merged(TextStyle(color="#ff0000"))
        assert merged.font_size == 32
        assert merged.color == "#ff0000"
        assert merged.stroke_width == 2

    def test_merged_with_none(self):
        base = TextStyle(font_size=10)
        assert base.merged(None) is base


# --- Options ---


class TestGlobalOptions:
    def test_aspect_ratio_pattern(self):
        with pytest.raises(ValidationError):
            GlobalOptions(aspect_ratio="wide")

    def test_resolution_positive(self):
        with pytest.raises(ValidationError):
            GlobalOptions(resolution=(0, 1080))

    def test_trim_range(self):
        with pytest.raises(ValidationError):
            TrimRange(start=5, end=5)


# --- Captions ---


class TestCaption:
    def test_duration(self):
        assert Caption(text="hi", start_time=1, end_time=3.5).duration == 2.5

    def test_end_before_start(self):
        with pytest.raises(ValidationError):
            Caption(text="hi", start_time=3, end_time=1)

    def test_track_language_required(self):
        with pytest.raises(ValidationError):
            CaptionTrackConfig(language="")


# --- Codecs ---


class TestCodecModels:
    def test_incompatible_report_needs_alternatives(self):
        with pytest.raises(ValidationError):
            CompatibilityReport(compatible=False, warnings=["nope"])

    def test_compatible_report(self):
        report = CompatibilityReport(compatible=True)
        assert report.alternatives == []

    def test_crf_range(self):
        with pytest.raises(ValidationError):
            VideoCodecOptions(crf=80)


# --- Command ---


class TestCompiledCommand:
    def test_input_args(self):
        binding = InputBinding(index=0, source="a.png", options=["-loop", "1"])
        assert binding.to_args() == ["-loop", "1", "-i", "a.png"]

    def test_to_string_quotes(self):
        cmd = CompiledCommand(argv=["ffmpeg", "-i", "my clip.mp4", "out.mp4"])
        assert cmd.to_string() == "ffmpeg -i 'my clip.mp4' out.mp4"


# --- Errors ---


class TestErrors:
    def test_hierarchy(self):
        for error_type in (CompositionError, CaptionError, CodecError):
            assert issubclass(error_type, ClipgraphError)

    def test_components(self):
        assert CompositionError("x").component == "composition"
        assert CaptionError("x").component == "captions"
        assert CodecError("x").component == "codecs"

    def test_error_response(self):
        exc = CaptionError("Track not found: fr", details={"tracks": ["en"]})
        response = ErrorResponse.from_exception(exc, guidance="Add the track first.")
        assert response.error_type == "CaptionError"
        assert response.component == "captions"
        assert response.details == {"tracks": ["en"]}
        assert response.actionable_guidance == "Add the track first."
