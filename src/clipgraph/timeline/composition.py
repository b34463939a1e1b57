"""The Composition value: an immutable description of one output video."""

import json
import logging
import re
from collections.abc import Callable, Iterable
from math import gcd

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from clipgraph.captions.compositor import CaptionCompositor
from clipgraph.captions.presets import CAPTION_PRESETS, WORD_HIGHLIGHT_PRESETS
from clipgraph.captions.timing import reading_duration, sequence_times, word_timings
from clipgraph.codecs.resolver import CodecResolver
from clipgraph.config import get_settings
from clipgraph.models.captions import CaptionTrack, CaptionTrackConfig, SubtitleFormat
from clipgraph.models.codecs import (
    AudioCodecOptions,
    AudioCodecSettings,
    CodecConfiguration,
    CompatibilityReport,
    HardwareAcceleration,
    VideoCodecOptions,
    VideoCodecSettings,
)
from clipgraph.models.command import CompiledCommand
from clipgraph.models.errors import CaptionError, CompositionError
from clipgraph.models.layers import (
    AudioLayer,
    FilterLayer,
    ImageLayer,
    Layer,
    TextLayer,
    TransitionMarkerLayer,
    VideoLayer,
)
from clipgraph.models.options import (
    CropRegion,
    GlobalOptions,
    PlatformValidation,
    RenderOptions,
    TrimRange,
)
from clipgraph.models.styles import (
    NAMED_POSITIONS,
    AnimationType,
    AudioStyle,
    Ducking,
    Position,
    TextAnimation,
    TextStyle,
)
from clipgraph.models.transitions import TransitionSpec
from clipgraph.rendering.ffmpeg_builder import FFmpegCommandBuilder, resolve_canvas
from clipgraph.transitions.resolver import TRANSITION_PRESETS, TransitionResolver

logger = logging.getLogger(__name__)

PLATFORM_ASPECT_RATIOS = {
    "tiktok": "9:16",
    "instagram": "1:1",
    "youtube": "16:9",
    "twitter": "16:9",
    "linkedin": "16:9",
}

_CAPTION_ANIMATIONS = {
    "fade": AnimationType.FADE_IN,
    "slide": AnimationType.SLIDE_IN,
    "scale": AnimationType.ZOOM_IN,
    "bounce": AnimationType.ZOOM_IN,
    "pulse": AnimationType.ZOOM_IN,
}

_WORD_CLEANUP = re.compile(r"[^\w\s!?.,']")

# Approximate horizontal advance per highlighted word, in pixels
_WORD_SPACING = 120


def _validation_details(e: ValidationError) -> dict:
    return {"errors": e.errors(include_url=False, include_context=False, include_input=False)}


def _build(model_cls, **fields):
    """Construct a model, turning validation failures into CompositionError."""
    try:
        return model_cls(**fields)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or model_cls.__name__
        raise CompositionError(
            f"Invalid {model_cls.__name__} ({location}): {first['msg']}",
            details=_validation_details(e),
        )


def _check_timing(start_time: float, duration: float | None) -> None:
    if duration is not None and duration <= 0:
        raise CompositionError(
            "Layer duration must be greater than 0", details={"duration": duration}
        )
    if start_time < 0:
        raise CompositionError(
            "Layer start time must be non-negative", details={"start_time": start_time}
        )


def _animation(name: str | None, duration: float) -> TextAnimation | None:
    if name is None or name in ("none", "instant"):
        return None
    kind = _CAPTION_ANIMATIONS.get(name, name)
    return TextAnimation(type=AnimationType(kind), duration=duration)


class Composition(BaseModel):
    """An ordered set of layers plus output-wide options.

    Compositions are persistent values. Every ``add_*``/``set_*`` method
    returns a new Composition whose layer tuple shares all existing layer
    objects with the original; the original is never changed::

        base = Composition().add_video("intro.mp4", duration=10)
        titled = base.add_text("Hello", start_time=1)
        assert len(base.layers) == 1 and len(titled.layers) == 2
    """

    model_config = ConfigDict(frozen=True)

    layers: tuple[Layer, ...] = ()
    options: GlobalOptions = Field(default_factory=GlobalOptions)

    # Internal copy helpers

    def _append(self, *layers) -> "Composition":
        return self.model_copy(update={"layers": self.layers + tuple(layers)})

    def _with_options(self, **update) -> "Composition":
        options = _build(GlobalOptions, **{**dict(self.options), **update})
        return self.model_copy(update={"options": options})

    # Layers

    def add_video(
        self,
        path: str,
        *,
        start_time: float = 0,
        duration: float | None = None,
        position=None,
        margin: int | None = None,
        style=None,
        trim_start: float | None = None,
        trim_end: float | None = None,
        muted: bool = False,
        volume: float | None = None,
        z_order: int | None = None,
    ) -> "Composition":
        _check_timing(start_time, duration)
        return self._append(
            _build(
                VideoLayer,
                source=path,
                start_time=start_time,
                duration=duration,
                position=position,
                margin=margin,
                style=style,
                trim_start=trim_start,
                trim_end=trim_end,
                muted=muted,
                volume=volume,
                z_order=z_order,
            )
        )

    def add_audio(
        self,
        path: str,
        *,
        start_time: float = 0,
        duration: float | None = None,
        style=None,
        trim_start: float | None = None,
        trim_end: float | None = None,
        loop: bool = False,
        z_order: int | None = None,
    ) -> "Composition":
        _check_timing(start_time, duration)
        return self._append(
            _build(
                AudioLayer,
                source=path,
                start_time=start_time,
                duration=duration,
                style=style,
                trim_start=trim_start,
                trim_end=trim_end,
                loop=loop,
                z_order=z_order,
            )
        )

    def add_image(
        self,
        path: str,
        *,
        start_time: float = 0,
        duration: float | str | None = None,
        position=None,
        margin: int | None = None,
        style=None,
        z_order: int | None = None,
    ) -> "Composition":
        """Add a still image. ``duration="full"`` keeps it up until the end."""
        if duration == "full":
            duration = None
        elif duration is None:
            duration = get_settings().default_image_duration
        _check_timing(start_time, duration)
        return self._append(
            _build(
                ImageLayer,
                source=path,
                start_time=start_time,
                duration=duration,
                position=position,
                margin=margin,
                style=style,
                z_order=z_order,
            )
        )

    def add_text(
        self,
        text: str,
        *,
        start_time: float = 0,
        duration: float | None = None,
        position="center",
        style=None,
        animation=None,
        z_order: int | None = None,
    ) -> "Composition":
        if duration is None:
            duration = get_settings().default_text_duration
        _check_timing(start_time, duration)
        return self._append(
            _build(
                TextLayer,
                source=text,
                start_time=start_time,
                duration=duration,
                position=position,
                style=style,
                animation=animation,
                z_order=z_order,
            )
        )

    def add_filter(
        self,
        name: str,
        options: dict | None = None,
        *,
        start_time: float = 0,
        duration: float | None = None,
        z_order: int | None = None,
    ) -> "Composition":
        _check_timing(start_time, duration)
        return self._append(
            _build(
                FilterLayer,
                source=name,
                options=options or {},
                start_time=start_time,
                duration=duration,
                z_order=z_order,
            )
        )

    def add_watermark(
        self,
        path: str,
        position="bottom-right",
        opacity: float | None = None,
        scale: float | None = None,
    ) -> "Composition":
        """Overlay an image for the whole composition, inset from a corner."""
        style = None
        if opacity is not None or scale is not None:
            style = {"opacity": opacity, "scale": scale}
        return self.add_image(path, duration="full", position=position, style=style)

    def duck_audio(self, background: str, **ducking) -> "Composition":
        """Attach ducking to every audio layer playing ``background``.

        ``ducking`` holds the fields of :class:`Ducking`. A sidechain voice
        may be added after this call; it only has to be present at compile
        time.
        """
        spec = _build(Ducking, **ducking)
        targets = [
            index
            for index, layer in enumerate(self.layers)
            if isinstance(layer, AudioLayer) and layer.source == background
        ]
        if not targets:
            raise CompositionError(
                f"No audio layer plays {background}", details={"background": background}
            )
        layers = list(self.layers)
        for index in targets:
            style = layers[index].style or AudioStyle()
            layers[index] = layers[index].model_copy(
                update={"style": style.model_copy(update={"ducking": spec})}
            )
        return self.model_copy(update={"layers": tuple(layers)})

    def _transition_spec(self, transition, duration=None, easing=None, direction=None):
        if isinstance(transition, TransitionSpec):
            fields = dict(transition)
        elif isinstance(transition, str) and transition in TRANSITION_PRESETS:
            fields = dict(TRANSITION_PRESETS[transition])
        else:
            fields = {"type": transition, "duration": get_settings().default_transition_duration}
        overrides = {"duration": duration, "easing": easing, "direction": direction}
        fields.update({k: v for k, v in overrides.items() if v is not None})
        return _build(TransitionSpec, **fields)

    def add_transition(
        self,
        transition: TransitionSpec | str = "fade",
        duration: float | None = None,
        easing=None,
        direction=None,
    ) -> "Composition":
        """Request a transition into the next video or image layer added.

        ``transition`` may be a spec, a preset name or a transition type.
        """
        spec = self._transition_spec(transition, duration, easing, direction)
        return self._append(TransitionMarkerLayer(transition=spec))

    # Global options

    def set_transition(
        self,
        transition: TransitionSpec | str = "fade",
        duration: float | None = None,
        easing=None,
        direction=None,
    ) -> "Composition":
        """Set the transition used wherever full-frame clips overlap."""
        spec = self._transition_spec(transition, duration, easing, direction)
        return self._with_options(transition=spec)

    def use_transition_preset(self, name: str) -> "Composition":
        return self._with_options(transition=TransitionResolver().preset(name))

    def set_resolution(self, width: int, height: int) -> "Composition":
        return self._with_options(resolution=(width, height))

    def scale(self, width: int, height: int) -> "Composition":
        return self.set_resolution(width, height)

    def set_frame_rate(self, fps: float) -> "Composition":
        return self._with_options(frame_rate=fps)

    def set_aspect_ratio(self, ratio: str) -> "Composition":
        return self._with_options(aspect_ratio=ratio)

    def set_duration(self, seconds: float) -> "Composition":
        if seconds <= 0:
            raise CompositionError("Duration must be greater than 0", details={"duration": seconds})
        return self._with_options(duration=seconds)

    def trim(self, start: float, end: float | None = None) -> "Composition":
        return self._with_options(trim=_build(TrimRange, start=start, end=end))

    def crop(self, width: int, height: int, x: int = 0, y: int = 0) -> "Composition":
        return self._with_options(crop=_build(CropRegion, width=width, height=height, x=x, y=y))

    def set_background_color(self, color: str) -> "Composition":
        return self._with_options(background_color=color)

    # Codecs

    def _codec_base(self, resolver: CodecResolver) -> CodecConfiguration:
        return self.options.codec or resolver.default_configuration()

    def set_video_codec(self, codec: str, **options) -> "Composition":
        video = _build(
            VideoCodecSettings, codec=codec, options=_build(VideoCodecOptions, **options)
        )
        base = self._codec_base(CodecResolver())
        return self._with_options(codec=base.model_copy(update={"video": video}))

    def set_audio_codec(self, codec: str, **options) -> "Composition":
        audio = _build(
            AudioCodecSettings, codec=codec, options=_build(AudioCodecOptions, **options)
        )
        base = self._codec_base(CodecResolver())
        return self._with_options(codec=base.model_copy(update={"audio": audio}))

    def use_codec_preset(self, name: str) -> "Composition":
        return self._with_options(codec=CodecResolver().preset(name))

    def set_hardware_acceleration(self, kind: HardwareAcceleration | str) -> "Composition":
        """Decode with ``kind`` and, for a named vendor, encode with its encoder."""
        codec = CodecResolver().apply_hardware(self.options.codec, kind)
        kind = HardwareAcceleration(kind)
        if kind in (HardwareAcceleration.NONE, HardwareAcceleration.AUTO):
            codec = self.options.codec
        return self._with_options(codec=codec, hardware_acceleration=kind)

    def auto_select_codec(
        self,
        container: str = "mp4",
        quality: str = "high",
        compatibility: str = "modern",
        file_size: str | None = None,
        hardware: bool = False,
    ) -> "Composition":
        codec = CodecResolver().auto_select(container, quality, compatibility, file_size)
        update = {"codec": codec}
        if hardware:
            update["hardware_acceleration"] = HardwareAcceleration.AUTO
        return self._with_options(**update)

    def optimize_for_file_size(
        self, target_mb: float, duration: float | None = None
    ) -> "Composition":
        """Cap the bitrate so the output lands near ``target_mb`` megabytes."""
        if target_mb <= 0:
            raise CompositionError(
                "Target file size must be greater than 0", details={"target_mb": target_mb}
            )
        if duration is None:
            duration = self.get_duration()
        if duration <= 0:
            raise CompositionError(
                "Duration must be greater than 0", details={"duration": duration}
            )
        has_audio = any(
            isinstance(layer, AudioLayer) or (isinstance(layer, VideoLayer) and not layer.muted)
            for layer in self.layers
        )
        codec = CodecResolver().settings_for_file_size(
            target_mb, duration, has_audio=has_audio, base=self.options.codec
        )
        return self._with_options(codec=codec)

    def check_codec_compatibility(
        self, container: str = "mp4", platform: str | None = None
    ) -> CompatibilityReport:
        return CodecResolver().check_compatibility(self.options.codec, container, platform)

    # Captions

    def _track(self, language: str) -> CaptionTrackConfig:
        for track in self.options.caption_tracks:
            if track.language == language:
                return track
        raise CaptionError(
            f"Track not found: {language}",
            details={"tracks": [t.language for t in self.options.caption_tracks]},
        )

    def add_caption_track(
        self,
        language: str,
        *,
        language_name: str | None = None,
        style=None,
        position=None,
        enabled: bool = True,
    ) -> "Composition":
        """Register a caption track; re-registering a language replaces its settings."""
        config = _build(
            CaptionTrackConfig,
            language=language,
            language_name=language_name or language,
            style=style,
            position=position,
            enabled=enabled,
        )
        tracks = [t for t in self.options.caption_tracks if t.language != language]
        if len(tracks) == len(self.options.caption_tracks):
            tracks.append(config)
        else:
            tracks = [
                config if t.language == language else t for t in self.options.caption_tracks
            ]
        return self._with_options(caption_tracks=tuple(tracks))

    def _caption_layer(self, language, text, start_time, end_time, style, animation, position):
        _check_timing(start_time, end_time - start_time)
        return _build(
            TextLayer,
            source=text,
            start_time=start_time,
            duration=end_time - start_time,
            position=position,
            style=style,
            animation=animation,
            track=language,
        )

    def add_caption(
        self,
        language: str,
        text: str,
        start_time: float,
        end_time: float,
        *,
        style=None,
        animation=None,
        position=None,
    ) -> "Composition":
        self._track(language)
        return self._append(
            self._caption_layer(language, text, start_time, end_time, style, animation, position)
        )

    def add_caption_sequence(
        self,
        language: str,
        texts: list[str],
        start_time: float = 0,
        *,
        spacing: float | None = None,
        duration: float | None = None,
        style=None,
        animation=None,
    ) -> "Composition":
        """Add captions one after another.

        With ``duration`` every caption gets the same window; otherwise each
        one stays up for its reading time.
        """
        self._track(language)
        if not texts:
            return self
        settings = get_settings()
        if spacing is None:
            spacing = settings.caption_spacing
        if duration is not None:
            _check_timing(start_time, duration)
            windows = sequence_times(len(texts), start_time, duration, spacing)
        else:
            windows = []
            cursor = start_time
            for text in texts:
                length = reading_duration(
                    text,
                    settings.caption_reading_speed_wpm,
                    settings.caption_min_duration,
                    settings.caption_max_duration,
                )
                windows.append((cursor, cursor + length))
                cursor += length + spacing
        return self._append(
            *(
                self._caption_layer(language, text, start, end, style, animation, None)
                for text, (start, end) in zip(texts, windows)
            )
        )

    def add_captions(
        self,
        captions: Iterable[str | dict],
        *,
        language: str | None = None,
        style=None,
        preset: str | None = None,
        transition: str = "fade",
        transition_duration: float = 0.5,
        start_delay: float = 0,
        overlap: float = 0.1,
        words_per_minute: int | None = None,
    ) -> "Composition":
        """Add a list of simple captions with staggered automatic timing.

        Each item is a string or a dict with ``text`` and optional
        ``start_time``, ``end_time``, ``duration``, ``position`` and
        ``style``. Untimed items start where the previous one ends minus
        ``overlap`` of its length. With ``language`` the captions join
        that track, registering it first if needed.
        """
        settings = get_settings()
        wpm = words_per_minute or settings.caption_reading_speed_wpm
        base = TextStyle(font_size=32, color="#ffffff", stroke_color="#000000", stroke_width=2)
        if preset is not None:
            if preset in CAPTION_PRESETS:
                base = base.merged(CAPTION_PRESETS[preset])
            else:
                logger.warning("Unknown caption preset %r, using default style", preset)
        if style is not None:
            base = base.merged(_build(TextStyle, **dict(style)))
        animation = _animation(transition, transition_duration)

        comp = self
        if language is not None and language not in {
            t.language for t in self.options.caption_tracks
        }:
            comp = comp.add_caption_track(language)

        layers = []
        cursor = start_delay
        for item in captions:
            if isinstance(item, str):
                item = {"text": item}
            text = item["text"]
            length = item.get("duration")
            if length is None and "start_time" in item and "end_time" in item:
                length = item["end_time"] - item["start_time"]
            if length is None:
                length = reading_duration(
                    text, wpm, settings.caption_min_duration, settings.caption_max_duration
                )
            start = item.get("start_time", cursor)
            end = item.get("end_time", start + length)
            cursor = end - length * overlap

            item_style = base
            if item.get("style") is not None:
                item_style = base.merged(_build(TextStyle, **dict(item["style"])))
            layers.append(
                comp._caption_layer(
                    language, text, start, end, item_style, animation, item.get("position")
                )
            )
        if not layers:
            return comp
        return comp._append(*layers)

    def add_word_highlighting(
        self,
        text: str | None = None,
        *,
        words: list[tuple[str, float, float]] | None = None,
        start_time: float = 0,
        duration: float = 5,
        words_per_second: float = 2.5,
        position=None,
        preset: str | None = "tiktok",
        base_style=None,
        highlight_style=None,
        highlight_transition: str = "scale",
        transition_duration: float = 0.2,
        max_words_per_line: int = 5,
        line_spacing: float = 1.5,
    ) -> "Composition":
        """Karaoke-style captions: each line stays up while its words light up in turn.

        Words come from ``words`` as ``(word, start, end)`` triples or are
        timed from ``text`` at ``words_per_second``, cut off at
        ``start_time + duration``.
        """
        if words is None:
            if not text or not text.strip():
                logger.warning("add_word_highlighting called without text or words")
                return self
            end_limit = start_time + duration
            words = [
                (word, start, min(end, end_limit))
                for word, start, end in word_timings(text, start_time, words_per_second)
                if start < end_limit
            ]
        words = [(_WORD_CLEANUP.sub("", w), s, e) for w, s, e in words]
        words = [(w, s, e) for w, s, e in words if w and e > s]
        if not words:
            return self

        base = TextStyle(font_size=32, color="#cccccc", stroke_color="#000000", stroke_width=1)
        highlight = TextStyle(color="#ff0066", stroke_color="#000000", stroke_width=2)
        if preset is not None:
            if preset in WORD_HIGHLIGHT_PRESETS:
                preset_base, preset_highlight = WORD_HIGHLIGHT_PRESETS[preset]
                base = base.merged(preset_base)
                highlight = highlight.merged(preset_highlight)
            else:
                logger.warning("Unknown word highlighting preset %r", preset)
        if base_style is not None:
            base = base.merged(_build(TextStyle, **dict(base_style)))
        highlight = base.merged(highlight)
        if highlight_style is not None:
            highlight = highlight.merged(_build(TextStyle, **dict(highlight_style)))
        animation = _animation(highlight_transition, transition_duration)

        width, height = resolve_canvas(self.options, get_settings())
        anchor = _word_anchor(position)
        center_x = _pixels(anchor.x, width)
        center_y = _pixels(anchor.y, height)
        line_height = (base.font_size or 32) * line_spacing

        step = max_words_per_line
        lines = [words[i : i + step] for i in range(0, len(words), step)]
        layers = []
        for line_index, line in enumerate(lines):
            y = center_y + (line_index - (len(lines) - 1) / 2) * line_height
            line_start = line[0][1]
            line_end = line[-1][2]
            for word_index, (word, start, end) in enumerate(line):
                x = center_x + (word_index - (len(line) - 1) / 2) * _WORD_SPACING
                placed = Position(x=round(x), y=round(y), anchor="center")
                layers.append(
                    TextLayer(
                        source=word,
                        start_time=line_start,
                        duration=line_end - line_start,
                        position=placed,
                        style=base,
                    )
                )
                layers.append(
                    TextLayer(
                        source=word,
                        start_time=start,
                        duration=end - start,
                        position=placed,
                        style=highlight,
                        animation=animation,
                    )
                )
        return self._append(*layers)

    def import_captions(
        self, language: str, content: str, format: SubtitleFormat | str = SubtitleFormat.SRT
    ) -> "Composition":
        """Parse subtitle text into ``language``, registering the track if needed."""
        captions = CaptionCompositor().parse(content, format)
        comp = self
        if language not in {t.language for t in self.options.caption_tracks}:
            comp = comp.add_caption_track(language)
        if not captions:
            return comp
        return comp._append(
            *(
                comp._caption_layer(
                    language, c.text, c.start_time, c.end_time, c.style, c.animation, None
                )
                for c in captions
            )
        )

    # Combining

    def concat(self, other: "Composition") -> "Composition":
        """Append ``other`` after this composition ends.

        Caption tracks are merged by language; this composition's track
        settings win where both define the same language.
        """
        offset = self.get_duration()
        shifted = tuple(
            layer.model_copy(update={"start_time": layer.start_time + offset})
            for layer in other.layers
        )
        known = {t.language for t in self.options.caption_tracks}
        tracks = self.options.caption_tracks + tuple(
            t for t in other.options.caption_tracks if t.language not in known
        )
        comp = self.model_copy(update={"layers": self.layers + shifted})
        if tracks != self.options.caption_tracks:
            comp = comp._with_options(caption_tracks=tracks)
        return comp

    def pipe(self, fn: Callable[["Composition"], "Composition"]) -> "Composition":
        return fn(self)

    # Queries

    def get_duration(self) -> float:
        """Output length in seconds.

        Uses the explicit override when set. Otherwise media without a
        duration counts as the default media length, and open-ended
        images, filters and transition markers do not extend the output.
        """
        if self.options.duration is not None:
            return self.options.duration
        default_media = get_settings().default_media_duration
        ends = [0.0]
        for layer in self.layers:
            if isinstance(layer, TransitionMarkerLayer):
                continue
            if layer.duration is not None:
                ends.append(layer.start_time + layer.duration)
            elif isinstance(layer, (VideoLayer, AudioLayer)):
                ends.append(layer.start_time + default_media)
        return max(ends)

    def caption_tracks(self) -> list[CaptionTrack]:
        return CaptionCompositor().build_tracks(self.options.caption_tracks, self.layers)

    def get_caption_track(self, language: str) -> CaptionTrack:
        self._track(language)
        return next(t for t in self.caption_tracks() if t.language == language)

    def export_captions(
        self, track_id: str, format: SubtitleFormat | str = SubtitleFormat.SRT
    ) -> str:
        return CaptionCompositor().export(self.get_caption_track(track_id), format)

    def validate_for_platform(self, platform: str) -> PlatformValidation:
        expected = PLATFORM_ASPECT_RATIOS.get(platform.lower())
        if expected is None:
            raise CompositionError(
                f"Invalid platform: {platform}",
                details={"available": sorted(PLATFORM_ASPECT_RATIOS)},
            )
        warnings = []
        actual = self.options.aspect_ratio
        if actual is None and self.options.resolution is not None:
            actual = _ratio(*self.options.resolution)
        if actual is None:
            warnings.append(f"No aspect ratio set; {platform} expects {expected}")
        elif _ratio_value(actual) != _ratio_value(expected):
            warnings.append(f"Aspect ratio {actual} does not match {platform} ({expected})")
        return PlatformValidation(
            platform=platform,
            valid=not warnings,
            expected_aspect_ratio=expected,
            warnings=warnings,
        )

    # Output

    def compile(self, output_path: str, render: RenderOptions | None = None) -> CompiledCommand:
        return FFmpegCommandBuilder().build(self, output_path, render)

    def get_command(self, output_path: str, render: RenderOptions | None = None) -> str:
        return self.compile(output_path, render).to_string()

    def to_json(self) -> dict:
        """Snapshot as ``{"layers": [...], "globalOptions": {...}}`` in insertion order."""
        return {
            "layers": [layer.model_dump(mode="json", exclude_none=True) for layer in self.layers],
            "globalOptions": self.options.model_dump(mode="json", exclude_none=True),
        }

    @classmethod
    def from_json(cls, data: dict | str) -> "Composition":
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise CompositionError(f"Invalid composition JSON: {e}")
        try:
            return cls.model_validate(
                {"layers": data.get("layers", []), "options": data.get("globalOptions", {})}
            )
        except ValidationError as e:
            raise CompositionError("Invalid composition snapshot", details=_validation_details(e))


def _word_anchor(position) -> Position:
    """Centre point for word highlighting from any accepted position form."""
    if position is None:
        return Position(x="50%", y="50%")
    if isinstance(position, Position):
        return position
    if isinstance(position, str):
        if position not in NAMED_POSITIONS:
            logger.warning("Unknown position %r, using center", position)
        x = "10%" if "left" in position else "90%" if "right" in position else "50%"
        y = "10%" if "top" in position else "90%" if "bottom" in position else "50%"
        return Position(x=x, y=y)
    if isinstance(position, (tuple, list)):
        if len(position) != 2:
            raise CompositionError(
                "Position pairs must have exactly two items", details={"position": position}
            )
        return _build(Position, x=position[0], y=position[1])
    if isinstance(position, dict):
        return _build(Position, **position)
    raise CompositionError(
        f"Unsupported position: {position!r}", details={"position": repr(position)}
    )


def _pixels(value: float | str, size: int) -> float:
    if isinstance(value, str):
        return size * float(value[:-1]) / 100
    return value


def _ratio(width: int, height: int) -> str:
    divisor = gcd(width, height)
    return f"{width // divisor}:{height // divisor}"


def _ratio_value(ratio: str) -> float:
    w, h = (float(part) for part in ratio.split(":"))
    return round(w / h, 3)
