"""Caption tracks: drawtext fragments, subtitle export and import."""

import logging
import math
import re

from pydantic import ValidationError as PydanticValidationError

from clipgraph.captions.timing import (
    format_ass_time,
    format_srt_time,
    format_vtt_time,
    parse_timestamp,
    word_count,
)
from clipgraph.config import Settings, get_settings
from clipgraph.models.captions import (
    Caption,
    CaptionStatistics,
    CaptionTrack,
    CaptionTrackConfig,
    SubtitleFormat,
)
from clipgraph.models.errors import CaptionError
from clipgraph.models.layers import TextLayer
from clipgraph.models.styles import AnimationType, Position, TextAnimation, TextStyle
from clipgraph.models.transitions import Direction
from clipgraph.rendering.expressions import (
    enable_between,
    escape_text,
    fmt,
    normalize_color,
    resolve_position,
)

logger = logging.getLogger(__name__)

_ASS_HEADER = (
    "[Script Info]\n"
    "Title: Generated Captions\n"
    "ScriptType: v4.00+\n"
    "\n"
    "[V4+ Styles]\n"
    "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, "
    "BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, "
    "BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding\n"
    "Style: Default,{font},{size},&H00FFFFFF,&H000000FF,&H00000000,&H00000000,"
    "0,0,0,0,100,100,0,0,1,2,0,2,10,10,10,1\n"
    "\n"
    "[Events]\n"
    "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text\n"
)

_BLOCK_SPLIT = re.compile(r"\n\s*\n")


class CaptionCompositor:
    """Builds caption tracks from text layers and renders them.

    The compositor holds no per-composition state: tracks are derived
    from the composition's layers on every call, so exported subtitles
    and burned-in captions always come from the same sequence.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    # Tracks

    def caption_style(self) -> TextStyle:
        return TextStyle(
            font_family=self.settings.caption_font,
            font_size=self.settings.caption_font_size,
            color="#ffffff",
            stroke_color="#000000",
            stroke_width=2,
        )

    def build_tracks(
        self, configs: tuple[CaptionTrackConfig, ...], layers
    ) -> list[CaptionTrack]:
        """Group caption text layers into tracks, in track registration order."""
        by_track: dict[str, list[TextLayer]] = {c.language: [] for c in configs}
        for layer in layers:
            if isinstance(layer, TextLayer) and layer.track in by_track:
                by_track[layer.track].append(layer)

        tracks = []
        for config in configs:
            ordered = sorted(by_track[config.language], key=lambda layer: layer.start_time)
            captions = [
                Caption(
                    id=f"{config.language}-{n}",
                    text=layer.source,
                    start_time=layer.start_time,
                    end_time=layer.end_time,
                    style=layer.style,
                    animation=layer.animation,
                )
                for n, layer in enumerate(ordered, start=1)
            ]
            tracks.append(
                CaptionTrack(
                    id=config.language,
                    language=config.language,
                    language_name=config.language_name,
                    captions=captions,
                    style=config.style,
                    position=config.position,
                    enabled=config.enabled,
                )
            )
        return tracks

    # Drawtext fragments

    def text_filter(self, layer: TextLayer, track: CaptionTrackConfig | None = None) -> str:
        """Render a text layer (plain or caption) as a drawtext filter chain."""
        if track is not None:
            style = self.caption_style().merged(track.style).merged(layer.style)
            position = layer.position or track.position or "bottom"
        else:
            style = TextStyle(font_size=24, color="white").merged(layer.style)
            position = layer.position
        start = layer.start_time
        end = layer.end_time
        return self.drawtext(
            layer.source, style, position, start, end, layer.animation, layer.margin
        )

    def drawtext(
        self,
        text: str,
        style: TextStyle,
        position: str | Position | None,
        start: float,
        end: float | None,
        animation: TextAnimation | None = None,
        margin: int | None = None,
    ) -> str:
        x, y = resolve_position(
            position,
            margin if margin is not None else self.settings.text_margin,
            frame=("w", "h"),
            item=("text_w", "text_h"),
        )
        font_size = fmt(style.font_size or 24)
        alpha = fmt(style.opacity) if style.opacity is not None else None

        if animation is not None and end is not None:
            a0 = start + animation.delay
            d = min(animation.duration, max(end - a0, 0.001))
            a1 = a0 + d
            kind = animation.type
            if kind == AnimationType.TYPEWRITER:
                return self._typewriter(text, style, x, y, a0, a1, end)
            if kind == AnimationType.FADE_IN:
                ramp = f"if(lt(t,{fmt(a0)}),0,if(lt(t,{fmt(a1)}),(t-{fmt(a0)})/{fmt(d)},1))"
                alpha = f"'{ramp}'" if alpha is None else f"'{alpha}*{ramp}'"
            elif kind == AnimationType.FADE_OUT:
                f0 = end - d
                ramp = f"if(lt(t,{fmt(f0)}),1,if(lt(t,{fmt(end)}),({fmt(end)}-t)/{fmt(d)},0))"
                alpha = f"'{ramp}'" if alpha is None else f"'{alpha}*{ramp}'"
            elif kind == AnimationType.SLIDE_IN:
                direction = animation.direction or Direction.LEFT
                if direction in (Direction.UP, Direction.DOWN):
                    origin = "h" if direction == Direction.UP else "-text_h"
                    y = self._slide(origin, y, a0, a1, d)
                else:
                    origin = "w" if direction == Direction.RIGHT else "-text_w"
                    x = self._slide(origin, x, a0, a1, d)
            elif kind == AnimationType.ZOOM_IN:
                font_size = (
                    f"'if(lt(t,{fmt(a1)}),max(1,{font_size}*max(t-{fmt(a0)},0)/{fmt(d)}),"
                    f"{font_size})'"
                )

        return self._drawtext_options(text, style, font_size, alpha, x, y, start, end)

    def _slide(self, origin: str, target: str, a0: float, a1: float, d: float) -> str:
        progress = f"max(t-{fmt(a0)},0)/{fmt(d)}"
        return f"'if(lt(t,{fmt(a1)}),{origin}+(({target})-({origin}))*{progress},{target})'"

    def _typewriter(
        self, text: str, style: TextStyle, x: str, y: str, a0: float, a1: float, end: float
    ) -> str:
        font_size = fmt(style.font_size or 24)
        n = len(text)
        if n == 0:
            return self._drawtext_options(text, style, font_size, None, x, y, a0, end)
        steps = min(n, self.settings.typewriter_max_steps)
        step = (a1 - a0) / steps
        parts = []
        for k in range(1, steps + 1):
            prefix = text[: math.ceil(k * n / steps)]
            s = a0 + (k - 1) * step
            if k < steps:
                window = f"enable='gte(t,{fmt(s)})*lt(t,{fmt(s + step)})'"
            else:
                window = enable_between(s, end)
            parts.append(
                self._drawtext_options(prefix, style, font_size, None, x, y, s, end, window)
            )
        return ",".join(parts)

    def _drawtext_options(
        self,
        text: str,
        style: TextStyle,
        font_size: str,
        alpha: str | None,
        x: str,
        y: str,
        start: float,
        end: float | None,
        window: str | None = None,
    ) -> str:
        opts = [f"text='{escape_text(text)}'"]
        if style.font_file:
            opts.append(f"fontfile='{style.font_file}'")
        elif style.font_family:
            opts.append(f"font='{style.font_family}'")
        opts.append(f"fontsize={font_size}")
        opts.append(f"fontcolor={normalize_color(style.color or 'white')}")
        if alpha is not None:
            opts.append(f"alpha={alpha}")
        if style.background_color:
            opts.append("box=1")
            opts.append(f"boxcolor={normalize_color(style.background_color)}")
            opts.append(f"boxborderw={style.padding if style.padding is not None else 10}")
        if style.stroke_width:
            opts.append(f"bordercolor={normalize_color(style.stroke_color or 'black')}")
            opts.append(f"borderw={style.stroke_width}")
        if style.shadow_color or style.shadow_x or style.shadow_y:
            opts.append(f"shadowcolor={normalize_color(style.shadow_color or 'black')}")
            opts.append(f"shadowx={style.shadow_x or 2}")
            opts.append(f"shadowy={style.shadow_y or 2}")
        opts.append(f"x={x}")
        opts.append(f"y={y}")
        if window is not None:
            opts.append(window)
        elif end is not None:
            opts.append(enable_between(start, end))
        elif start > 0:
            opts.append(f"enable='gte(t,{fmt(start)})'")
        return "drawtext=" + ":".join(opts)

    # Export / import

    def export(self, track: CaptionTrack, format: SubtitleFormat | str = SubtitleFormat.SRT) -> str:
        """Render a track as subtitle file text."""
        try:
            format = SubtitleFormat(format)
        except ValueError:
            raise CaptionError(
                f"Unsupported caption format: {format}",
                details={"available": [f.value for f in SubtitleFormat]},
            )

        if format == SubtitleFormat.SRT:
            return "".join(
                f"{i}\n{format_srt_time(c.start_time)} --> {format_srt_time(c.end_time)}\n"
                f"{c.text}\n\n"
                for i, c in enumerate(track.captions, start=1)
            )
        if format == SubtitleFormat.VTT:
            return "WEBVTT\n\n" + "".join(
                f"{format_vtt_time(c.start_time)} --> {format_vtt_time(c.end_time)}\n{c.text}\n\n"
                for c in track.captions
            )
        if format == SubtitleFormat.ASS:
            style = self.caption_style().merged(track.style)
            header = _ASS_HEADER.format(font=style.font_family, size=style.font_size)
            return header + "".join(
                f"Dialogue: 0,{format_ass_time(c.start_time)},{format_ass_time(c.end_time)},"
                f"Default,,0,0,0,,{c.text.replace(chr(10), chr(92) + 'N')}\n"
                for c in track.captions
            )
        return track.model_dump_json(indent=2, exclude_none=True)

    def parse(self, content: str, format: SubtitleFormat | str) -> list[Caption]:
        """Parse subtitle text into captions (srt, vtt or json)."""
        try:
            format = SubtitleFormat(format)
        except ValueError:
            raise CaptionError(f"Unsupported caption format: {format}")
        content = content.replace("\r\n", "\n").replace("\r", "\n")

        if format == SubtitleFormat.JSON:
            try:
                return CaptionTrack.model_validate_json(content).captions
            except PydanticValidationError as e:
                raise CaptionError(
                    "Invalid caption JSON", details={"errors": e.errors(include_url=False)}
                )
        if format == SubtitleFormat.ASS:
            raise CaptionError("Importing ASS captions is not supported")

        captions = []
        for block in _BLOCK_SPLIT.split(content.strip()):
            lines = block.split("\n")
            timing = next((i for i, line in enumerate(lines) if "-->" in line), None)
            if timing is None:
                # WEBVTT header, NOTE and STYLE blocks
                continue
            start_text, _, end_text = lines[timing].partition("-->")
            try:
                start = parse_timestamp(start_text)
                end = parse_timestamp(end_text.split()[0])
                captions.append(
                    Caption(text="\n".join(lines[timing + 1 :]), start_time=start, end_time=end)
                )
            except (ValueError, IndexError) as e:
                raise CaptionError(
                    f"Invalid {format.value} cue: {lines[timing]!r}", details={"error": str(e)}
                )
        return captions

    def statistics(self, track: CaptionTrack) -> CaptionStatistics:
        if not track.captions:
            return CaptionStatistics()
        total = sum(c.duration for c in track.captions)
        words = sum(word_count(c.text) for c in track.captions)
        return CaptionStatistics(
            caption_count=len(track.captions),
            total_duration=total,
            average_duration=total / len(track.captions),
            words_per_minute=words / (total / 60) if total > 0 else 0.0,
        )
