"""FFmpeg command construction from a composition."""

import logging
import math
from typing import TYPE_CHECKING

from clipgraph.captions.compositor import CaptionCompositor
from clipgraph.codecs.resolver import CodecResolver
from clipgraph.config import Settings, get_settings
from clipgraph.models.captions import CaptionTrackConfig
from clipgraph.models.codecs import CodecConfiguration
from clipgraph.models.command import CompiledCommand
from clipgraph.models.errors import CompositionError
from clipgraph.models.layers import (
    AudioLayer,
    FilterLayer,
    ImageLayer,
    TextLayer,
    TransitionMarkerLayer,
    VideoLayer,
)
from clipgraph.models.options import GlobalOptions, RenderOptions
from clipgraph.models.styles import Ducking, DuckingMode
from clipgraph.models.transitions import TransitionSpec
from clipgraph.rendering.context import CompileContext
from clipgraph.rendering.expressions import (
    enable_between,
    fmt,
    normalize_color,
    quote_expression,
    resolve_position,
)
from clipgraph.transitions.resolver import TransitionResolver, layer_span

if TYPE_CHECKING:
    from clipgraph.timeline.composition import Composition

logger = logging.getLogger(__name__)

RENDER_QUALITY = {
    "low": (28, "fast"),
    "medium": (23, "medium"),
    "high": (18, "medium"),
    "ultra": (15, "slow"),
}

# Filters that accept the timeline ``enable`` option
TIMELINE_FILTERS = {
    "boxblur",
    "colorchannelmixer",
    "curves",
    "drawbox",
    "eq",
    "gblur",
    "hue",
    "negate",
    "noise",
    "unsharp",
    "vignette",
}

SEPIA_MATRIX = ".393:.769:.189:0:.349:.686:.168:0:.272:.534:.131"


def render_filter(layer: FilterLayer) -> str:
    """Map a filter layer onto ffmpeg filter syntax.

    Known effect names get their ffmpeg equivalent; anything else passes
    through as ``name=key=value:...``.
    """
    name = layer.source
    opts = layer.options
    value = opts.get("value")

    if name == "blur":
        return f"boxblur={opts.get('radius', value if value is not None else 5)}:1"
    if name in ("brightness", "contrast", "saturation", "gamma"):
        default = 0 if name == "brightness" else 1
        return f"eq={name}={value if value is not None else default}"
    if name == "hue":
        return f"hue=h={opts.get('degrees', value if value is not None else 0)}"
    if name == "grayscale":
        return "hue=s=0"
    if name == "sepia":
        return f"colorchannelmixer={SEPIA_MATRIX}"
    if name == "vignette":
        return f"vignette={opts.get('angle', 'PI/4')}"
    if name in ("invert", "negate"):
        return "negate"
    if name == "sharpen":
        return f"unsharp=5:5:{value if value is not None else 1.0}"
    if name == "fade":
        fade_type = opts.get("type", "in")
        start = _option_value(opts.get("start", 0))
        duration = _option_value(opts.get("duration", 1))
        return f"fade=t={fade_type}:st={start}:d={duration}"
    if not opts:
        return name
    return name + "=" + ":".join(f"{k}={_option_value(v)}" for k, v in opts.items())


def _option_value(value) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return fmt(value)
    return str(value)


def _even(value: float) -> int:
    return max(2, int(round(value / 2)) * 2)


def resolve_canvas(options: GlobalOptions, settings: Settings) -> tuple[int, int]:
    """Output size: explicit resolution, else derived from the aspect ratio."""
    if options.resolution is not None:
        return options.resolution
    if options.aspect_ratio is not None:
        w, h = (float(part) for part in options.aspect_ratio.split(":"))
        if w <= 0 or h <= 0:
            logger.warning("Degenerate aspect ratio %s, using default canvas", options.aspect_ratio)
        elif w >= h:
            return _even(settings.default_height * w / h), settings.default_height
        else:
            return settings.default_height, _even(settings.default_height * h / w)
    return settings.default_width, settings.default_height


def atempo_chain(tempo: float) -> list[str]:
    """Split a tempo factor into atempo stages within the filter's 0.5-2.0 range."""
    stages = []
    while tempo > 2.0:
        stages.append("atempo=2.0")
        tempo /= 2.0
    while tempo < 0.5:
        stages.append("atempo=0.5")
        tempo /= 0.5
    stages.append(f"atempo={fmt(tempo)}")
    return stages


def _shift(value: float) -> str:
    """Render ``t-value`` so that negative values stay readable."""
    return f"t-{fmt(value)}" if value >= 0 else f"t+{fmt(-value)}"


def duck_envelope(ducking: Ducking, offset: float = 0.0) -> str:
    """Per-frame ``volume`` that dips to ``ducking.level`` around each region.

    Region times are on the output timeline; ``offset`` is the layer's own
    start, so the expression runs on the layer's local clock.
    """
    envelopes = []
    for start, end in ducking.regions:
        down = start - ducking.anticipation - offset
        up = end + ducking.hold + ducking.release - offset
        envelopes.append(
            f"min(max(({_shift(down)})/{fmt(ducking.attack)},0),1)"
            f"*min(max(({fmt(up)}-t)/{fmt(ducking.release)},0),1)"
        )
    envelope = envelopes[0]
    for other in envelopes[1:]:
        envelope = f"max({envelope},{other})"
    return f"volume='1-{fmt(1 - ducking.level)}*{envelope}':eval=frame"


class FFmpegCommandBuilder:
    """Compiles a composition into an ffmpeg command."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.codecs = CodecResolver(self.settings)
        self.transitions = TransitionResolver(self.settings)
        self.captions = CaptionCompositor(self.settings)

    def build(
        self,
        composition: "Composition",
        output_path: str,
        render: RenderOptions | None = None,
    ) -> CompiledCommand:
        """Build the complete FFmpeg command for ``composition``."""
        render = render or RenderOptions()
        options = composition.options
        layers = composition.layers
        if not any(not isinstance(layer, TransitionMarkerLayer) for layer in layers):
            raise CompositionError("Composition has no layers to render")

        duration = composition.get_duration()
        if duration <= 0:
            duration = self.settings.default_media_duration
        width, height = resolve_canvas(options, self.settings)
        frame_rate = options.frame_rate or self.settings.default_frame_rate
        ctx = CompileContext(width, height, frame_rate, duration)

        self._bind_inputs(ctx, layers)
        codec = self._codec_configuration(options, render)
        video_output = self._build_video_chain(ctx, composition, codec)
        audio_output = self._build_audio_chain(ctx, layers)
        if video_output is None:
            codec = codec.model_copy(update={"video": None})

        cmd = [self.settings.ffmpeg_binary, "-y" if render.overwrite else "-n"]
        cmd.extend(self.codecs.hwaccel_args(options.hardware_acceleration))
        cmd.extend(ctx.input_args())
        if ctx.filter_complex:
            cmd.extend(["-filter_complex", ctx.filter_complex])
        if video_output:
            cmd.extend(["-map", video_output])
        if audio_output:
            cmd.extend(["-map", audio_output])
        cmd.extend(self.codecs.to_ffmpeg_args(codec))
        cmd.extend(self._output_flags(options))
        cmd.append(str(output_path))

        logger.debug(
            "Compiled %d layers into %d inputs and %d graph nodes",
            len(layers),
            len(ctx.inputs),
            len(ctx.video_nodes) + len(ctx.audio_nodes),
        )
        return CompiledCommand(
            argv=cmd,
            filter_complex=ctx.filter_complex,
            inputs=ctx.inputs,
            video_output=video_output,
            audio_output=audio_output,
            duration=duration,
        )

    # Inputs

    def _bind_inputs(self, ctx: CompileContext, layers) -> None:
        for index, layer in enumerate(layers):
            if isinstance(layer, ImageLayer):
                start, end = layer_span(layer, ctx.duration)
                options = ["-loop", "1", "-t", fmt(max(end - start, 0.001))]
            elif isinstance(layer, (VideoLayer, AudioLayer)):
                options = []
                if isinstance(layer, AudioLayer) and layer.loop:
                    options.extend(["-stream_loop", "-1"])
                if layer.trim_start is not None:
                    options.extend(["-ss", fmt(layer.trim_start)])
                if layer.trim_end is not None:
                    options.extend(["-to", fmt(layer.trim_end)])
            else:
                continue
            ctx.bind_input(index, layer.source, options)

    # Video

    def _build_video_chain(
        self, ctx: CompileContext, composition: "Composition", codec: CodecConfiguration
    ) -> str | None:
        options = composition.options
        layers = composition.layers
        visual = [
            (index, layer)
            for index, layer in enumerate(layers)
            if isinstance(layer, (VideoLayer, ImageLayer, TextLayer, FilterLayer))
        ]
        if not visual:
            return None
        visual.sort(key=lambda item: (_z(item), item[0]))

        requests = self._transition_requests(layers)
        tracks = {track.language: track for track in options.caption_tracks}
        background = normalize_color(options.background_color or self.settings.background_color)
        ctx.video_nodes.append(
            f"color=c={background}:s={ctx.width}x{ctx.height}:r={fmt(ctx.frame_rate)}"
            f":d={fmt(ctx.duration)}[base]"
        )
        current = "base"
        previous = None
        for index, layer in visual:
            if isinstance(layer, (VideoLayer, ImageLayer)):
                spec = requests.get(index) or options.transition
                current, full_frame = self._overlay(ctx, index, layer, current, previous, spec)
                if full_frame:
                    previous = (index, layer)
            elif isinstance(layer, TextLayer):
                track = None
                if layer.track is not None:
                    track = tracks.get(layer.track) or CaptionTrackConfig(language=layer.track)
                    if not track.enabled:
                        logger.debug("Skipping caption in disabled track %s", layer.track)
                        continue
                out = ctx.label("v")
                node = self.captions.text_filter(layer, track)
                ctx.video_nodes.append(f"[{current}]{node}[{out}]")
                current = out
            else:
                out = ctx.label("v")
                ctx.video_nodes.append(f"[{current}]{self._filter_node(layer, ctx)}[{out}]")
                current = out

        if options.crop is not None:
            crop = options.crop
            out = ctx.label("v")
            ctx.video_nodes.append(
                f"[{current}]crop={crop.width}:{crop.height}:{crop.x}:{crop.y}[{out}]"
            )
            current = out

        pixel_format = "yuv420p"
        if codec.video and codec.video.options.pixel_format:
            pixel_format = codec.video.options.pixel_format
        ctx.video_nodes.append(f"[{current}]format={pixel_format}[vout]")
        return "[vout]"

    def _transition_requests(self, layers) -> dict[int, TransitionSpec]:
        """Map each video/image layer to the marker inserted just before it."""
        requests = {}
        pending = None
        for index, layer in enumerate(layers):
            if isinstance(layer, TransitionMarkerLayer):
                pending = layer.transition
            elif isinstance(layer, (VideoLayer, ImageLayer)) and pending is not None:
                requests[index] = pending
                pending = None
        return requests

    def _overlay(
        self,
        ctx: CompileContext,
        index: int,
        layer: VideoLayer | ImageLayer,
        current: str,
        previous: tuple | None,
        spec: TransitionSpec | None,
    ) -> tuple[str, bool]:
        style = layer.style
        full_frame = layer.position is None and (
            style is None or (style.scale is None and style.width is None and style.height is None)
        )
        start, end = layer_span(layer, ctx.duration)

        branch = ["setpts=PTS-STARTPTS"]
        if full_frame:
            branch.append(f"scale={ctx.width}:{ctx.height}:force_original_aspect_ratio=decrease")
        elif style is not None:
            if style.width is not None or style.height is not None:
                branch.append(f"scale={style.width or -2}:{style.height or -2}")
            elif style.scale is not None:
                branch.append(f"scale=iw*{fmt(style.scale)}:ih*{fmt(style.scale)}")
        if style is not None and style.rotation:
            radians = fmt(math.radians(style.rotation))
            branch.append("format=yuva420p")
            branch.append(f"rotate={radians}:c=none:ow='rotw({radians})':oh='roth({radians})'")
        if style is not None and style.opacity is not None and style.opacity < 1:
            branch.append("format=yuva420p")
            branch.append(f"colorchannelmixer=aa={fmt(style.opacity)}")

        margin = layer.margin if layer.margin is not None else self.settings.overlay_margin
        x, y = resolve_position(layer.position, margin)
        # Only a layer entering on top of the clip beneath it transitions in.
        if full_frame and previous is not None and start >= previous[1].start_time:
            prev_index, prev_layer = previous
            point = self.transitions.resolve(
                prev_layer, layer, spec, ctx.duration, prev_index, index, x, y
            )
            if point.active:
                ctx.transitions.append(point)
                branch.extend(point.fragment.prepare)
                x = point.fragment.x or x
                y = point.fragment.y or y

        if start > 0:
            branch.append(f"setpts=PTS+{fmt(start)}/TB")

        input_index = ctx.layer_inputs[index]
        prepared = ctx.label("l")
        ctx.video_nodes.append(f"[{input_index}:v]{','.join(branch)}[{prepared}]")
        out = ctx.label("v")
        ctx.video_nodes.append(
            f"[{current}][{prepared}]overlay=x={quote_expression(x)}:y={quote_expression(y)}"
            f":eof_action=pass:{enable_between(start, end)}[{out}]"
        )
        return out, full_frame

    def _filter_node(self, layer: FilterLayer, ctx: CompileContext) -> str:
        node = render_filter(layer)
        timed = layer.start_time > 0 or layer.duration is not None
        if not timed:
            return node
        name = node.split("=", 1)[0]
        if name not in TIMELINE_FILTERS:
            logger.warning("Filter %s does not support timed enable; applying it throughout", name)
            return node
        start, end = layer_span(layer, ctx.duration)
        separator = ":" if "=" in node else "="
        return f"{node}{separator}{enable_between(start, end)}"

    # Audio

    def _build_audio_chain(self, ctx: CompileContext, layers) -> str | None:
        contributors = [
            (index, layer)
            for index, layer in enumerate(layers)
            if isinstance(layer, AudioLayer) or (isinstance(layer, VideoLayer) and not layer.muted)
        ]
        if not contributors:
            return None

        keys = self._sidechain_keys(contributors)
        if len(contributors) == 1:
            index, layer = contributors[0]
            input_index = ctx.layer_inputs[index]
            chain = self._audio_filters(layer, ctx.duration)
            if not chain:
                optional = "?" if isinstance(layer, VideoLayer) else ""
                return f"{input_index}:a{optional}"
            ctx.audio_nodes.append(f"[{input_index}:a]{','.join(chain)}[aout]")
            return "[aout]"

        pads = {}
        for index, layer in contributors:
            input_index = ctx.layer_inputs[index]
            chain = self._audio_filters(layer, ctx.duration)
            if chain:
                label = ctx.label("a")
                ctx.audio_nodes.append(f"[{input_index}:a]{','.join(chain)}[{label}]")
                pads[index] = f"[{label}]"
            else:
                pads[index] = f"[{input_index}:a]"

        if keys:
            self._duck(ctx, pads, keys)
        ctx.audio_nodes.append(
            f"{''.join(pads.values())}amix=inputs={len(pads)}:duration=longest[aout]"
        )
        return "[aout]"

    def _sidechain_keys(self, contributors) -> dict[int, tuple[int, Ducking]]:
        """Map each sidechain-ducked background to the contributor keying it."""
        keys = {}
        for index, layer in contributors:
            ducking = _ducking(layer)
            if ducking is None or ducking.mode != DuckingMode.SIDECHAIN:
                continue
            voice = next(
                (i for i, other in contributors if i != index and other.source == ducking.voice),
                None,
            )
            if voice is None:
                logger.warning(
                    "Ducking voice %s is not in the audio mix; %s is not ducked",
                    ducking.voice,
                    layer.source,
                )
                continue
            keys[index] = (voice, ducking)
        return keys

    def _duck(self, ctx: CompileContext, pads: dict[int, str], keys) -> None:
        """Split each voice into its mix pad plus one key per background it ducks."""
        backgrounds_by_voice: dict[int, list[int]] = {}
        for background, (voice, _) in keys.items():
            backgrounds_by_voice.setdefault(voice, []).append(background)

        key_pads = {}
        for voice, backgrounds in backgrounds_by_voice.items():
            labels = [ctx.label("a") for _ in range(len(backgrounds) + 1)]
            outputs = "".join(f"[{label}]" for label in labels)
            ctx.audio_nodes.append(f"{pads[voice]}asplit={len(labels)}{outputs}")
            pads[voice] = f"[{labels[0]}]"
            for background, label in zip(backgrounds, labels[1:]):
                key_pads[background] = f"[{label}]"

        for background, (_, ducking) in keys.items():
            key = key_pads[background]
            if ducking.band is not None:
                low, high = ducking.band
                band = ctx.label("a")
                ctx.audio_nodes.append(f"{key}highpass=f={low},lowpass=f={high}[{band}]")
                key = f"[{band}]"
            out = ctx.label("a")
            ctx.audio_nodes.append(
                f"{pads[background]}{key}sidechaincompress=threshold={fmt(ducking.threshold)}"
                f":ratio={fmt(ducking.ratio)}:attack={fmt(ducking.attack * 1000)}"
                f":release={fmt(ducking.release * 1000)}:knee=2.5:detection=peak[{out}]"
            )
            pads[background] = f"[{out}]"

    def _audio_filters(self, layer: AudioLayer | VideoLayer, duration: float) -> list[str]:
        start, end = layer_span(layer, duration)
        length = end - start
        chain = []
        if layer.duration is not None or (isinstance(layer, AudioLayer) and layer.loop):
            chain.extend([f"atrim=duration={fmt(length)}", "asetpts=PTS-STARTPTS"])

        if isinstance(layer, VideoLayer):
            if layer.volume is not None and layer.volume != 1:
                chain.append(f"volume={fmt(layer.volume)}")
        elif layer.style is not None:
            style = layer.style
            if style.tempo is not None and style.tempo != 1:
                chain.extend(atempo_chain(style.tempo))
            if style.volume is not None and style.volume != 1:
                chain.append(f"volume={fmt(style.volume)}")
            if style.pan:
                left = fmt(min(1.0, 1.0 - style.pan))
                right = fmt(min(1.0, 1.0 + style.pan))
                chain.append(f"pan=stereo|c0={left}*c0|c1={right}*c1")
            if style.lowpass is not None:
                chain.append(f"lowpass=f={style.lowpass}")
            if style.highpass is not None:
                chain.append(f"highpass=f={style.highpass}")
            if style.fade_in is not None:
                chain.append(f"afade=t=in:st=0:d={fmt(style.fade_in)}")
            if style.fade_out is not None:
                fade_start = max(0.0, length - style.fade_out)
                chain.append(f"afade=t=out:st={fmt(fade_start)}:d={fmt(style.fade_out)}")

        ducking = _ducking(layer)
        if ducking is not None and ducking.mode == DuckingMode.REGIONS:
            chain.append(duck_envelope(ducking, start))

        if start > 0:
            chain.append(f"adelay={round(start * 1000)}:all=1")
        return chain

    # Output

    def _codec_configuration(
        self, options: GlobalOptions, render: RenderOptions
    ) -> CodecConfiguration:
        codec = options.codec or self.codecs.default_configuration()
        if codec.video is not None:
            video_options = codec.video.options
            update = {}
            if render.quality is not None:
                update["crf"], update["preset"] = RENDER_QUALITY[render.quality]
            if render.video_bitrate is not None:
                update["bitrate"] = render.video_bitrate
            if update:
                codec = codec.model_copy(
                    update={
                        "video": codec.video.model_copy(
                            update={"options": video_options.model_copy(update=update)}
                        )
                    }
                )
        if codec.audio is not None and render.audio_bitrate is not None:
            audio_options = codec.audio.options.model_copy(update={"bitrate": render.audio_bitrate})
            codec = codec.model_copy(
                update={"audio": codec.audio.model_copy(update={"options": audio_options})}
            )
        return codec

    def _output_flags(self, options: GlobalOptions) -> list[str]:
        flags = []
        if options.frame_rate is not None:
            flags.extend(["-r", fmt(options.frame_rate)])
        if options.resolution is not None:
            flags.extend(["-s", f"{options.resolution[0]}x{options.resolution[1]}"])
        if options.aspect_ratio is not None:
            flags.extend(["-aspect", options.aspect_ratio])
        if options.trim is not None:
            flags.extend(["-ss", fmt(options.trim.start)])
            if options.trim.end is not None:
                flags.extend(["-t", fmt(options.trim.end - options.trim.start)])
        elif options.duration is not None:
            flags.extend(["-t", fmt(options.duration)])
        return flags


def _ducking(layer) -> Ducking | None:
    if isinstance(layer, AudioLayer) and layer.style is not None:
        return layer.style.ducking
    return None


def _z(item) -> int:
    index, layer = item
    return layer.z_order if layer.z_order is not None else index
