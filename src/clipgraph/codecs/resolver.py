"""Codec presets, compatibility checks and encoder flag rendering."""

import logging

from clipgraph.config import Settings, get_settings
from clipgraph.models.codecs import (
    AudioCodecOptions,
    AudioCodecSettings,
    CodecConfiguration,
    CompatibilityLevel,
    CompatibilityReport,
    HardwareAcceleration,
    QualityTier,
    VideoCodecOptions,
    VideoCodecSettings,
)
from clipgraph.models.errors import CodecError

logger = logging.getLogger(__name__)


def _config(video: str, video_opts: dict, audio: str, audio_opts: dict) -> CodecConfiguration:
    return CodecConfiguration(
        video=VideoCodecSettings(codec=video, options=VideoCodecOptions(**video_opts)),
        audio=AudioCodecSettings(codec=audio, options=AudioCodecOptions(**audio_opts)),
    )


CODEC_PRESETS: dict[str, CodecConfiguration] = {
    "archival": _config(
        "libx264",
        {
            "preset": "slow",
            "crf": 18,
            "profile": "high",
            "level": "5.1",
            "pixel_format": "yuv420p",
            "tune": "film",
        },
        "flac",
        {"compression_level": 8},
    ),
    "streaming": _config(
        "libx264",
        {
            "preset": "veryfast",
            "crf": 23,
            "profile": "main",
            "level": "4.0",
            "pixel_format": "yuv420p",
            "gop_size": 48,
            "tune": "zerolatency",
        },
        "aac",
        {"bitrate": "128k", "sample_rate": 44100, "channels": 2, "profile": "aac_low"},
    ),
    "mobile": _config(
        "libx264",
        {
            "preset": "faster",
            "crf": 28,
            "profile": "baseline",
            "level": "3.1",
            "pixel_format": "yuv420p",
            "ref_frames": 1,
        },
        "aac",
        {"bitrate": "96k", "sample_rate": 44100, "channels": 2, "profile": "aac_he"},
    ),
    "hdr": _config(
        "libx265",
        {
            "preset": "medium",
            "crf": 21,
            "profile": "main10",
            "pixel_format": "yuv420p10le",
            "extra": {
                "color_primaries": "bt2020",
                "color_trc": "smpte2084",
                "colorspace": "bt2020nc",
            },
        },
        "libopus",
        {"bitrate": "160k", "sample_rate": 48000, "channels": 2, "vbr": True},
    ),
    "youtube": _config(
        "libx264",
        {
            "preset": "medium",
            "crf": 23,
            "profile": "high",
            "level": "4.2",
            "pixel_format": "yuv420p",
            "gop_size": 60,
            "b_frames": 2,
        },
        "aac",
        {"bitrate": "192k", "sample_rate": 48000, "channels": 2},
    ),
    "instagram": _config(
        "libx264",
        {
            "preset": "fast",
            "crf": 23,
            "profile": "main",
            "level": "4.0",
            "pixel_format": "yuv420p",
            "gop_size": 30,
        },
        "aac",
        {"bitrate": "128k", "sample_rate": 44100, "channels": 2},
    ),
    "tiktok": _config(
        "libx264",
        {
            "preset": "fast",
            "crf": 25,
            "profile": "main",
            "level": "4.0",
            "pixel_format": "yuv420p",
            "gop_size": 30,
        },
        "aac",
        {"bitrate": "128k", "sample_rate": 44100, "channels": 2},
    ),
}

# encoder, -hwaccel value, encoder options
HARDWARE_PROFILES: dict[HardwareAcceleration, tuple[str, str, dict]] = {
    HardwareAcceleration.NVIDIA: (
        "h264_nvenc",
        "cuda",
        {
            "preset": "p4",
            "extra": {"rc": "vbr", "cq": "23", "b:v": "0", "maxrate": "4M", "bufsize": "8M"},
        },
    ),
    HardwareAcceleration.INTEL: (
        "h264_qsv",
        "qsv",
        {"preset": "medium", "extra": {"global_quality": "23", "look_ahead": "1"}},
    ),
    HardwareAcceleration.AMD: (
        "h264_amf",
        "auto",
        {"extra": {"usage": "transcoding", "quality": "balanced", "rc": "vbr_latency"}},
    ),
    HardwareAcceleration.APPLE: (
        "h264_videotoolbox",
        "videotoolbox",
        {"profile": "high", "level": "4.2", "extra": {"allow_sw": "1"}},
    ),
}

CONTAINER_CODECS: dict[str, list[str]] = {
    "mp4": ["h264", "h265", "aac", "mp3", "ac3"],
    "mkv": ["h264", "h265", "vp8", "vp9", "av1", "aac", "opus", "vorbis", "flac"],
    "webm": ["vp8", "vp9", "av1", "opus", "vorbis"],
    "mov": ["h264", "h265", "prores", "aac", "pcm"],
    "avi": ["h264", "mpeg4", "mp3", "ac3", "pcm"],
}

PLATFORM_CODECS: dict[str, list[str]] = {
    "ios": ["h264", "h265", "aac"],
    "android": ["h264", "vp8", "vp9", "aac", "opus"],
    "windows": ["h264", "h265", "vp8", "vp9", "av1", "aac", "mp3", "opus"],
    "macos": ["h264", "h265", "vp8", "vp9", "aac", "opus"],
}

VIDEO_FORMATS = ("h264", "h265", "vp8", "vp9", "av1", "prores", "mpeg4")
AUDIO_FORMATS = ("aac", "opus", "mp3", "vorbis", "flac", "ac3", "pcm")

# Preferred alternatives, in suggestion order
PREFERRED_VIDEO = ("h264", "h265", "vp9")
PREFERRED_AUDIO = ("aac", "opus", "mp3")

# Encoder name -> bitstream format used by the compatibility tables
_ENCODER_FORMATS = {
    "libx264": "h264",
    "h264_nvenc": "h264",
    "h264_qsv": "h264",
    "h264_amf": "h264",
    "h264_videotoolbox": "h264",
    "libx265": "h265",
    "hevc": "h265",
    "hevc_nvenc": "h265",
    "hevc_qsv": "h265",
    "hevc_videotoolbox": "h265",
    "libvpx": "vp8",
    "libvpx-vp9": "vp9",
    "libsvtav1": "av1",
    "libaom-av1": "av1",
    "librav1e": "av1",
    "prores_ks": "prores",
    "libopus": "opus",
    "libvorbis": "vorbis",
    "libmp3lame": "mp3",
    "libfdk_aac": "aac",
}

QUALITY_TIERS: dict[QualityTier, tuple[int, str, str]] = {
    QualityTier.HIGHEST: (18, "slow", "320k"),
    QualityTier.HIGH: (23, "medium", "192k"),
    QualityTier.MEDIUM: (28, "fast", "128k"),
    QualityTier.LOW: (32, "veryfast", "96k"),
}

# Candidate encoders per compatibility level, most preferred first
_VIDEO_CANDIDATES: dict[CompatibilityLevel, tuple[str, ...]] = {
    CompatibilityLevel.MAXIMUM: ("libx264", "libvpx-vp9", "mpeg4"),
    CompatibilityLevel.MODERN: ("libx264", "libx265", "libvpx-vp9", "prores_ks"),
    CompatibilityLevel.CUTTING_EDGE: ("libsvtav1", "libx265", "libvpx-vp9", "prores_ks"),
}

_AUDIO_CANDIDATES = ("aac", "libopus", "libmp3lame", "pcm_s16le")
_SMALL_AUDIO_CANDIDATES = ("libopus", "aac", "libmp3lame", "pcm_s16le")

_VIDEO_PROFILES = {CompatibilityLevel.MAXIMUM: "baseline", CompatibilityLevel.MODERN: "main"}


def codec_format(codec: str) -> str:
    """Normalise an encoder name to the format name used by the tables."""
    name = codec.lower()
    if name in _ENCODER_FORMATS:
        return _ENCODER_FORMATS[name]
    if name.startswith("pcm_"):
        return "pcm"
    if name.startswith("lib"):
        name = name[3:]
    return {"x264": "h264", "x265": "h265", "hevc": "h265"}.get(name, name)


class CodecResolver:
    """Resolves codec intent into configurations and encoder flags."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def default_configuration(self) -> CodecConfiguration:
        return CodecConfiguration(
            video=VideoCodecSettings(
                codec=self.settings.output_video_codec,
                options=VideoCodecOptions(
                    preset=self.settings.output_preset, crf=self.settings.output_crf
                ),
            ),
            audio=AudioCodecSettings(codec=self.settings.output_audio_codec),
        )

    def preset(self, name: str) -> CodecConfiguration:
        """Return the named codec preset."""
        try:
            return CODEC_PRESETS[name]
        except KeyError:
            raise CodecError(
                f"Unknown codec preset: {name}",
                details={"available": sorted(CODEC_PRESETS)},
            )

    def apply_hardware(
        self, config: CodecConfiguration | None, kind: HardwareAcceleration | str
    ) -> CodecConfiguration:
        """Swap the video encoder for the hardware encoder of ``kind``."""
        try:
            kind = HardwareAcceleration(kind)
        except ValueError:
            raise CodecError(
                f"Unknown hardware acceleration: {kind}",
                details={"available": [h.value for h in HardwareAcceleration]},
            )
        config = config or self.default_configuration()
        if kind not in HARDWARE_PROFILES:
            return config

        encoder, _, profile = HARDWARE_PROFILES[kind]
        current = config.video.options if config.video else VideoCodecOptions()
        # crf is a software-encoder option; hardware encoders take their own rate control
        options = current.model_copy(
            update={
                **profile,
                "crf": None,
                "extra": {**current.extra, **profile.get("extra", {})},
            }
        )
        return config.model_copy(
            update={"video": VideoCodecSettings(codec=encoder, options=options)}
        )

    def hwaccel_args(self, kind: HardwareAcceleration) -> list[str]:
        """Decoder acceleration flags; these go before the inputs."""
        if kind == HardwareAcceleration.NONE:
            return []
        if kind == HardwareAcceleration.AUTO:
            return ["-hwaccel", "auto"]
        return ["-hwaccel", HARDWARE_PROFILES[kind][1]]

    def auto_select(
        self,
        container: str = "mp4",
        quality: QualityTier | str = QualityTier.HIGH,
        compatibility: CompatibilityLevel | str = CompatibilityLevel.MODERN,
        file_size: str | None = None,
    ) -> CodecConfiguration:
        """Pick encoders and quality settings for the given requirements.

        Candidates are tried in preference order and the first one the
        container accepts wins, so the result never contradicts the
        compatibility table for known containers.
        """
        try:
            quality = QualityTier(quality)
            compatibility = CompatibilityLevel(compatibility)
        except ValueError as e:
            raise CodecError(str(e))
        crf, preset, audio_bitrate = QUALITY_TIERS[quality]
        supported = CONTAINER_CODECS.get(container.lower())

        video_candidates = list(_VIDEO_CANDIDATES[compatibility])
        if compatibility == CompatibilityLevel.MODERN and quality == QualityTier.HIGHEST:
            video_candidates.remove("libx265")
            video_candidates.insert(0, "libx265")
        audio_candidates = _AUDIO_CANDIDATES
        if file_size == "smallest":
            crf = min(crf + 5, 51)
            audio_bitrate = "64k"
            audio_candidates = _SMALL_AUDIO_CANDIDATES

        video_codec = self._first_supported(video_candidates, supported)
        audio_codec = self._first_supported(audio_candidates, supported)

        video_options = {"crf": crf, "preset": preset}
        if codec_format(video_codec) == "h264" and compatibility in _VIDEO_PROFILES:
            video_options["profile"] = _VIDEO_PROFILES[compatibility]

        return CodecConfiguration(
            video=VideoCodecSettings(codec=video_codec, options=VideoCodecOptions(**video_options)),
            audio=AudioCodecSettings(
                codec=audio_codec, options=AudioCodecOptions(bitrate=audio_bitrate)
            ),
        )

    def _first_supported(self, candidates, supported: list[str] | None) -> str:
        if supported is None:
            return candidates[0]
        for codec in candidates:
            if codec_format(codec) in supported:
                return codec
        return candidates[0]

    def check_compatibility(
        self,
        config: CodecConfiguration | None,
        container: str,
        platform: str | None = None,
    ) -> CompatibilityReport:
        """Check a configuration against a container and optional platform."""
        config = config or self.default_configuration()
        container = container.lower()
        warnings: list[str] = []
        alternatives: list[str] = []

        checks = []
        if config.video:
            checks.append((config.video.codec, "Video", PREFERRED_VIDEO, VIDEO_FORMATS))
        if config.audio:
            checks.append((config.audio.codec, "Audio", PREFERRED_AUDIO, AUDIO_FORMATS))

        supported = CONTAINER_CODECS.get(container)
        if supported is None:
            warnings.append(f"Unknown container: {container}")
            for codec, _, _, _ in checks:
                alternatives.extend(self._containers_for(codec_format(codec)))
            if not alternatives:
                alternatives.extend(CONTAINER_CODECS)
        else:
            for codec, label, preferred, formats in checks:
                if codec_format(codec) in supported:
                    continue
                warnings.append(f"{label} codec {codec} not supported in {container} container")
                suggestions = [c for c in preferred if c in supported]
                if not suggestions:
                    suggestions = [c for c in supported if c in formats]
                if not suggestions:
                    suggestions = self._containers_for(codec_format(codec))
                alternatives.extend(suggestions)

        if platform:
            platform_codecs = PLATFORM_CODECS.get(platform.lower())
            if platform_codecs is None:
                warnings.append(f"Unknown platform: {platform}")
                alternatives.extend(PLATFORM_CODECS)
            else:
                for codec, label, preferred, formats in checks:
                    if codec_format(codec) in platform_codecs:
                        continue
                    warnings.append(f"{label} codec {codec} may not be supported on {platform}")
                    suggestions = [c for c in platform_codecs if c in formats]
                    alternatives.extend(suggestions or platform_codecs)

        alternatives = list(dict.fromkeys(alternatives))
        return CompatibilityReport(
            compatible=not warnings, warnings=warnings, alternatives=alternatives
        )

    def _containers_for(self, fmt: str) -> list[str]:
        containers = [name for name, codecs in CONTAINER_CODECS.items() if fmt in codecs]
        return containers or list(CONTAINER_CODECS)

    def settings_for_file_size(
        self,
        target_mb: float,
        duration: float,
        has_audio: bool = True,
        base: CodecConfiguration | None = None,
    ) -> CodecConfiguration:
        """Derive bitrate limits and CRF that aim for ``target_mb`` megabytes."""
        if target_mb <= 0:
            raise CodecError(f"Target file size must be greater than 0, got {target_mb}")
        if duration <= 0:
            raise CodecError(f"Duration must be greater than 0, got {duration}")

        audio_kbps = self.settings.default_audio_bitrate_kbps if has_audio else 0
        total_kbit = target_mb * 8 * 1024
        video_kbps = total_kbit / duration - audio_kbps
        video_kbps = min(
            max(video_kbps, self.settings.min_video_bitrate_kbps),
            self.settings.max_video_bitrate_kbps,
        )

        if video_kbps > 5000:
            crf = 18
        elif video_kbps > 2500:
            crf = 23
        elif video_kbps > 1000:
            crf = 28
        else:
            crf = 32

        base = base or self.default_configuration()
        video = base.video or self.default_configuration().video
        if video.options.crf is not None:
            crf = max(crf, video.options.crf)
        rate = round(video_kbps)
        video = video.model_copy(
            update={
                "options": video.options.model_copy(
                    update={"crf": crf, "max_bitrate": f"{rate}k", "buffer_size": f"{rate * 2}k"}
                )
            }
        )

        audio = base.audio
        if has_audio:
            audio = audio or self.default_configuration().audio
            audio = audio.model_copy(
                update={"options": audio.options.model_copy(update={"bitrate": f"{audio_kbps}k"})}
            )
        logger.debug(
            "File size target %.1fMB over %.1fs -> %dk video, crf %d",
            target_mb,
            duration,
            rate,
            crf,
        )
        return CodecConfiguration(video=video, audio=audio)

    def to_ffmpeg_args(self, config: CodecConfiguration) -> list[str]:
        """Render encoder flags in their documented order."""
        args: list[str] = []
        if config.video:
            opts = config.video.options
            args.extend(["-c:v", config.video.codec])
            if opts.preset:
                args.extend(["-preset", opts.preset])
            if opts.crf is not None:
                args.extend(["-crf", str(opts.crf)])
            if opts.bitrate:
                args.extend(["-b:v", opts.bitrate])
            if opts.max_bitrate:
                args.extend(["-maxrate", opts.max_bitrate])
            if opts.buffer_size:
                args.extend(["-bufsize", opts.buffer_size])
            if opts.profile:
                args.extend(["-profile:v", opts.profile])
            if opts.level:
                args.extend(["-level", opts.level])
            if opts.pixel_format:
                args.extend(["-pix_fmt", opts.pixel_format])
            if opts.gop_size is not None:
                args.extend(["-g", str(opts.gop_size)])
            if opts.b_frames is not None:
                args.extend(["-bf", str(opts.b_frames)])
            if opts.ref_frames is not None:
                args.extend(["-refs", str(opts.ref_frames)])
            if opts.tune:
                args.extend(["-tune", opts.tune])
            for key, value in opts.extra.items():
                args.extend([f"-{key}", value])

        if config.audio:
            opts = config.audio.options
            args.extend(["-c:a", config.audio.codec])
            if opts.bitrate:
                args.extend(["-b:a", opts.bitrate])
            if opts.sample_rate is not None:
                args.extend(["-ar", str(opts.sample_rate)])
            if opts.channels is not None:
                args.extend(["-ac", str(opts.channels)])
            if opts.profile:
                args.extend(["-profile:a", opts.profile])
            if opts.compression_level is not None:
                args.extend(["-compression_level", str(opts.compression_level)])
            if opts.quality is not None:
                args.extend(["-q:a", f"{opts.quality:g}"])
            if opts.vbr and codec_format(config.audio.codec) == "opus":
                args.extend(["-vbr", "on"])
        return args
