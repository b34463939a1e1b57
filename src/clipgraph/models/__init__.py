"""Data models for clipgraph."""

from clipgraph.models.captions import (
    Caption,
    CaptionStatistics,
    CaptionTrack,
    CaptionTrackConfig,
    SubtitleFormat,
)
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
from clipgraph.models.command import CompiledCommand, InputBinding
from clipgraph.models.errors import (
    CaptionError,
    ClipgraphError,
    CodecError,
    CompositionError,
    ErrorResponse,
)
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
    AnimationType,
    AudioStyle,
    Position,
    TextAnimation,
    TextStyle,
    VisualStyle,
)
from clipgraph.models.transitions import (
    Direction,
    Easing,
    TransitionFragment,
    TransitionPoint,
    TransitionSpec,
    TransitionType,
)

__all__ = [
    "AnimationType",
    "AudioCodecOptions",
    "AudioCodecSettings",
    "AudioLayer",
    "AudioStyle",
    "Caption",
    "CaptionError",
    "CaptionStatistics",
    "CaptionTrack",
    "CaptionTrackConfig",
    "ClipgraphError",
    "CodecConfiguration",
    "CodecError",
    "CompatibilityLevel",
    "CompatibilityReport",
    "CompiledCommand",
    "CompositionError",
    "CropRegion",
    "Direction",
    "Easing",
    "ErrorResponse",
    "FilterLayer",
    "GlobalOptions",
    "HardwareAcceleration",
    "ImageLayer",
    "InputBinding",
    "Layer",
    "PlatformValidation",
    "Position",
    "QualityTier",
    "RenderOptions",
    "SubtitleFormat",
    "TextAnimation",
    "TextLayer",
    "TextStyle",
    "TransitionFragment",
    "TransitionMarkerLayer",
    "TransitionPoint",
    "TransitionSpec",
    "TransitionType",
    "TrimRange",
    "VideoCodecOptions",
    "VideoCodecSettings",
    "VideoLayer",
    "VisualStyle",
]
