"""Codec configuration data models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QualityTier(StrEnum):
    HIGHEST = "highest"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CompatibilityLevel(StrEnum):
    MAXIMUM = "maximum"
    MODERN = "modern"
    CUTTING_EDGE = "cutting-edge"


class HardwareAcceleration(StrEnum):
    NONE = "none"
    AUTO = "auto"
    NVIDIA = "nvidia"
    INTEL = "intel"
    AMD = "amd"
    APPLE = "apple"


class VideoCodecOptions(BaseModel):
    """Encoder parameters, rendered in a fixed flag order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    preset: str | None = None
    crf: int | None = Field(default=None, ge=0, le=63)
    bitrate: str | None = Field(default=None, description="e.g. '2500k'")
    max_bitrate: str | None = None
    buffer_size: str | None = None
    profile: str | None = None
    level: str | None = None
    pixel_format: str | None = None
    gop_size: int | None = Field(default=None, gt=0)
    b_frames: int | None = Field(default=None, ge=0)
    ref_frames: int | None = Field(default=None, gt=0)
    tune: str | None = None
    extra: dict[str, str] = Field(default_factory=dict, description="Appended as -key value")


class AudioCodecOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    bitrate: str | None = None
    sample_rate: int | None = Field(default=None, gt=0)
    channels: int | None = Field(default=None, gt=0)
    profile: str | None = None
    compression_level: int | None = Field(default=None, ge=0)
    quality: float | None = Field(default=None, description="Rendered as -q:a")
    vbr: bool | None = None


class VideoCodecSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    codec: str = Field(..., min_length=1)
    options: VideoCodecOptions = Field(default_factory=VideoCodecOptions)


class AudioCodecSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    codec: str = Field(..., min_length=1)
    options: AudioCodecOptions = Field(default_factory=AudioCodecOptions)


class CodecConfiguration(BaseModel):
    """Video and audio encoder intent for one output."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    video: VideoCodecSettings | None = None
    audio: AudioCodecSettings | None = None


class CompatibilityReport(BaseModel):
    """Result of checking a codec configuration against a container/platform."""

    compatible: bool
    warnings: list[str] = Field(default_factory=list)
    alternatives: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_alternatives(self) -> "CompatibilityReport":
        if not self.compatible and not self.alternatives:
            raise ValueError("An incompatible report must suggest at least one alternative")
        return self
