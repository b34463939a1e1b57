"""Composition-wide option models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clipgraph.models.captions import CaptionTrackConfig
from clipgraph.models.codecs import CodecConfiguration, HardwareAcceleration
from clipgraph.models.transitions import TransitionSpec


class TrimRange(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    start: float = Field(default=0.0, ge=0)
    end: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def validate_range(self) -> "TrimRange":
        if self.end is not None and self.end <= self.start:
            raise ValueError(f"Trim end ({self.end}) must be > start ({self.start})")
        return self


class CropRegion(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    x: int = Field(default=0, ge=0)
    y: int = Field(default=0, ge=0)


class GlobalOptions(BaseModel):
    """Options that apply to the whole output rather than one layer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    resolution: tuple[int, int] | None = Field(default=None, description="(width, height)")
    frame_rate: float | None = Field(default=None, gt=0)
    aspect_ratio: str | None = Field(default=None, pattern=r"^\d+(\.\d+)?:\d+(\.\d+)?$")
    duration: float | None = Field(default=None, gt=0, description="Output duration override")
    trim: TrimRange | None = None
    crop: CropRegion | None = None
    background_color: str | None = None
    codec: CodecConfiguration | None = None
    hardware_acceleration: HardwareAcceleration = HardwareAcceleration.NONE
    transition: TransitionSpec | None = Field(
        default=None, description="Transition requested for overlapping clips"
    )
    caption_tracks: tuple[CaptionTrackConfig, ...] = ()

    @model_validator(mode="after")
    def validate_resolution(self) -> "GlobalOptions":
        if self.resolution is not None and min(self.resolution) <= 0:
            raise ValueError(f"Resolution must be positive, got {self.resolution}")
        return self


class RenderOptions(BaseModel):
    """Per-call output options that are not part of the composition value."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    quality: Literal["low", "medium", "high", "ultra"] | None = None
    video_bitrate: str | None = None
    audio_bitrate: str | None = None
    overwrite: bool = True


class PlatformValidation(BaseModel):
    """Result of checking a composition's framing against a platform."""

    platform: str
    valid: bool
    expected_aspect_ratio: str
    warnings: list[str] = Field(default_factory=list)
