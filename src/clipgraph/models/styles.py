"""Position, style and animation models shared by layers and captions."""

import logging
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clipgraph.models.transitions import Direction

logger = logging.getLogger(__name__)

NAMED_POSITIONS = (
    "center",
    "top",
    "bottom",
    "left",
    "right",
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
)


class Position(BaseModel):
    """Explicit placement: pixels as numbers, or percentages as ``"NN%"`` strings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: float | str = Field(default=0)
    y: float | str = Field(default=0)
    anchor: str | None = Field(default=None, description="Which point of the layer x/y refer to")

    @field_validator("x", "y")
    @classmethod
    def validate_coordinate(cls, v: float | str) -> float | str:
        if isinstance(v, str):
            number = v[:-1] if v.endswith("%") else None
            try:
                float(number)
            except (TypeError, ValueError):
                raise ValueError(f"Coordinate must be a number or a percentage, got {v!r}")
        return v


class VisualStyle(BaseModel):
    """Style for video and image layers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    scale: float | None = Field(default=None, gt=0, description="Scale factor of the source")
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    opacity: float | None = Field(default=None, ge=0, le=1)
    rotation: float | None = Field(default=None, description="Rotation in degrees")


class TextStyle(BaseModel):
    """Style for text layers and captions."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    font_size: int | None = Field(default=None, gt=0)
    font_family: str | None = None
    font_file: str | None = None
    color: str | None = None
    opacity: float | None = Field(default=None, ge=0, le=1)
    background_color: str | None = None
    padding: int | None = Field(default=None, ge=0)
    stroke_color: str | None = None
    stroke_width: int | None = Field(default=None, ge=0)
    shadow_color: str | None = None
    shadow_x: int | None = None
    shadow_y: int | None = None

    def merged(self, override: "TextStyle | None") -> "TextStyle":
        """Return this style with every field set on ``override`` replacing ours."""
        if override is None:
            return self
        return self.model_copy(update=override.model_dump(exclude_none=True))


class DuckingMode(StrEnum):
    SIDECHAIN = "sidechain"
    REGIONS = "regions"


class Ducking(BaseModel):
    """Lower a background track while a voice is present.

    ``sidechain`` compresses the background whenever the ``voice`` layer
    is loud; ``threshold`` and ``ratio`` control how hard. ``regions``
    drops the background to ``level`` inside fixed time windows, ramping
    down over ``attack`` seconds and back up over ``release``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: DuckingMode = DuckingMode.SIDECHAIN
    voice: str | None = Field(
        default=None, description="Source of the layer that triggers ducking"
    )
    level: float = Field(default=0.3, gt=0, le=1, description="Gain inside ducked regions")
    threshold: float = Field(default=0.05, ge=0.001, le=1)
    ratio: float = Field(default=4.0, ge=1, le=20)
    attack: float = Field(default=0.3, gt=0, le=2, description="Seconds to duck down")
    release: float = Field(default=0.5, gt=0, le=9, description="Seconds to recover")
    hold: float = Field(default=0.1, ge=0, description="Seconds held after a region ends")
    anticipation: float = Field(default=0.1, ge=0, description="Seconds ducked before a region")
    band: tuple[int, int] | None = Field(
        default=None, description="Voice frequency band (Hz) the sidechain listens to"
    )
    regions: tuple[tuple[float, float], ...] = ()

    @model_validator(mode="after")
    def validate_mode(self):
        if self.mode == DuckingMode.SIDECHAIN and not self.voice:
            raise ValueError("Sidechain ducking needs a voice source")
        if self.mode == DuckingMode.REGIONS and not self.regions:
            raise ValueError("Region ducking needs at least one region")
        for start, end in self.regions:
            if start < 0 or end <= start:
                raise ValueError(f"Invalid ducking region ({start}, {end})")
        if self.band is not None and not 0 < self.band[0] < self.band[1]:
            raise ValueError(f"Invalid ducking band {self.band}")
        return self


class AudioStyle(BaseModel):
    """Style for audio layers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    volume: float | None = Field(default=None, ge=0)
    pan: float | None = Field(default=None, ge=-1, le=1, description="-1 left, 1 right")
    fade_in: float | None = Field(default=None, gt=0)
    fade_out: float | None = Field(default=None, gt=0)
    tempo: float | None = Field(default=None, gt=0)
    lowpass: int | None = Field(default=None, gt=0, description="Cutoff in Hz")
    highpass: int | None = Field(default=None, gt=0, description="Cutoff in Hz")
    ducking: Ducking | None = None


class AnimationType(StrEnum):
    """Text animations. Unknown names degrade to a fade-in."""

    FADE_IN = "fade-in"
    FADE_OUT = "fade-out"
    SLIDE_IN = "slide-in"
    ZOOM_IN = "zoom-in"
    TYPEWRITER = "typewriter"

    @classmethod
    def _missing_(cls, value):
        logger.warning("Unknown text animation %r, falling back to fade-in", value)
        return cls.FADE_IN


class TextAnimation(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: AnimationType = Field(default=AnimationType.FADE_IN)
    duration: float = Field(default=0.5, gt=0)
    delay: float = Field(default=0.0, ge=0)
    direction: Direction | None = None
