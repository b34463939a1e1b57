"""Transition data models."""

import logging
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class TransitionType(StrEnum):
    """Supported transition kinds. Unknown names degrade to a fade."""

    FADE = "fade"
    DISSOLVE = "dissolve"
    SLIDE = "slide"
    WIPE = "wipe"
    ZOOM = "zoom"
    IRIS = "iris"
    GLITCH = "glitch"
    NONE = "none"

    @classmethod
    def _missing_(cls, value):
        logger.warning("Unknown transition type %r, falling back to fade", value)
        return cls.FADE


class Easing(StrEnum):
    """Progress curves applied to animated transition expressions."""

    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"

    @classmethod
    def _missing_(cls, value):
        logger.warning("Unknown easing %r, falling back to linear", value)
        return cls.LINEAR


class Direction(StrEnum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    CENTER_OUT = "center-out"
    CENTER_IN = "center-in"

    @classmethod
    def _missing_(cls, value):
        logger.warning("Unknown transition direction %r, falling back to right", value)
        return cls.RIGHT


class TransitionSpec(BaseModel):
    """A requested transition: what the caller asked for, before clamping."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: TransitionType = Field(default=TransitionType.FADE)
    duration: float = Field(default=1.0, gt=0, description="Requested duration in seconds")
    easing: Easing = Field(default=Easing.EASE_IN_OUT)
    direction: Direction | None = Field(default=None)


class TransitionFragment(BaseModel):
    """Filter text contributed by a transition to the incoming layer's overlay."""

    prepare: list[str] = Field(
        default_factory=list, description="Filters appended to the incoming branch"
    )
    x: str | None = Field(default=None, description="Animated overlay x expression")
    y: str | None = Field(default=None, description="Animated overlay y expression")

    @property
    def is_empty(self) -> bool:
        return not self.prepare and self.x is None and self.y is None


class TransitionPoint(BaseModel):
    """A transition resolved between two layers."""

    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)
    type: TransitionType
    easing: Easing = Field(default=Easing.EASE_IN_OUT)
    direction: Direction | None = None
    requested_duration: float = Field(..., gt=0)
    overlap: float = Field(..., description="Seconds the two layers share; <= 0 means none")
    duration: float = Field(default=0.0, ge=0, description="Effective, clamped duration")
    start: float = Field(default=0.0, ge=0)
    end: float = Field(default=0.0, ge=0)
    fragment: TransitionFragment = Field(default_factory=TransitionFragment)
    filter: str = Field(default="", description="Standalone fragment with [from]/[to] pads")

    @property
    def active(self) -> bool:
        return self.overlap > 0 and self.type != TransitionType.NONE
