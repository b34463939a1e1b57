"""Layer data models.

A layer is one declarative element of a composition. Layers are frozen
pydantic models discriminated by ``kind``; unknown keys are rejected.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clipgraph.models.styles import AudioStyle, Position, TextAnimation, TextStyle, VisualStyle
from clipgraph.models.transitions import TransitionSpec

FilterValue = str | int | float | bool


class LayerBase(BaseModel):
    """Fields shared by every layer kind."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    source: str = Field(default="", description="Path, literal text or filter name")
    start_time: float = Field(default=0.0, ge=0, description="Start on the output timeline")
    duration: float | None = Field(
        default=None, gt=0, description="Seconds on screen; None runs to composition end"
    )
    z_order: int | None = Field(default=None, description="None means insertion order")

    @property
    def end_time(self) -> float | None:
        if self.duration is None:
            return None
        return self.start_time + self.duration


class PositionedLayer(LayerBase):
    position: str | Position | None = Field(default=None)
    margin: int | None = Field(default=None, ge=0, description="Inset for named positions")

    @field_validator("position", mode="before")
    @classmethod
    def coerce_pair(cls, v):
        if isinstance(v, (tuple, list)):
            if len(v) != 2:
                raise ValueError("Position pairs must have exactly two items")
            return {"x": v[0], "y": v[1]}
        return v


class TrimmedMixin(BaseModel):
    trim_start: float | None = Field(default=None, ge=0, description="Source in-point")
    trim_end: float | None = Field(default=None, gt=0, description="Source out-point")

    @model_validator(mode="after")
    def validate_trim(self):
        if self.trim_start is not None and self.trim_end is not None:
            if self.trim_end <= self.trim_start:
                raise ValueError(
                    f"trim_end ({self.trim_end}) must be > trim_start ({self.trim_start})"
                )
        return self


class VideoLayer(PositionedLayer, TrimmedMixin):
    kind: Literal["video"] = "video"
    style: VisualStyle | None = None
    muted: bool = Field(default=False, description="Exclude the clip's own audio from the mix")
    volume: float | None = Field(default=None, ge=0)


class AudioLayer(LayerBase, TrimmedMixin):
    kind: Literal["audio"] = "audio"
    style: AudioStyle | None = None
    loop: bool = Field(default=False, description="Repeat the source until the layer ends")


class ImageLayer(PositionedLayer):
    kind: Literal["image"] = "image"
    style: VisualStyle | None = None


class TextLayer(PositionedLayer):
    kind: Literal["text"] = "text"
    style: TextStyle | None = None
    track: str | None = Field(default=None, description="Caption track this text belongs to")
    animation: TextAnimation | None = None


class FilterLayer(LayerBase):
    kind: Literal["filter"] = "filter"
    options: dict[str, FilterValue] = Field(default_factory=dict)


class TransitionMarkerLayer(LayerBase):
    """Requests the transition into the next video or image layer."""

    kind: Literal["transition-marker"] = "transition-marker"
    transition: TransitionSpec = Field(default_factory=TransitionSpec)


Layer = Annotated[
    Union[VideoLayer, AudioLayer, ImageLayer, TextLayer, FilterLayer, TransitionMarkerLayer],
    Field(discriminator="kind"),
]

MEDIA_KINDS = ("video", "audio", "image")
VISUAL_KINDS = ("video", "image", "text", "filter")
