"""Caption track data models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clipgraph.models.styles import Position, TextAnimation, TextStyle


class SubtitleFormat(StrEnum):
    SRT = "srt"
    VTT = "vtt"
    ASS = "ass"
    JSON = "json"


class Caption(BaseModel):
    """One timed caption inside a track."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="")
    text: str
    start_time: float = Field(..., ge=0)
    end_time: float = Field(..., ge=0)
    style: TextStyle | None = None
    animation: TextAnimation | None = None

    @model_validator(mode="after")
    def validate_time_range(self) -> "Caption":
        if self.end_time <= self.start_time:
            raise ValueError(
                f"end_time ({self.end_time}) must be > start_time ({self.start_time})"
            )
        return self

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class CaptionTrackConfig(BaseModel):
    """Per-language track settings stored on the composition."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    language: str = Field(..., min_length=1)
    language_name: str = Field(default="")
    style: TextStyle | None = None
    position: str | Position | None = None
    enabled: bool = True


class CaptionTrack(BaseModel):
    """A read-only view of one language's captions in start-time order."""

    id: str
    language: str
    language_name: str = ""
    captions: list[Caption] = Field(default_factory=list)
    style: TextStyle | None = None
    position: str | Position | None = None
    enabled: bool = True


class CaptionStatistics(BaseModel):
    caption_count: int = Field(default=0, ge=0)
    total_duration: float = Field(default=0.0, ge=0)
    average_duration: float = Field(default=0.0, ge=0)
    words_per_minute: float = Field(default=0.0, ge=0)
