"""Compiled command models."""

import shlex

from pydantic import BaseModel, Field


class InputBinding(BaseModel):
    """One ``-i`` input of the compiled command."""

    index: int = Field(..., ge=0)
    source: str
    options: list[str] = Field(default_factory=list, description="Input flags before -i")

    def to_args(self) -> list[str]:
        return [*self.options, "-i", self.source]


class CompiledCommand(BaseModel):
    """The result of compiling a composition."""

    argv: list[str]
    filter_complex: str = ""
    inputs: list[InputBinding] = Field(default_factory=list)
    video_output: str | None = Field(default=None, description="Mapped video pad or stream")
    audio_output: str | None = Field(default=None, description="Mapped audio pad or stream")
    duration: float = Field(default=0.0, ge=0)

    def to_string(self) -> str:
        return shlex.join(self.argv)
