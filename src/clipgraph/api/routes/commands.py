"""Compile endpoint."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from clipgraph.api.dependencies import get_command_builder
from clipgraph.models.options import RenderOptions
from clipgraph.rendering.ffmpeg_builder import FFmpegCommandBuilder
from clipgraph.timeline.composition import Composition

router = APIRouter(prefix="/api/v1", tags=["compile"])


class CompileRequest(BaseModel):
    composition: dict[str, Any] = Field(..., description="Snapshot as produced by to_json()")
    output_path: str = Field(..., min_length=1)
    render: RenderOptions | None = None


@router.post("/compile")
async def compile_composition(
    request: CompileRequest,
    builder: FFmpegCommandBuilder = Depends(get_command_builder),
):
    """Compile a composition snapshot into an ffmpeg command."""
    composition = Composition.from_json(request.composition)
    command = builder.build(composition, request.output_path, request.render)
    return {
        "command": command.to_string(),
        "argv": command.argv,
        "filter_complex": command.filter_complex,
        "inputs": [binding.model_dump() for binding in command.inputs],
        "duration": command.duration,
    }
