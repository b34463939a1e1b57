"""Caption export endpoint."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from clipgraph.api.dependencies import get_caption_compositor
from clipgraph.captions.compositor import CaptionCompositor
from clipgraph.models.captions import SubtitleFormat
from clipgraph.timeline.composition import Composition

router = APIRouter(prefix="/api/v1", tags=["captions"])


class CaptionExportRequest(BaseModel):
    composition: dict[str, Any]
    track_id: str = Field(..., min_length=1)
    format: SubtitleFormat = SubtitleFormat.SRT


@router.post("/captions/export")
async def export_captions(
    request: CaptionExportRequest,
    compositor: CaptionCompositor = Depends(get_caption_compositor),
):
    """Render one caption track of a composition as subtitle text."""
    composition = Composition.from_json(request.composition)
    track = composition.get_caption_track(request.track_id)
    return {
        "track_id": track.id,
        "format": request.format.value,
        "content": compositor.export(track, request.format),
        "statistics": compositor.statistics(track).model_dump(),
    }
