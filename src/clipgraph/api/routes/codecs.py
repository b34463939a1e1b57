"""Codec endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from clipgraph.api.dependencies import get_codec_resolver
from clipgraph.codecs.resolver import CODEC_PRESETS, CodecResolver
from clipgraph.models.codecs import CompatibilityReport
from clipgraph.timeline.composition import Composition

router = APIRouter(prefix="/api/v1", tags=["codecs"])


class CompatibilityRequest(BaseModel):
    composition: dict[str, Any] = Field(default_factory=dict)
    container: str = Field(default="mp4", min_length=1)
    platform: str | None = None


@router.post("/codecs/compatibility", response_model=CompatibilityReport)
async def check_compatibility(
    request: CompatibilityRequest,
    resolver: CodecResolver = Depends(get_codec_resolver),
):
    """Check a composition's codec intent against a container and platform."""
    composition = Composition.from_json(request.composition)
    return resolver.check_compatibility(
        composition.options.codec, request.container, request.platform
    )


@router.get("/codecs/presets")
async def list_presets():
    """List the named codec presets."""
    return {
        name: config.model_dump(mode="json", exclude_none=True)
        for name, config in CODEC_PRESETS.items()
    }
