"""Error handling for the API."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from clipgraph.models.errors import (
    CaptionError,
    ClipgraphError,
    CodecError,
    CompositionError,
    ErrorResponse,
)

logger = logging.getLogger(__name__)

_GUIDANCE = {
    CompositionError: "Check layer timing and option values in the composition.",
    CaptionError: "Register the caption track first and use srt, vtt, ass or json.",
    CodecError: "Use one of the listed codec presets or hardware profiles.",
}


async def clipgraph_error_handler(request: Request, exc: ClipgraphError) -> JSONResponse:
    """Handle ClipgraphError exceptions."""
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    response = ErrorResponse.from_exception(exc, guidance=_get_guidance(exc))
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


def _get_status_code(exc: ClipgraphError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(exc, (CompositionError, CaptionError, CodecError)):
        return 400
    return 500


def _get_guidance(exc: ClipgraphError) -> str:
    for error_type, guidance in _GUIDANCE.items():
        if isinstance(exc, error_type):
            return guidance
    return "Please try again or contact support."
