"""Error hierarchy and error response models."""

from pydantic import BaseModel, Field


class ClipgraphError(Exception):
    """Base error for all clipgraph errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class CompositionError(ClipgraphError):
    """Structurally impossible compositions (bad durations, empty inputs)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="composition", details=details)


class CaptionError(ClipgraphError):
    """Unknown caption tracks or unreadable subtitle content."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="captions", details=details)


class CodecError(ClipgraphError):
    """Unknown codec presets or hardware profiles."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="codecs", details=details)


class ErrorResponse(BaseModel):
    """Standardized error response for API."""

    error_type: str = Field(..., description="Error category")
    component: str = Field(default="", description="Component that raised the error")
    message: str = Field(..., description="Human-readable error message")
    details: dict = Field(default_factory=dict)
    actionable_guidance: str = Field(default="", description="Suggested user action")

    @classmethod
    def from_exception(cls, exc: ClipgraphError, guidance: str = "") -> "ErrorResponse":
        return cls(
            error_type=type(exc).__name__,
            component=exc.component,
            message=exc.message,
            details=exc.details,
            actionable_guidance=guidance,
        )
