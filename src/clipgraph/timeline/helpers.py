"""Shortcut constructors for common compositions."""

from clipgraph.models.errors import CompositionError
from clipgraph.timeline.composition import Composition

# platform -> (aspect ratio, width, height)
PLATFORM_FORMATS: dict[str, tuple[str, int, int]] = {
    "tiktok": ("9:16", 1080, 1920),
    "youtube": ("16:9", 1920, 1080),
    "twitter": ("16:9", 1280, 720),
    "linkedin": ("16:9", 1920, 1080),
    "square": ("1:1", 1080, 1080),
    "portrait": ("9:16", 1080, 1920),
    "landscape": ("16:9", 1920, 1080),
}

INSTAGRAM_FORMATS = {"reels": "portrait", "story": "portrait", "feed": "square"}


def video(path: str, **options) -> Composition:
    return Composition().add_video(path, **options)


def _framed(path: str, platform: str, options: dict) -> Composition:
    aspect, width, height = PLATFORM_FORMATS[platform]
    return video(path, **options).set_aspect_ratio(aspect).set_resolution(width, height)


def tiktok(path: str, **options) -> Composition:
    return _framed(path, "tiktok", options)


def youtube(path: str, **options) -> Composition:
    return _framed(path, "youtube", options)


def instagram(path: str, format: str = "reels", **options) -> Composition:
    """Reels and stories are 9:16, feed posts are square."""
    if format not in INSTAGRAM_FORMATS:
        raise CompositionError(
            f"Unknown Instagram format: {format}", details={"available": list(INSTAGRAM_FORMATS)}
        )
    return _framed(path, INSTAGRAM_FORMATS[format], options)


def twitter(path: str, **options) -> Composition:
    return _framed(path, "twitter", options)


def linkedin(path: str, **options) -> Composition:
    return _framed(path, "linkedin", options)


def square(path: str, **options) -> Composition:
    return _framed(path, "square", options)


def portrait(path: str, **options) -> Composition:
    return _framed(path, "portrait", options)


def landscape(path: str, **options) -> Composition:
    return _framed(path, "landscape", options)


def image(path: str, duration: float | str | None = None, **options) -> Composition:
    return Composition().add_image(path, duration=duration, **options)


def audio(path: str, **options) -> Composition:
    return Composition().add_audio(path, **options)


def concat(paths: list[str], duration: float | None = None) -> Composition:
    """Place clips back to back.

    Each clip runs for ``duration`` seconds, or the default media length
    when no duration is given.
    """
    if not paths:
        raise CompositionError("At least one video path is required")
    comp = video(paths[0], duration=duration)
    for path in paths[1:]:
        comp = comp.concat(video(path, duration=duration))
    return comp


def loop(path: str, count: int, duration: float | None = None) -> Composition:
    """Repeat one clip ``count`` times back to back."""
    if count < 1:
        raise CompositionError("Loop count must be at least 1", details={"count": count})
    return concat([path] * count, duration=duration)
