"""Declarative video compositions compiled to ffmpeg commands."""

from clipgraph.timeline.composition import Composition
from clipgraph.timeline.ducking import dialogue_mix, duck, duck_at_regions, music_bed
from clipgraph.timeline.effects import (
    blur,
    brightness,
    compose,
    contrast,
    fade_in,
    fade_out,
    grayscale,
    saturation,
    sepia,
    vignette,
    vintage,
)
from clipgraph.timeline.helpers import (
    audio,
    concat,
    image,
    instagram,
    landscape,
    linkedin,
    loop,
    portrait,
    square,
    tiktok,
    twitter,
    video,
    youtube,
)
from clipgraph.timeline.panzoom import ken_burns, pan, pan_zoom, zoom_in, zoom_out
from clipgraph.timeline.pip import add_multiple_pip, add_picture_in_picture

__version__ = "0.1.0"

__all__ = [
    "Composition",
    "__version__",
    "add_multiple_pip",
    "add_picture_in_picture",
    "audio",
    "blur",
    "brightness",
    "compose",
    "concat",
    "contrast",
    "dialogue_mix",
    "duck",
    "duck_at_regions",
    "fade_in",
    "fade_out",
    "grayscale",
    "image",
    "instagram",
    "ken_burns",
    "landscape",
    "linkedin",
    "loop",
    "music_bed",
    "pan",
    "pan_zoom",
    "portrait",
    "saturation",
    "sepia",
    "square",
    "tiktok",
    "twitter",
    "video",
    "vignette",
    "vintage",
    "youtube",
    "zoom_in",
    "zoom_out",
]
