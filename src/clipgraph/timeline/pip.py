"""Picture-in-picture overlays."""

import logging
import math
from typing import Literal

from clipgraph.models.errors import CompositionError
from clipgraph.models.styles import Position
from clipgraph.timeline.composition import Composition

logger = logging.getLogger(__name__)

AudioMix = Literal["duck", "mute", "mix"]

PIP_VOLUMES = {"duck": 0.3, "mix": 1.0}


def add_picture_in_picture(
    comp: Composition,
    path: str,
    position: str | Position = "bottom-right",
    scale: float = 0.25,
    margin: int = 20,
    start_time: float = 0,
    duration: float | None = None,
    audio: AudioMix = "duck",
) -> Composition:
    """Overlay a scaled-down clip on top of ``comp``.

    The overlay's picture is always muted; unless ``audio="mute"`` its
    sound is added as a separate audio layer reading the same input.
    """
    if audio not in ("duck", "mute", "mix"):
        raise CompositionError(
            f"Unknown picture-in-picture audio mode: {audio}",
            details={"available": ["duck", "mute", "mix"]},
        )
    result = comp.add_video(
        path,
        start_time=start_time,
        duration=duration,
        position=position,
        margin=margin,
        style={"scale": scale},
        muted=True,
    )
    if audio != "mute":
        result = result.add_audio(
            path,
            start_time=start_time,
            duration=duration,
            style={"volume": PIP_VOLUMES[audio]},
        )
    return result


def _layout(count: int, layout: str) -> list[tuple[Position, float]]:
    if layout == "stack":
        return [(Position(x="5%", y=f"{5 + i * 25}%"), 0.2) for i in range(count)]
    if layout == "carousel":
        step = 2 * math.pi / count
        return [
            (
                Position(
                    x=f"{round(50 + 35 * math.cos(i * step), 2)}%",
                    y=f"{round(50 + 35 * math.sin(i * step), 2)}%",
                    anchor="center",
                ),
                0.15,
            )
            for i in range(count)
        ]
    # grid
    size = math.ceil(math.sqrt(count))
    cell = 100 / size
    return [
        (
            Position(x=f"{round((i % size) * cell, 2)}%", y=f"{round((i // size) * cell, 2)}%"),
            0.9 / size,
        )
        for i in range(count)
    ]


def add_multiple_pip(
    comp: Composition,
    paths: list[str],
    layout: Literal["grid", "stack", "carousel"] = "grid",
    audio: AudioMix = "mute",
) -> Composition:
    """Arrange several overlays in a grid, a vertical stack or a circle.

    An empty ``paths`` list returns ``comp`` itself.
    """
    if not paths:
        return comp
    if layout not in ("grid", "stack", "carousel"):
        logger.warning("Unknown picture-in-picture layout %r, using grid", layout)
        layout = "grid"
    result = comp
    for path, (position, scale) in zip(paths, _layout(len(paths), layout)):
        result = add_picture_in_picture(result, path, position=position, scale=scale, audio=audio)
    return result
