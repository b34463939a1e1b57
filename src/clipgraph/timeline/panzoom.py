"""Pan and zoom (Ken Burns) effects for ``Composition.pipe``.

Each effect adds a ``zoompan`` filter that moves a crop window from one
rectangle of the input to another and scales it back to the canvas.
"""

import logging
import random
from typing import NamedTuple

from clipgraph.config import get_settings
from clipgraph.models.errors import CompositionError
from clipgraph.models.transitions import Easing
from clipgraph.rendering.expressions import fmt, quote_expression
from clipgraph.rendering.ffmpeg_builder import resolve_canvas
from clipgraph.timeline.composition import Composition
from clipgraph.timeline.effects import Effect
from clipgraph.transitions.resolver import ease

logger = logging.getLogger(__name__)

KEN_BURNS_DIRECTIONS = ("center-out", "top-bottom", "left-right", "diagonal", "random")

PAN_DIRECTIONS = ("left", "right", "up", "down")


class Rect(NamedTuple):
    """A window of the input frame, in input pixels."""

    x: float
    y: float
    width: float
    height: float


def _check_rect(rect: Rect, size: tuple[int, int]) -> None:
    width, height = size
    inside = (
        rect.width > 0
        and rect.height > 0
        and rect.x >= 0
        and rect.y >= 0
        and rect.x + rect.width <= width + 1e-6
        and rect.y + rect.height <= height + 1e-6
    )
    if not inside:
        raise CompositionError(
            f"Pan-zoom rectangle {tuple(rect)} does not fit the {width}x{height} input",
            details={"rect": tuple(rect), "input_size": size},
        )


def _lerp(start: float, end: float, progress: str) -> str:
    delta = end - start
    if abs(delta) < 1e-9:
        return fmt(start)
    sign = "+" if delta > 0 else "-"
    return f"{fmt(start)}{sign}{fmt(abs(delta))}*{progress}"


def _progress(start_time: float, duration: float, fps: float, easing: Easing) -> str:
    # zoompan counts output frames in ``on``; with d=1 that is the input frame
    elapsed = f"on/{fmt(fps)}"
    if start_time > 0:
        elapsed = f"max({elapsed}-{fmt(start_time)},0)"
    return ease(f"min({elapsed}/{fmt(duration)},1)", easing)


def pan_zoom(
    start_rect: Rect | tuple,
    end_rect: Rect | tuple,
    duration: float,
    *,
    start_time: float = 0,
    easing: Easing | str = Easing.LINEAR,
    input_size: tuple[int, int] | None = None,
) -> Effect:
    """Move the visible window from ``start_rect`` to ``end_rect``.

    Rectangles are in input pixels; ``input_size`` defaults to the canvas.
    The window keeps the aspect of the canvas, so a rectangle of another
    shape is fitted by its tighter side.
    """
    if duration <= 0:
        raise CompositionError(
            "Pan-zoom duration must be greater than 0", details={"duration": duration}
        )
    start_rect, end_rect = Rect(*start_rect), Rect(*end_rect)
    easing = Easing(easing)

    def apply(comp: Composition) -> Composition:
        settings = get_settings()
        canvas = resolve_canvas(comp.options, settings)
        size = input_size or canvas
        for rect in (start_rect, end_rect):
            _check_rect(rect, size)
        fps = comp.options.frame_rate or settings.default_frame_rate
        progress = _progress(start_time, duration, fps, easing)

        width, height = size
        zooms = [min(width / r.width, height / r.height) for r in (start_rect, end_rect)]
        centers = [
            ((r.x + r.width / 2) / width, (r.y + r.height / 2) / height)
            for r in (start_rect, end_rect)
        ]
        cx = _lerp(centers[0][0], centers[1][0], progress)
        cy = _lerp(centers[0][1], centers[1][1], progress)
        options = {
            "z": quote_expression(_lerp(zooms[0], zooms[1], progress)),
            "x": quote_expression(f"iw*{cx}-iw/zoom/2"),
            "y": quote_expression(f"ih*{cy}-ih/zoom/2"),
            "d": 1,
            "s": f"{canvas[0]}x{canvas[1]}",
            "fps": float(fps),
        }
        logger.debug("Pan-zoom %s -> %s over %ss", tuple(start_rect), tuple(end_rect), duration)
        return comp.add_filter("zoompan", options)

    return apply


def _ken_burns_rects(direction, start_zoom, end_zoom, size, seed):
    width, height = size
    sw, sh = width / start_zoom, height / start_zoom
    ew, eh = width / end_zoom, height / end_zoom

    if direction == "center-out":
        origins = ((width - sw) / 2, (height - sh) / 2), ((width - ew) / 2, (height - eh) / 2)
    elif direction == "top-bottom":
        origins = ((width - sw) / 2, 0), ((width - ew) / 2, height - eh)
    elif direction == "left-right":
        origins = (0, (height - sh) / 2), (width - ew, (height - eh) / 2)
    elif direction == "diagonal":
        origins = (0, 0), (width - ew, height - eh)
    else:
        rng = random.Random(seed)
        origins = (
            (rng.uniform(0, width - sw), rng.uniform(0, height - sh)),
            (rng.uniform(0, width - ew), rng.uniform(0, height - eh)),
        )
    (sx, sy), (ex, ey) = origins
    return Rect(sx, sy, sw, sh), Rect(ex, ey, ew, eh)


def ken_burns(
    start_zoom: float = 1.0,
    end_zoom: float = 1.3,
    direction: str = "center-out",
    duration: float = 5.0,
    *,
    easing: Easing | str = Easing.LINEAR,
    start_time: float = 0,
    seed: int = 0,
) -> Effect:
    """Slow zoom combined with a drift across the frame.

    ``direction="random"`` picks both windows from ``seed``, so the same
    seed always compiles to the same command.
    """
    if direction not in KEN_BURNS_DIRECTIONS:
        raise CompositionError(
            f"Unknown Ken Burns direction: {direction}",
            details={"available": list(KEN_BURNS_DIRECTIONS)},
        )
    if start_zoom < 1 or end_zoom < 1:
        raise CompositionError(
            "Ken Burns zoom must be at least 1",
            details={"start_zoom": start_zoom, "end_zoom": end_zoom},
        )

    def apply(comp: Composition) -> Composition:
        size = resolve_canvas(comp.options, get_settings())
        start_rect, end_rect = _ken_burns_rects(direction, start_zoom, end_zoom, size, seed)
        effect = pan_zoom(start_rect, end_rect, duration, start_time=start_time, easing=easing)
        return effect(comp)

    return apply


def zoom_in(zoom: float = 1.5, duration: float = 5.0, easing="ease-in-out") -> Effect:
    return ken_burns(1.0, zoom, "center-out", duration, easing=easing)


def zoom_out(zoom: float = 1.5, duration: float = 5.0, easing="ease-in-out") -> Effect:
    return ken_burns(zoom, 1.0, "center-out", duration, easing=easing)


def pan(
    direction: str = "right", zoom: float = 1.2, duration: float = 5.0, easing="linear"
) -> Effect:
    """Drift across the frame at a constant ``zoom``."""
    if direction not in PAN_DIRECTIONS:
        raise CompositionError(
            f"Unknown pan direction: {direction}", details={"available": list(PAN_DIRECTIONS)}
        )
    axis = "left-right" if direction in ("left", "right") else "top-bottom"
    if zoom < 1:
        raise CompositionError("Pan zoom must be at least 1", details={"zoom": zoom})

    def apply(comp: Composition) -> Composition:
        size = resolve_canvas(comp.options, get_settings())
        start_rect, end_rect = _ken_burns_rects(axis, zoom, zoom, size, 0)
        if direction in ("left", "up"):
            start_rect, end_rect = end_rect, start_rect
        return pan_zoom(start_rect, end_rect, duration, easing=easing)(comp)

    return apply
