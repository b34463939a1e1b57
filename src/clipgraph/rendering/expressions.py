"""Small helpers that render values into filter-graph syntax."""

import logging
import re

from clipgraph.models.styles import NAMED_POSITIONS, Position

logger = logging.getLogger(__name__)

_RGB = re.compile(r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)$")
_HEX = re.compile(r"^#([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def fmt(value: float) -> str:
    """Render a number with at most three decimals and no trailing zeros."""
    text = f"{value + 0.0:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def enable_between(start: float, end: float) -> str:
    return f"enable='between(t,{fmt(start)},{fmt(end)})'"


def escape_text(text: str) -> str:
    """Escape literal text for a quoted drawtext ``text`` option.

    A straight apostrophe cannot appear inside the quoted value at all, so
    it is replaced with a typographic one.
    """
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\u2019")
        .replace(":", "\\:")
        .replace("%", "\\%")
    )


def normalize_color(color: str | None, opacity: float | None = None) -> str | None:
    """Convert CSS-style colours to ffmpeg colour syntax.

    ``#rrggbb`` becomes ``0xrrggbb`` and ``rgba(r,g,b,a)`` becomes
    ``0xrrggbb@a``. Named colours pass through unchanged.
    """
    if color is None:
        return None
    color = color.strip()
    alpha = None
    match = _RGB.match(color)
    if match:
        r, g, b, a = match.groups()
        color = "0x" + "".join(f"{min(int(c), 255):02x}" for c in (r, g, b))
        alpha = float(a) if a is not None else None
    else:
        match = _HEX.match(color)
        if match:
            color = "0x" + match.group(1).lower()
    if opacity is not None:
        alpha = opacity if alpha is None else alpha * opacity
    if alpha is not None and "@" not in color:
        color = f"{color}@{fmt(alpha)}"
    return color


# (x, y) in multiples of the free space: 0 = near edge, 0.5 = centred, 1 = far edge
_ANCHOR_FACTORS = {
    "center": (0.5, 0.5),
    "top": (0.5, 0.0),
    "bottom": (0.5, 1.0),
    "left": (0.0, 0.5),
    "right": (1.0, 0.5),
    "top-left": (0.0, 0.0),
    "top-right": (1.0, 0.0),
    "bottom-left": (0.0, 1.0),
    "bottom-right": (1.0, 1.0),
}


def _edge(factor: float, frame: str, item: str, margin: int) -> str:
    if factor == 0.0:
        return str(margin)
    if factor == 1.0:
        return f"{frame}-{item}-{margin}"
    return f"({frame}-{item})/2"


def _coordinate(value: float | str, frame: str) -> str:
    if isinstance(value, str):
        return f"({frame}*{fmt(float(value[:-1]) / 100)})"
    return fmt(value)


def resolve_position(
    position: str | Position | None,
    margin: int,
    frame: tuple[str, str] = ("W", "H"),
    item: tuple[str, str] = ("w", "h"),
    default: str = "center",
) -> tuple[str, str]:
    """Return (x, y) expressions placing an item of size ``item`` in ``frame``.

    ``frame`` and ``item`` are the variable names the consuming filter
    exposes: ``W/H/w/h`` for overlay, ``w/h/text_w/text_h`` for drawtext.
    """
    if position is None:
        position = default
    if isinstance(position, str):
        name = position
        if name not in NAMED_POSITIONS:
            logger.warning("Unknown position %r, falling back to %s", name, default)
            name = default
        fx, fy = _ANCHOR_FACTORS[name]
        return _edge(fx, frame[0], item[0], margin), _edge(fy, frame[1], item[1], margin)

    x = _coordinate(position.x, frame[0])
    y = _coordinate(position.y, frame[1])
    if position.anchor:
        anchor = position.anchor
        if anchor not in _ANCHOR_FACTORS:
            logger.warning("Unknown anchor %r, using top-left", anchor)
            anchor = "top-left"
        fx, fy = _ANCHOR_FACTORS[anchor]
        if fx:
            x = f"{x}-{item[0]}" if fx == 1.0 else f"{x}-{item[0]}/2"
        if fy:
            y = f"{y}-{item[1]}" if fy == 1.0 else f"{y}-{item[1]}/2"
    return x, y


def quote_expression(expr: str) -> str:
    """Quote an option value that contains commas."""
    if "," in expr and not expr.startswith("'"):
        return f"'{expr}'"
    return expr
