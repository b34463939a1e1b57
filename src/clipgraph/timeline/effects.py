"""Reusable effects for ``Composition.pipe``.

Every function here returns a ``Composition -> Composition`` callable,
so effects chain naturally::

    comp.pipe(fade_in(0.5)).pipe(vintage())
    comp.pipe(compose(grayscale(), vignette()))
"""

from collections.abc import Callable
from functools import reduce

from clipgraph.timeline.composition import Composition

Effect = Callable[[Composition], Composition]


def compose(*effects: Effect) -> Effect:
    """Apply ``effects`` left to right."""

    def apply(comp: Composition) -> Composition:
        return reduce(lambda acc, effect: effect(acc), effects, comp)

    return apply


def fade_in(duration: float = 1.0) -> Effect:
    def apply(comp: Composition) -> Composition:
        return comp.add_filter("fade", {"type": "in", "start": 0, "duration": duration})

    return apply


def fade_out(duration: float = 1.0) -> Effect:
    """Fade to black over the last ``duration`` seconds of the composition."""

    def apply(comp: Composition) -> Composition:
        start = max(comp.get_duration() - duration, 0.0)
        return comp.add_filter("fade", {"type": "out", "start": start, "duration": duration})

    return apply


def brightness(value: float) -> Effect:
    return lambda comp: comp.add_filter("brightness", {"value": value})


def contrast(value: float) -> Effect:
    return lambda comp: comp.add_filter("contrast", {"value": value})


def saturation(value: float) -> Effect:
    return lambda comp: comp.add_filter("saturation", {"value": value})


def blur(radius: int = 5) -> Effect:
    return lambda comp: comp.add_filter("blur", {"radius": radius})


def grayscale() -> Effect:
    return lambda comp: comp.add_filter("grayscale")


def sepia() -> Effect:
    return lambda comp: comp.add_filter("sepia")


def vignette(angle: str = "PI/4") -> Effect:
    return lambda comp: comp.add_filter("vignette", {"angle": angle})


def vintage() -> Effect:
    return compose(sepia(), contrast(1.2), brightness(0.1), vignette("PI/5"))
