"""Transition resolution between overlapping layers."""

import logging

from clipgraph.config import Settings, get_settings
from clipgraph.models.layers import LayerBase
from clipgraph.models.transitions import (
    Direction,
    Easing,
    TransitionFragment,
    TransitionPoint,
    TransitionSpec,
    TransitionType,
)
from clipgraph.rendering.expressions import fmt, quote_expression

logger = logging.getLogger(__name__)

TRANSITION_PRESETS: dict[str, TransitionSpec] = {
    "smooth": TransitionSpec(type=TransitionType.FADE, duration=1.0, easing=Easing.EASE_IN_OUT),
    "quick": TransitionSpec(type=TransitionType.FADE, duration=0.3, easing=Easing.LINEAR),
    "dramatic": TransitionSpec(
        type=TransitionType.ZOOM,
        duration=2.0,
        easing=Easing.EASE_IN_OUT,
        direction=Direction.CENTER_OUT,
    ),
    "slide-show": TransitionSpec(
        type=TransitionType.SLIDE, duration=0.8, easing=Easing.EASE_OUT, direction=Direction.RIGHT
    ),
    "professional": TransitionSpec(
        type=TransitionType.WIPE,
        duration=1.5,
        easing=Easing.EASE_IN_OUT,
        direction=Direction.RIGHT,
    ),
    "creative": TransitionSpec(
        type=TransitionType.IRIS,
        duration=1.2,
        easing=Easing.EASE_OUT,
        direction=Direction.CENTER_OUT,
    ),
    "retro": TransitionSpec(type=TransitionType.DISSOLVE, duration=2.0, easing=Easing.EASE_IN),
    "tech": TransitionSpec(type=TransitionType.GLITCH, duration=0.5, easing=Easing.LINEAR),
}


def ease(progress: str, easing: Easing) -> str:
    """Wrap a 0..1 progress expression in an easing curve."""
    p = f"({progress})"
    if easing == Easing.EASE_IN:
        return f"pow({progress},2)"
    if easing == Easing.EASE_OUT:
        return f"(1-pow(1-{p},2))"
    if easing == Easing.EASE_IN_OUT:
        return f"({p}*{p}*(3-2*{p}))"
    return p


def layer_span(layer: LayerBase, composition_end: float) -> tuple[float, float]:
    """(start, end) of a layer, running open-ended layers to the composition end."""
    end = layer.end_time
    if end is None:
        end = max(composition_end, layer.start_time)
    return layer.start_time, end


class TransitionResolver:
    """Decides where overlapping layers need a transition and builds its fragment."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def default_spec(self) -> TransitionSpec:
        return TRANSITION_PRESETS["smooth"].model_copy(
            update={"duration": self.settings.default_transition_duration}
        )

    def preset(self, name: str) -> TransitionSpec:
        """Return a named preset; unknown names fall back to ``smooth``."""
        if name not in TRANSITION_PRESETS:
            logger.warning("Unknown transition preset %r, falling back to smooth", name)
            return TRANSITION_PRESETS["smooth"]
        return TRANSITION_PRESETS[name]

    def resolve(
        self,
        layer_a: LayerBase,
        layer_b: LayerBase,
        spec: TransitionSpec | None = None,
        composition_end: float = 0.0,
        from_index: int = 0,
        to_index: int = 1,
        base_x: str = "(W-w)/2",
        base_y: str = "(H-h)/2",
    ) -> TransitionPoint:
        """Resolve the transition from ``layer_a`` into ``layer_b``.

        The overlap is the intersection of both time ranges, so the pair may
        come in either order. The effective duration is clamped to the
        overlap and to both layers' own durations. The window starts at the
        later of the two starts.
        Without an explicit ``spec`` the default fade spans the whole overlap.
        """
        implicit = spec is None
        spec = spec or self.default_spec()
        a_start, a_end = layer_span(layer_a, composition_end)
        b_start, b_end = layer_span(layer_b, composition_end)
        window = max(a_start, b_start)
        overlap = min(a_end, b_end) - window

        point = TransitionPoint(
            from_index=from_index,
            to_index=to_index,
            type=spec.type,
            easing=spec.easing,
            direction=spec.direction,
            requested_duration=spec.duration,
            overlap=overlap,
            start=window,
            end=window,
        )
        if overlap <= 0:
            return point

        requested = overlap if implicit else spec.duration
        duration = min(requested, overlap, a_end - a_start, b_end - b_start)
        fragment = self.fragment(spec, duration, window, base_x, base_y, window - b_start)
        return point.model_copy(
            update={
                "duration": duration,
                "end": window + duration,
                "fragment": fragment,
                "filter": self.render(fragment, base_x, base_y),
            }
        )

    def fragment(
        self,
        spec: TransitionSpec,
        duration: float,
        start: float,
        base_x: str = "(W-w)/2",
        base_y: str = "(H-h)/2",
        offset: float = 0.0,
    ) -> TransitionFragment:
        """Build the filters for the incoming branch and its overlay expressions.

        ``prepare`` filters run on the incoming branch before it is shifted
        to its own start, so they see local time beginning at 0; the window
        opens ``offset`` seconds into the branch. Overlay expressions see
        output time, where the window opens at ``start``.
        """
        d = fmt(max(duration, 0.001))
        t0 = fmt(offset)
        if offset > 0:
            elapsed = f"max(T-{t0},0)"
            within = f"between(t,{t0},{fmt(offset + duration)})"
        else:
            elapsed = "T"
            within = f"lt(t,{d})"
        local = ease(f"min({elapsed}/{d},1)", spec.easing)
        direction = spec.direction

        if spec.type == TransitionType.NONE:
            return TransitionFragment()
        if spec.type == TransitionType.FADE:
            return TransitionFragment(
                prepare=["format=yuva420p", f"fade=t=in:st={t0}:d={d}:alpha=1"]
            )
        if spec.type == TransitionType.DISSOLVE:
            return TransitionFragment(
                prepare=[
                    f"noise=alls=40:allf=t:enable='{within}'",
                    "format=yuva420p",
                    f"fade=t=in:st={t0}:d={d}:alpha=1",
                ]
            )
        if spec.type == TransitionType.SLIDE:
            progress = ease(f"min(max((t-{fmt(start)})/{d},0),1)", spec.easing)
            if direction in (Direction.UP, Direction.DOWN):
                origin = "H" if direction == Direction.UP else "-h"
                return TransitionFragment(y=f"{origin}+(({base_y})-({origin}))*{progress}")
            origin = "W" if direction == Direction.LEFT else "-w"
            return TransitionFragment(x=f"{origin}+(({base_x})-({origin}))*{progress}")
        if spec.type == TransitionType.WIPE:
            if direction == Direction.LEFT:
                mask = f"gte(X,W*(1-{local}))"
            elif direction == Direction.DOWN:
                mask = f"lte(Y,H*{local})"
            elif direction == Direction.UP:
                mask = f"gte(Y,H*(1-{local}))"
            else:
                mask = f"lte(X,W*{local})"
            return TransitionFragment(prepare=["format=yuva420p", self._alpha_mask(mask)])
        if spec.type == TransitionType.IRIS:
            radius = "hypot(X-W/2,Y-H/2)"
            reach = "hypot(W/2,H/2)"
            if direction == Direction.CENTER_IN:
                mask = f"gte({radius},{reach}*(1-{local}))"
            else:
                mask = f"lte({radius},{reach}*{local})"
            return TransitionFragment(prepare=["format=yuva420p", self._alpha_mask(mask)])
        if spec.type == TransitionType.ZOOM:
            factor = ease(f"min({elapsed.lower()}/{d},1)", spec.easing)
            return TransitionFragment(
                prepare=[
                    f"scale=w='2*trunc(iw*max(0.02,{factor})/2)'"
                    f":h='2*trunc(ih*max(0.02,{factor})/2)':eval=frame"
                ],
                x="(W-w)/2",
                y="(H-h)/2",
            )
        # GLITCH
        return TransitionFragment(
            prepare=[
                f"noise=alls=60:allf=t+u:enable='{within}'",
                f"rgbashift=rh=8:bh=-8:enable='{within}'",
            ]
        )

    def _alpha_mask(self, mask: str) -> str:
        return f"geq=lum='lum(X,Y)':cb='cb(X,Y)':cr='cr(X,Y)':a='if({mask},255,0)'"

    def render(self, fragment: TransitionFragment, base_x: str, base_y: str) -> str:
        """Standalone form of a fragment with ``[from]``/``[to]`` input pads."""
        prepare = ",".join(fragment.prepare) or "null"
        x = quote_expression(fragment.x or base_x)
        y = quote_expression(fragment.y or base_y)
        return f"[to]{prepare}[prepared];[from][prepared]overlay=x={x}:y={y}[out]"

    def auto_generate_transitions(
        self,
        layers: list[LayerBase],
        preset: str | TransitionSpec = "smooth",
        composition_end: float | None = None,
    ) -> list[TransitionPoint]:
        """Resolve transitions pairwise across layers sorted by start time.

        Always returns ``len(layers) - 1`` points; pairs that do not
        overlap produce inactive points with an empty fragment.
        """
        spec = preset if isinstance(preset, TransitionSpec) else self.preset(preset)
        ordered = sorted(enumerate(layers), key=lambda item: item[1].start_time)
        if composition_end is None:
            ends = [layer.end_time for layer in layers if layer.end_time is not None]
            starts = [layer.start_time for layer in layers]
            composition_end = max(ends + starts, default=0.0)
        return [
            self.resolve(a, b, spec, composition_end, from_index=i, to_index=j)
            for (i, a), (j, b) in zip(ordered, ordered[1:])
        ]
