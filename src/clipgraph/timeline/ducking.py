"""Audio ducking effects for ``Composition.pipe``.

Background tracks are lowered while a voice plays, either by following
the voice's loudness (sidechain) or inside fixed time windows::

    comp.pipe(duck("music.mp3", voice="narration.mp3"))
    comp.pipe(duck_at_regions("music.mp3", [(10, 15), (30, 33)]))
"""

import logging
from collections.abc import Iterable

from clipgraph.timeline.composition import Composition
from clipgraph.timeline.effects import Effect

logger = logging.getLogger(__name__)

# Speech fundamentals and formants; keys the sidechain on the voice only
VOICE_BAND = (300, 3400)


def duck(
    background: str,
    voice: str,
    *,
    threshold: float = 0.05,
    ratio: float = 4.0,
    attack: float = 0.3,
    release: float = 0.5,
    band: tuple[int, int] | None = None,
) -> Effect:
    """Compress ``background`` whenever ``voice`` is loud."""

    def apply(comp: Composition) -> Composition:
        return comp.duck_audio(
            background,
            mode="sidechain",
            voice=voice,
            threshold=threshold,
            ratio=ratio,
            attack=attack,
            release=release,
            band=band,
        )

    return apply


def duck_at_regions(
    background: str,
    regions: Iterable[tuple[float, float]],
    *,
    level: float = 0.3,
    attack: float = 0.3,
    release: float = 0.5,
    hold: float = 0.1,
    anticipation: float = 0.1,
) -> Effect:
    """Drop ``background`` to ``level`` inside each ``(start, end)`` window.

    Windows are on the output timeline. The dip starts ``anticipation``
    seconds early and is held ``hold`` seconds past the window's end.
    """
    regions = tuple(sorted((float(start), float(end)) for start, end in regions))

    def apply(comp: Composition) -> Composition:
        return comp.duck_audio(
            background,
            mode="regions",
            regions=regions,
            level=level,
            attack=attack,
            release=release,
            hold=hold,
            anticipation=anticipation,
        )

    return apply


def dialogue_mix(
    dialogue: str,
    *,
    music: str | None = None,
    ambience: str | None = None,
    sound_effects: str | None = None,
    dialogue_boost: float = 1.2,
) -> Effect:
    """Add a dialogue-led mix: music and ambience duck under the dialogue.

    Music ducks hard and fast; ambience is quieter to begin with and
    recovers more slowly. Sound effects are never ducked.
    """

    def apply(comp: Composition) -> Composition:
        result = comp.add_audio(dialogue, style={"volume": dialogue_boost})
        if music is not None:
            result = result.add_audio(music)
            result = duck(music, dialogue, ratio=8.0, band=VOICE_BAND)(result)
        if ambience is not None:
            result = result.add_audio(ambience, style={"volume": 0.8})
            result = duck(ambience, dialogue, attack=0.5, release=1.0)(result)
        if sound_effects is not None:
            result = result.add_audio(sound_effects)
        return result

    return apply


def music_bed(
    music: str,
    ducking_points: Iterable[tuple[float, float]],
    *,
    level: float = 0.2,
    fade_in: float = 2.0,
    fade_out: float = 3.0,
    base_volume: float = 0.8,
) -> Effect:
    """Add background music that dips at each ``(time, duration)`` point."""
    regions = [(time, time + length) for time, length in ducking_points]

    def apply(comp: Composition) -> Composition:
        result = comp.add_audio(
            music, style={"volume": base_volume, "fade_in": fade_in, "fade_out": fade_out}
        )
        if not regions:
            logger.info("Music bed %s has no ducking points", music)
            return result
        return duck_at_regions(music, regions, level=level, attack=0.5, release=1.0)(result)

    return apply
