"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from clipgraph.models.layers import VideoLayer
from clipgraph.timeline.composition import Composition

VIDEO_PATHS = ["a.mp4", "b.mp4", "clip with spaces.mov"]
AUDIO_PATHS = ["music.mp3", "voice.wav"]
IMAGE_PATHS = ["logo.png", "frame.jpg"]
POSITIONS = ["center", "top-left", "bottom-right", "bottom", None]
CAPTION_ALPHABET = "abcdefghijklmnopqrstuvwxyz ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789,.!?'"


@st.composite
def generate_timing(draw, max_start=60.0):
    """Generate a (start_time, duration) pair rounded to milliseconds."""
    start = draw(st.floats(min_value=0.0, max_value=max_start))
    duration = draw(st.floats(min_value=0.1, max_value=30.0))
    return round(start, 3), round(duration, 3)


@st.composite
def generate_video_layer(draw):
    start, duration = draw(generate_timing())
    source = draw(st.sampled_from(VIDEO_PATHS))
    return VideoLayer(source=source, start_time=start, duration=duration)


@st.composite
def generate_composition(draw):
    """Generate a random valid composition with one to six layers."""
    comp = Composition()
    n_layers = draw(st.integers(min_value=1, max_value=6))
    for _ in range(n_layers):
        kind = draw(st.sampled_from(["video", "audio", "image", "text", "filter"]))
        start, duration = draw(generate_timing())
        if kind == "video":
            comp = comp.add_video(
                draw(st.sampled_from(VIDEO_PATHS)),
                start_time=start,
                duration=draw(st.one_of(st.none(), st.just(duration))),
                muted=draw(st.booleans()),
            )
        elif kind == "audio":
            comp = comp.add_audio(
                draw(st.sampled_from(AUDIO_PATHS)),
                start_time=start,
                duration=duration,
                style={"volume": draw(st.sampled_from([0.5, 1.0, 1.5]))},
            )
        elif kind == "image":
            comp = comp.add_image(
                draw(st.sampled_from(IMAGE_PATHS)),
                start_time=start,
                duration=duration,
                position=draw(st.sampled_from(POSITIONS)),
            )
        elif kind == "text":
            comp = comp.add_text(
                draw(generate_caption_text()),
                start_time=start,
                duration=duration,
                position=draw(st.sampled_from(POSITIONS)) or "center",
            )
        else:
            comp = comp.add_filter(draw(st.sampled_from(["grayscale", "sepia", "blur"])))
    if draw(st.booleans()):
        comp = comp.set_transition(draw(st.sampled_from(["smooth", "quick", "retro", "tech"])))
    return comp


@st.composite
def generate_caption_text(draw):
    """Generate single-line caption text with no surrounding whitespace."""
    text = draw(st.text(alphabet=CAPTION_ALPHABET, min_size=1, max_size=40))
    text = text.strip()
    return text or "caption"


@st.composite
def generate_captions(draw):
    """Generate (text, start, end) triples on whole milliseconds."""
    n_captions = draw(st.integers(min_value=1, max_value=8))
    captions = []
    for _ in range(n_captions):
        start_ms = draw(st.integers(min_value=0, max_value=3_600_000))
        length_ms = draw(st.integers(min_value=1, max_value=10_000))
        captions.append(
            (draw(generate_caption_text()), start_ms / 1000, (start_ms + length_ms) / 1000)
        )
    return captions
