"""Shared test fixtures."""

import pytest

from clipgraph.config import Settings
from clipgraph.timeline.composition import Composition


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def empty():
    return Composition()


@pytest.fixture
def two_clips():
    """Two full-frame clips overlapping on [8, 10]."""
    return Composition().add_video("a.mp4", duration=10).add_video(
        "b.mp4", start_time=8, duration=10
    )


@pytest.fixture
def bilingual():
    """English and Spanish caption tracks with one caption each on [1, 3]."""
    return (
        Composition()
        .add_video("talk.mp4", duration=10)
        .add_caption_track("en", language_name="English")
        .add_caption_track("es", language_name="Spanish")
        .add_caption("en", "Hello there", 1, 3)
        .add_caption("es", "Hola", 1, 3)
    )
