"""Tests for shortcut constructors, effects and picture-in-picture."""

import logging

import pytest

from clipgraph.models.errors import CompositionError
from clipgraph.models.layers import AudioLayer, FilterLayer, VideoLayer
from clipgraph.rendering.ffmpeg_builder import render_filter
from clipgraph.timeline import effects, helpers
from clipgraph.timeline.ducking import dialogue_mix, duck, duck_at_regions, music_bed
from clipgraph.timeline.panzoom import ken_burns, pan, pan_zoom, zoom_in, zoom_out
from clipgraph.timeline.pip import add_multiple_pip, add_picture_in_picture


class TestPlatformHelpers:
    def test_tiktok(self):
        comp = helpers.tiktok("clip.mp4")
        assert comp.options.aspect_ratio == "9:16"
        assert comp.options.resolution == (1080, 1920)
        assert comp.validate_for_platform("tiktok").valid

    def test_youtube(self):
        comp = helpers.youtube("clip.mp4", duration=12)
        assert comp.options.resolution == (1920, 1080)
        assert comp.get_duration() == 12

    def test_twitter(self):
        assert helpers.twitter("clip.mp4").options.resolution == (1280, 720)

    def test_instagram_formats(self):
        assert helpers.instagram("clip.mp4").options.aspect_ratio == "9:16"
        assert helpers.instagram("clip.mp4", format="feed").options.resolution == (1080, 1080)

    def test_instagram_unknown_format(self):
        with pytest.raises(CompositionError, match="Unknown Instagram format"):
            helpers.instagram("clip.mp4", format="carousel")

    def test_orientation_helpers(self):
        assert helpers.square("clip.mp4").options.aspect_ratio == "1:1"
        assert helpers.portrait("clip.mp4").options.aspect_ratio == "9:16"
        assert helpers.landscape("clip.mp4").options.aspect_ratio == "16:9"

    def test_image_and_audio(self):
        assert helpers.image("logo.png").layers[0].duration == 5
        assert isinstance(helpers.audio("song.mp3").layers[0], AudioLayer)


class TestSequencing:
    def test_concat(self):
        comp = helpers.concat(["a.mp4", "b.mp4", "c.mp4"], duration=4)
        assert [layer.start_time for layer in comp.layers] == [0, 4, 8]
        assert comp.get_duration() == 12

    def test_concat_requires_paths(self):
        with pytest.raises(CompositionError, match="At least one video path is required"):
            helpers.concat([])

    def test_loop(self):
        comp = helpers.loop("a.mp4", 3, duration=2)
        assert [layer.source for layer in comp.layers] == ["a.mp4"] * 3
        assert [layer.start_time for layer in comp.layers] == [0, 2, 4]

    def test_loop_shares_input(self):
        cmd = helpers.loop("a.mp4", 2, duration=2).compile("out.mp4")
        assert len(cmd.inputs) == 1

    def test_loop_count(self):
        with pytest.raises(CompositionError, match="Loop count must be at least 1"):
            helpers.loop("a.mp4", 0)


class TestEffects:
    def test_fade_in(self, two_clips):
        layer = two_clips.pipe(effects.fade_in(0.5)).layers[-1]
        assert isinstance(layer, FilterLayer)
        assert layer.options == {"type": "in", "start": 0, "duration": 0.5}

    def test_fade_out_starts_before_end(self, two_clips):
        comp = two_clips.pipe(effects.fade_out(2))
        assert comp.layers[-1].options["start"] == 16
        assert "fade=t=out:st=16:d=2" in comp.compile("out.mp4").filter_complex

    def test_fade_out_longer_than_composition(self, empty):
        comp = empty.add_video("a.mp4", duration=1).pipe(effects.fade_out(3))
        assert comp.layers[-1].options["start"] == 0

    def test_value_effects(self, empty):
        comp = empty.pipe(effects.brightness(0.2)).pipe(effects.saturation(1.5))
        assert [(layer.source, layer.options) for layer in comp.layers] == [
            ("brightness", {"value": 0.2}),
            ("saturation", {"value": 1.5}),
        ]

    def test_blur_default_radius(self, empty):
        assert empty.pipe(effects.blur()).layers[0].options == {"radius": 5}

    def test_vintage(self, empty):
        comp = empty.pipe(effects.vintage())
        assert [layer.source for layer in comp.layers] == [
            "sepia",
            "contrast",
            "brightness",
            "vignette",
        ]
        assert comp.layers[-1].options == {"angle": "PI/5"}

    def test_compose_order(self, empty):
        comp = empty.pipe(effects.compose(effects.grayscale(), effects.vignette()))
        assert [layer.source for layer in comp.layers] == ["grayscale", "vignette"]

    def test_effects_leave_original(self, two_clips):
        two_clips.pipe(effects.vintage())
        assert len(two_clips.layers) == 2


class TestPictureInPicture:
    @pytest.fixture
    def main(self, empty):
        return empty.add_video("main.mp4", duration=10)

    def test_defaults(self, main):
        comp = add_picture_in_picture(main, "cam.mp4")
        overlay, sound = comp.layers[1:]
        assert isinstance(overlay, VideoLayer)
        assert overlay.muted is True
        assert overlay.position == "bottom-right"
        assert overlay.margin == 20
        assert overlay.style.scale == 0.25
        assert isinstance(sound, AudioLayer)
        assert sound.style.volume == 0.3

    def test_muted_overlay_adds_no_audio(self, main):
        comp = add_picture_in_picture(main, "cam.mp4", audio="mute")
        assert len(comp.layers) == 2

    def test_mix(self, main):
        comp = add_picture_in_picture(main, "cam.mp4", audio="mix", start_time=2, duration=3)
        sound = comp.layers[-1]
        assert sound.style.volume == 1.0
        assert (sound.start_time, sound.duration) == (2, 3)

    def test_unknown_audio_mode(self, main):
        with pytest.raises(CompositionError):
            add_picture_in_picture(main, "cam.mp4", audio="loud")

    def test_multiple_empty(self, main):
        assert add_multiple_pip(main, []) is main

    def test_grid(self, main):
        comp = add_multiple_pip(main, ["a.mp4", "b.mp4", "c.mp4", "d.mp4"])
        overlays = comp.layers[1:]
        assert len(overlays) == 4
        assert [(o.position.x, o.position.y) for o in overlays] == [
            ("0.0%", "0.0%"),
            ("50.0%", "0.0%"),
            ("0.0%", "50.0%"),
            ("50.0%", "50.0%"),
        ]
        assert all(o.style.scale == 0.45 for o in overlays)

    def test_stack(self, main):
        overlays = add_multiple_pip(main, ["a.mp4", "b.mp4", "c.mp4"], layout="stack").layers[1:]
        assert [o.position.y for o in overlays] == ["5%", "30%", "55%"]
        assert all(o.position.x == "5%" for o in overlays)

    def test_carousel(self, main):
        overlays = add_multiple_pip(main, ["a.mp4", "b.mp4"], layout="carousel").layers[1:]
        first = overlays[0].position
        assert (first.x, first.y, first.anchor) == ("85.0%", "50.0%", "center")
        assert overlays[0].style.scale == 0.15

    def test_unknown_layout_falls_back_to_grid(self, main, caplog):
        with caplog.at_level(logging.WARNING):
            comp = add_multiple_pip(main, ["a.mp4"], layout="spiral")
        assert comp.layers[1].position.x == "0.0%"
        assert "spiral" in caplog.text

    def test_multiple_with_audio(self, main):
        comp = add_multiple_pip(main, ["a.mp4", "b.mp4"], audio="duck")
        assert sum(isinstance(layer, AudioLayer) for layer in comp.layers) == 2


class TestDuckingEffects:
    @pytest.fixture
    def scored(self, empty):
        return empty.add_audio("voice.mp3").add_audio("music.mp3")

    def test_duck_sets_sidechain(self, scored):
        comp = scored.pipe(duck("music.mp3", "voice.mp3", ratio=6))
        ducking = comp.layers[1].style.ducking
        assert (ducking.mode, ducking.voice, ducking.ratio) == ("sidechain", "voice.mp3", 6)
        assert comp.layers[0].style is None

    def test_duck_keeps_existing_style(self, empty):
        comp = empty.add_audio("music.mp3", style={"volume": 0.5})
        comp = comp.pipe(duck("music.mp3", "voice.mp3"))
        assert comp.layers[0].style.volume == 0.5
        assert comp.layers[0].style.ducking.voice == "voice.mp3"

    def test_duck_unknown_background(self, scored):
        with pytest.raises(CompositionError, match="No audio layer plays rain.mp3"):
            scored.pipe(duck("rain.mp3", "voice.mp3"))

    def test_regions_sorted(self, scored):
        comp = scored.pipe(duck_at_regions("music.mp3", [(30, 33), (10, 15)], level=0.2))
        ducking = comp.layers[1].style.ducking
        assert ducking.regions == ((10, 15), (30, 33))
        assert ducking.level == 0.2

    def test_invalid_region(self, scored):
        with pytest.raises(CompositionError, match="Invalid ducking region"):
            scored.pipe(duck_at_regions("music.mp3", [(5, 3)]))

    def test_regions_required(self, scored):
        with pytest.raises(CompositionError, match="at least one region"):
            scored.duck_audio("music.mp3", mode="regions")

    def test_sidechain_needs_voice(self, scored):
        with pytest.raises(CompositionError, match="needs a voice source"):
            scored.duck_audio("music.mp3")

    def test_dialogue_mix(self, empty):
        mix = dialogue_mix(
            "talk.mp3", music="score.mp3", ambience="room.mp3", sound_effects="fx.mp3"
        )
        comp = empty.pipe(mix)
        talk, score, room, fx = comp.layers
        assert talk.style.volume == 1.2
        assert score.style.ducking.voice == "talk.mp3"
        assert score.style.ducking.band == (300, 3400)
        assert room.style.volume == 0.8
        assert (room.style.ducking.attack, room.style.ducking.release) == (0.5, 1.0)
        assert fx.style is None

    def test_dialogue_only(self, empty):
        assert len(empty.pipe(dialogue_mix("talk.mp3")).layers) == 1

    def test_music_bed(self, empty):
        comp = empty.pipe(music_bed("bed.mp3", [(10, 5), (30, 3)]))
        style = comp.layers[0].style
        assert (style.volume, style.fade_in, style.fade_out) == (0.8, 2.0, 3.0)
        assert style.ducking.regions == ((10, 15), (30, 33))
        assert style.ducking.level == 0.2

    def test_music_bed_without_points(self, empty):
        assert empty.pipe(music_bed("bed.mp3", [])).layers[0].style.ducking is None


class TestPanZoom:
    @pytest.fixture
    def still(self, empty):
        comp = empty.add_image("photo.jpg", duration=5)
        return comp.set_resolution(1920, 1080).set_frame_rate(25)

    def test_zoom_in(self, still):
        layer = still.pipe(zoom_in()).layers[-1]
        assert isinstance(layer, FilterLayer)
        p = "(min(on/25/5,1))"
        assert render_filter(layer) == (
            f"zoompan=z='1+0.5*({p}*{p}*(3-2*{p}))':x=iw*0.5-iw/zoom/2:y=ih*0.5-ih/zoom/2"
            ":d=1:s=1920x1080:fps=25"
        )

    def test_zoom_out(self, still):
        z = still.pipe(zoom_out(2, easing="linear")).layers[-1].options["z"]
        assert z == "'2-1*(min(on/25/5,1))'"

    def test_pan_right(self, still):
        options = still.pipe(pan("right")).layers[-1].options
        assert options["z"] == "1.2"
        assert options["x"] == "'iw*0.417+0.167*(min(on/25/5,1))-iw/zoom/2'"
        assert options["y"] == "ih*0.5-ih/zoom/2"

    def test_pan_left_reverses(self, still):
        options = still.pipe(pan("left")).layers[-1].options
        assert options["x"] == "'iw*0.583-0.167*(min(on/25/5,1))-iw/zoom/2'"

    def test_pan_down(self, still):
        options = still.pipe(pan("down", duration=2)).layers[-1].options
        assert options["x"] == "iw*0.5-iw/zoom/2"
        assert options["y"].startswith("'ih*0.417+0.167*(min(on/25/2,1))")

    def test_delayed_start(self, still):
        effect = pan_zoom((0, 0, 1920, 1080), (480, 270, 960, 540), 4, start_time=2)
        assert still.pipe(effect).layers[-1].options["z"] == "'1+1*(min(max(on/25-2,0)/4,1))'"

    def test_ken_burns_random_is_seeded(self, still):
        first = still.pipe(ken_burns(direction="random", seed=7)).layers[-1].options
        again = still.pipe(ken_burns(direction="random", seed=7)).layers[-1].options
        other = still.pipe(ken_burns(direction="random", seed=8)).layers[-1].options
        assert first == again
        assert first != other

    def test_rect_outside_input(self, still):
        effect = pan_zoom((0, 0, 2000, 1080), (0, 0, 960, 540), 5)
        with pytest.raises(CompositionError, match="does not fit"):
            still.pipe(effect)

    def test_explicit_input_size(self, still):
        effect = pan_zoom((0, 0, 4000, 3000), (1000, 750, 2000, 1500), 5, input_size=(4000, 3000))
        options = still.pipe(effect).layers[-1].options
        assert options["s"] == "1920x1080"
        assert options["z"] == "'1+1*(min(on/25/5,1))'"

    def test_unknown_directions(self):
        with pytest.raises(CompositionError, match="Unknown Ken Burns direction"):
            ken_burns(direction="spiral")
        with pytest.raises(CompositionError, match="Unknown pan direction"):
            pan("sideways")

    def test_compiles_into_graph(self, still):
        fc = still.pipe(zoom_in()).compile("out.mp4").filter_complex
        assert "zoompan=z='1+0.5*" in fc
