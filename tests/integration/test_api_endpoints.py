"""Integration tests for API endpoints."""

import pytest
from fastapi.testclient import TestClient

from clipgraph.api.app import create_app


@pytest.fixture
def client():
    app = create_app()
    return TestClient(app)


class TestHealthEndpoint:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data


class TestCompileEndpoint:
    def test_compile(self, client, two_clips):
        response = client.post(
            "/api/v1/compile",
            json={"composition": two_clips.to_json(), "output_path": "out.mp4"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["argv"] == two_clips.compile("out.mp4").argv
        assert data["command"].startswith("ffmpeg -y -i a.mp4 -i b.mp4 -filter_complex ")
        assert [i["source"] for i in data["inputs"]] == ["a.mp4", "b.mp4"]
        assert data["duration"] == 18

    def test_render_options(self, client, two_clips):
        response = client.post(
            "/api/v1/compile",
            json={
                "composition": two_clips.to_json(),
                "output_path": "out.mp4",
                "render": {"quality": "low"},
            },
        )
        argv = response.json()["argv"]
        assert argv[argv.index("-crf") + 1] == "28"

    def test_empty_composition(self, client, empty):
        response = client.post(
            "/api/v1/compile", json={"composition": empty.to_json(), "output_path": "out.mp4"}
        )
        assert response.status_code == 400
        data = response.json()
        assert data["error_type"] == "CompositionError"
        assert data["component"] == "composition"
        assert data["actionable_guidance"]

    def test_invalid_snapshot(self, client):
        response = client.post(
            "/api/v1/compile",
            json={
                "composition": {"layers": [{"kind": "video", "duration": -1}]},
                "output_path": "out.mp4",
            },
        )
        assert response.status_code == 400
        assert response.json()["details"]["errors"]

    def test_missing_output_path(self, client, two_clips):
        response = client.post("/api/v1/compile", json={"composition": two_clips.to_json()})
        assert response.status_code == 422


class TestCaptionsEndpoint:
    def test_export_srt(self, client, bilingual):
        response = client.post(
            "/api/v1/captions/export",
            json={"composition": bilingual.to_json(), "track_id": "es"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "1\n00:00:01,000 --> 00:00:03,000\nHola\n\n"
        assert data["statistics"]["caption_count"] == 1

    def test_export_vtt(self, client, bilingual):
        response = client.post(
            "/api/v1/captions/export",
            json={"composition": bilingual.to_json(), "track_id": "en", "format": "vtt"},
        )
        assert response.json()["content"].startswith("WEBVTT\n\n")

    def test_unknown_track(self, client, bilingual):
        response = client.post(
            "/api/v1/captions/export",
            json={"composition": bilingual.to_json(), "track_id": "fr"},
        )
        assert response.status_code == 400
        data = response.json()
        assert data["error_type"] == "CaptionError"
        assert data["message"] == "Track not found: fr"

    def test_unsupported_format(self, client, bilingual):
        response = client.post(
            "/api/v1/captions/export",
            json={"composition": bilingual.to_json(), "track_id": "en", "format": "sbv"},
        )
        assert response.status_code == 422


class TestCodecEndpoints:
    def test_compatibility_default(self, client):
        response = client.post("/api/v1/codecs/compatibility", json={})
        assert response.status_code == 200
        assert response.json()["compatible"] is True

    def test_compatibility_webm(self, client, two_clips):
        response = client.post(
            "/api/v1/codecs/compatibility",
            json={"composition": two_clips.to_json(), "container": "webm"},
        )
        data = response.json()
        assert data["compatible"] is False
        assert "vp9" in data["alternatives"]

    def test_compatibility_uses_composition_codec(self, client, two_clips):
        comp = two_clips.use_codec_preset("hdr")
        response = client.post(
            "/api/v1/codecs/compatibility",
            json={"composition": comp.to_json(), "container": "mkv", "platform": "ios"},
        )
        assert "Audio codec libopus may not be supported on ios" in response.json()["warnings"]

    def test_presets(self, client):
        response = client.get("/api/v1/codecs/presets")
        assert response.status_code == 200
        data = response.json()
        assert data["youtube"]["video"]["codec"] == "libx264"
        assert data["archival"]["audio"]["codec"] == "flac"
