"""Application configuration using Pydantic BaseSettings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """clipgraph configuration loaded from environment variables."""

    model_config = {"env_prefix": "CLIPGRAPH_", "env_file": ".env", "extra": "ignore"}

    # Engine
    ffmpeg_binary: str = "ffmpeg"

    # Canvas
    default_width: int = 1920
    default_height: int = 1080
    default_frame_rate: float = 30.0
    background_color: str = "black"

    # Layer defaults
    default_media_duration: float = 30.0
    default_text_duration: float = 5.0
    default_image_duration: float = 5.0
    overlay_margin: int = 20
    text_margin: int = 50
    default_transition_duration: float = 1.0

    # Encoding
    output_video_codec: str = "libx264"
    output_audio_codec: str = "aac"
    output_crf: int = 23
    output_preset: str = "medium"
    min_video_bitrate_kbps: int = 500
    max_video_bitrate_kbps: int = 50000
    default_audio_bitrate_kbps: int = 128

    # Captions
    caption_font: str = "Arial"
    caption_font_size: int = 32
    caption_reading_speed_wpm: int = 200
    caption_min_duration: float = 1.0
    caption_max_duration: float = 7.0
    caption_spacing: float = 0.1
    typewriter_max_steps: int = 40


def get_settings() -> Settings:
    """Return a settings instance built from the current environment."""
    return Settings()
