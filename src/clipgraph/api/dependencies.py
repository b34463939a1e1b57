"""Dependency injection providers for FastAPI."""

from functools import lru_cache

from clipgraph.captions.compositor import CaptionCompositor
from clipgraph.codecs.resolver import CodecResolver
from clipgraph.rendering.ffmpeg_builder import FFmpegCommandBuilder


@lru_cache
def get_command_builder() -> FFmpegCommandBuilder:
    return FFmpegCommandBuilder()


@lru_cache
def get_codec_resolver() -> CodecResolver:
    return CodecResolver()


@lru_cache
def get_caption_compositor() -> CaptionCompositor:
    return CaptionCompositor()
