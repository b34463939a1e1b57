"""Subtitle timestamps and reading-speed timing."""

import re

_SRT_TIME = re.compile(r"^(\d+):(\d{2}):(\d{2})[,.](\d{3})$")


def to_milliseconds(seconds: float) -> int:
    """Round a time in seconds to whole milliseconds."""
    return int(round(seconds * 1000))


def _split(seconds: float) -> tuple[int, int, int, int]:
    total_ms = max(0, to_milliseconds(seconds))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, ms = divmod(rest, 1000)
    return hours, minutes, secs, ms


def format_srt_time(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS,mmm``."""
    hours, minutes, secs, ms = _split(seconds)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{ms:03d}"


def format_vtt_time(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS.mmm``."""
    return format_srt_time(seconds).replace(",", ".")


def format_ass_time(seconds: float) -> str:
    """Format seconds as ``H:MM:SS.cc`` (centiseconds)."""
    hours, minutes, secs, ms = _split(seconds)
    return f"{hours:d}:{minutes:02d}:{secs:02d}.{ms // 10:02d}"


def parse_timestamp(value: str) -> float:
    """Parse an SRT or VTT timestamp. VTT's short ``MM:SS.mmm`` form is accepted."""
    value = value.strip()
    if value.count(":") == 1:
        value = f"00:{value}"
    match = _SRT_TIME.match(value)
    if not match:
        raise ValueError(f"Invalid subtitle timestamp: {value!r}")
    hours, minutes, secs, ms = (int(g) for g in match.groups())
    total_ms = ((hours * 60 + minutes) * 60 + secs) * 1000 + ms
    return total_ms / 1000


def word_count(text: str) -> int:
    return len(text.split())


def reading_duration(
    text: str, words_per_minute: int = 200, minimum: float = 1.0, maximum: float = 7.0
) -> float:
    """Seconds needed to read ``text``, clamped to [minimum, maximum]."""
    seconds = word_count(text) / words_per_minute * 60
    return min(max(seconds, minimum), maximum)


def sequence_times(
    count: int, start_time: float, duration: float, spacing: float
) -> list[tuple[float, float]]:
    """Back-to-back windows: window i starts at start + i * (duration + spacing)."""
    return [
        (start_time + i * (duration + spacing), start_time + i * (duration + spacing) + duration)
        for i in range(count)
    ]


def word_timings(
    text: str, start_time: float = 0.0, words_per_second: float = 2.5
) -> list[tuple[str, float, float]]:
    """Evenly spaced (word, start, end) triples at a constant speaking rate."""
    step = 1.0 / words_per_second
    return [
        (word, start_time + i * step, start_time + (i + 1) * step)
        for i, word in enumerate(text.split())
    ]
