"""Platform caption styles and word-highlighting looks."""

from clipgraph.models.styles import TextStyle

CAPTION_PRESETS: dict[str, TextStyle] = {
    "instagram": TextStyle(
        font_size=36,
        font_family="Arial",
        color="#ffffff",
        stroke_color="#000000",
        stroke_width=2,
        shadow_color="rgba(0,0,0,0.5)",
        shadow_x=2,
        shadow_y=2,
    ),
    "tiktok": TextStyle(
        font_size=48,
        font_family="Arial Black",
        color="#ffffff",
        stroke_color="#000000",
        stroke_width=3,
        shadow_color="rgba(0,0,0,0.7)",
        shadow_x=3,
        shadow_y=3,
    ),
    "youtube": TextStyle(
        font_size=32,
        font_family="Arial",
        color="#ffffff",
        stroke_color="#000000",
        stroke_width=2,
        background_color="rgba(0,0,0,0.8)",
        padding=8,
    ),
    "pinterest": TextStyle(
        font_size=28,
        font_family="Georgia",
        color="#2d2d2d",
        background_color="rgba(255,255,255,0.9)",
        padding=12,
    ),
    "linkedin": TextStyle(
        font_size=24,
        font_family="Arial",
        color="#0077b5",
        background_color="rgba(255,255,255,0.95)",
        padding=10,
    ),
}

# (base, highlight) pairs; the highlight is merged over the base
WORD_HIGHLIGHT_PRESETS: dict[str, tuple[TextStyle, TextStyle]] = {
    "tiktok": (
        TextStyle(font_size=48, color="#ffffff", stroke_color="#000000", stroke_width=3),
        TextStyle(color="#ff0066", stroke_width=4),
    ),
    "instagram": (
        TextStyle(font_size=36, color="#ffffff", stroke_color="#000000", stroke_width=2),
        TextStyle(color="#ff4400", background_color="rgba(255,68,0,0.3)", padding=8),
    ),
    "youtube": (
        TextStyle(font_size=32, color="#ffffff", background_color="rgba(0,0,0,0.8)", padding=6),
        TextStyle(color="#ff0000", background_color="rgba(255,0,0,0.9)", padding=8),
    ),
    "karaoke": (
        TextStyle(font_size=40, color="#cccccc", stroke_color="#000000", stroke_width=2),
        TextStyle(color="#ffff00", stroke_color="#ff0000", stroke_width=3),
    ),
    "typewriter": (
        TextStyle(
            font_size=24, color="#333333", background_color="rgba(255,255,255,0.9)", padding=10
        ),
        TextStyle(color="#0066cc"),
    ),
}
