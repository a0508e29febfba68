"""Style Directive Resolver.

Maps a style id to writing guidance plus a sampling temperature. The table is
built once at import and is read-only. `resolve()` is total: unknown, blank or
missing ids fall back to the conversational style.
"""

from dataclasses import dataclass
from types import MappingProxyType

DEFAULT_STYLE = "conversational"


@dataclass(frozen=True)
class StyleDirective:
    """Named bundle of writing guidance and sampling temperature."""
    id: str
    name: str
    guidance: str
    temperature: float

    def __post_init__(self):
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature for style '{self.id}' must be in [0, 1], got {self.temperature}")


_DIRECTIVES = (
    StyleDirective(
        id="conversational",
        name="Conversational",
        guidance=(
            "STYLE: Conversational. Talk to one listener like a friend riding along in the car. "
            "Use everyday words, contractions and a relaxed rhythm. Keep it warm and natural, "
            "never scripted-sounding."
        ),
        temperature=0.7,
    ),
    StyleDirective(
        id="humorous",
        name="Humorous",
        guidance=(
            "STYLE: Humorous. Find the light, playful angle in the story. Use quick wit, a "
            "well-timed twist or gentle self-deprecation, and land at least one clear joke. "
            "Never punch down or mock anyone in the story."
        ),
        temperature=0.9,
    ),
    StyleDirective(
        id="touching",
        name="Touching",
        guidance=(
            "STYLE: Touching. Lead with the human moment and the emotion underneath it. "
            "Slow the pacing, choose tender concrete details and let the song carry the feeling "
            "home. Sincere, never saccharine."
        ),
        temperature=0.6,
    ),
    StyleDirective(
        id="inspiring",
        name="Inspiring",
        guidance=(
            "STYLE: Inspiring. Highlight resilience, courage or possibility in the story. Build "
            "energy toward the song and close on an uplifting call that leaves the listener "
            "feeling they can do something too."
        ),
        temperature=0.7,
    ),
    StyleDirective(
        id="dramatic",
        name="Dramatic",
        guidance=(
            "STYLE: Dramatic. Open with tension and hold back the payoff. Use short punchy "
            "sentences, vivid stakes and a reveal that hits right as the song starts."
        ),
        temperature=0.8,
    ),
    StyleDirective(
        id="reflective",
        name="Reflective",
        guidance=(
            "STYLE: Reflective. Take a thoughtful, unhurried tone. Connect the story to a "
            "bigger idea about people or time, pose a question the listener can sit with, "
            "and ease into the song."
        ),
        temperature=0.5,
    ),
)

STYLE_DIRECTIVES = MappingProxyType({d.id: d for d in _DIRECTIVES})
STYLE_IDS = tuple(STYLE_DIRECTIVES.keys())


def is_known_style(style_id: str | None) -> bool:
    """True if the id (case-insensitive, trimmed) names one of the six styles."""
    if not isinstance(style_id, str):
        return False
    return style_id.strip().lower() in STYLE_DIRECTIVES


def resolve(style_id: str | None = None) -> StyleDirective:
    """Return the directive for `style_id`, defaulting to conversational."""
    if isinstance(style_id, str):
        directive = STYLE_DIRECTIVES.get(style_id.strip().lower())
        if directive is not None:
            return directive
    return STYLE_DIRECTIVES[DEFAULT_STYLE]


__all__ = [
    "DEFAULT_STYLE",
    "StyleDirective",
    "STYLE_DIRECTIVES",
    "STYLE_IDS",
    "is_known_style",
    "resolve",
]
