"""
Supported Models Reference (Anthropic)

Friendly names (what an operator types into CLAUDE_MODEL) map to concrete,
versioned model IDs. Unknown or missing names fall back to the default.

Docs: https://docs.anthropic.com/en/docs/about-claude/models
"""

from ..telemetry import logger

# =============================================================================
# ANTHROPIC (CLAUDE) MODELS
# =============================================================================

ANTHROPIC_MODELS = {
    # Claude 4.5 Series (Latest)
    "claude-opus-4-5-20251101": "Premium model, max intelligence",
    "claude-sonnet-4-5-20250929": "Best balance of speed/intelligence",
    "claude-haiku-4-5-20251001": "Fastest, near-frontier intelligence",

    # Claude 4 Series (Legacy but available)
    "claude-opus-4-1-20250805": "Previous Opus",
    "claude-opus-4-20250514": "Claude 4 Opus",
    "claude-sonnet-4-20250514": "Claude 4 Sonnet",
    "claude-3-7-sonnet-20250219": "Claude 3.7 Sonnet",

    # Claude 3.5 Series (Legacy)
    "claude-3-5-haiku-20241022": "Fast Claude 3.5",
}

# Friendly name -> concrete ID
ANTHROPIC_ALIASES = {
    "sonnet": "claude-sonnet-4-5-20250929",
    "claude-sonnet": "claude-sonnet-4-5-20250929",
    "claude-sonnet-4-5": "claude-sonnet-4-5-20250929",
    "opus": "claude-opus-4-5-20251101",
    "claude-opus": "claude-opus-4-5-20251101",
    "claude-opus-4-5": "claude-opus-4-5-20251101",
    "haiku": "claude-haiku-4-5-20251001",
    "claude-haiku": "claude-haiku-4-5-20251001",
    "claude-haiku-4-5": "claude-haiku-4-5-20251001",
}

# Recommended defaults
ANTHROPIC_RECOMMENDED = {
    "flagship": "claude-opus-4-5-20251101",
    "balanced": "claude-sonnet-4-5-20250929",
    "fast": "claude-haiku-4-5-20251001",
}

DEFAULT_MODEL = ANTHROPIC_RECOMMENDED["balanced"]


def resolve_model(name: str | None) -> str:
    """Map a friendly or concrete model name to a concrete model ID.

    Matching is case-insensitive. Empty or unrecognized names resolve to
    DEFAULT_MODEL.
    """
    key = (name or "").strip().lower()
    if not key:
        return DEFAULT_MODEL
    if key in ANTHROPIC_MODELS:
        return key
    if key in ANTHROPIC_ALIASES:
        return ANTHROPIC_ALIASES[key]
    if key in ANTHROPIC_RECOMMENDED:
        return ANTHROPIC_RECOMMENDED[key]
    logger.bind(source="gateway").warning(f"Unknown model '{name}', using {DEFAULT_MODEL}")
    return DEFAULT_MODEL


def list_models() -> dict:
    """Concrete model IDs with descriptions."""
    return dict(ANTHROPIC_MODELS)


__all__ = [
    "ANTHROPIC_MODELS",
    "ANTHROPIC_ALIASES",
    "ANTHROPIC_RECOMMENDED",
    "DEFAULT_MODEL",
    "resolve_model",
    "list_models",
]
