"""Anthropic response extractors."""


def extract_text_segments(response) -> tuple[str, ...]:
    """Text blocks of a Messages API response, in order.

    Non-text blocks (thinking, tool_use) are skipped. A response without
    content yields an empty tuple.
    """
    if not response or not getattr(response, 'content', None):
        return ()

    segments = []
    for block in response.content:
        if getattr(block, 'type', None) == 'text':
            text = getattr(block, 'text', None)
            if text:
                segments.append(text)
    return tuple(segments)


def extract_usage(response) -> dict:
    """Extract usage data from response."""
    if not response or not getattr(response, 'usage', None):
        return {}

    usage = response.usage
    return {
        "input_tokens": getattr(usage, 'input_tokens', 0) or 0,
        "output_tokens": getattr(usage, 'output_tokens', 0) or 0,
        "cache_creation_input_tokens": getattr(usage, 'cache_creation_input_tokens', 0) or 0,
        "cache_read_input_tokens": getattr(usage, 'cache_read_input_tokens', 0) or 0,
    }


def create_summary(usage: dict, model: str, stop_reason: str | None, cost: float) -> str:
    """One-line summary with cost and token counts for the debug log."""
    total_in = (
        usage.get("input_tokens", 0)
        + usage.get("cache_creation_input_tokens", 0)
        + usage.get("cache_read_input_tokens", 0)
    )
    return (
        f"{model} | stop={stop_reason or 'unknown'} | "
        f"in={total_in:,} out={usage.get('output_tokens', 0):,} | ${cost:.4f}"
    )
