"""
Model Gateway - the boundary to the text-generation service.

- ModelGateway: protocol any client implements (generate / close)
- ModelResponse: vendor-neutral response (ordered text segments)
- AnthropicGateway: async Anthropic implementation
- resolve_model: friendly name -> concrete model ID
"""

from .base import ChatMessage, ModelGateway, ModelResponse
from .anthropic import AnthropicGateway, calculate_cost
from .supported_models import (
    ANTHROPIC_MODELS,
    ANTHROPIC_RECOMMENDED,
    DEFAULT_MODEL,
    list_models,
    resolve_model,
)

__all__ = [
    "ChatMessage",
    "ModelGateway",
    "ModelResponse",
    "AnthropicGateway",
    "calculate_cost",
    "ANTHROPIC_MODELS",
    "ANTHROPIC_RECOMMENDED",
    "DEFAULT_MODEL",
    "list_models",
    "resolve_model",
]
