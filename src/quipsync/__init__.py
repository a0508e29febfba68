"""
QuipSync - strict-JSON script and style generation.

Core:
- StrictJSONCompleter: request / validate / repair loop over a ModelGateway
- Schema registry: SCRIPT_BUNDLE, STYLE_PROFILE, get_schema
- Style directives: resolve, STYLE_DIRECTIVES
"""

from .config import AppConfig, get_config, reset_config, set_config
from .engine import CompletionRequest, StrictJSONCompleter, strip_code_fences
from .errors import (
    CompletionError,
    ExhaustionError,
    ExtractError,
    GatewayError,
    InputError,
    ParseError,
    QuipSyncError,
    SchemaError,
    StoreError,
    ValidationFailure,
)
from .llm_backend import AnthropicGateway, ModelGateway, ModelResponse, resolve_model
from .schemas import SCHEMAS, SCRIPT_BUNDLE, STYLE_PROFILE, OutputSchema, get_schema
from .service import CompletionService, StyleProfileService
from .styles import STYLE_DIRECTIVES, StyleDirective, resolve

__version__ = "1.0.0"

__all__ = [
    "AppConfig",
    "get_config",
    "reset_config",
    "set_config",
    "CompletionRequest",
    "StrictJSONCompleter",
    "strip_code_fences",
    "CompletionError",
    "ExhaustionError",
    "ExtractError",
    "GatewayError",
    "InputError",
    "ParseError",
    "QuipSyncError",
    "SchemaError",
    "StoreError",
    "ValidationFailure",
    "AnthropicGateway",
    "ModelGateway",
    "ModelResponse",
    "resolve_model",
    "SCHEMAS",
    "SCRIPT_BUNDLE",
    "STYLE_PROFILE",
    "OutputSchema",
    "get_schema",
    "CompletionService",
    "StyleProfileService",
    "STYLE_DIRECTIVES",
    "StyleDirective",
    "resolve",
]
