"""Schema Registry - output contracts for the strict-JSON completion engine.

Two documents are supported:

    ScriptBundle  - three on-air transition scripts plus the story / song analysis
    StyleProfile  - a DJ's writing voice distilled from sample scripts

Each OutputSchema pairs a pydantic model with an example document that is
embedded in the prompt to anchor the model's output shape.

Usage:
    from quipsync.schemas import SCRIPT_BUNDLE, get_schema

    outcome = SCRIPT_BUNDLE.validate(candidate)
    if outcome.ok:
        document = outcome.document
    else:
        print(outcome.failure.render())
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictStr
from pydantic import ValidationError as PydanticValidationError

from .errors import SNIPPET_CHARS, InputError, ValidationFailure


# =============================================================================
# Field types
# =============================================================================

def _not_blank(value: str) -> str:
    """Reject strings that are empty after trimming (value itself is kept as-is)."""
    if not value.strip():
        raise ValueError("must be a non-empty string")
    return value


NonEmptyStr = Annotated[StrictStr, AfterValidator(_not_blank)]


# =============================================================================
# Document models
# =============================================================================

class ScriptVariant(BaseModel):
    """One transition script and how to deliver it."""
    script: NonEmptyStr
    deliveryNotes: NonEmptyStr

    model_config = ConfigDict(extra="allow")


class ScriptBundle(BaseModel):
    """Story summary, song analysis and exactly three scripts (long, medium, short)."""
    storyDetails: NonEmptyStr
    songAnalysis: NonEmptyStr
    whyThisWorks: NonEmptyStr
    scripts: list[ScriptVariant] = Field(..., min_length=3, max_length=3)

    model_config = ConfigDict(extra="allow")


class StyleProfile(BaseModel):
    """A DJ's writing voice."""
    styleProfile: NonEmptyStr
    keyCharacteristics: list[NonEmptyStr] = Field(..., min_length=1)
    samplePhrases: list[NonEmptyStr] = Field(..., min_length=1)
    instructions: NonEmptyStr

    model_config = ConfigDict(extra="allow")


# =============================================================================
# Validation outcome
# =============================================================================

@dataclass(frozen=True)
class ValidationOutcome:
    """Either an accepted document or a structured failure, never both."""
    document: dict | None = None
    failure: ValidationFailure | None = None

    def __post_init__(self):
        if (self.document is None) == (self.failure is None):
            raise ValueError("ValidationOutcome needs exactly one of document/failure")

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def accept(cls, document: dict) -> "ValidationOutcome":
        return cls(document=document)

    @classmethod
    def reject(cls, reason: str, offending: Any = None) -> "ValidationOutcome":
        return cls(failure=ValidationFailure(kind="schema", reason=reason, snippet=_snippet(offending)))


def _snippet(value: Any) -> str:
    """Compact JSON rendering of the offending value, clipped."""
    if value is None:
        return ""
    if isinstance(value, str):
        text = value
    else:
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            text = repr(value)
    return text[:SNIPPET_CHARS]


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


# Check order: presence, then type, then arity, then non-empty strings
_ERROR_RANK = {
    "missing": 0,
    "string_type": 1,
    "list_type": 1,
    "model_type": 1,
    "model_attributes_type": 1,
    "dict_type": 1,
    "too_short": 2,
    "too_long": 2,
    "value_error": 3,
}


def _error_location(loc: tuple) -> str:
    parts = []
    for item in loc:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        else:
            parts.append(f".{item}" if parts else str(item))
    return "".join(parts) or "<root>"


# =============================================================================
# OutputSchema
# =============================================================================

@dataclass(frozen=True)
class OutputSchema:
    """A named, immutable output contract.

    The example document is stored serialized so nobody can mutate the
    shared instance; `example` hands out a fresh copy.
    """
    name: str
    model: type[BaseModel]
    example_json: str = field(repr=False)

    @classmethod
    def define(cls, name: str, model: type[BaseModel], example: dict) -> "OutputSchema":
        return cls(name=name, model=model, example_json=json.dumps(example, ensure_ascii=False))

    @property
    def example(self) -> dict:
        return json.loads(self.example_json)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(n for n, f in self.model.model_fields.items() if f.is_required())

    def render_example(self) -> str:
        """Pretty-printed example for embedding in prompts."""
        return json.dumps(self.example, ensure_ascii=False, indent=2)

    def validate(self, candidate: Any) -> ValidationOutcome:
        """Accept or reject a parsed JSON value. Pure, never raises.

        Extra keys are tolerated and preserved in the returned document.
        """
        if not isinstance(candidate, dict):
            return ValidationOutcome.reject(
                f"Expected a JSON object for {self.name}, got {_json_type_name(candidate)}",
                candidate,
            )

        missing = [f for f in self.required_fields if f not in candidate]
        if missing:
            return ValidationOutcome.reject(
                f"Missing required field(s): {', '.join(missing)}",
                sorted(candidate.keys()),
            )

        try:
            self.model.model_validate(candidate)
        except PydanticValidationError as e:
            errors = sorted(
                e.errors(include_url=False),
                key=lambda err: _ERROR_RANK.get(err.get("type", ""), 9),
            )
            first = errors[0]
            where = _error_location(tuple(first.get("loc", ())))
            reason = f"{where}: {first.get('msg', 'invalid value')}"
            if len(errors) > 1:
                reason += f" (+{len(errors) - 1} more error(s))"
            return ValidationOutcome.reject(reason, first.get("input"))

        return ValidationOutcome.accept(candidate)


# =============================================================================
# Registry
# =============================================================================

SCRIPT_BUNDLE = OutputSchema.define(
    "ScriptBundle",
    ScriptBundle,
    {
        "storyDetails": "Example summary",
        "songAnalysis": "Example analysis",
        "whyThisWorks": "Short rationale",
        "scripts": [
            {"script": "Long script example", "deliveryNotes": "notes"},
            {"script": "Medium script example", "deliveryNotes": "notes"},
            {"script": "Short script example", "deliveryNotes": "notes"},
        ],
    },
)

STYLE_PROFILE = OutputSchema.define(
    "StyleProfile",
    StyleProfile,
    {
        "styleProfile": "A cohesive description of the DJ persona",
        "keyCharacteristics": ["witty", "warm", "punchy"],
        "samplePhrases": ["let’s roll the windows down", "right on cue"],
        "instructions": "Keep sentences tight, land a hook in first 3 lines.",
    },
)

SCHEMAS = MappingProxyType({
    "script": SCRIPT_BUNDLE,
    "style": STYLE_PROFILE,
})


def get_schema(mode: str | None) -> OutputSchema:
    """Look up the output schema for a request mode ("script" or "style")."""
    key = (mode or "").strip()
    if key not in SCHEMAS:
        raise InputError('Invalid mode (use "script" or "style")')
    return SCHEMAS[key]


__all__ = [
    "NonEmptyStr",
    "ScriptVariant",
    "ScriptBundle",
    "StyleProfile",
    "ValidationOutcome",
    "OutputSchema",
    "SCRIPT_BUNDLE",
    "STYLE_PROFILE",
    "SCHEMAS",
    "get_schema",
]
