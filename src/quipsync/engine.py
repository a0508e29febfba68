"""Strict-JSON Completion Engine.

Turns a free-text generator into a contract-shaped data source:

    Requesting -> Parsing -> Validating -> Succeeded
                                        -> Repairing -> Requesting ...
                                        -> Exhausted

Each failed attempt appends the rejected output and a repair instruction to
the conversation, so the model keeps the original task context. The loop is
strictly fail-driven: the first valid document is returned immediately.

Usage:
    completer = StrictJSONCompleter(gateway)
    document = await completer.complete(CompletionRequest(
        user_prompt="...",
        schema=SCRIPT_BUNDLE,
        style=resolve("dramatic"),
    ))
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from .errors import SNIPPET_CHARS, ExhaustionError, ValidationFailure, failure_error
from .llm_backend.base import ChatMessage, ModelGateway
from .prompts import compose, render_repair_message
from .schemas import OutputSchema, ValidationOutcome
from .styles import StyleDirective
from .telemetry import logger, truncate

_LEADING_FENCE = re.compile(r"^```(?:json)?[ \t]*(?:\r?\n)?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"(?:\r?\n)?[ \t]*```$")

# Stands in for an assistant turn that produced no visible text
EMPTY_RESPONSE_MARKER = "(empty response)"


# =============================================================================
# Request / conversation
# =============================================================================

@dataclass(frozen=True)
class CompletionRequest:
    """Everything one completion call needs. Built per call, never persisted."""
    user_prompt: str
    schema: OutputSchema
    example: dict | None = None
    model: str | None = None
    max_output_tokens: int = 1600
    temperature: float = 0.7
    max_retries: int = 2
    style: StyleDirective | None = None

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.max_output_tokens <= 0:
            raise ValueError(f"max_output_tokens must be > 0, got {self.max_output_tokens}")
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"temperature must be in [0, 1], got {self.temperature}")

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1


class ConversationState:
    """Append-only message history owned by a single completion call."""

    def __init__(self, first_message: str):
        self._messages: list[ChatMessage] = [{"role": "user", "content": first_message}]

    def add_assistant(self, content: str) -> None:
        if not content or not content.strip():
            content = EMPTY_RESPONSE_MARKER
        self._messages.append({"role": "assistant", "content": content})

    def add_user(self, content: str) -> None:
        self._messages.append({"role": "user", "content": content})

    @property
    def messages(self) -> list[ChatMessage]:
        """Snapshot copy; callers cannot mutate the history."""
        return [dict(m) for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)


# =============================================================================
# Normalization / parsing
# =============================================================================

def strip_code_fences(text: str) -> str:
    """Remove a leading ```json line and a trailing ``` line plus surrounding whitespace.

    Interior content is never touched.
    """
    stripped = (text or "").strip()
    stripped = _LEADING_FENCE.sub("", stripped, count=1)
    stripped = _TRAILING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def parse_candidate(text: str) -> tuple[Any, ValidationFailure | None]:
    """Parse normalized model output as JSON.

    Returns:
        (value, None) on success, (None, failure) when the text is not JSON
    """
    try:
        return json.loads(text), None
    except (json.JSONDecodeError, RecursionError) as e:
        # RecursionError: nesting deeper than the decoder allows
        return None, ValidationFailure(kind="parse", reason=str(e), snippet=text[:SNIPPET_CHARS])


def evaluate(raw_text: str, schema: OutputSchema) -> ValidationOutcome:
    """Normalize, parse and validate one model output."""
    normalized = strip_code_fences(raw_text)
    value, failure = parse_candidate(normalized)
    if failure is not None:
        return ValidationOutcome(failure=failure)
    return schema.validate(value)


# =============================================================================
# Engine
# =============================================================================

class StrictJSONCompleter:
    """Drives request / validate / repair cycles against a model gateway.

    Holds no per-request state, so one instance can serve concurrent calls.
    """

    def __init__(self, gateway: ModelGateway, default_model: str | None = None):
        self.gateway = gateway
        self.default_model = default_model
        self._log = logger.bind(source="engine")

    async def complete(self, request: CompletionRequest) -> dict:
        """Return the first schema-conformant document the model produces.

        Raises:
            GatewayError: the model service failed; terminal, does not use a retry
            ExhaustionError: every attempt was rejected; __cause__ is the last
                ParseError / SchemaError
        """
        schema = request.schema
        composed = compose(request.user_prompt, schema, request.example, request.style)
        temperature = composed.temperature if composed.temperature is not None else request.temperature
        model = request.model or self.default_model
        conversation = ConversationState(composed.initial_message())

        total = request.total_attempts
        last_failure: ValidationFailure | None = None

        for attempt in range(1, total + 1):
            self._log.debug(
                f"{schema.name} attempt {attempt}/{total} "
                f"(model={model}, temperature={temperature}, messages={len(conversation)})"
            )

            response = await self.gateway.generate(
                conversation.messages,
                model=model,
                max_tokens=request.max_output_tokens,
                temperature=temperature,
            )
            raw = response.text
            outcome = evaluate(raw, schema)

            if outcome.ok:
                self._log.info(f"{schema.name} validated on attempt {attempt}/{total}")
                return outcome.document

            last_failure = outcome.failure
            self._log.warning(
                f"{schema.name} attempt {attempt}/{total} rejected "
                f"({last_failure.kind}): {truncate(last_failure.reason, 200)}"
            )

            if attempt == total:
                break

            conversation.add_assistant(raw)
            conversation.add_user(render_repair_message(last_failure, request.style))

        self._log.error(f"{schema.name} exhausted after {total} attempt(s)")
        raise ExhaustionError(total, last_failure, schema.name) from failure_error(last_failure)


__all__ = [
    "CompletionRequest",
    "ConversationState",
    "StrictJSONCompleter",
    "strip_code_fences",
    "parse_candidate",
    "evaluate",
    "EMPTY_RESPONSE_MARKER",
]
