"""Error taxonomy for the strict-JSON completion pipeline.

    QuipSyncError
    ├── InputError          malformed request, rejected before any model call
    ├── ParseError          model output is not JSON (drives a repair attempt)
    ├── SchemaError         JSON that violates the OutputSchema (drives a repair attempt)
    ├── StoreError          style-profile persistence failure
    ├── ExtractError        URL fetch / text extraction failure
    └── CompletionError
        ├── GatewayError    transport / auth / quota failure, terminal
        └── ExhaustionError all attempts consumed, caused by the last Parse/SchemaError

ParseError and SchemaError wrap a structured ValidationFailure. Failures stay
structured inside the engine and are rendered to text only when the repair
message is composed.
"""

from dataclasses import dataclass
from typing import Literal

FailureKind = Literal["parse", "schema"]

SNIPPET_CHARS = 200
FEEDBACK_CHARS = 800


@dataclass(frozen=True)
class ValidationFailure:
    """Why a candidate document was rejected."""

    kind: FailureKind
    reason: str
    snippet: str = ""

    def render(self, limit: int = FEEDBACK_CHARS) -> str:
        """Render as repair feedback, clipped to `limit` characters."""
        label = "JSON parse error" if self.kind == "parse" else "Schema error"
        text = f"{label}: {self.reason}"
        if self.snippet:
            text += f"\nOffending text: {self.snippet}"
        return text[:limit]


class QuipSyncError(Exception):
    """Base class for all quipsync errors."""


class InputError(QuipSyncError):
    """Malformed or missing request fields (unknown mode, empty prompt, bad URL)."""


class ValidationError(QuipSyncError):
    """A candidate document failed parsing or schema validation."""

    def __init__(self, failure: ValidationFailure):
        super().__init__(failure.reason)
        self.failure = failure


class ParseError(ValidationError):
    """Model output is not syntactically valid JSON after fence stripping."""


class SchemaError(ValidationError):
    """Valid JSON that does not conform to the OutputSchema."""


class CompletionError(QuipSyncError):
    """A completion call failed without producing a document."""


class GatewayError(CompletionError):
    """Transport, auth or quota failure from the model service."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ExhaustionError(CompletionError):
    """All permitted attempts were consumed without a valid document."""

    def __init__(self, attempts: int, last_failure: ValidationFailure, schema_name: str = ""):
        self.attempts = attempts
        self.last_failure = last_failure
        self.schema_name = schema_name
        target = f" {schema_name}" if schema_name else ""
        super().__init__(
            f"No valid{target} document after {attempts} attempt(s); "
            f"last error: {last_failure.render(FEEDBACK_CHARS)}"
        )


class StoreError(QuipSyncError):
    """Reading or writing the style-profile store failed."""


class ExtractError(QuipSyncError):
    """Fetching or extracting text from a URL failed."""


def failure_error(failure: ValidationFailure) -> ValidationError:
    """Build the matching exception for a structured failure."""
    if failure.kind == "parse":
        return ParseError(failure)
    return SchemaError(failure)


__all__ = [
    "FailureKind",
    "ValidationFailure",
    "QuipSyncError",
    "InputError",
    "ValidationError",
    "ParseError",
    "SchemaError",
    "CompletionError",
    "GatewayError",
    "ExhaustionError",
    "StoreError",
    "ExtractError",
    "failure_error",
    "SNIPPET_CHARS",
    "FEEDBACK_CHARS",
]
