"""Vendor-neutral gateway types.

The completion engine only sees `ModelResponse.text_segments`; any client that
implements `ModelGateway.generate()` can stand in for the Anthropic one.
"""

from dataclasses import dataclass, field
from typing import Literal, Protocol, TypedDict, runtime_checkable


class ChatMessage(TypedDict):
    role: Literal["user", "assistant"]
    content: str


@dataclass(frozen=True)
class ModelResponse:
    """Ordered text segments returned by one generation call."""
    text_segments: tuple[str, ...] = ()
    model: str | None = None
    stop_reason: str | None = None
    usage: dict = field(default_factory=dict)

    @property
    def text(self) -> str:
        """All segments concatenated; empty when the model returned no text."""
        return "".join(self.text_segments)


@runtime_checkable
class ModelGateway(Protocol):
    """Issues one generation request. Retries are the caller's job."""

    async def generate(
        self,
        messages: list[ChatMessage],
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> ModelResponse:
        ...

    async def close(self) -> None:
        ...


__all__ = ["ChatMessage", "ModelResponse", "ModelGateway"]
