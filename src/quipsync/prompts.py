"""Prompt Composer.

Builds the text sent to the model. Composition is deterministic: the same
task, schema, example and style always produce the same strings.

    composed = compose(task, SCRIPT_BUNDLE, style=resolve("dramatic"))
    first_message = composed.initial_message()
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from textwrap import dedent

from .errors import FEEDBACK_CHARS, ValidationFailure
from .schemas import OutputSchema
from .styles import StyleDirective

SYSTEM_FRAMING = dedent(
    """
    You MUST return ONLY valid JSON. No prose, no markdown fences.
    Match this exact shape (keys and types). Do not add extra keys.

    Example shape:
    {example}
    """
).strip()

REPAIR_INSTRUCTION = "Return ONLY valid JSON that matches the required shape."


@dataclass(frozen=True)
class ComposedPrompt:
    """System framing + user task, and the temperature the style asks for."""
    system_framing: str
    user_message: str
    temperature: float | None = None

    def initial_message(self) -> str:
        """Single user message that opens the conversation."""
        return f"{self.system_framing}\n\n{self.user_message}"


def compose(
    task: str,
    schema: OutputSchema,
    example: dict | None = None,
    style: StyleDirective | None = None,
) -> ComposedPrompt:
    """Assemble the prompt for one completion.

    Args:
        task: The caller's task description
        schema: Output contract the model must satisfy
        example: Schema-conformant sample; defaults to the schema's own example
        style: Optional style directive; its guidance is appended to the task
            and its temperature supersedes the caller's default

    Returns:
        ComposedPrompt
    """
    example_doc = schema.example if example is None else example
    framing = SYSTEM_FRAMING.format(example=json.dumps(example_doc, ensure_ascii=False, indent=2))

    user_message = task.strip()
    if style is not None:
        user_message = f"{user_message}\n\n{style.guidance}"

    return ComposedPrompt(
        system_framing=framing,
        user_message=user_message,
        temperature=style.temperature if style is not None else None,
    )


def render_repair_message(failure: ValidationFailure, style: StyleDirective | None = None) -> str:
    """User message sent after a rejected attempt.

    Contains the clipped failure reason, the JSON-only instruction and, when a
    style is active, the style guidance again so repairs keep the voice.
    """
    feedback = failure.render(FEEDBACK_CHARS)
    parts = [
        f"Your previous output failed JSON validation:\n{feedback}",
        REPAIR_INSTRUCTION,
    ]
    if style is not None:
        parts.append(f"Keep following this style:\n{style.guidance}")
    return "\n\n".join(parts)


def build_style_analysis_task(description: str, samples: list[str]) -> str:
    """Task text asking the model to distil a DJ's voice from sample scripts."""
    joined = "\n\n---\n\n".join(f"SAMPLE {i + 1}:\n{s}" for i, s in enumerate(samples))
    return "\n".join([
        f'USER\'S STYLE DESCRIPTION:\n"{description}"',
        "",
        "SCRIPT SAMPLES:",
        joined,
        "",
        "TASK: Analyze this DJ's writing voice. Return STRICT JSON with these fields:",
        dedent(
            """
            {
              "styleProfile": "detailed description of voice, tone, rhythm, POV",
              "keyCharacteristics": ["bullet list of concrete traits"],
              "samplePhrases": ["short phrases that sound like them"],
              "instructions": "clear guidance to replicate the style"
            }
            """
        ).strip(),
        "",
        "Rules:",
        "- Do NOT include code fences.",
        "- Do NOT add commentary, JSON only.",
        "- Be specific, concrete, non-generic.",
    ])


__all__ = [
    "SYSTEM_FRAMING",
    "REPAIR_INSTRUCTION",
    "ComposedPrompt",
    "compose",
    "render_repair_message",
    "build_style_analysis_task",
]
