"""
Per-endpoint orchestration shared by the HTTP handlers and the CLI.

    CompletionService    mode + prompt + style  -> validated document
    StyleProfileService  description + samples  -> analysed, stored StyleProfile
"""

import asyncio
from typing import Any

from .config import AppConfig
from .engine import CompletionRequest, StrictJSONCompleter
from .errors import InputError
from .prompts import build_style_analysis_task
from .schemas import STYLE_PROFILE, get_schema
from .store import JSONLStyleStore
from .styles import resolve


def build_completion_request(
    mode: Any,
    prompt: Any,
    style: Any,
    config: AppConfig,
    model: str | None = None,
) -> CompletionRequest:
    """Validate raw request fields and build the engine request.

    Script mode always carries a style directive (absent or unknown ids fall
    back to conversational). Style mode ignores `style`.

    Raises:
        InputError: unknown mode or blank prompt
    """
    mode = mode.strip() if isinstance(mode, str) else None
    schema = get_schema(mode)

    if not isinstance(prompt, str) or not prompt.strip():
        raise InputError("Missing prompt")

    defaults = config.completion.for_mode(mode)
    directive = resolve(style if isinstance(style, str) else None) if mode == "script" else None

    return CompletionRequest(
        user_prompt=prompt,
        schema=schema,
        model=model,
        max_output_tokens=defaults.max_output_tokens,
        temperature=defaults.temperature,
        max_retries=defaults.max_retries,
        style=directive,
    )


class CompletionService:
    """Runs `/api/complete-json` requests through the engine."""

    def __init__(self, completer: StrictJSONCompleter, config: AppConfig):
        self.completer = completer
        self.config = config

    async def complete(self, mode: Any, prompt: Any, style: Any = None) -> dict:
        request = build_completion_request(mode, prompt, style, self.config)
        return await self.completer.complete(request)


class StyleProfileService:
    """Analyses sample scripts into a StyleProfile and persists it."""

    def __init__(self, completer: StrictJSONCompleter, store: JSONLStyleStore, config: AppConfig):
        self.completer = completer
        self.store = store
        self.config = config

    async def create(self, description: str, samples: list[str]) -> dict:
        """Analyse the samples and store the result.

        Raises:
            ExhaustionError / GatewayError: analysis failed
            StoreError: the record could not be written
        """
        defaults = self.config.completion.style_analysis
        request = CompletionRequest(
            user_prompt=build_style_analysis_task(description, samples),
            schema=STYLE_PROFILE,
            max_output_tokens=defaults.max_output_tokens,
            temperature=defaults.temperature,
            max_retries=defaults.max_retries,
        )
        analysis = await self.completer.complete(request)
        return await asyncio.to_thread(self.store.insert, description, analysis)

    async def latest(self) -> dict | None:
        return await asyncio.to_thread(self.store.fetch_latest)


__all__ = ["build_completion_request", "CompletionService", "StyleProfileService"]
