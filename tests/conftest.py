"""Shared fixtures: a scripted model gateway and an isolated config."""

import json

import pytest

from quipsync.config import AppConfig, reset_config
from quipsync.llm_backend import ModelResponse
from quipsync.schemas import SCRIPT_BUNDLE, STYLE_PROFILE


class ScriptedGateway:
    """Model gateway stub that replays canned replies and records every call.

    Each reply is a string (one text segment), a list of strings (several
    segments) or an exception to raise. The last reply repeats once the
    script runs out.
    """

    def __init__(self, *replies):
        self.replies = list(replies) or [""]
        self.calls = []
        self.closed = False

    async def generate(self, messages, model=None, max_tokens=1600, temperature=0.7):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        reply = self.replies[min(len(self.calls), len(self.replies)) - 1]
        if isinstance(reply, BaseException):
            raise reply
        segments = (reply,) if isinstance(reply, str) else tuple(reply)
        return ModelResponse(text_segments=tuple(s for s in segments if s), model=model)

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


@pytest.fixture
def gateway_factory():
    return ScriptedGateway


@pytest.fixture
def bundle_doc() -> dict:
    return {
        "storyDetails": "x",
        "songAnalysis": "y",
        "whyThisWorks": "z",
        "scripts": [
            {"script": "a", "deliveryNotes": "n"},
            {"script": "b", "deliveryNotes": "n"},
            {"script": "c", "deliveryNotes": "n"},
        ],
    }


@pytest.fixture
def bundle_json(bundle_doc) -> str:
    return json.dumps(bundle_doc)


@pytest.fixture
def profile_doc() -> dict:
    return STYLE_PROFILE.example


@pytest.fixture
def script_example() -> dict:
    return SCRIPT_BUNDLE.example


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """Packaged defaults with a fake key, a pinned model and a temp store."""
    return AppConfig.from_yaml(overrides={
        "anthropic": {"api_key": "test-key", "model": "sonnet"},
        "store": {"path": str(tmp_path / "styles.jsonl")},
    })


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()
