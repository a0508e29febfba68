"""Tests for quipsync/service.py."""

import asyncio
import json

import pytest

from quipsync.engine import StrictJSONCompleter
from quipsync.errors import ExhaustionError, InputError
from quipsync.schemas import SCRIPT_BUNDLE, STYLE_PROFILE
from quipsync.service import CompletionService, StyleProfileService, build_completion_request
from quipsync.store import JSONLStyleStore
from quipsync.styles import STYLE_DIRECTIVES


class TestBuildCompletionRequest:

    def test_script_defaults(self, app_config):
        request = build_completion_request("script", "prompt", "dramatic", app_config)
        assert request.schema is SCRIPT_BUNDLE
        assert request.max_output_tokens == 1800
        assert request.max_retries == 2
        assert request.style is STYLE_DIRECTIVES["dramatic"]

    @pytest.mark.parametrize("style", [None, "", "bogus", 7])
    def test_script_always_has_a_style(self, app_config, style):
        request = build_completion_request("script", "prompt", style, app_config)
        assert request.style is STYLE_DIRECTIVES["conversational"]

    def test_style_mode_ignores_style(self, app_config):
        request = build_completion_request("style", "prompt", "dramatic", app_config)
        assert request.schema is STYLE_PROFILE
        assert request.style is None
        assert request.temperature == 0.5
        assert request.max_output_tokens == 1200

    @pytest.mark.parametrize("mode", [None, "", "poem", 3])
    def test_bad_mode(self, app_config, mode):
        with pytest.raises(InputError, match='Invalid mode'):
            build_completion_request(mode, "prompt", None, app_config)

    @pytest.mark.parametrize("prompt", [None, "", "   \n", 12])
    def test_missing_prompt(self, app_config, prompt):
        with pytest.raises(InputError, match="Missing prompt"):
            build_completion_request("script", prompt, None, app_config)

    def test_model_override(self, app_config):
        request = build_completion_request("style", "p", None, app_config, model="claude-haiku-4-5-20251001")
        assert request.model == "claude-haiku-4-5-20251001"


class TestCompletionService:

    def test_complete(self, app_config, gateway_factory, bundle_doc, bundle_json):
        gateway = gateway_factory(bundle_json)
        service = CompletionService(StrictJSONCompleter(gateway), app_config)
        assert asyncio.run(service.complete("script", "prompt", "humorous")) == bundle_doc
        assert gateway.calls[0]["temperature"] == 0.9

    def test_input_error_before_model_call(self, app_config, gateway_factory):
        gateway = gateway_factory("unused")
        service = CompletionService(StrictJSONCompleter(gateway), app_config)
        with pytest.raises(InputError):
            asyncio.run(service.complete("poem", "prompt"))
        assert gateway.calls == []


class TestStyleProfileService:

    def _service(self, gateway, app_config):
        store = JSONLStyleStore(app_config.store.path)
        return StyleProfileService(StrictJSONCompleter(gateway), store, app_config)

    def test_create_and_latest(self, app_config, gateway_factory, profile_doc):
        gateway = gateway_factory(json.dumps(profile_doc))
        service = self._service(gateway, app_config)

        record = asyncio.run(service.create("Warm and witty morning host", ["s" * 60]))
        assert record["description"] == "Warm and witty morning host"
        assert record["analysis"] == profile_doc
        assert asyncio.run(service.latest()) == record

        call = gateway.calls[0]
        assert call["temperature"] == 0.6
        assert call["max_tokens"] == 1200
        assert "SAMPLE 1:" in call["messages"][0]["content"]

    def test_failed_analysis_stores_nothing(self, app_config, gateway_factory):
        service = self._service(gateway_factory("not json"), app_config)
        with pytest.raises(ExhaustionError):
            asyncio.run(service.create("Warm and witty morning host", ["s" * 60]))
        assert asyncio.run(service.latest()) is None
