"""
QuipSync HTTP service - FastAPI.

Endpoints:
    POST /api/complete-json   {mode, prompt, style?} -> {ok, data}
    POST /api/extract         {url}                  -> {text}
    POST /api/style-create    {description, samples} -> {ok, style}
    GET  /api/style-list                             -> {ok, personal}
    GET  /health

Failures are {error, detail?} with a non-2xx status: 400 for bad input,
5xx for model / storage failures.

Usage:
    uvicorn quipsync.server:app --port 8000
"""

import random
import string
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .config import AppConfig, get_config
from .engine import StrictJSONCompleter
from .errors import (
    FEEDBACK_CHARS,
    ExhaustionError,
    ExtractError,
    GatewayError,
    InputError,
    StoreError,
)
from .extract import extract
from .llm_backend import AnthropicGateway, ModelGateway, resolve_model
from .service import StyleProfileService, build_completion_request
from .store import JSONLStyleStore
from .telemetry import logger, setup_logging, truncate

_RID_ALPHABET = string.ascii_lowercase + string.digits


def _request_id() -> str:
    return "".join(random.choices(_RID_ALPHABET, k=6))


def _error(status: int, error: str, detail: str | None = None) -> JSONResponse:
    body = {"error": error}
    if detail:
        body["detail"] = truncate(detail, FEEDBACK_CHARS)
    return JSONResponse(body, status_code=status)


class StyleCreateRequest(BaseModel):
    """Body of POST /api/style-create."""
    description: str = Field(..., min_length=10, max_length=2000)
    samples: list[str] = Field(..., min_length=1, max_length=5)

    @field_validator("samples")
    @classmethod
    def _samples_long_enough(cls, samples: list[str]) -> list[str]:
        for i, sample in enumerate(samples):
            if len(sample) < 50:
                raise ValueError(f"samples[{i}] must be at least 50 characters")
        return samples


def create_app(
    config: AppConfig | None = None,
    gateway: ModelGateway | None = None,
    store: JSONLStyleStore | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        config: App config (process-wide config if None)
        gateway: Model gateway; built from config in the lifespan if None and
            an API key is configured
        store: Style store; built from config.store.path if None
    """
    config = config or get_config()
    setup_logging(config.telemetry.level)
    log = logger.bind(source="server")
    default_model = resolve_model(config.anthropic.model)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_gateway = False
        if app.state.gateway is None and config.anthropic.api_key:
            app.state.gateway = AnthropicGateway(
                api_key=config.anthropic.api_key,
                default_model=default_model,
                timeout=config.anthropic.timeout,
            )
            owns_gateway = True
        log.info(f"QuipSync service starting (model={default_model})")

        yield

        if owns_gateway:
            await app.state.gateway.close()
            app.state.gateway = None
        log.info("QuipSync service stopped")

    app = FastAPI(
        title="QuipSync",
        description="Strict-JSON script and style generation for radio DJs",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.gateway = gateway
    app.state.store = store or JSONLStyleStore(config.store.path)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _completer(app: FastAPI) -> StrictJSONCompleter | None:
        if app.state.gateway is None:
            return None
        return StrictJSONCompleter(app.state.gateway, default_model=default_model)

    @app.get("/health")
    async def health():
        return {"status": "ok", "model": default_model}

    @app.post("/api/complete-json")
    async def complete_json(request: Request):
        rid = _request_id()
        t0 = time.perf_counter()

        try:
            body = await request.json()
        except ValueError:
            return _error(400, "Invalid JSON body")
        if not isinstance(body, dict):
            return _error(400, "Invalid JSON body")

        # Input is checked before the credential
        try:
            completion = build_completion_request(
                body.get("mode"), body.get("prompt"), body.get("style"), config,
            )
        except InputError as e:
            return _error(400, str(e))

        completer = _completer(request.app)
        if completer is None:
            return _error(500, "Server missing ANTHROPIC_API_KEY")

        log.info(f"[complete-json:{rid}] start mode={body.get('mode')} model={default_model}")
        try:
            data = await completer.complete(completion)
        except ExhaustionError as e:
            log.error(f"[complete-json:{rid}] exhausted: {truncate(str(e), 200)}")
            return _error(502, "LLM JSON endpoint failed", str(e))
        except GatewayError as e:
            log.error(f"[complete-json:{rid}] gateway error: {e}")
            return _error(503, "LLM JSON endpoint failed", str(e))
        except Exception as e:
            log.exception(f"[complete-json:{rid}] error")
            return _error(500, "LLM JSON endpoint failed", str(e))

        log.info(f"[complete-json:{rid}] done in {(time.perf_counter() - t0) * 1000:.0f}ms")
        return {"ok": True, "data": data}

    @app.post("/api/extract")
    async def extract_text(request: Request):
        try:
            body = await request.json()
        except ValueError:
            body = {}
        url = body.get("url") if isinstance(body, dict) else None

        try:
            text = await extract(
                url,
                timeout=config.extract.timeout,
                user_agent=config.extract.user_agent,
            )
        except InputError as e:
            return _error(400, str(e))
        except ExtractError as e:
            log.warning(f"[extract] {e}")
            return _error(502, "Extract failed", str(e))

        return {"text": text[: config.extract.max_chars]}

    @app.post("/api/style-create")
    async def style_create(request: Request):
        try:
            payload = StyleCreateRequest.model_validate(await request.json())
        except (ValueError, PydanticValidationError) as e:
            log.warning(f"[style-create] invalid body: {truncate(str(e), 200)}")
            return _error(400, "style-create failed", str(e))

        completer = _completer(request.app)
        if completer is None:
            return _error(500, "Server missing ANTHROPIC_API_KEY")

        service = StyleProfileService(completer, request.app.state.store, config)
        try:
            record = await service.create(payload.description, payload.samples)
        except StoreError as e:
            log.error(f"[style-create] store insert error: {e}")
            return _error(500, "DB insert failed")
        except ExhaustionError as e:
            log.error(f"[style-create] exhausted: {truncate(str(e), 200)}")
            return _error(502, "style-create failed", str(e))
        except GatewayError as e:
            log.error(f"[style-create] gateway error: {e}")
            return _error(503, "style-create failed", str(e))
        except Exception as e:
            log.exception("[style-create] error")
            return _error(500, "style-create failed", str(e))

        return {"ok": True, "style": record}

    @app.get("/api/style-list")
    async def style_list(request: Request):
        service = StyleProfileService(_completer(request.app), request.app.state.store, config)
        try:
            latest = await service.latest()
        except StoreError as e:
            log.error(f"[style-list] store read error: {e}")
            return _error(500, "DB read failed")
        return {"ok": True, "personal": [latest] if latest else []}

    return app


_app: FastAPI | None = None


def __getattr__(name: str):
    # `uvicorn quipsync.server:app` builds the app once, on first access
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["create_app", "StyleCreateRequest"]
