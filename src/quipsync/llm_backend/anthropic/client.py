"""Anthropic Gateway - Async with aiohttp.

Thin call interface to the Messages API. One call per `generate()`, no retry
logic here: the completion engine decides what to do with a bad answer, and a
transport / auth / quota failure surfaces as GatewayError.

Usage:
    async with AnthropicGateway(api_key=key) as gateway:
        response = await gateway.generate(
            messages=[{"role": "user", "content": "..."}],
            model="claude-sonnet-4-5-20250929",
            max_tokens=1800,
            temperature=0.7,
        )
        print(response.text)
"""

import anthropic
from anthropic import AsyncAnthropic, DefaultAioHttpClient

from ...errors import GatewayError
from ...telemetry import logger, truncate
from ..base import ChatMessage, ModelResponse
from ..supported_models import resolve_model
from .ant_to_json import create_summary, extract_text_segments, extract_usage
from .pricing import calculate_cost


class AnthropicGateway:
    """Async Anthropic gateway using aiohttp for improved concurrency."""

    def __init__(
        self,
        api_key: str | None = None,
        default_model: str | None = None,
        timeout: float = 120,
        max_retries: int = 0,
        client: AsyncAnthropic | None = None,
    ):
        """
        Args:
            api_key: Anthropic API key
            default_model: Friendly or concrete model used when a call passes none
            timeout: Per-request timeout in seconds
            max_retries: SDK-level transport retries (0 keeps retry policy in the engine)
            client: Pre-built SDK client (tests)
        """
        self._log = logger.bind(source="gateway")
        self.default_model = resolve_model(default_model)

        if client is not None:
            self.client = client
        else:
            if not api_key:
                self._log.warning("No Anthropic API key provided; requests will likely fail")
            client_kwargs = {
                "http_client": DefaultAioHttpClient(),
                "timeout": timeout,
                "max_retries": max_retries,
            }
            if api_key:
                client_kwargs["api_key"] = api_key
            self.client = AsyncAnthropic(**client_kwargs)

        self._log.info(f"Anthropic async gateway initialized with model: {self.default_model}")

    async def generate(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        max_tokens: int = 1600,
        temperature: float = 0.7,
    ) -> ModelResponse:
        """Send the full conversation and return the response's text segments.

        Raises:
            GatewayError: connection, timeout, auth, quota or other API failure
        """
        resolved_model = model or self.default_model

        try:
            response = await self.client.messages.create(
                model=resolved_model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": m["role"], "content": m["content"]} for m in messages],
            )
        except anthropic.APIStatusError as e:
            raise GatewayError(
                f"Anthropic API error {e.status_code}: {truncate(e.message, 300)}",
                status_code=e.status_code,
            ) from e
        except anthropic.APIConnectionError as e:
            raise GatewayError(f"Anthropic connection failed: {truncate(str(e), 300)}") from e
        except anthropic.APIError as e:
            raise GatewayError(f"Anthropic request failed: {truncate(str(e), 300)}") from e

        usage = extract_usage(response)
        cost = calculate_cost(usage, resolved_model)
        stop_reason = getattr(response, 'stop_reason', None)
        self._log.debug(create_summary(usage, resolved_model, stop_reason, cost))

        return ModelResponse(
            text_segments=extract_text_segments(response),
            model=getattr(response, 'model', resolved_model),
            stop_reason=stop_reason,
            usage=usage,
        )

    async def close(self):
        """Close the aiohttp client session."""
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
