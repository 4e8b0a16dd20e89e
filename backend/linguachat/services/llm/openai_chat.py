"""OpenAI-compatible chat completion provider.

Uses the official openai SDK against api.openai.com or any compatible
base URL. One request per call: SDK retries are disabled and every call
is bounded by a timeout. Failures are logged and re-raised as RuntimeError;
deciding what to do about them is the caller's job.
"""

import asyncio
from collections.abc import Sequence

import httpx
import structlog
from openai import AsyncOpenAI

from linguachat.services.llm.base import ChatContextEntry, LLMProvider, LLMResponse

logger = structlog.get_logger(__name__)

_TIMEOUT_SECONDS = 10.0


class OpenAIChatProvider(LLMProvider):
    """Chat completions via the OpenAI API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4-turbo-preview",
        base_url: str | None = None,
        timeout: float = _TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )
        self._model = model
        self._timeout = timeout
        logger.info("openai_provider_initialized", model=model, base_url=base_url)

    async def complete(
        self,
        messages: Sequence[ChatContextEntry],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Run a single chat completion request."""
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model,
                    messages=[m.to_dict() for m in messages],
                    max_tokens=max_tokens,
                    temperature=temperature,
                ),
                timeout=self._timeout,
            )
            text = response.choices[0].message.content
            if text is None:
                raise ValueError("completion returned no text")
            usage = response.usage
            result = LLMResponse(
                text=text,
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
            )
            logger.debug(
                "openai_complete_ok",
                input_tokens=result.input_tokens,
                output_tokens=result.output_tokens,
                message_count=len(messages),
            )
            return result
        except asyncio.TimeoutError as e:
            logger.error("openai_complete_timeout", message_count=len(messages))
            raise RuntimeError("OpenAI completion timed out") from e
        except Exception as e:
            logger.error(
                "openai_complete_failed",
                error=str(e),
                model=self._model,
                message_count=len(messages),
            )
            raise RuntimeError(f"OpenAI completion failed: {e}") from e

    async def close(self) -> None:
        await self._client.close()
