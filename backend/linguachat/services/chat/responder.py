"""Assistant response generation with static fallbacks.

The confidence attached to every reply records where it came from:

  0.9  the completion provider answered
  0.5  no provider is configured; static fallback text
  0.3  a provider is configured but the call failed; static fallback text

generate() never raises. Provider failures are logged and converted into
the 0.3 fallback so the pipeline can always persist an assistant message.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from linguachat.services.language.tables import (
    FALLBACK_RESPONSES,
    SYSTEM_PROMPTS,
    LanguageCode,
    LanguageTable,
)
from linguachat.services.llm.base import ChatContextEntry, LLMProvider

logger = structlog.get_logger(__name__)

CONFIDENCE_PROVIDER = 0.9
CONFIDENCE_NO_PROVIDER = 0.5
CONFIDENCE_PROVIDER_FAILED = 0.3


@dataclass(frozen=True)
class GeneratedResponse:
    """Assistant reply text plus its provenance confidence."""

    content: str
    confidence: float


class ResponseGenerator:
    """Builds the provider request from a context window and a language."""

    def __init__(
        self,
        llm: LLMProvider | None,
        temperature: float = 0.7,
        max_tokens: int = 500,
        system_prompts: LanguageTable[str] = SYSTEM_PROMPTS,
        fallback_responses: LanguageTable[str] = FALLBACK_RESPONSES,
    ) -> None:
        self._llm = llm
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._system_prompts = system_prompts
        self._fallbacks = fallback_responses

    @property
    def has_provider(self) -> bool:
        return self._llm is not None

    def system_prompt(self, language: LanguageCode) -> str:
        return self._system_prompts.resolve(language)

    def fallback_response(self, language: LanguageCode) -> str:
        return self._fallbacks.resolve(language)

    def build_messages(
        self, context: Sequence[ChatContextEntry], language: LanguageCode
    ) -> list[ChatContextEntry]:
        """System persona first, then the context in the order given."""
        return [ChatContextEntry(role="system", content=self.system_prompt(language))] + list(
            context
        )

    async def generate(
        self, context: Sequence[ChatContextEntry], user_language: LanguageCode
    ) -> GeneratedResponse:
        if self._llm is None:
            logger.debug("response_fallback_no_provider", language=user_language)
            return GeneratedResponse(
                content=self.fallback_response(user_language),
                confidence=CONFIDENCE_NO_PROVIDER,
            )

        messages = self.build_messages(context, user_language)
        try:
            result = await self._llm.complete(
                messages,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as e:
            logger.warning(
                "response_generation_failed",
                provider=type(self._llm).__name__,
                language=user_language,
                context_len=len(context),
                error=str(e),
            )
            return GeneratedResponse(
                content=self.fallback_response(user_language),
                confidence=CONFIDENCE_PROVIDER_FAILED,
            )

        return GeneratedResponse(content=result.text, confidence=CONFIDENCE_PROVIDER)
