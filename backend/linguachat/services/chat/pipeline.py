"""Per-message orchestration: detect, persist, window, generate, persist.

Turn flow for one user message:
  1. classify the text
  2. persist the user message (failure aborts the turn)
  3. load the newest N messages and put them back in chronological order
  4. reduce them to role/content context entries
  5. generate the assistant reply (never raises, see ResponseGenerator)
  6. persist the assistant message (failure propagates; the user message stays)
  7. bump the conversation's updated_at (best effort)

Concurrent turns on the same conversation are not coordinated. Ordering is
by created_at only and the newest updated_at wins.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

import structlog

from linguachat.models.message import (
    ROLE_ASSISTANT,
    ROLE_USER,
    STATUS_DELIVERED,
    STATUS_SENT,
    Message,
)
from linguachat.services.chat.responder import ResponseGenerator
from linguachat.services.chat.store import ConversationStore
from linguachat.services.language.detector import LanguageClassifier
from linguachat.services.language.tables import LanguageCode
from linguachat.services.llm.base import ChatContextEntry

logger = structlog.get_logger(__name__)

DEFAULT_CONTEXT_WINDOW = 10


@dataclass(frozen=True)
class Attachment:
    """A file the user attached to a message."""

    url: str
    type: str | None = None


def build_context(messages: Sequence[Message]) -> list[ChatContextEntry]:
    """Drop everything but role and content. Order is preserved."""
    return [ChatContextEntry(role=m.role, content=m.content) for m in messages]


class MessagePipeline:
    """Handles one user message end to end and returns the assistant reply."""

    def __init__(
        self,
        store: ConversationStore,
        classifier: LanguageClassifier,
        generator: ResponseGenerator,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
    ) -> None:
        if context_window < 1:
            raise ValueError("context_window must be at least 1")
        self._store = store
        self._classifier = classifier
        self._generator = generator
        self._context_window = context_window

    @property
    def context_window(self) -> int:
        return self._context_window

    async def load_context(self, conversation_id: UUID) -> list[ChatContextEntry]:
        """The newest ``context_window`` messages, oldest first."""
        recent = await self._store.query_messages(
            conversation_id, order="desc", limit=self._context_window
        )
        return build_context(list(reversed(recent)))

    async def handle_user_message(
        self,
        conversation_id: UUID,
        text: str,
        user_language: LanguageCode,
        attachment: Attachment | None = None,
    ) -> Message:
        start = time.monotonic()

        # 1. Classify
        detected_language = self._classifier.detect(text)

        # 2. Persist the user message
        user_message = await self._store.insert_message(
            conversation_id=conversation_id,
            role=ROLE_USER,
            content=text,
            detected_language=detected_language,
            status=STATUS_SENT,
            attachment_url=attachment.url if attachment else None,
            attachment_type=attachment.type if attachment else None,
        )

        # 3 + 4. Windowed context
        context = await self.load_context(conversation_id)

        # 5. Generate
        response = await self._generator.generate(context, user_language)

        # 6. Persist the assistant message
        assistant_message = await self._store.insert_message(
            conversation_id=conversation_id,
            role=ROLE_ASSISTANT,
            content=response.content,
            detected_language=user_language,
            status=STATUS_DELIVERED,
            confidence_score=response.confidence,
        )

        # 7. Bump updated_at
        try:
            await self._store.touch_conversation(conversation_id)
        except Exception as e:
            logger.warning(
                "conversation_touch_failed",
                conversation_id=str(conversation_id),
                error=str(e),
            )

        logger.info(
            "pipeline_turn_complete",
            conversation_id=str(conversation_id),
            user_message_id=str(user_message.id),
            assistant_message_id=str(assistant_message.id),
            detected_language=detected_language,
            user_language=user_language,
            context_len=len(context),
            confidence=response.confidence,
            latency_ms=int((time.monotonic() - start) * 1000),
        )
        return assistant_message
