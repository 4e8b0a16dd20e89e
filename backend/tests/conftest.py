"""Shared pytest fixtures for the LinguaChat test suite.

Provides:
  - MockLLMProvider: completion provider returning configurable text or raising
  - MockConversationStore: in-memory ConversationStore with a deterministic clock
  - sqlite_session_factory / sqlite_store: in-memory aiosqlite database and a store over it
  - openai_transport helpers: httpx.MockTransport-backed OpenAI provider

No test talks to a real network service or database server.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from linguachat.core.exceptions import (
    ConversationNotFoundError,
    InvalidStatusTransitionError,
    MessageNotFoundError,
)
from linguachat.db.base import Base
from linguachat.models.conversation import Conversation
from linguachat.models.message import (
    ROLE_ASSISTANT,
    STATUS_SENT,
    STATUS_TRANSITIONS,
    Message,
)
from linguachat.services.chat.store import (
    ConversationStore,
    SQLAlchemyConversationStore,
    SortOrder,
    default_conversation_title,
)
from linguachat.services.llm.base import ChatContextEntry, LLMProvider, LLMResponse
from linguachat.services.llm.openai_chat import OpenAIChatProvider


# ---------------------------------------------------------------------------
# Mock LLM Provider
# ---------------------------------------------------------------------------


class MockLLMProvider(LLMProvider):
    """Mock completion provider. Returns configurable text or raises."""

    def __init__(
        self,
        text: str = "Mock response",
        error: Exception | None = None,
    ) -> None:
        self._text = text
        self._error = error
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        messages: Sequence[ChatContextEntry],
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> LLMResponse:
        self.calls.append(
            {
                "messages": list(messages),
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        )
        if self._error is not None:
            raise self._error
        return LLMResponse(text=self._text, input_tokens=50, output_tokens=10)


# ---------------------------------------------------------------------------
# Mock Conversation Store
# ---------------------------------------------------------------------------


class MockConversationStore(ConversationStore):
    """In-memory ConversationStore. Each write advances a fake clock by 1s."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
        self.conversations: dict[UUID, Conversation] = {}
        self.messages: list[Message] = []
        self.fail_on: set[str] = set()
        self.inserted_roles: list[str] = []

    def tick(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RuntimeError(f"{operation} unavailable")

    def _require(self, conversation_id: UUID) -> Conversation:
        conversation = self.conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError()
        return conversation

    async def insert_message(self, **fields: Any) -> Message:
        role = fields.get("role")
        self._check(f"insert_message:{role}")
        self._require(fields["conversation_id"])
        fields.setdefault("status", STATUS_SENT)
        message = Message(id=uuid.uuid4(), created_at=self.tick(), **fields)
        self.messages.append(message)
        self.inserted_roles.append(role)
        return message

    async def query_messages(
        self,
        conversation_id: UUID,
        order: SortOrder = "asc",
        limit: int | None = None,
    ) -> list[Message]:
        self._check("query_messages")
        rows = sorted(
            (m for m in self.messages if m.conversation_id == conversation_id),
            key=lambda m: (m.created_at, m.id),
            reverse=order == "desc",
        )
        return rows[:limit] if limit is not None else rows

    async def update_message_status(self, message_id: UUID, status: str) -> Message:
        for message in self.messages:
            if message.id == message_id:
                if status not in STATUS_TRANSITIONS.get(message.status, frozenset()):
                    raise InvalidStatusTransitionError()
                message.status = status
                return message
        raise MessageNotFoundError()

    async def query_unanswered_messages(self, conversation_id: UUID) -> list[Message]:
        pending: list[Message] = []
        for message in await self.query_messages(conversation_id, order="desc"):
            if message.role == ROLE_ASSISTANT:
                break
            pending.append(message)
        return list(reversed(pending))

    async def insert_conversation(
        self, user_id: str, language: str, title: str | None = None
    ) -> Conversation:
        now = self.tick()
        conversation = Conversation(
            id=uuid.uuid4(),
            user_id=user_id,
            language=language,
            title=title or default_conversation_title(now),
            created_at=now,
            updated_at=now,
        )
        self.conversations[conversation.id] = conversation
        return conversation

    async def get_conversation(self, conversation_id: UUID) -> Conversation:
        return self._require(conversation_id)

    async def query_conversations(self, user_id: str) -> list[Conversation]:
        return sorted(
            (c for c in self.conversations.values() if c.user_id == user_id),
            key=lambda c: c.updated_at,
            reverse=True,
        )

    async def update_conversation(self, conversation_id: UUID, **fields: Any) -> Conversation:
        conversation = self._require(conversation_id)
        for name, value in fields.items():
            setattr(conversation, name, value)
        return conversation

    async def touch_conversation(
        self, conversation_id: UUID, at: datetime | None = None
    ) -> bool:
        self._check("touch_conversation")
        conversation = self._require(conversation_id)
        at = at or self.tick()
        if conversation.updated_at > at:
            return False
        conversation.updated_at = at
        return True

    async def delete_conversation(self, conversation_id: UUID) -> None:
        self._require(conversation_id)
        del self.conversations[conversation_id]
        self.messages = [m for m in self.messages if m.conversation_id != conversation_id]


# ---------------------------------------------------------------------------
# OpenAI provider over httpx.MockTransport
# ---------------------------------------------------------------------------


def chat_completion_payload(text: str) -> dict[str, Any]:
    """Minimal OpenAI chat.completion response body."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1705312800,
        "model": "gpt-4-turbo-preview",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 42, "completion_tokens": 7, "total_tokens": 49},
    }


def make_openai_provider(
    handler: Callable[[httpx.Request], httpx.Response],
) -> OpenAIChatProvider:
    """OpenAIChatProvider whose HTTP traffic is answered by ``handler``."""
    return OpenAIChatProvider(
        api_key="sk-test",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm() -> MockLLMProvider:
    """Mock completion provider fixture."""
    return MockLLMProvider()


@pytest.fixture
def mock_store() -> MockConversationStore:
    """In-memory conversation store fixture."""
    return MockConversationStore()


@pytest.fixture
def sample_user_id() -> str:
    """Fixed user id for testing."""
    return "user-00000000-0001"


@pytest_asyncio.fixture
async def sqlite_session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Session factory on a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def sqlite_store(
    sqlite_session_factory: async_sessionmaker[AsyncSession],
) -> SQLAlchemyConversationStore:
    """SQLAlchemyConversationStore over ``sqlite_session_factory``."""
    return SQLAlchemyConversationStore(sqlite_session_factory)
