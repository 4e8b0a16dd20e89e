"""Conversation and message persistence.

Every store call is its own unit of work: it opens a session, commits, and
closes. A later failure therefore never rolls back an earlier write, which
is what lets the pipeline treat the user message as a durable anchor.

SQLAlchemy driver errors are caught and re-raised as typed errors so the API
layer receives a structured response.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Literal
from uuid import UUID

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from linguachat.core.exceptions import (
    ConversationNotFoundError,
    DatabaseConnectionError,
    InvalidStatusTransitionError,
    LinguaChatError,
    MessageNotFoundError,
    PersistenceError,
)
from linguachat.models.conversation import Conversation
from linguachat.models.message import (
    ROLE_ASSISTANT,
    ROLE_USER,
    STATUS_SENT,
    STATUS_TRANSITIONS,
    Message,
)

logger = structlog.get_logger(__name__)

SortOrder = Literal["asc", "desc"]

_MESSAGE_FIELDS = frozenset(
    {
        "conversation_id",
        "role",
        "content",
        "detected_language",
        "original_content",
        "translation_metadata",
        "attachment_url",
        "attachment_type",
        "status",
        "confidence_score",
    }
)
_CONVERSATION_UPDATE_FIELDS = frozenset({"title", "language"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_conversation_title(now: datetime | None = None) -> str:
    return f"Conversation {(now or _utcnow()).strftime('%Y-%m-%d')}"


class ConversationStore(ABC):
    """Narrow data-access contract used by the pipeline and the API."""

    @abstractmethod
    async def insert_message(self, **fields: Any) -> Message:
        """Persist a message. id and created_at are generated by the store."""

    @abstractmethod
    async def query_messages(
        self,
        conversation_id: UUID,
        order: SortOrder = "asc",
        limit: int | None = None,
    ) -> list[Message]:
        """Messages of one conversation ordered by created_at."""

    @abstractmethod
    async def update_message_status(self, message_id: UUID, status: str) -> Message:
        """Move a message along sent -> delivered | error."""

    @abstractmethod
    async def query_unanswered_messages(self, conversation_id: UUID) -> list[Message]:
        """Trailing user messages that never got an assistant reply."""

    @abstractmethod
    async def insert_conversation(
        self, user_id: str, language: str, title: str | None = None
    ) -> Conversation:
        ...

    @abstractmethod
    async def get_conversation(self, conversation_id: UUID) -> Conversation:
        ...

    @abstractmethod
    async def query_conversations(self, user_id: str) -> list[Conversation]:
        """A user's conversations, most recently updated first."""

    @abstractmethod
    async def update_conversation(self, conversation_id: UUID, **fields: Any) -> Conversation:
        ...

    @abstractmethod
    async def touch_conversation(
        self, conversation_id: UUID, at: datetime | None = None
    ) -> bool:
        """Advance updated_at to ``at``. Never moves it backwards."""

    @abstractmethod
    async def delete_conversation(self, conversation_id: UUID) -> None:
        ...


class SQLAlchemyConversationStore(ConversationStore):
    """ConversationStore backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _unit_of_work(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Yield a session, commit on success, roll back and translate on error."""
        try:
            async with self._session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except LinguaChatError:
            raise
        except (OperationalError, InterfaceError) as e:
            logger.error("store_connection_error", operation=operation, error=str(e))
            raise DatabaseConnectionError(f"Database connection failed: {e}") from e
        except SQLAlchemyError as e:
            logger.error("store_operation_failed", operation=operation, error=str(e))
            raise PersistenceError(f"{operation} failed: {e}") from e

    @staticmethod
    async def _require_conversation(
        session: AsyncSession, conversation_id: UUID
    ) -> Conversation:
        conversation = await session.get(Conversation, conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
        return conversation

    # -- messages ----------------------------------------------------------

    async def insert_message(self, **fields: Any) -> Message:
        unknown = set(fields) - _MESSAGE_FIELDS
        if unknown:
            raise ValueError(f"Unknown message fields: {sorted(unknown)}")
        if fields.get("role") not in (ROLE_USER, ROLE_ASSISTANT):
            raise ValueError(f"Invalid message role: {fields.get('role')!r}")
        fields.setdefault("status", STATUS_SENT)
        if fields["status"] not in STATUS_TRANSITIONS:
            raise ValueError(f"Invalid message status: {fields['status']!r}")

        async with self._unit_of_work("insert_message") as session:
            await self._require_conversation(session, fields["conversation_id"])
            message = Message(**fields)
            session.add(message)
            await session.flush()

        logger.debug(
            "message_inserted",
            message_id=str(message.id),
            conversation_id=str(message.conversation_id),
            role=message.role,
        )
        return message

    async def query_messages(
        self,
        conversation_id: UUID,
        order: SortOrder = "asc",
        limit: int | None = None,
    ) -> list[Message]:
        # id breaks created_at ties so equal timestamps still sort deterministically
        if order == "desc":
            ordering = (Message.created_at.desc(), Message.id.desc())
        else:
            ordering = (Message.created_at.asc(), Message.id.asc())
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(*ordering)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._unit_of_work("query_messages") as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def update_message_status(self, message_id: UUID, status: str) -> Message:
        async with self._unit_of_work("update_message_status") as session:
            message = await session.get(Message, message_id)
            if message is None:
                raise MessageNotFoundError(f"Message {message_id} not found")
            allowed = STATUS_TRANSITIONS.get(message.status, frozenset())
            if status not in allowed:
                raise InvalidStatusTransitionError(
                    f"Cannot move message from {message.status!r} to {status!r}"
                )
            message.status = status

        logger.info("message_status_updated", message_id=str(message_id), status=status)
        return message

    async def query_unanswered_messages(self, conversation_id: UUID) -> list[Message]:
        last_reply = (
            select(func.max(Message.created_at))
            .where(
                Message.conversation_id == conversation_id,
                Message.role == ROLE_ASSISTANT,
            )
            .scalar_subquery()
        )
        stmt = (
            select(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.role == ROLE_USER,
                or_(last_reply.is_(None), Message.created_at > last_reply),
            )
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        async with self._unit_of_work("query_unanswered_messages") as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    # -- conversations -----------------------------------------------------

    async def insert_conversation(
        self, user_id: str, language: str, title: str | None = None
    ) -> Conversation:
        now = _utcnow()
        conversation = Conversation(
            user_id=user_id,
            language=language,
            title=title or default_conversation_title(now),
            created_at=now,
            updated_at=now,
        )
        async with self._unit_of_work("insert_conversation") as session:
            session.add(conversation)
            await session.flush()

        logger.info(
            "conversation_created",
            conversation_id=str(conversation.id),
            user_id=user_id,
            language=language,
        )
        return conversation

    async def get_conversation(self, conversation_id: UUID) -> Conversation:
        async with self._unit_of_work("get_conversation") as session:
            return await self._require_conversation(session, conversation_id)

    async def query_conversations(self, user_id: str) -> list[Conversation]:
        stmt = (
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())
        )
        async with self._unit_of_work("query_conversations") as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def update_conversation(self, conversation_id: UUID, **fields: Any) -> Conversation:
        unknown = set(fields) - _CONVERSATION_UPDATE_FIELDS
        if unknown:
            raise ValueError(f"Unknown conversation fields: {sorted(unknown)}")

        async with self._unit_of_work("update_conversation") as session:
            conversation = await self._require_conversation(session, conversation_id)
            for name, value in fields.items():
                setattr(conversation, name, value)
        return conversation

    async def touch_conversation(
        self, conversation_id: UUID, at: datetime | None = None
    ) -> bool:
        at = at or _utcnow()
        stmt = (
            update(Conversation)
            .where(Conversation.id == conversation_id, Conversation.updated_at <= at)
            .values(updated_at=at)
        )
        async with self._unit_of_work("touch_conversation") as session:
            result = await session.execute(stmt)
            if result.rowcount:
                return True
            # No row moved: either it does not exist or a newer timestamp won.
            await self._require_conversation(session, conversation_id)
            return False

    async def delete_conversation(self, conversation_id: UUID) -> None:
        async with self._unit_of_work("delete_conversation") as session:
            await session.execute(
                delete(Message).where(Message.conversation_id == conversation_id)
            )
            result = await session.execute(
                delete(Conversation).where(Conversation.id == conversation_id)
            )
            if not result.rowcount:
                raise ConversationNotFoundError(f"Conversation {conversation_id} not found")

        logger.info("conversation_deleted", conversation_id=str(conversation_id))
