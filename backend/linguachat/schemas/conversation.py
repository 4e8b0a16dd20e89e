"""Conversation and message request/response schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConversationCreateRequest(BaseModel):
    """POST /v1/conversations request body."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str = Field(min_length=1)
    language: str = "en"
    title: str | None = None


class ConversationUpdateRequest(BaseModel):
    """PATCH /v1/conversations/{conversation_id} request body."""

    model_config = ConfigDict(from_attributes=True)

    title: str | None = None
    language: str | None = None


class ConversationResponse(BaseModel):
    """A single conversation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    title: str
    language: str
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    """A single persisted message."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    conversation_id: uuid.UUID
    role: str
    content: str
    detected_language: str
    original_content: str | None = None
    translation_metadata: dict[str, Any] | None = None
    attachment_url: str | None = None
    attachment_type: str | None = None
    status: str
    confidence_score: float | None = None
    created_at: datetime
