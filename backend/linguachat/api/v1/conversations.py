"""Conversation and message endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from linguachat.api.deps import get_pipeline, get_store
from linguachat.schemas.chat import SendMessageRequest
from linguachat.schemas.conversation import (
    ConversationCreateRequest,
    ConversationResponse,
    ConversationUpdateRequest,
    MessageResponse,
)
from linguachat.services.chat.pipeline import Attachment, MessagePipeline
from linguachat.services.chat.store import ConversationStore

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    body: ConversationCreateRequest,
    store: ConversationStore = Depends(get_store),
) -> ConversationResponse:
    """Start a new conversation for a user."""
    conversation = await store.insert_conversation(
        user_id=body.user_id, language=body.language, title=body.title
    )
    return ConversationResponse.model_validate(conversation)


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    user_id: str = Query(..., min_length=1),
    store: ConversationStore = Depends(get_store),
) -> list[ConversationResponse]:
    """List a user's conversations, most recently active first."""
    conversations = await store.query_conversations(user_id)
    return [ConversationResponse.model_validate(c) for c in conversations]


@router.patch("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    conversation_id: UUID,
    body: ConversationUpdateRequest,
    store: ConversationStore = Depends(get_store),
) -> ConversationResponse:
    """Rename a conversation or change its language."""
    conversation = await store.update_conversation(
        conversation_id, **body.model_dump(exclude_none=True)
    )
    return ConversationResponse.model_validate(conversation)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_conversation(
    conversation_id: UUID,
    store: ConversationStore = Depends(get_store),
) -> Response:
    """Delete a conversation and all of its messages."""
    await store.delete_conversation(conversation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    store: ConversationStore = Depends(get_store),
) -> list[MessageResponse]:
    """Full transcript in chronological order."""
    await store.get_conversation(conversation_id)
    messages = await store.query_messages(conversation_id, order="asc")
    return [MessageResponse.model_validate(m) for m in messages]


@router.get("/{conversation_id}/messages/unanswered", response_model=list[MessageResponse])
async def list_unanswered_messages(
    conversation_id: UUID,
    store: ConversationStore = Depends(get_store),
) -> list[MessageResponse]:
    """User messages left without an assistant reply."""
    await store.get_conversation(conversation_id)
    messages = await store.query_unanswered_messages(conversation_id)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: UUID,
    body: SendMessageRequest,
    pipeline: MessagePipeline = Depends(get_pipeline),
) -> MessageResponse:
    """Process a user message and return the assistant's reply."""
    attachment = (
        Attachment(url=body.attachment_url, type=body.attachment_type)
        if body.attachment_url
        else None
    )
    reply = await pipeline.handle_user_message(
        conversation_id=conversation_id,
        text=body.text,
        user_language=body.user_language,
        attachment=attachment,
    )
    return MessageResponse.model_validate(reply)
