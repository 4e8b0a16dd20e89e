"""Chat request schemas."""

from pydantic import BaseModel, ConfigDict, Field


class SendMessageRequest(BaseModel):
    """POST /v1/conversations/{conversation_id}/messages request body."""

    model_config = ConfigDict(from_attributes=True)

    text: str = Field(min_length=1)
    user_language: str = "en"
    attachment_url: str | None = None
    attachment_type: str | None = None
