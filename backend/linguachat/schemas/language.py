"""Language catalogue and translation schemas."""

from pydantic import BaseModel, ConfigDict, Field


class LanguageInfo(BaseModel):
    """One supported language."""

    code: str
    name: str
    flag: str


class LanguageListResponse(BaseModel):
    """GET /v1/languages response body."""

    default_language: str
    languages: list[LanguageInfo]


class TranslateRequest(BaseModel):
    """POST /v1/translate request body."""

    model_config = ConfigDict(from_attributes=True)

    text: str = Field(min_length=1)
    target_language: str = Field(min_length=2)
    source_language: str | None = None


class TranslateResponse(BaseModel):
    """POST /v1/translate response body."""

    translated_text: str
    detected_language: str
