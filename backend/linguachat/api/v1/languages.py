"""Language catalogue and explicit translation endpoints."""

from fastapi import APIRouter, Depends

from linguachat.api.deps import get_translation_gateway
from linguachat.core.config import settings
from linguachat.schemas.language import (
    LanguageInfo,
    LanguageListResponse,
    TranslateRequest,
    TranslateResponse,
)
from linguachat.services.language.tables import (
    LANGUAGE_FLAGS,
    LANGUAGE_NAMES,
    SUPPORTED_LANGUAGES,
)
from linguachat.services.language.translation import TranslationGateway

router = APIRouter(tags=["languages"])


@router.get("/languages", response_model=LanguageListResponse)
async def list_languages() -> LanguageListResponse:
    """Supported languages with display names and flags."""
    return LanguageListResponse(
        default_language=settings.default_language,
        languages=[
            LanguageInfo(
                code=code,
                name=LANGUAGE_NAMES.resolve(code),
                flag=LANGUAGE_FLAGS.resolve(code),
            )
            for code in SUPPORTED_LANGUAGES
        ],
    )


@router.post("/translate", response_model=TranslateResponse)
async def translate(
    body: TranslateRequest,
    gateway: TranslationGateway = Depends(get_translation_gateway),
) -> TranslateResponse:
    """Translate text through the configured backend. Failures return 502."""
    result = await gateway.translate(
        body.text,
        target_language=body.target_language,
        source_language=body.source_language,
    )
    return TranslateResponse(
        translated_text=result.translated_text,
        detected_language=result.detected_language,
    )
