"""Liveness endpoint."""

from fastapi import APIRouter, Depends

from linguachat.api.deps import get_response_generator, get_translation_gateway
from linguachat.services.chat.responder import ResponseGenerator
from linguachat.services.language.translation import TranslationGateway

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    generator: ResponseGenerator = Depends(get_response_generator),
    gateway: TranslationGateway = Depends(get_translation_gateway),
) -> dict:
    return {
        "status": "ok",
        "completion_provider": generator.has_provider,
        "translation_backend": gateway.backend.name,
    }
