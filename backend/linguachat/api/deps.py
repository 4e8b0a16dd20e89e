"""Shared FastAPI dependencies: store, generator, pipeline, translation.

Long-lived objects (the conversation store, the response generator with its
completion provider, the translation gateway) are created once during the
FastAPI lifespan and stored on app.state. All downstream code retrieves
them via Depends(), never by direct import.
"""

from fastapi import Depends, Request

from linguachat.core.config import settings
from linguachat.services.chat.pipeline import MessagePipeline
from linguachat.services.chat.responder import ResponseGenerator
from linguachat.services.chat.store import ConversationStore
from linguachat.services.language.detector import LanguageClassifier
from linguachat.services.language.translation import TranslationGateway


# ---------------------------------------------------------------------------
# Singletons retrieved from app.state (set during lifespan)
# ---------------------------------------------------------------------------

def get_store(request: Request) -> ConversationStore:
    """Return the singleton conversation store."""
    return request.app.state.store


def get_response_generator(request: Request) -> ResponseGenerator:
    """Return the singleton response generator."""
    return request.app.state.response_generator


def get_translation_gateway(request: Request) -> TranslationGateway:
    """Return the singleton translation gateway."""
    return request.app.state.translation_gateway


# ---------------------------------------------------------------------------
# Service constructors wired via Depends()
# ---------------------------------------------------------------------------

def get_classifier() -> LanguageClassifier:
    """Return a LanguageClassifier using the configured default language."""
    return LanguageClassifier(default_language=settings.default_language)


def get_pipeline(
    store: ConversationStore = Depends(get_store),
    classifier: LanguageClassifier = Depends(get_classifier),
    generator: ResponseGenerator = Depends(get_response_generator),
) -> MessagePipeline:
    """Return a MessagePipeline fully wired with all dependencies."""
    return MessagePipeline(
        store=store,
        classifier=classifier,
        generator=generator,
        context_window=settings.context_window_size,
    )
