"""FastAPI application entrypoint.

All routes prefixed /v1. Auto-generated OpenAPI docs at /docs.

The conversation store, the response generator (with its optional OpenAI
completion provider) and the translation gateway are created once during
the lifespan and stored on app.state for injection via Depends().
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from linguachat.api.v1.conversations import router as conversations_router
from linguachat.api.v1.health import router as health_router
from linguachat.api.v1.languages import router as languages_router
from linguachat.core.config import settings
from linguachat.core.exceptions import LinguaChatError
from linguachat.db.postgres import async_session_factory, close_postgres, create_tables
from linguachat.services.chat.responder import ResponseGenerator
from linguachat.services.chat.store import SQLAlchemyConversationStore
from linguachat.services.language.translation import TranslationGateway
from linguachat.services.llm.openai_chat import OpenAIChatProvider


def _configure_logging() -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


_configure_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle.

    Without OPENAI_API_KEY no completion provider is built and every reply
    comes from the static fallback table.
    """
    # --- Startup ---
    logger.info(
        "app_startup",
        env=settings.app_env,
        completion_enabled=settings.completion_enabled,
        translation_provider=settings.translation_provider.value,
    )

    if not settings.is_production:
        await create_tables()

    llm = None
    if settings.completion_enabled:
        llm = OpenAIChatProvider(
            api_key=settings.openai_api_key,
            model=settings.completion_model,
            base_url=settings.openai_base_url or None,
            timeout=settings.http_timeout_seconds,
        )

    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    app.state.store = SQLAlchemyConversationStore(async_session_factory)
    app.state.response_generator = ResponseGenerator(
        llm=llm,
        temperature=settings.response_temperature,
        max_tokens=settings.response_max_tokens,
    )
    app.state.translation_gateway = TranslationGateway.from_settings(
        settings, client=http_client
    )

    logger.info("app_providers_ready")
    yield

    # --- Shutdown ---
    logger.info("app_shutdown")

    await http_client.aclose()
    if llm is not None:
        await llm.close()
    await close_postgres()


app = FastAPI(
    title="LinguaChat API",
    description="Multilingual chat backend with language detection and provider fallback.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS: permissive outside production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if not settings.is_production else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LinguaChatError)
async def linguachat_error_handler(request: Request, exc: LinguaChatError) -> JSONResponse:
    """Structured error response for all LinguaChat exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


# Mount all v1 routers
app.include_router(health_router, prefix="/v1")
app.include_router(languages_router, prefix="/v1")
app.include_router(conversations_router, prefix="/v1")
