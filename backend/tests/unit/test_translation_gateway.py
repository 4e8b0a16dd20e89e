"""Unit tests for the translation gateway.

Tests:
  - Google backend: query-string request, parses translatedText/detectedSourceLanguage
  - LibreTranslate backend: JSON body with source "auto" when unknown
  - detected language falls back to the caller's source, then the default code
  - non-2xx responses raise TranslationError carrying the backend's message
  - transport errors and malformed bodies raise TranslationError
  - from_settings picks the backend named in settings
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from linguachat.core.config import Settings, TranslationProvider
from linguachat.core.exceptions import TranslationError
from linguachat.services.language.translation import (
    GoogleTranslateBackend,
    LibreTranslateBackend,
    TranslationGateway,
)


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _google(handler: Callable[[httpx.Request], httpx.Response]) -> TranslationGateway:
    return TranslationGateway(GoogleTranslateBackend(api_key="g-key", client=_client(handler)))


def _libre(handler: Callable[[httpx.Request], httpx.Response]) -> TranslationGateway:
    return TranslationGateway(
        LibreTranslateBackend(base_url="https://lt.example.com/", client=_client(handler))
    )


@pytest.mark.asyncio
class TestGoogleBackend:
    """Commercial backend contract."""

    async def test_success(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json={
                    "data": {
                        "translations": [
                            {"translatedText": "Hola", "detectedSourceLanguage": "en"}
                        ]
                    }
                },
            )

        result = await _google(handler).translate("Hello", "es")

        assert result.translated_text == "Hola"
        assert result.detected_language == "en"
        assert seen["method"] == "POST"
        assert seen["params"] == {"key": "g-key", "q": "Hello", "target": "es"}

    async def test_source_language_is_sent_and_used_as_fallback(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200, json={"data": {"translations": [{"translatedText": "Bonjour"}]}}
            )

        result = await _google(handler).translate("Hello", "fr", source_language="en")

        assert seen["params"]["source"] == "en"
        assert result.detected_language == "en"

    async def test_error_message_is_surfaced(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": {"message": "API key not valid"}})

        with pytest.raises(TranslationError, match="API key not valid"):
            await _google(handler).translate("Hello", "es")


@pytest.mark.asyncio
class TestLibreBackend:
    """Open-alternative backend contract."""

    async def test_success_with_auto_source(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "translatedText": "Guten Tag",
                    "detectedLanguage": {"confidence": 90, "language": "en"},
                },
            )

        result = await _libre(handler).translate("Good day", "de")

        assert seen["url"] == "https://lt.example.com/translate"
        assert seen["body"] == {"q": "Good day", "source": "auto", "target": "de"}
        assert result.translated_text == "Guten Tag"
        assert result.detected_language == "en"

    async def test_api_key_is_included_when_configured(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"translatedText": "x"})

        backend = LibreTranslateBackend(
            base_url="https://lt.example.com", api_key="lt-key", client=_client(handler)
        )
        await TranslationGateway(backend).translate("y", "fr", source_language="en")

        assert seen["body"]["api_key"] == "lt-key"
        assert seen["body"]["source"] == "en"

    async def test_missing_detection_falls_back_to_default(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"translatedText": "नमस्ते"})

        result = await _libre(handler).translate("Hello", "hi")
        assert result.detected_language == "en"

    async def test_error_message_is_surfaced(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "ta is not supported"})

        with pytest.raises(TranslationError, match="ta is not supported"):
            await _libre(handler).translate("Hello", "ta")

    async def test_non_json_error_uses_generic_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(TranslationError, match="Translation failed"):
            await _libre(handler).translate("Hello", "es")

    async def test_malformed_success_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(TranslationError, match="malformed"):
            await _libre(handler).translate("Hello", "es")

    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused")

        with pytest.raises(TranslationError, match="Connection refused"):
            await _libre(handler).translate("Hello", "es")


class TestFromSettings:
    """Backend selection is explicit, never inferred from key presence."""

    def test_google_selected(self) -> None:
        config = Settings(
            _env_file=None,
            translation_provider=TranslationProvider.GOOGLE,
            google_translate_api_key="g-key",
        )
        gateway = TranslationGateway.from_settings(config)
        assert isinstance(gateway.backend, GoogleTranslateBackend)

    def test_libre_selected_even_with_google_key(self) -> None:
        config = Settings(
            _env_file=None,
            translation_provider=TranslationProvider.LIBRE,
            google_translate_api_key="g-key",
        )
        gateway = TranslationGateway.from_settings(config)
        assert isinstance(gateway.backend, LibreTranslateBackend)
