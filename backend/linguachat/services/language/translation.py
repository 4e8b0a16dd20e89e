"""Translation gateway over Google Cloud Translation or LibreTranslate.

The backend is chosen explicitly by ``settings.translation_provider``; the
settings validator guarantees the chosen backend has its credential or URL,
so there is no silent fallback from one provider to the other.

Each translate() is a single HTTP round trip with a bounded timeout and no
retries. Any failure surfaces as TranslationError carrying the backend's own
error text. Translation is an explicit user action, so there is no static
substitute on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from linguachat.core.config import Settings, TranslationProvider
from linguachat.core.exceptions import TranslationError
from linguachat.services.language.tables import DEFAULT_LANGUAGE, LanguageCode

logger = structlog.get_logger(__name__)

_GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


@dataclass(frozen=True)
class TranslationResult:
    """Translated text plus the source language the backend reported."""

    translated_text: str
    detected_language: LanguageCode


class TranslationBackend(ABC):
    """One translation provider: how to build its request and read its reply."""

    name: str = "backend"

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def _send(self, request: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(**request)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.request(**request)

    @abstractmethod
    def build_request(
        self, text: str, target_language: str, source_language: str | None
    ) -> dict[str, Any]:
        """Keyword arguments for httpx.AsyncClient.request()."""
        ...

    @abstractmethod
    def parse_success(self, data: dict[str, Any]) -> tuple[str, str | None]:
        """Return (translated_text, detected_language or None)."""
        ...

    @abstractmethod
    def parse_error(self, data: Any) -> str | None:
        ...

    async def translate(
        self, text: str, target_language: str, source_language: str | None
    ) -> tuple[str, str | None]:
        request = self.build_request(text, target_language, source_language)
        try:
            response = await self._send(request)
        except httpx.HTTPError as e:
            logger.error("translation_request_failed", backend=self.name, error=str(e))
            raise TranslationError(f"Translation request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = self.parse_error(data) or "Translation failed"
            logger.warning(
                "translation_backend_error",
                backend=self.name,
                status_code=response.status_code,
                error=message,
            )
            raise TranslationError(message)

        try:
            return self.parse_success(data)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error("translation_malformed_response", backend=self.name, error=str(e))
            raise TranslationError("Translation failed: malformed response") from e


class GoogleTranslateBackend(TranslationBackend):
    """Google Cloud Translation v2 (API key in the query string)."""

    name = "google"

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self._api_key = api_key

    def build_request(
        self, text: str, target_language: str, source_language: str | None
    ) -> dict[str, Any]:
        params = {"key": self._api_key, "q": text, "target": target_language}
        if source_language:
            params["source"] = source_language
        return {"method": "POST", "url": _GOOGLE_TRANSLATE_URL, "params": params}

    def parse_success(self, data: dict[str, Any]) -> tuple[str, str | None]:
        translation = data["data"]["translations"][0]
        return translation["translatedText"], translation.get("detectedSourceLanguage")

    def parse_error(self, data: Any) -> str | None:
        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            return data["error"].get("message")
        return None


class LibreTranslateBackend(TranslationBackend):
    """Self-hosted or public LibreTranslate instance (JSON POST)."""

    name = "libre"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self._url = f"{base_url.rstrip('/')}/translate"
        self._api_key = api_key

    def build_request(
        self, text: str, target_language: str, source_language: str | None
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "q": text,
            "source": source_language or "auto",
            "target": target_language,
        }
        if self._api_key:
            body["api_key"] = self._api_key
        return {"method": "POST", "url": self._url, "json": body}

    def parse_success(self, data: dict[str, Any]) -> tuple[str, str | None]:
        detected = data.get("detectedLanguage") or {}
        return data["translatedText"], detected.get("language")

    def parse_error(self, data: Any) -> str | None:
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return None


class TranslationGateway:
    """Translate text through the configured backend."""

    def __init__(
        self,
        backend: TranslationBackend,
        default_language: LanguageCode = DEFAULT_LANGUAGE,
    ) -> None:
        self._backend = backend
        self._default = default_language

    @property
    def backend(self) -> TranslationBackend:
        return self._backend

    @classmethod
    def from_settings(
        cls, config: Settings, client: httpx.AsyncClient | None = None
    ) -> "TranslationGateway":
        if config.translation_provider is TranslationProvider.GOOGLE:
            backend: TranslationBackend = GoogleTranslateBackend(
                api_key=config.google_translate_api_key,
                client=client,
                timeout=config.http_timeout_seconds,
            )
        else:
            backend = LibreTranslateBackend(
                base_url=config.libre_translate_url,
                api_key=config.libre_translate_api_key,
                client=client,
                timeout=config.http_timeout_seconds,
            )
        logger.info("translation_gateway_initialized", backend=backend.name)
        return cls(backend=backend, default_language=config.default_language)

    async def translate(
        self,
        text: str,
        target_language: LanguageCode,
        source_language: LanguageCode | None = None,
    ) -> TranslationResult:
        translated, detected = await self._backend.translate(
            text, target_language, source_language
        )
        logger.debug(
            "translation_ok",
            backend=self._backend.name,
            target=target_language,
            detected=detected,
            text_len=len(text),
        )
        return TranslationResult(
            translated_text=translated,
            detected_language=detected or source_language or self._default,
        )
