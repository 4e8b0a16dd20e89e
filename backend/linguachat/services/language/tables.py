"""Static per-language lookup tables.

Every table is a read-only mapping keyed by language code with a required
default entry. Lookups for an unsupported code resolve to the default entry,
so callers never have to handle a missing language themselves.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Generic, TypeVar

LanguageCode = str

DEFAULT_LANGUAGE: LanguageCode = "en"

SUPPORTED_LANGUAGES: tuple[LanguageCode, ...] = ("en", "hi", "es", "fr", "ta", "de")

V = TypeVar("V")


class LanguageTable(Mapping[LanguageCode, V], Generic[V]):
    """Immutable language -> value mapping that always has a default entry."""

    def __init__(
        self,
        entries: Mapping[LanguageCode, V],
        default: LanguageCode = DEFAULT_LANGUAGE,
    ) -> None:
        if default not in entries:
            raise ValueError(f"language table is missing default entry {default!r}")
        self._entries: Mapping[LanguageCode, V] = MappingProxyType(dict(entries))
        self._default = default

    @property
    def default_language(self) -> LanguageCode:
        return self._default

    def resolve(self, language: LanguageCode | None) -> V:
        """Exact-match lookup falling back to the default entry."""
        if language is not None and language in self._entries:
            return self._entries[language]
        return self._entries[self._default]

    def __getitem__(self, language: LanguageCode) -> V:
        return self._entries[language]

    def __iter__(self) -> Iterator[LanguageCode]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"LanguageTable({dict(self._entries)!r}, default={self._default!r})"


SYSTEM_PROMPTS: LanguageTable[str] = LanguageTable(
    {
        "en": (
            "You are a helpful, friendly multilingual assistant. Respond naturally "
            "and conversationally in English. Be concise but informative."
        ),
        "hi": (
            "आप एक सहायक, मित्रवत बहुभाषी सहायक हैं। हिंदी में स्वाभाविक और "
            "संवादात्मक तरीके से जवाब दें। संक्षिप्त लेकिन जानकारीपूर्ण रहें।"
        ),
        "es": (
            "Eres un asistente multilingüe útil y amigable. Responde de forma natural "
            "y conversacional en español. Sé conciso pero informativo."
        ),
        "fr": (
            "Vous êtes un assistant multilingue utile et amical. Répondez naturellement "
            "et de manière conversationnelle en français. Soyez concis mais informatif."
        ),
        "ta": (
            "நீங்கள் ஒரு உதவிகரமான, நட்பான பன்மொழி உதவியாளர். தமிழில் இயல்பாகவும் "
            "உரையாடல் முறையிலும் பதிலளிக்கவும். சுருக்கமாக ஆனால் தகவல் நிறைந்ததாக இருக்கவும்."
        ),
        "de": (
            "Sie sind ein hilfreicher, freundlicher mehrsprachiger Assistent. Antworten "
            "Sie natürlich und gesprächig auf Deutsch. Seien Sie prägnant, aber informativ."
        ),
    }
)

FALLBACK_RESPONSES: LanguageTable[str] = LanguageTable(
    {
        "en": "I'm not sure I understand. Could you try rephrasing that?",
        "hi": "मुझे यकीन नहीं है कि मैं समझता हूं। क्या आप इसे दूसरे तरीके से कह सकते हैं?",
        "es": "No estoy seguro de entender. ¿Podrías reformularlo?",
        "fr": "Je ne suis pas sûr de comprendre. Pourriez-vous reformuler cela?",
        "ta": "எனக்கு புரிகிறதா என்று தெரியவில்லை. அதை வேறு விதமாக சொல்ல முடியுமா?",
        "de": "Ich bin nicht sicher, ob ich das verstehe. Könnten Sie das umformulieren?",
    }
)

LANGUAGE_NAMES: LanguageTable[str] = LanguageTable(
    {
        "en": "English",
        "hi": "हिन्दी (Hindi)",
        "es": "Español (Spanish)",
        "fr": "Français (French)",
        "ta": "தமிழ் (Tamil)",
        "de": "Deutsch (German)",
    }
)

LANGUAGE_FLAGS: LanguageTable[str] = LanguageTable(
    {
        "en": "🇬🇧",
        "hi": "🇮🇳",
        "es": "🇪🇸",
        "fr": "🇫🇷",
        "ta": "🇮🇳",
        "de": "🇩🇪",
    }
)
