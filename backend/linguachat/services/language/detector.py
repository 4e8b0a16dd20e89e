"""Heuristic language detection.

Rules are evaluated in a fixed priority order; the first language with any
matching pattern wins. Non-Latin scripts are matched by Unicode block, Latin
scripts by common function words and diacritics.

Latin-script rules overlap (e.g. "la" is both Spanish and French), so the
result for short Latin text depends on rule order. This is a heuristic, not
a statistical model.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import structlog

from linguachat.services.language.tables import DEFAULT_LANGUAGE, LanguageCode

logger = structlog.get_logger(__name__)

LanguageRule = tuple[LanguageCode, tuple[re.Pattern, ...]]

# Priority order matters: earlier entries win on overlap.
DEFAULT_RULES: tuple[LanguageRule, ...] = (
    (
        "en",
        (
            re.compile(r"\b(the|is|are|was|were|have|has|will|would|can|could)\b", re.I),
        ),
    ),
    ("hi", (re.compile(r"[\u0900-\u097F]"),)),
    (
        "es",
        (
            re.compile(r"\b(el|la|los|las|es|son|está|están|tiene|tienen)\b", re.I),
            re.compile(r"[áéíóúñ]", re.I),
        ),
    ),
    (
        "fr",
        (
            re.compile(r"\b(le|la|les|est|sont|être|avoir|dans|pour)\b", re.I),
            re.compile(r"[àâéèêëîïôùûüÿæœç]", re.I),
        ),
    ),
    ("ta", (re.compile(r"[\u0B80-\u0BFF]"),)),
    (
        "de",
        (
            re.compile(r"\b(der|die|das|ist|sind|haben|wird|können)\b", re.I),
            re.compile(r"[äöüß]", re.I),
        ),
    ),
)


class LanguageClassifier:
    """Deterministic, rule-ordered language classifier."""

    def __init__(
        self,
        rules: Sequence[LanguageRule] = DEFAULT_RULES,
        default_language: LanguageCode = DEFAULT_LANGUAGE,
    ) -> None:
        self._rules = tuple(rules)
        self._default = default_language

    @property
    def default_language(self) -> LanguageCode:
        return self._default

    def detect(self, text: str | None) -> LanguageCode:
        """Return the best-guess language code. Never raises."""
        trimmed = (text or "").strip()
        if not trimmed:
            return self._default

        for language, patterns in self._rules:
            if any(pattern.search(trimmed) for pattern in patterns):
                logger.debug("language_detected", language=language, text_len=len(trimmed))
                return language

        return self._default
