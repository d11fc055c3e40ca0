"""Batch translation of route steps."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import openai

from pylazarillo._api.chat import complete
from pylazarillo._normalize import split_lines
from pylazarillo.config import LazarilloConfig
from pylazarillo.exceptions import ExternalServiceError, TranslationFailed

_logger = logging.getLogger(__name__)

_LANGUAGE_NAMES: dict[str, str] = {
    "es": "español",
    "en": "inglés",
    "pt": "portugués",
    "fr": "francés",
    "it": "italiano",
}

_TRANSLATE_PROMPT = (
    "Traduce estas instrucciones al {language}.\n"
    "Devuelve exactamente {count} líneas, una por instrucción y en el mismo orden, "
    "sin numeración ni texto adicional.\n\n"
    "{steps}"
)


class StepTranslator:
    """Translate a whole route in a single call, preserving order and count."""

    def __init__(self, config: LazarilloConfig, client: openai.AsyncOpenAI) -> None:
        self._config = config
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._config.directions_language != self._config.user_language

    async def translate(self, steps: Sequence[str]) -> list[str]:
        """Return *steps* in the user's language.

        Raises :class:`TranslationFailed` when the provider fails or when the
        answer does not split back into the same number of steps.
        """
        if not steps:
            return []
        if not self.enabled:
            return list(steps)

        language = _LANGUAGE_NAMES.get(self._config.user_language, self._config.user_language)
        prompt = _TRANSLATE_PROMPT.format(
            language=language,
            count=len(steps),
            steps="\n".join(step.replace("\n", " ") for step in steps),
        )
        try:
            answer = await complete(
                self._client,
                model=self._config.openai_model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max(300, 60 * len(steps)),
                service="translator",
            )
        except ExternalServiceError as exc:
            raise TranslationFailed(f"Route translation failed: {exc}") from exc

        translated = split_lines(answer)
        _logger.debug("Translated %d steps into %d lines (%s)", len(steps), len(translated), language)
        if len(translated) != len(steps):
            raise TranslationFailed(
                f"Translator returned {len(translated)} steps for {len(steps)} instructions"
            )
        return translated
