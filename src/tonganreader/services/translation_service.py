"""Fallback machine translation for words missing from the dictionary."""
import logging
from typing import Optional

from deep_translator import GoogleTranslator, MicrosoftTranslator

from tonganreader.config import TranslatorSettings, settings

logger = logging.getLogger(__name__)


class TranslationService:
    """Translate target-language words through a third-party API."""

    def __init__(self, translator_settings: Optional[TranslatorSettings] = None):
        self.settings = translator_settings or settings.translator

    @property
    def enabled(self) -> bool:
        return self.settings.provider != "none"

    def _build_translator(self):
        if self.settings.provider == "microsoft":
            return MicrosoftTranslator(
                api_key=self.settings.azure_key,
                region=self.settings.azure_region,
                source=self.settings.source,
                target=self.settings.target,
            )
        return GoogleTranslator(source="auto", target=self.settings.target)

    def translate(self, word: str) -> Optional[str]:
        """Translate a word, or return None if the provider has no answer."""
        if not self.enabled:
            return None
        try:
            translation = self._build_translator().translate(word)
        except Exception as e:
            # Provider failures fall through to "not found" for the caller
            logger.error(f"Error generating translation for word: {word}, error: {e}")
            return None

        if not translation or not str(translation).strip():
            return None
        logger.info(f"Translation generated for word: {word}, translation: {translation}")
        return str(translation).strip()
