"""Title translation."""

from .backfill import TranslationBackfill
from .provider import (
    MockTranslator,
    MyMemoryTranslator,
    OpenAITranslator,
    Translator,
    create_translator,
)

__all__ = [
    "Translator",
    "MyMemoryTranslator",
    "OpenAITranslator",
    "MockTranslator",
    "TranslationBackfill",
    "create_translator",
]
