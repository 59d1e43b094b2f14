"""Translation provider interface and implementations."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx
import openai
from openai import AsyncOpenAI

from ..exceptions import TranslationError

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "zh": "Simplified Chinese",
    "ms": "Malay",
}


class Translator(ABC):
    """Abstract base class for translation providers."""

    name = "base"

    @abstractmethod
    async def translate(self, text: str, target: str) -> str:
        """
        Translate text into the target language.

        Args:
            text: Source text (English)
            target: Target language code ("zh" or "ms")

        Returns:
            Translated text

        Raises:
            TranslationError: If no usable translation was produced
        """
        pass

    async def aclose(self) -> None:
        """Release any held clients."""


class MyMemoryTranslator(Translator):
    """Free MyMemory translation API."""

    name = "mymemory"
    endpoint = "https://api.mymemory.translated.net/get"
    lang_pairs = {
        "zh": "en|zh-CN",
        "ms": "en|ms",
    }

    def __init__(
        self,
        timeout: float = 15.0,
        user_agent: str = "SarawakNews/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    async def translate(self, text: str, target: str) -> str:
        """Translate using the MyMemory GET endpoint."""
        if target not in self.lang_pairs:
            raise TranslationError(f"Unsupported target language: {target}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                transport=self.transport,
            ) as client:
                response = await client.get(
                    self.endpoint,
                    params={"q": text, "langpair": self.lang_pairs[target]},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise TranslationError(f"Translation API failed: {e}") from e
        except ValueError as e:
            raise TranslationError(f"Invalid translation response: {e}") from e

        translated = (data.get("responseData") or {}).get("translatedText")
        if data.get("responseStatus") == 200 and translated:
            return translated.strip()

        raise TranslationError(f"No translation returned (status {data.get('responseStatus')})")


class OpenAITranslator(Translator):
    """OpenAI chat-completion translator."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 15.0,
    ) -> None:
        """
        Initialize OpenAI translator.

        Args:
            api_key: OpenAI API key
            model: Model name to use
            base_url: Custom base URL (for compatible endpoints)
            timeout: Per-request timeout in seconds
        """
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.model = model

    async def translate(self, text: str, target: str) -> str:
        """Translate a headline with a single chat completion."""
        language = LANGUAGE_NAMES.get(target)
        if language is None:
            raise TranslationError(f"Unsupported target language: {target}")

        prompt = (
            f"Translate this news headline into {language}. "
            "Keep place names and personal names as they are. "
            "Reply with the translation only.\n\n"
            f"{text}"
        )

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.0,
                max_tokens=200,
            )
        except openai.OpenAIError as e:
            raise TranslationError(f"OpenAI translation failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise TranslationError("Empty translation returned")
        return content.strip()

    async def aclose(self) -> None:
        await self.client.close()


class MockTranslator(Translator):
    """Deterministic translator for tests and offline runs."""

    name = "mock"

    def __init__(self, fail_for: Optional[List[str]] = None) -> None:
        """Initialize mock translator; languages in ``fail_for`` always fail."""
        self.fail_for = set(fail_for or [])
        self.calls: List[Tuple[str, str]] = []

    async def translate(self, text: str, target: str) -> str:
        """Prefix the text with the language code."""
        self.calls.append((text, target))
        if target in self.fail_for:
            raise TranslationError(f"Mock failure for {target}")
        return f"[{target}] {text}"


def create_translator(config: Dict[str, Any], user_agent: str = "SarawakNews/1.0") -> Optional[Translator]:
    """
    Build the configured translator.

    Returns None when the provider cannot be used (OpenAI without a key), so
    titles stay empty and are retried once the provider is configured.

    Raises:
        ValueError: If the provider name is unknown
    """
    provider = config.get("provider", "mymemory")

    if provider == "mymemory":
        return MyMemoryTranslator(timeout=config.get("timeout", 15.0), user_agent=user_agent)

    if provider == "openai":
        api_key = config.get("api_key")
        if not api_key:
            logger.warning("No OpenAI API key found. Translation backfill is disabled.")
            return None
        return OpenAITranslator(
            api_key=api_key,
            model=config.get("model", "gpt-4o-mini"),
            base_url=config.get("base_url"),
            timeout=config.get("timeout", 15.0),
        )

    if provider == "mock":
        return MockTranslator()

    raise ValueError(f"Unknown translation provider: {provider!r}")
