"""Translation backfill for articles missing translated titles."""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from ..db.storage import Storage
from ..exceptions import StorageError, StorageUnavailableError, TranslationError
from ..models import Article
from .provider import Translator

logger = logging.getLogger(__name__)


class TranslationBackfill:
    """Fill in missing ``title_zh``/``title_ms`` in paced batches.

    Languages of one article are translated concurrently; articles are
    handled one after another with ``delay_seconds`` between them. A failed
    language is left empty and picked up again by a later batch. Every
    attempt is stamped so persistently failing articles rotate to the back.
    """

    def __init__(
        self,
        storage: Storage,
        translator: Translator,
        batch_size: int = 100,
        delay_seconds: float = 0.5,
        timeout: float = 15.0,
        targets: Sequence[str] = ("zh", "ms"),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.storage = storage
        self.translator = translator
        self.batch_size = batch_size
        self.delay_seconds = delay_seconds
        self.timeout = timeout
        self.targets = list(targets)
        self.sleep = sleep

    async def _translate_one(self, article: Article, target: str) -> Optional[str]:
        try:
            return await asyncio.wait_for(
                self.translator.translate(article.title, target), timeout=self.timeout
            )
        except TranslationError as e:
            logger.warning("Translation to %s failed for article %s: %s", target, article.id, e)
        except asyncio.TimeoutError:
            logger.warning("Translation to %s timed out for article %s", target, article.id)
        except Exception:
            logger.warning("Translation to %s errored for article %s", target, article.id, exc_info=True)
        return None

    def missing_targets(self, article: Article) -> List[str]:
        """Target languages whose title is still empty."""
        return [lang for lang in self.targets if not getattr(article, f"title_{lang}")]

    async def translate_article(self, article: Article) -> Dict[str, Optional[str]]:
        """Translate every missing language of one article in parallel."""
        missing = self.missing_targets(article)
        results = await asyncio.gather(*(self._translate_one(article, lang) for lang in missing))
        return dict(zip(missing, results))

    async def run(self, limit: Optional[int] = None) -> int:
        """
        Process one batch.

        Returns:
            Number of articles that received at least one new translation
        """
        articles = self.storage.get_untranslated_articles(limit or self.batch_size)
        translated = 0
        attempted = 0

        for article in articles:
            if not self.missing_targets(article):
                continue

            if attempted and self.delay_seconds:
                await self.sleep(self.delay_seconds)
            attempted += 1

            results = await self.translate_article(article)
            try:
                self.storage.set_article_translations(
                    article.id,
                    title_zh=results.get("zh"),
                    title_ms=results.get("ms"),
                )
            except StorageUnavailableError:
                raise
            except StorageError as e:
                logger.error("Failed to save translations for article %s: %s", article.id, e)
                continue

            if any(results.values()):
                translated += 1

        logger.info("Translated %d of %d articles", translated, len(articles))
        return translated
