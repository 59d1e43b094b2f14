"""Keyword-based relevance, category and sub-region classification.

Every decision is a substring test against lower-cased ``title + snippet``.
"""

from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional

from ..config import ClassifierConfig
from .keywords import (
    CATEGORY_KEYWORDS,
    DEFAULT_CATEGORY,
    DEFAULT_REGION,
    REGION_KEYWORDS,
    REGIONAL_KEYWORDS,
)


class Classification(NamedTuple):
    """Result of classifying one item."""

    in_scope: bool
    category: str
    subregion: str


def normalize_text(*parts: Optional[str]) -> str:
    """Join the non-empty parts and lower-case them."""
    return " ".join(part for part in parts if part).lower()


def count_hits(text: str, keywords: Iterable[str]) -> int:
    """Number of keywords that occur anywhere in ``text``."""
    return sum(1 for keyword in keywords if keyword in text)


def score_labels(text: str, table: Mapping[str, Iterable[str]]) -> Dict[str, int]:
    """Keyword hit count per label."""
    return {label: count_hits(text, keywords) for label, keywords in table.items()}


def best_label(scores: Mapping[str, int], default: str) -> str:
    """Label with the strictly highest non-zero score, else ``default``."""
    if not scores:
        return default
    top = max(scores.values())
    if top == 0:
        return default
    leaders = [label for label, score in scores.items() if score == top]
    if len(leaders) > 1:
        return default
    return leaders[0]


def _lowered(table: Mapping[str, Iterable[str]]) -> Dict[str, List[str]]:
    return {label: [k.lower() for k in keywords] for label, keywords in table.items()}


class KeywordClassifier:
    """Stateless classifier over static keyword tables."""

    def __init__(
        self,
        regional_keywords: Optional[Iterable[str]] = None,
        category_keywords: Optional[Mapping[str, Iterable[str]]] = None,
        region_keywords: Optional[Mapping[str, Iterable[str]]] = None,
        default_region: str = DEFAULT_REGION,
    ) -> None:
        self.regional_keywords = [
            k.lower() for k in (regional_keywords if regional_keywords is not None else REGIONAL_KEYWORDS)
        ]
        self.category_keywords = _lowered(
            category_keywords if category_keywords is not None else CATEGORY_KEYWORDS
        )
        self.region_keywords = _lowered(
            region_keywords if region_keywords is not None else REGION_KEYWORDS
        )
        self.default_region = default_region

    @classmethod
    def from_config(cls, config: ClassifierConfig) -> "KeywordClassifier":
        """Build a classifier honoring any table overrides."""
        return cls(
            regional_keywords=config.regional_keywords,
            category_keywords=config.category_keywords,
            region_keywords=config.region_keywords,
            default_region=config.default_region,
        )

    def is_relevant(
        self,
        title: str,
        snippet: Optional[str] = None,
        always_relevant: bool = False,
    ) -> bool:
        """Whether an item belongs in the corpus."""
        if always_relevant:
            return True
        text = normalize_text(title, snippet)
        return any(keyword in text for keyword in self.regional_keywords)

    def detect_category(self, title: str, snippet: Optional[str] = None) -> str:
        """Category with the most keyword hits."""
        text = normalize_text(title, snippet)
        return best_label(score_labels(text, self.category_keywords), DEFAULT_CATEGORY)

    def detect_subregion(
        self,
        title: str,
        snippet: Optional[str] = None,
        source_name: Optional[str] = None,
    ) -> str:
        """Locality with the most keyword hits; the source name counts too."""
        text = normalize_text(title, snippet, source_name)
        return best_label(score_labels(text, self.region_keywords), self.default_region)

    def classify(
        self,
        title: str,
        snippet: Optional[str] = None,
        always_relevant: bool = False,
        source_name: Optional[str] = None,
    ) -> Classification:
        """Scope, category and sub-region for one item."""
        if not self.is_relevant(title, snippet, always_relevant):
            return Classification(False, DEFAULT_CATEGORY, self.default_region)
        return Classification(
            True,
            self.detect_category(title, snippet),
            self.detect_subregion(title, snippet, source_name),
        )


_default_classifier = KeywordClassifier()


def classify(
    title: str,
    snippet: Optional[str] = None,
    always_relevant: bool = False,
    source_name: Optional[str] = None,
) -> Classification:
    """Classify with the built-in tables."""
    return _default_classifier.classify(title, snippet, always_relevant, source_name)
