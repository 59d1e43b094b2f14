"""Relevance and topic classification."""

from .classifier import Classification, KeywordClassifier, classify
from .keywords import CATEGORIES, DEFAULT_CATEGORY, DEFAULT_REGION

__all__ = [
    "Classification",
    "KeywordClassifier",
    "classify",
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "DEFAULT_REGION",
]
