"""Exception hierarchy for the ingestion pipeline."""


class SarnewsError(Exception):
    """Base class for all pipeline errors."""


class FeedError(SarnewsError):
    """A single source could not be fetched or parsed."""

    def __init__(self, source_name: str, message: str) -> None:
        super().__init__(message)
        self.source_name = source_name
        self.message = message


class FeedTransportError(FeedError):
    """Timeout, DNS failure or non-2xx response while fetching a feed."""


class FeedParseError(FeedError):
    """Feed content could not be parsed."""


class StorageError(SarnewsError):
    """A storage operation failed for one record."""


class StorageUnavailableError(StorageError):
    """Storage cannot be reached at all."""


class TranslationError(SarnewsError):
    """The translation capability failed to return a translation."""
