"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, DynamoDB, Workers KV).

Responsibilities:
    - Provide an interface for inserting, retrieving, updating and deleting ShortURLModel objects.
    - Standardize error handling across multiple data store implementations.
    - Enforce a consistent API for use by request handlers.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from edgeshortener.models import ShortURLModel
        >>> from edgeshortener.dao.redis import ShortURLRedisDAO

        >>> dao = ShortURLRedisDAO(...)
        >>> dao.insert(ShortURLModel(target='https://example.com/blog/article-123', shortcode='a1b2c3'))

        >>> dao.update('a1b2c3', 'https://example.com/blog/article-456').target
        'https://example.com/blog/article-456'

        >>> dao.delete('a1b2c3')
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from edgeshortener.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        insert(short_url: ShortURLModel, **kwargs) -> ShortURLModel:
            Insert a new mapping. Never overwrites an existing one.
            Raises ShortURLAlreadyExistsError if the short code already exists.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Raises ShortURLNotFoundError if the entry does not exist.

        get_many(shortcodes: Iterable[str], **kwargs) -> list[ShortURLModel]:
            Batch lookup; codes that vanished in the meantime are skipped.

        update(shortcode: str, target: str, **kwargs) -> ShortURLModel:
            Replace the target URL, preserving the creation time.
            Raises ShortURLNotFoundError if the entry does not exist.

        delete(shortcode: str, **kwargs) -> None:
            Raises ShortURLNotFoundError if the entry does not exist.

        count(increment: bool, **kwargs) -> int:
            Return counter from data store, optionally incremented first.

    All methods raise DataStoreError on connection or read/write failure.
    """

    @abstractmethod
    def insert(self, short_url: ShortURLModel, **kwargs) -> ShortURLModel:
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        pass

    @abstractmethod
    def get_many(self, shortcodes: Iterable[str], **kwargs) -> list[ShortURLModel]:
        pass

    @abstractmethod
    def update(self, shortcode: str, target: str, **kwargs) -> ShortURLModel:
        pass

    @abstractmethod
    def delete(self, shortcode: str, **kwargs) -> None:
        pass

    @abstractmethod
    def count(self, increment: bool = False, **kwargs) -> int:
        pass
