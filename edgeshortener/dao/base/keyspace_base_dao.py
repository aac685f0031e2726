from abc import ABC, abstractmethod

from edgeshortener.models import KeyListing


class KeyspaceBaseDAO(ABC):
    """Interface for enumerating the shared key namespace page by page."""

    @abstractmethod
    def list(self, limit: int, cursor: str | None = None, **kwargs) -> KeyListing:
        """Return one page of unprefixed key names of every record kind.

        Args:
            limit (int):
                Page size hint; stores may return slightly fewer or more keys.
            cursor (str | None):
                Opaque cursor returned by the previous page, None for the first page.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
