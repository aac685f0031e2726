from abc import ABC, abstractmethod

from edgeshortener.models import SessionModel


class SessionBaseDAO(ABC):
    """Interface for session record storage.

    Methods:
        insert(session: SessionModel, ttl: int, **kwargs) -> SessionModel:
            Store a session with a store-level TTL in seconds.

        get(token: str, **kwargs) -> SessionModel:
            Raises SessionNotFoundError when no record exists for the token.
            Raises MalformedRecordError when the stored payload can't be parsed.

        delete(token: str, **kwargs) -> bool:
            Idempotent. Returns True if a record was removed.
    """

    @abstractmethod
    def insert(self, session: SessionModel, ttl: int, **kwargs) -> SessionModel:
        pass

    @abstractmethod
    def get(self, token: str, **kwargs) -> SessionModel:
        pass

    @abstractmethod
    def delete(self, token: str, **kwargs) -> bool:
        pass
