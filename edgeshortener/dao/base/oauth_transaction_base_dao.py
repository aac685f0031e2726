from abc import ABC, abstractmethod

from edgeshortener.models import OAuthTransactionModel


class OAuthTransactionBaseDAO(ABC):
    """Interface for in-flight OAuth authorization transactions.

    Methods:
        insert(transaction: OAuthTransactionModel, ttl: int, **kwargs) -> OAuthTransactionModel:
            Store a transaction keyed by its state with a store-level TTL in seconds.

        consume(state: str, **kwargs) -> OAuthTransactionModel:
            Read and delete the transaction in one step (single use).
            Raises OAuthTransactionNotFoundError when no record exists for the state.
            Raises MalformedRecordError when the stored payload can't be parsed
            (the record is gone either way).
    """

    @abstractmethod
    def insert(self, transaction: OAuthTransactionModel, ttl: int, **kwargs) -> OAuthTransactionModel:
        pass

    @abstractmethod
    def consume(self, state: str, **kwargs) -> OAuthTransactionModel:
        pass
