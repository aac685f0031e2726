from edgeshortener.exceptions import EdgeShortenerError


class DAOError(EdgeShortenerError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class ShortURLNotFoundError(DAOError):
    """Raised when a ShortURLModel is not found in the data store."""

    error_code = 'dao:short_url_not_found_error'


class ShortURLAlreadyExistsError(DAOError):
    """Raised when inserting a ShortURLModel that already exists in the data store."""

    error_code = 'dao:short_url_already_exists_error'


class SessionNotFoundError(DAOError):
    """Raised when a session record is not found in the data store."""

    error_code = 'dao:session_not_found_error'


class OAuthTransactionNotFoundError(DAOError):
    """Raised when an OAuth transaction is not found (never issued, consumed or expired)."""

    error_code = 'dao:oauth_transaction_not_found_error'


class MalformedRecordError(DAOError):
    """Raised when a stored record can't be parsed into its model."""

    error_code = 'dao:malformed_record_error'


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and out-of-memory failures.
    """

    error_code = 'dao:data_store_error'
