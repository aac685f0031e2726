class EdgeShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:edgeshortener_error'


class MalformedResponseError(EdgeShortenerError):
    """Raised when a response is malformed."""

    error_code = 'app:malformed_response_error'


class ConfigurationError(EdgeShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class InfrastructureError(EdgeShortenerError):
    """Base exception for all infrastructure (AWS) errors."""

    error_code = 'infra:infrastructure_error'


class HTTPError(EdgeShortenerError):
    """Base exception for errors answered with a JSON `{"error": message}` body."""

    error_code = 'http:http_error'
    status_code = 500
    default_message = 'Internal Server Error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(HTTPError):
    """Raised when a required request field is missing or invalid."""

    error_code = 'http:validation_error'
    status_code = 400
    default_message = 'Invalid request'


class MalformedInputError(HTTPError):
    """Raised when the request body can't be parsed."""

    error_code = 'http:malformed_input_error'
    status_code = 400
    default_message = 'Invalid request'


class UnauthorizedError(HTTPError):
    """Raised when a credential is missing, invalid or expired."""

    error_code = 'http:unauthorized_error'
    status_code = 401
    default_message = 'Unauthorized'


class NotFoundError(HTTPError):
    error_code = 'http:not_found_error'
    status_code = 404
    default_message = 'Not found'


class ConflictError(HTTPError):
    error_code = 'http:conflict_error'
    status_code = 409
    default_message = 'Conflict'


class UpstreamFailureError(EdgeShortenerError):
    """Raised when the identity provider rejects or fails a token exchange.

    Never answered with a 500: callers redirect to the login page with `marker`.
    """

    error_code = 'auth:upstream_failure_error'

    def __init__(self, marker: str, message: str | None = None):
        self.marker = marker
        super().__init__(message or marker)


class InvalidSessionError(EdgeShortenerError):
    """Raised when a session token doesn't resolve to a usable session."""

    error_code = 'auth:invalid_session_error'


class ExpiredSessionError(InvalidSessionError):
    """Raised when a session exists but its expiry instant has passed."""

    error_code = 'auth:expired_session_error'
