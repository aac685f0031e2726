from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Admin session lifetime (24 hours in seconds)
    SESSION = 86_400  # 60 * 60 * 24
    # In-flight OAuth authorization transaction (10 minutes in seconds)
    OAUTH_TRANSACTION = 600


class KeyPrefix(StrEnum):
    """Record kinds sharing the flat key-value namespace."""

    SESSION = 'session'
    OAUTH = 'oauth'
    META = 'meta'


class AuthMode(StrEnum):
    NONE = 'none'
    PASSWORD = 'password'
    OAUTH = 'oauth'


class DenyReason(StrEnum):
    MISSING_CREDENTIALS = 'missing_credentials'
    INVALID_SESSION = 'invalid_session'
    EXPIRED_SESSION = 'expired_session'


class LoginError(StrEnum):
    """Error markers appended to the login page as `?error=<marker>`."""

    MISSING_PARAMS = 'missing_params'
    INVALID_STATE = 'invalid_state'
    TOKEN_EXCHANGE_FAILED = 'token_exchange_failed'
    UNAUTHORIZED_ROLE = 'unauthorized_role'
    UNKNOWN = 'unknown'


class Shortcode:
    """Short code generation and validation parameters."""

    LENGTH = 7
    PATTERN = r'^[A-Za-z0-9_-]{1,64}$'
    MAX_GENERATION_ATTEMPTS = 5
    RESERVED = frozenset({'api', 'h', 'login', 'logout', 'favicon.ico', 'robots.txt'})


class Listing:
    DEFAULT_LIMIT = 100
    MAX_LIMIT = 1000


class OAuthDefaults:
    SCOPES = 'profile email'
    ALLOWED_ROLES = ('admin',)
    AUTHORIZE_PATH = '/auth/authorize'
    TOKEN_PATH = '/auth/token'
    CALLBACK_PATH = '/api/callback'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        SHORTCODE_SALT = 'SHORTCODE_SALT'

    class Auth(StrEnum):
        MODE = 'AUTH_MODE'
        API_KEY = 'API_KEY'
        API_KEY_SECRET = 'API_KEY_SECRET'  # noqa: S105
        ADMIN_PASSWORD_HASH = 'ADMIN_PASSWORD_HASH'  # noqa: S105
        PUBLIC_HOST = 'PUBLIC_HOST'

    class OAuth(StrEnum):
        PROVIDER_URL = 'OAUTH_PROVIDER_URL'
        CLIENT_ID = 'OAUTH_CLIENT_ID'
        CLIENT_SECRET = 'OAUTH_CLIENT_SECRET'  # noqa: S105
        # Secrets Manager name holding the client secret as a plain SecretString
        CLIENT_SECRET_NAME = 'OAUTH_CLIENT_SECRET_NAME'  # noqa: S105
        SCOPES = 'OAUTH_SCOPES'
        ALLOWED_ROLES = 'OAUTH_ALLOWED_ROLES'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'

    class Redis(StrEnum):
        URL = 'REDIS_URL'  # overrides AppConfig, e.g. redis://localhost:6379/0

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
