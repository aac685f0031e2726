# Log event names
SESSION_CREATED = 'SESSION_CREATED'
SESSION_REVOKED = 'SESSION_REVOKED'
SESSION_EXPIRED = 'SESSION_EXPIRED'
SESSION_MALFORMED = 'SESSION_MALFORMED'
SESSION_SWEPT = 'SESSION_SWEPT'
AUTH_DENIED = 'AUTH_DENIED'
OAUTH_INITIATED = 'OAUTH_INITIATED'
OAUTH_INVALID_STATE = 'OAUTH_INVALID_STATE'
OAUTH_TOKEN_EXCHANGE_FAILED = 'OAUTH_TOKEN_EXCHANGE_FAILED'
OAUTH_UNAUTHORIZED_ROLE = 'OAUTH_UNAUTHORIZED_ROLE'
OAUTH_LOGIN_SUCCESS = 'OAUTH_LOGIN_SUCCESS'

# Random material sizes in bytes, before URL-safe base64 encoding
SESSION_TOKEN_BYTES = 32
STATE_BYTES = 32
CODE_VERIFIER_BYTES = 64  # 86 characters, within RFC 7636's 43-128
