# Log event names
SHORT_URL_CREATED = 'SHORT_URL_CREATED'
SHORT_URL_UPDATED = 'SHORT_URL_UPDATED'
SHORT_URL_DELETED = 'SHORT_URL_DELETED'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
SLUG_ALREADY_EXISTS = 'SLUG_ALREADY_EXISTS'
SHORTCODE_COLLISION = 'SHORTCODE_COLLISION'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
URLS_LISTED = 'URLS_LISTED'
PASSWORD_LOGIN_FAILED = 'PASSWORD_LOGIN_FAILED'
CALLBACK_STORE_FAILURE = 'CALLBACK_STORE_FAILURE'
