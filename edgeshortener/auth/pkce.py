"""Random credentials and PKCE (RFC 7636) helpers.

Example:
    >>> verifier = generate_code_verifier()
    >>> len(verifier)
    86
    >>> code_challenge('dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk')
    'E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM'
"""

import base64
import hashlib
import secrets

from edgeshortener.auth.constants import SESSION_TOKEN_BYTES, STATE_BYTES, CODE_VERIFIER_BYTES


def generate_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def generate_state() -> str:
    return secrets.token_urlsafe(STATE_BYTES)


def generate_code_verifier() -> str:
    return secrets.token_urlsafe(CODE_VERIFIER_BYTES)


def code_challenge(code_verifier: str) -> str:
    """Derive the S256 code challenge: base64url(SHA-256(verifier)) without padding.

    Raises:
        ValueError:
            If the verifier isn't 43-128 characters long.
    """
    if not 43 <= len(code_verifier) <= 128:
        raise ValueError(f'Code verifier must be 43-128 characters long (given length: {len(code_verifier)}).')

    digest = hashlib.sha256(code_verifier.encode('ascii')).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b'=').decode('ascii')
