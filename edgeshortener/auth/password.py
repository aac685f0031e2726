import logging

import bcrypt

from edgeshortener.exceptions import BadConfigurationError


logger = logging.getLogger(__name__)

# bcrypt refuses longer inputs
MAX_PASSWORD_BYTES = 72


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against the configured bcrypt hash.

    Passwords bcrypt can't take (over 72 bytes, NUL bytes) never match.

    Raises:
        BadConfigurationError:
            If the configured hash isn't a valid bcrypt hash.
    """
    candidate = password.encode('utf-8')
    if len(candidate) > MAX_PASSWORD_BYTES or b'\x00' in candidate:
        logger.debug('Password rejected before hashing.', extra={'length': len(candidate)})
        return False

    try:
        return bcrypt.checkpw(candidate, password_hash.encode('utf-8'))
    except ValueError as e:
        raise BadConfigurationError('Admin password hash is not a valid bcrypt hash') from e
