"""Helper utilities for the edge router Lambda function.

Functions:
    base_url(event) -> str
        Extract correct public base URL from API Gateway event
    to_epoch_ms(dt) -> int / from_epoch_ms(value) -> datetime | None
        Convert between datetimes and the epoch milliseconds kept in the store
    split_record_key(name) -> tuple[KeyPrefix | None, str]
        Classify an unprefixed store key by record kind
    require_environment(*names) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn any unhandled exception into a JSON 500 response

Example:
    >>> event = {'requestContext': {'domainName': 'abc123.execute-api.us-east-1.amazonaws.com', 'stage': 'Prod'}}
    >>> base_url(event)
    'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'

    >>> base_url({'requestContext': {'domainName': 'hop.example.com', 'stage': 'Prod'}})
    'https://hop.example.com'

    >>> base_url({})
    'http://localhost:3000'
"""

import os
import functools
import logging
from datetime import datetime, UTC
from typing import Any
from collections.abc import Callable

from edgeshortener.constants import KeyPrefix, UNKNOWN_INTERNAL_SERVER_ERROR
from edgeshortener.exceptions import MissingEnvironmentVariableError


logger = logging.getLogger(__name__)


def base_url(event: dict[str, Any]) -> str:
    """Extract public base URL from API Gateway event

    Works with both custom and default AWS API Gateway domains. If a custom
    domain is configured, the stage name is omitted. If using the default AWS
    execute-api domain, the stage name is included.

    Returns:
        str: Base URL, e.g.:
             - "https://hop.example.com"
             - "https://abc123.execute-api.us-east-1.amazonaws.com/Prod"
    """
    request_context = event.get('requestContext') or {}
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain.startswith(('localhost', '127.0.0.1')):
        # SAM local API reports the local listener as the domain
        return f'http://{domain}'
    elif domain and 'execute-api' not in domain:
        # If the domain is a custom domain (no execute-api), skip stage
        return f'https://{domain}'
    elif domain:
        # Otherwise include the stage (for AWS default domains)
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return 'http://localhost:3000'


def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def from_epoch_ms(value: int | str | None) -> datetime | None:
    """Parse epoch milliseconds into an aware UTC datetime.

    Raises:
        ValueError:
            If the value isn't an integer or is out of the representable range.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f'Invalid epoch milliseconds value: {value!r}')
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=UTC)
    except (OverflowError, OSError) as e:
        raise ValueError(f'Epoch milliseconds value out of range: {value!r}') from e


def split_record_key(name: str) -> tuple[KeyPrefix | None, str]:
    """Classify an unprefixed store key.

    Returns:
        tuple: (KeyPrefix, identifier) for prefixed records, (None, name) for links.

    Example:
        >>> split_record_key('session:abc')
        (<KeyPrefix.SESSION: 'session'>, 'abc')
        >>> split_record_key('Gh71TCN')
        (None, 'Gh71TCN')
    """
    kind, sep, ident = name.partition(':')
    if sep and kind in {prefix.value for prefix in KeyPrefix}:
        return KeyPrefix(kind), ident
    return None, name


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('OAUTH_CLIENT_ID', 'OAUTH_PROVIDER_URL')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'OAUTH_CLIENT_ID', 'OAUTH_PROVIDER_URL'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: answer any exception escaping a Lambda handler with a JSON 500."""
    from edgeshortener.web.responses import response_500

    @functools.wraps(handler)
    def wrapper(event, context):
        try:
            return handler(event, context)
        except Exception:
            logger.exception(
                'Unhandled exception in Lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return response_500()

    return wrapper
