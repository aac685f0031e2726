import functools
from typing import Any
from collections.abc import Callable

import redis

from edgeshortener.dao.exceptions import DataStoreError


__all__ = []

# Transient transport failures; everything else (e.g. WRONGTYPE) is a bug and propagates
CONNECTIVITY_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def describe_connection(client: redis.Redis) -> str:
    """Render '<host>:<port>/<db>' of a client's pool for error messages."""
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_connection_error[F: Callable[..., Any]](method: F) -> F:
    """Translate Redis connectivity failures inside a DAO method into DataStoreError

    Example:
        >>> @handle_redis_connection_error
        ... def count(self):
        ...     return self.redis.get('meta:counter')
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except CONNECTIVITY_ERRORS as e:
            raise DataStoreError(f"Can't connect to Redis at {describe_connection(self.redis)} ({method.__name__}).") from e

    return wrapper
