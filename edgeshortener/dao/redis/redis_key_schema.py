import functools
from collections.abc import Callable

from edgeshortener.constants import KeyPrefix


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for links, sessions and OAuth transactions.

    All record kinds share one flat namespace. Links live under their bare short
    code, every other kind under a `<kind>:` prefix. An optional prefix can be
    provided to namespace all generated keys, e.g. "edgeshortener:prod".
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def link_key(self, shortcode: str) -> str:
        return shortcode

    @prefix_key
    def session_key(self, token: str) -> str:
        return f'{KeyPrefix.SESSION}:{token}'

    @prefix_key
    def oauth_key(self, state: str) -> str:
        return f'{KeyPrefix.OAUTH}:{state}'

    @prefix_key
    def counter_key(self) -> str:
        return f'{KeyPrefix.META}:counter'

    @prefix_key
    def scan_pattern(self) -> str:
        return '*'

    def unprefix(self, key: str) -> str:
        """Strip the namespace prefix from a raw Redis key."""
        if self.prefix is not None and key.startswith(f'{self.prefix}:'):
            return key[len(self.prefix) + 1 :]
        return key
