from beartype import beartype

from edgeshortener.models import KeyListing
from edgeshortener.dao.base import KeyspaceBaseDAO
from edgeshortener.dao.redis.mixins import RedisClientMixin
from edgeshortener.dao.redis.helpers import handle_redis_connection_error


class KeyspaceRedisDAO(RedisClientMixin, KeyspaceBaseDAO):
    """Enumerate the namespace with SCAN.

    The cursor is Redis' own SCAN cursor rendered as a string. A returned cursor
    of 0 means the iteration is complete. COUNT is a hint, so pages may be
    slightly larger or smaller than `limit`, and a key may appear twice across
    pages if the keyspace is rehashed mid-iteration.
    """

    @handle_redis_connection_error
    @beartype
    def list(self, limit: int, cursor: str | None = None, **kwargs) -> KeyListing:
        next_cursor, keys = self.redis.scan(
            cursor=int(cursor or 0),
            match=self.keys.scan_pattern(),
            count=limit,
        )
        complete = int(next_cursor) == 0

        return KeyListing(
            keys=[self.keys.unprefix(key) for key in keys],
            cursor=None if complete else str(next_cursor),
            complete=complete,
        )
