"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

Each link is a Redis hash stored under its bare short code:

    <prefix>:<shortcode>  ->  {'url': <target URL>, 'created': <epoch milliseconds>}

Links carry no TTL; they live until deleted.

Example:
    >>> from edgeshortener.models import ShortURLModel
    >>> from edgeshortener.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix='app:dev')
    >>> dao.insert(ShortURLModel(target='https://example.com/page', shortcode='abc123'))
    ShortURLModel(target='https://example.com/page', shortcode='abc123', created_at=...)

    >>> dao.update('abc123', 'https://example.com/other').created_at
    <datetime of the original insert>
"""

from collections.abc import Iterable
from datetime import datetime, UTC

from beartype import beartype
from redis.exceptions import WatchError

from edgeshortener.models import ShortURLModel
from edgeshortener.dao.base import ShortURLBaseDAO
from edgeshortener.dao.redis.mixins import RedisClientMixin
from edgeshortener.dao.redis.helpers import handle_redis_connection_error
from edgeshortener.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError
from edgeshortener.utils.helpers import to_epoch_ms, from_epoch_ms


URL_FIELD = 'url'
CREATED_FIELD = 'created'


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL mappings

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> ShortURLModel:
        """Insert a short URL mapping into Redis

        Raises:
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists.
            DataStoreError:
                If a Redis connection issue occurs.
        """
        link_key = self.keys.link_key(short_url.shortcode)
        created_at = short_url.created_at or datetime.now(UTC)

        # NOTE: HSETNX claims the shortcode atomically. Two concurrent inserts
        #       of the same slug can't both succeed, so an existing mapping is
        #       never overwritten:
        #
        #       (lambda 1): HSETNX <app>:<shortcode> url <url 1>  => 1
        #       (lambda 2): HSETNX <app>:<shortcode> url <url 2>  => 0 (409)
        #       (lambda 1): HSET <app>:<shortcode> created <epoch ms>
        if not self.redis.hsetnx(link_key, URL_FIELD, short_url.target):
            raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
        self.redis.hset(link_key, CREATED_FIELD, to_epoch_ms(created_at))

        return ShortURLModel(target=short_url.target, shortcode=short_url.shortcode, created_at=created_at)

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL mapping by shortcode

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        record = self.redis.hgetall(self.keys.link_key(shortcode))
        if not record or URL_FIELD not in record:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        return self._to_model(shortcode, record)

    @handle_redis_connection_error
    @beartype
    def get_many(self, shortcodes: Iterable[str], **kwargs) -> list[ShortURLModel]:
        """Retrieve several mappings in one round trip, skipping missing ones."""
        shortcodes = list(shortcodes)
        if not shortcodes:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for shortcode in shortcodes:
                pipe.hgetall(self.keys.link_key(shortcode))
            # Keys of another type answer WRONGTYPE; skip them instead of failing the page
            records = pipe.execute(raise_on_error=False)

        # fmt: off
        return [self._to_model(shortcode, record)
                for shortcode, record in zip(shortcodes, records)
                if isinstance(record, dict) and URL_FIELD in record]
        # fmt: on

    @handle_redis_connection_error
    @beartype
    def update(self, shortcode: str, target: str, **kwargs) -> ShortURLModel:
        """Replace the target URL of an existing mapping

        The `created` field is left untouched. Records that predate it get one.

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        link_key = self.keys.link_key(shortcode)

        # NOTE: WATCH makes EXEC fail if the link is deleted between the EXISTS check
        #       and the write, so a concurrent DELETE can't be undone by HSET.
        with self.redis.pipeline(transaction=True) as pipe:
            while True:
                try:
                    pipe.watch(link_key)
                    if not pipe.exists(link_key):
                        raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
                    pipe.multi()
                    pipe.hset(link_key, URL_FIELD, target)
                    pipe.hsetnx(link_key, CREATED_FIELD, to_epoch_ms(datetime.now(UTC)))
                    pipe.hget(link_key, CREATED_FIELD)
                    _, _, created = pipe.execute()
                    break
                except WatchError:
                    continue  # re-check existence

        return self._to_model(shortcode, {URL_FIELD: target, CREATED_FIELD: created})

    @handle_redis_connection_error
    @beartype
    def delete(self, shortcode: str, **kwargs) -> None:
        """Remove a mapping

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
        """
        if not self.redis.delete(self.keys.link_key(shortcode)):
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

    @handle_redis_connection_error
    def count(self, increment: bool = False, **kwargs) -> int:
        """Retrieve (and optionally increment) the global short URL counter

        Example:
            >>> dao.count(increment=False)
            123
            >>> dao.count(increment=True)
            124
        """
        if increment:
            return int(self.redis.incr(self.keys.counter_key()))
        return int(self.redis.get(self.keys.counter_key()) or 0)

    @staticmethod
    def _to_model(shortcode: str, record: dict) -> ShortURLModel:
        try:
            created_at = from_epoch_ms(record.get(CREATED_FIELD))
        except (TypeError, ValueError):
            created_at = None
        return ShortURLModel(target=record[URL_FIELD], shortcode=shortcode, created_at=created_at)
