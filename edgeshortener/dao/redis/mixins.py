"""Redis mixin providing shared client initialization and connectivity checks.

Classes:
    - RedisClientMixin: Base mixin to inject Redis key management, client setup & healthcheck.

Example:
    Several DAOs sharing one connection pool within a single invocation:

        >>> client = redis.Redis.from_url('redis://localhost:6379/0', decode_responses=True)
        >>> links = ShortURLRedisDAO(redis_client=client, prefix='edgeshortener:dev')
        >>> sessions = SessionRedisDAO(redis_client=client, prefix='edgeshortener:dev', healthcheck=False)
"""

import redis

from edgeshortener.dao.redis.redis_key_schema import RedisKeySchema
from edgeshortener.dao.redis.helpers import CONNECTIVITY_ERRORS, describe_connection
from edgeshortener.dao.exceptions import DataStoreError


class RedisClientMixin:
    """Mixin Redis client setup and health check for Redis-backed DAOs.

    Attributes:
        redis (redis.Redis):
            Active Redis client instance used by subclasses.

        keys (RedisKeySchema):
            Helper class for generating namespaced Redis key names.
    """

    def __init__(
        self,
        redis_host: str | None = 'localhost',
        redis_port: int | None = 6379,
        redis_db: int | None = 0,
        redis_decode_responses: bool | None = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
        healthcheck: bool = True,
    ):
        """Initialize a Redis-based DAO

        Either reuse an existing Redis client instance or create one from the
        Redis connection parameters.

        Args:
            redis_host, redis_port, redis_db, redis_username, redis_password:
                Connection parameters, ignored when `redis_client` is given.

            redis_decode_responses (bool | None):
                If True, decodes Redis responses. Defaults to True.

            redis_client (redis.Redis | None):
                Pre-initialized Redis client. If None, a new client is created.

            prefix (str | None):
                Namespace prefix for all Redis keys, e.g. 'app:env'.

            healthcheck (bool):
                PING Redis on construction. Defaults to True.

        Raises:
            DataStoreError:
                If Redis healthcheck fails (connectivity issues).
        """
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        if healthcheck:
            self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis to healthcheck connectivity

        Raises:
            DataStoreError:
                If Redis connection cannot be established and raise_error=True.
        """
        try:
            self.redis.ping()
        except CONNECTIVITY_ERRORS as e:
            if raise_error:
                raise DataStoreError(f"Redis at {describe_connection(self.redis)} did not answer PING.") from e
            return False
        return True
