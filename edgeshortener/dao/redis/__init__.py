from edgeshortener.dao.redis.redis_key_schema import RedisKeySchema
from edgeshortener.dao.redis.mixins import RedisClientMixin
from edgeshortener.dao.redis.short_url_redis_dao import ShortURLRedisDAO
from edgeshortener.dao.redis.session_redis_dao import SessionRedisDAO
from edgeshortener.dao.redis.oauth_transaction_redis_dao import OAuthTransactionRedisDAO
from edgeshortener.dao.redis.keyspace_redis_dao import KeyspaceRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'ShortURLRedisDAO',
    'SessionRedisDAO',
    'OAuthTransactionRedisDAO',
    'KeyspaceRedisDAO',
]
