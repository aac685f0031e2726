"""Redis-backed storage for admin sessions.

Sessions are JSON strings with a store-level TTL:

    <prefix>:session:<token>  ->  {"expiresAt": <epoch ms>, "profile": ..., "me": ..., "role": ...}

The TTL mirrors the application-level expiry so Redis evicts records even if
nobody ever checks them again.
"""

import json

from beartype import beartype

from edgeshortener.models import SessionModel
from edgeshortener.types import SessionRecord
from edgeshortener.dao.base import SessionBaseDAO
from edgeshortener.dao.redis.mixins import RedisClientMixin
from edgeshortener.dao.redis.helpers import handle_redis_connection_error
from edgeshortener.dao.exceptions import SessionNotFoundError, MalformedRecordError
from edgeshortener.utils.helpers import to_epoch_ms, from_epoch_ms


def session_to_record(session: SessionModel) -> SessionRecord:
    record = {'expiresAt': to_epoch_ms(session.expires_at)}
    for name in ('profile', 'me', 'role'):
        value = getattr(session, name)
        if value is not None:
            record[name] = value
    return record


def session_from_record(token: str, raw: str) -> SessionModel:
    """Parse a stored session payload.

    Raises:
        MalformedRecordError:
            If the payload isn't a JSON object with a numeric `expiresAt`.
    """
    try:
        record = json.loads(raw)
        expires_at = from_epoch_ms(record['expiresAt'])
    except (TypeError, ValueError, KeyError, OverflowError) as e:
        raise MalformedRecordError(f'Malformed session record for token ending in ...{token[-4:]}.') from e

    if expires_at is None:
        raise MalformedRecordError(f'Session record for token ending in ...{token[-4:]} has no expiry.')

    return SessionModel(
        token=token,
        expires_at=expires_at,
        profile=record.get('profile'),
        me=record.get('me'),
        role=record.get('role'),
    )


class SessionRedisDAO(RedisClientMixin, SessionBaseDAO):
    @handle_redis_connection_error
    @beartype
    def insert(self, session: SessionModel, ttl: int, **kwargs) -> SessionModel:
        self.redis.set(self.keys.session_key(session.token), json.dumps(session_to_record(session)), ex=ttl)
        return session

    @handle_redis_connection_error
    @beartype
    def get(self, token: str, **kwargs) -> SessionModel:
        raw = self.redis.get(self.keys.session_key(token))
        if raw is None:
            raise SessionNotFoundError('Session not found.')
        return session_from_record(token, raw)

    @handle_redis_connection_error
    @beartype
    def delete(self, token: str, **kwargs) -> bool:
        return bool(self.redis.delete(self.keys.session_key(token)))
