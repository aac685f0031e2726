"""Session issuing, validation and revocation.

A session is valid while `now < expires_at`. Expiry is enforced twice: here,
on every validation, and by the store TTL set at creation.

Example:
    >>> manager = SessionManager(SessionRedisDAO(...), BackgroundTasks())
    >>> session = manager.create_session(me='https://alice.example', role='admin')
    >>> manager.validate_session(session.token).role
    'admin'
    >>> manager.revoke_session(session.token)
    True
"""

import logging
from datetime import datetime, timedelta, UTC
from typing import Any

from edgeshortener.constants import TTL
from edgeshortener.models import SessionModel
from edgeshortener.dao.base import SessionBaseDAO
from edgeshortener.dao.exceptions import SessionNotFoundError, MalformedRecordError
from edgeshortener.exceptions import InvalidSessionError, ExpiredSessionError
from edgeshortener.utils.background import BackgroundTasks
from edgeshortener.auth.pkce import generate_session_token
from edgeshortener.auth.constants import SESSION_CREATED, SESSION_REVOKED, SESSION_EXPIRED, SESSION_MALFORMED


logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(self, dao: SessionBaseDAO, background: BackgroundTasks, ttl: int = TTL.SESSION):
        self.dao = dao
        self.background = background
        self.ttl = ttl

    def create_session(self, profile: Any = None, me: str | None = None, role: str | None = None) -> SessionModel:
        """Issue a new session expiring `ttl` seconds from now.

        Raises:
            DataStoreError:
                If the store is unreachable.
        """
        session = SessionModel(
            token=generate_session_token(),
            expires_at=datetime.now(UTC) + timedelta(seconds=self.ttl),
            profile=profile,
            me=me,
            role=role,
        )
        self.dao.insert(session, ttl=self.ttl)

        logger.info('Session created.', extra={'event': SESSION_CREATED, 'me': me, 'role': role})
        return session

    def validate_session(self, token: str) -> SessionModel:
        """Resolve a bearer token to its session.

        Raises:
            InvalidSessionError:
                If no session exists for the token, or its record is corrupt
                (the corrupt record is deleted in the background).
            ExpiredSessionError:
                If the session reached its expiry instant (the record is deleted).
            DataStoreError:
                If the store is unreachable.
        """
        try:
            session = self.dao.get(token)
        except SessionNotFoundError as e:
            raise InvalidSessionError('Session not found.') from e
        except MalformedRecordError as e:
            logger.warning('Malformed session record. Scheduling deletion.', extra={'event': SESSION_MALFORMED})
            self.background.schedule(self.dao.delete, token)
            raise InvalidSessionError('Session record is malformed.') from e

        if session.is_expired():
            self.dao.delete(token)
            logger.info('Session expired. Record deleted.', extra={'event': SESSION_EXPIRED, 'me': session.me})
            raise ExpiredSessionError('Session expired.')

        return session

    def revoke_session(self, token: str) -> bool:
        """Delete a session. Revoking an unknown token is not an error."""
        revoked = self.dao.delete(token)
        logger.info('Session revoked.', extra={'event': SESSION_REVOKED, 'existed': revoked})
        return revoked
