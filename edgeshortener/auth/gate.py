"""Per-request authorization decision.

The static API key is compared before any store lookup, so machine-to-machine
calls never touch the session store, and the two credentials stay independent:
neither one can be used to mint the other.
"""

import hmac
import logging
from dataclasses import dataclass
from enum import StrEnum

from edgeshortener.constants import AuthMode, DenyReason
from edgeshortener.models import SessionModel
from edgeshortener.exceptions import InvalidSessionError, ExpiredSessionError
from edgeshortener.utils.config import Settings
from edgeshortener.web.request import Request
from edgeshortener.auth.sessions import SessionManager
from edgeshortener.auth.constants import AUTH_DENIED


logger = logging.getLogger(__name__)


class Grant(StrEnum):
    PUBLIC = 'public'
    AUTH_DISABLED = 'auth_disabled'
    API_KEY = 'api_key'
    SESSION = 'session'


@dataclass(frozen=True)
class Allow:
    grant: Grant
    session: SessionModel | None = None


@dataclass(frozen=True)
class Deny:
    reason: DenyReason


type Verdict = Allow | Deny


class AuthGate:
    def __init__(self, sessions: SessionManager, settings: Settings):
        self.sessions = sessions
        self.settings = settings

    def authorize(self, request: Request, *, public: bool = False) -> Verdict:
        """Decide whether a request may reach its handler.

        Args:
            request (Request):
                Parsed inbound request; only its Authorization header is read.
            public (bool):
                True for routes that need no credentials.

        Returns:
            Allow | Deny: Allow carries the session for session-authorized requests.

        Raises:
            DataStoreError:
                If the session store is unreachable.
        """
        if public:
            return Allow(grant=Grant.PUBLIC)
        if self.settings.auth_mode is AuthMode.NONE:
            return Allow(grant=Grant.AUTH_DISABLED)

        token = request.bearer_token()
        if not token:
            return self._deny(request, DenyReason.MISSING_CREDENTIALS)

        api_key = self.settings.api_key
        if api_key and hmac.compare_digest(token.encode('utf-8'), api_key.encode('utf-8')):
            return Allow(grant=Grant.API_KEY)

        try:
            session = self.sessions.validate_session(token)
        except ExpiredSessionError:
            return self._deny(request, DenyReason.EXPIRED_SESSION)
        except InvalidSessionError:
            return self._deny(request, DenyReason.INVALID_SESSION)

        return Allow(grant=Grant.SESSION, session=session)

    @staticmethod
    def _deny(request: Request, reason: DenyReason) -> Deny:
        logger.info(
            'Request denied. Responding with 401.',
            extra={'event': AUTH_DENIED, 'reason': reason, 'method': request.method, 'path': request.path},
        )
        return Deny(reason=reason)
