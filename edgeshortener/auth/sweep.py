import logging
from collections.abc import Iterable
from datetime import datetime, UTC

from edgeshortener.dao.base import SessionBaseDAO
from edgeshortener.dao.exceptions import SessionNotFoundError, MalformedRecordError
from edgeshortener.utils.background import BackgroundTasks
from edgeshortener.auth.constants import SESSION_SWEPT


logger = logging.getLogger(__name__)


class SessionSweeper:
    """Delete expired or corrupt sessions discovered while listing the store.

    There is no timer: the listing handler hands over the session tokens found
    on the page it is rendering. Deletions are scheduled in the background and
    never delay the response.
    """

    def __init__(self, dao: SessionBaseDAO, background: BackgroundTasks):
        self.dao = dao
        self.background = background

    def sweep(self, tokens: Iterable[str]) -> int:
        """Schedule deletion of every dead session among `tokens`.

        Returns:
            int: Number of deletions scheduled.

        Raises:
            DataStoreError:
                If the store is unreachable while reading sessions.
        """
        now = datetime.now(UTC)
        scheduled = 0

        for token in tokens:
            try:
                session = self.dao.get(token)
            except SessionNotFoundError:
                continue  # evicted by TTL since the listing
            except MalformedRecordError:
                reason = 'malformed'
            else:
                if not session.is_expired(now):
                    continue
                reason = 'expired'

            self.background.schedule(self.dao.delete, token)
            scheduled += 1
            logger.debug('Scheduled session deletion.', extra={'event': SESSION_SWEPT, 'reason': reason})

        return scheduled
