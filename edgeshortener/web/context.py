from dataclasses import dataclass

from edgeshortener.dao.base import ShortURLBaseDAO, KeyspaceBaseDAO
from edgeshortener.utils.background import BackgroundTasks
from edgeshortener.utils.config import Settings
from edgeshortener.auth.sessions import SessionManager
from edgeshortener.auth.oauth import OAuthFlow
from edgeshortener.auth.sweep import SessionSweeper
from edgeshortener.auth.gate import AuthGate


@dataclass(frozen=True)
class HandlerContext:
    """Collaborators available to route handlers during one invocation."""

    settings: Settings
    links: ShortURLBaseDAO
    keyspace: KeyspaceBaseDAO
    sessions: SessionManager
    oauth: OAuthFlow
    sweeper: SessionSweeper
    gate: AuthGate
    background: BackgroundTasks
