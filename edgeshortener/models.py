from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any


# fmt: off
@dataclass(frozen=True)
class ShortURLModel:
    target: str                         # Original long URL
    shortcode: str                      # Unique short identifier of shortened URL
    created_at: datetime | None = None  # Creation time, preserved across edits


@dataclass(frozen=True)
class SessionModel:
    token: str                          # Opaque bearer credential
    expires_at: datetime                # Absolute expiry instant (UTC)
    profile: Any = None                 # Identity provider profile, as returned
    me: str | None = None               # Subject identifier
    role: str | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True from the expiry instant onwards."""
        return (now or datetime.now(UTC)) >= self.expires_at


@dataclass(frozen=True)
class OAuthTransactionModel:
    state: str                          # CSRF binding, also the record key
    code_verifier: str                  # PKCE secret
    redirect_uri: str | None = None     # Redirect URI sent with the authorization request


@dataclass(frozen=True)
class KeyListing:
    keys: list[str] = field(default_factory=list)  # Unprefixed key names
    cursor: str | None = None                      # None once the scan is complete
    complete: bool = True
# fmt: on
