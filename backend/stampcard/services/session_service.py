"""
Session Token Management Service with Store-Scoped Identities

WHY: Bearer tokens bind a request to one store and one role. Sessions
capture store_id and role at login; every write derives its tenant from
the session, never from the request body.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (registry never holds plaintext)
- Optional absolute timeout (SESSION_TTL_SECONDS)
- Revocable on logout
- Store/role binding is immutable for the session lifetime
"""

from __future__ import annotations

import hashlib
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from .auth_service import User, UserDirectory
from .store_service import Store, StoreDirectory
from ..time_utils import to_utc_z, utcnow


DEFAULT_SESSION_TTL = timedelta(hours=24)


class UnauthenticatedError(Exception):
    """Raised when a token is missing, unknown, revoked or expired."""
    pass


class ForbiddenError(Exception):
    """Raised when an authenticated session lacks the required role."""
    pass


@dataclass(frozen=True)
class Session:
    """
    Server-held record behind a bearer token.

    Frozen: store_id and role cannot change after login.
    """
    user_id: str
    store_id: str
    username: str
    role: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "storeId": self.store_id,
            "username": self.username,
            "role": self.role,
            "createdAt": to_utc_z(self.created_at),
        }

    def actor(self) -> dict:
        return {"userId": self.user_id, "username": self.username, "role": self.role}


@dataclass(frozen=True)
class LoginResult:
    token: str
    session: Session
    store: Store
    user: User

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "store": self.store.to_dict(),
            "user": self.user.to_dict(),
        }


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 is sufficient for high-entropy tokens."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def require_role(session: Session, role: str) -> None:
    if session.role != role:
        raise ForbiddenError(f"{role.capitalize()} only")


class SessionRegistry:
    def __init__(
        self,
        stores: StoreDirectory,
        users: UserDirectory,
        *,
        ttl: timedelta | None = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._stores = stores
        self._users = users
        self._ttl = ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def login(self, store_id: str, username: str, password: str) -> LoginResult:
        """
        Authenticate against the store's user directory and open a session.

        Raises UnknownStoreError if store_id is not registered and
        InvalidCredentialsError if no user matches store+username+password.
        """
        store = self._stores.require_store(store_id)
        user = self._users.authenticate(store.id, username, password)

        session = Session(
            user_id=user.id,
            store_id=user.store_id,
            username=user.username,
            role=user.role,
            created_at=self._clock(),
        )

        token = generate_token()
        with self._lock:
            self._purge_expired_locked()
            self._sessions[hash_token(token)] = session

        return LoginResult(token=token, session=session, store=store, user=user)

    def validate_session(self, token: str) -> Session | None:
        """
        Return the Session for token, or None.

        Expired sessions are dropped on lookup.
        """
        if not token:
            return None

        key = hash_token(token)
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                return None
            if self._is_expired(session):
                del self._sessions[key]
                return None
            return session

    def authenticate(self, token: str) -> Session:
        session = self.validate_session(token)
        if session is None:
            raise UnauthenticatedError("Invalid token")
        return session

    def revoke_session(self, token: str) -> bool:
        """Returns True if an existing session was removed."""
        with self._lock:
            return self._sessions.pop(hash_token(token), None) is not None

    def purge_expired(self) -> int:
        """Drop every expired session; returns how many were removed."""
        with self._lock:
            return self._purge_expired_locked()

    def _purge_expired_locked(self) -> int:
        # Caller holds self._lock; login sweeps here so unused tokens cannot pile up
        expired = [k for k, s in self._sessions.items() if self._is_expired(s)]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def active_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _is_expired(self, session: Session) -> bool:
        if not self._ttl:
            return False
        return self._clock() - session.created_at > self._ttl
