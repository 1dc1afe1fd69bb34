"""
Authentication Service with Store-Scoped Users

WHY: Every ledger mutation must be attributable to a staff identity that
belongs to exactly one store.

MULTI-TENANT: Users belong to exactly one store (store_id). Usernames are
only unique within a store, so "staff1" in s1 and "staff1" in s2 are two
unrelated accounts with their own passwords.

SECURITY NOTES:
- Passwords are stored as bcrypt hashes (configurable cost factor)
- Verification goes through a CredentialVerifier so the hashing scheme
  can be swapped without touching the session layer
- There is no signup flow; the directory is static for the process lifetime
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

import bcrypt

from .store_service import DEFAULT_STORES, Store


ROLE_STAFF = "staff"
ROLE_MANAGER = "manager"
ROLES = (ROLE_STAFF, ROLE_MANAGER)

DEFAULT_BCRYPT_ROUNDS = 12


class InvalidCredentialsError(Exception):
    """Raised when store/username/password do not match a user."""
    pass


@dataclass(frozen=True)
class User:
    id: str
    store_id: str
    username: str
    password_hash: str
    role: str

    def to_dict(self) -> dict:
        # password_hash is never serialized
        return {"id": self.id, "username": self.username, "role": self.role}


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash password using bcrypt; returns the hash as a string."""
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. A malformed hash verifies as False
    rather than raising.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class CredentialVerifier(Protocol):
    def verify(self, user: User, candidate: str) -> bool:
        ...


class BcryptCredentialVerifier:
    def verify(self, user: User, candidate: str) -> bool:
        return verify_password(candidate, user.password_hash)


class UserDirectory:
    """Static, store-scoped user registry."""

    def __init__(self, users: Iterable[User], verifier: CredentialVerifier | None = None):
        self._users: dict[tuple[str, str], User] = {}
        self._verifier = verifier or BcryptCredentialVerifier()
        for user in users:
            if user.role not in ROLES:
                raise ValueError(f"Unknown role {user.role!r} for user {user.id}")
            key = (user.store_id, user.username)
            if key in self._users:
                raise ValueError(f"Duplicate username {user.username!r} in store {user.store_id}")
            self._users[key] = user

    def find_user(self, store_id: str, username: str) -> User | None:
        return self._users.get((store_id, username))

    def list_users(self, store_id: str | None = None) -> list[User]:
        users = list(self._users.values())
        if store_id is not None:
            users = [u for u in users if u.store_id == store_id]
        return users

    def authenticate(self, store_id: str, username: str, password: str) -> User:
        """
        Authenticate user within a store.

        Raises InvalidCredentialsError unless (store_id, username) exists and
        the password verifies. Unknown username and wrong password are
        indistinguishable to the caller.
        """
        user = self.find_user(store_id, username)
        if not user or not self._verifier.verify(user, password):
            raise InvalidCredentialsError("Invalid credentials")
        return user

    def __len__(self) -> int:
        return len(self._users)


def default_users(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> list[User]:
    """Demo accounts: one staff and one manager per built-in store."""
    users = []
    n = 1
    for store in DEFAULT_STORES:
        for username, role in (("staff1", ROLE_STAFF), ("manager1", ROLE_MANAGER)):
            users.append(User(
                id=f"u{n}",
                store_id=store.id,
                username=username,
                password_hash=hash_password("1234", rounds),
                role=role,
            ))
            n += 1
    return users


def load_directory(path: str | Path, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> tuple[list[Store], list[User]]:
    """
    Load stores and users from a JSON directory file.

    Users may carry either a bcrypt "passwordHash" or a plain "password",
    which is hashed here.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))

    stores = [Store(id=str(s["id"]), name=str(s["name"])) for s in data.get("stores", [])]
    store_ids = {s.id for s in stores}

    users = []
    for raw in data.get("users", []):
        store_id = str(raw["storeId"])
        if store_id not in store_ids:
            raise ValueError(f"User {raw.get('id')} references unknown store {store_id}")

        password_hash = raw.get("passwordHash")
        if not password_hash:
            password = raw.get("password")
            if not password:
                raise ValueError(f"User {raw.get('id')} needs password or passwordHash")
            password_hash = hash_password(password, rounds)

        users.append(User(
            id=str(raw["id"]),
            store_id=store_id,
            username=str(raw["username"]),
            password_hash=password_hash,
            role=raw.get("role", ROLE_STAFF),
        ))

    return stores, users
