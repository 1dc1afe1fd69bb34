# Overview: Pytest coverage for store-scoped authentication and sessions.

"""
Session Registry Tests

Verifies:
- Login is scoped by store: same username in two stores are two accounts
- Unknown store and bad credentials are distinct failures
- Tokens are high-entropy, stored hashed, and die on logout or expiry
- Role gate
"""

import json
from datetime import timedelta

import pytest

from conftest import ManualDateTimeClock
from stampcard.services.auth_service import (
    InvalidCredentialsError,
    User,
    UserDirectory,
    default_users,
    hash_password,
    load_directory,
    verify_password,
)
from stampcard.services.session_service import (
    ForbiddenError,
    SessionRegistry,
    UnauthenticatedError,
    hash_token,
    require_role,
)
from stampcard.services.store_service import StoreDirectory, UnknownStoreError


@pytest.fixture(scope="module")
def users():
    return UserDirectory(default_users(rounds=4))


@pytest.fixture
def clock():
    return ManualDateTimeClock()


@pytest.fixture
def registry(users, clock):
    return SessionRegistry(StoreDirectory(), users, ttl=timedelta(hours=24), clock=clock)


class TestLogin:
    def test_login_returns_token_store_and_user(self, registry):
        result = registry.login("s1", "staff1", "1234")

        assert len(result.token) == 64
        int(result.token, 16)  # hex
        assert result.to_dict() == {
            "token": result.token,
            "store": {"id": "s1", "name": "Shop A"},
            "user": {"id": "u1", "username": "staff1", "role": "staff"},
        }

    def test_session_binds_store_and_role(self, registry):
        result = registry.login("s2", "manager1", "1234")
        session = registry.authenticate(result.token)

        assert session.store_id == "s2"
        assert session.role == "manager"
        assert session.user_id == "u4"

    def test_wrong_password(self, registry):
        with pytest.raises(InvalidCredentialsError):
            registry.login("s1", "staff1", "wrong")

    def test_unknown_username(self, registry):
        with pytest.raises(InvalidCredentialsError):
            registry.login("s1", "nobody", "1234")

    def test_unknown_store(self, registry):
        with pytest.raises(UnknownStoreError):
            registry.login("s9", "staff1", "1234")

    def test_same_username_in_other_store_is_independent(self):
        users = UserDirectory([
            User(id="a", store_id="s1", username="staff1", password_hash=hash_password("alpha", 4), role="staff"),
            User(id="b", store_id="s2", username="staff1", password_hash=hash_password("bravo", 4), role="staff"),
        ])
        registry = SessionRegistry(StoreDirectory(), users)

        with pytest.raises(InvalidCredentialsError):
            registry.login("s1", "staff1", "bravo")

        assert registry.login("s1", "staff1", "alpha").user.id == "a"
        assert registry.login("s2", "staff1", "bravo").user.id == "b"

    def test_tokens_are_unique_per_login(self, registry):
        first = registry.login("s1", "staff1", "1234")
        second = registry.login("s1", "staff1", "1234")
        assert first.token != second.token
        assert registry.active_count() == 2


class TestValidation:
    def test_unknown_token(self, registry):
        assert registry.validate_session("deadbeef") is None
        assert registry.validate_session("") is None
        with pytest.raises(UnauthenticatedError):
            registry.authenticate("deadbeef")

    def test_registry_does_not_key_by_plaintext(self, registry):
        result = registry.login("s1", "staff1", "1234")
        assert result.token not in registry._sessions
        assert hash_token(result.token) in registry._sessions

    def test_logout_revokes(self, registry):
        result = registry.login("s1", "staff1", "1234")
        assert registry.revoke_session(result.token) is True
        assert registry.validate_session(result.token) is None
        # Second revoke finds nothing
        assert registry.revoke_session(result.token) is False

    def test_session_is_immutable(self, registry):
        session = registry.authenticate(registry.login("s1", "staff1", "1234").token)
        with pytest.raises(AttributeError):
            session.role = "manager"


class TestExpiry:
    def test_session_expires_after_ttl(self, registry, clock):
        token = registry.login("s1", "staff1", "1234").token

        clock.advance(hours=24)
        assert registry.validate_session(token) is not None

        clock.advance(seconds=1)
        assert registry.validate_session(token) is None
        assert registry.active_count() == 0

    def test_purge_expired(self, registry, clock):
        registry.login("s1", "staff1", "1234")
        clock.advance(hours=12)
        fresh = registry.login("s1", "manager1", "1234").token
        clock.advance(hours=13)

        assert registry.purge_expired() == 1
        assert registry.validate_session(fresh) is not None

    def test_login_sweeps_abandoned_sessions(self, registry, clock):
        for _ in range(3):
            registry.login("s1", "staff1", "1234")
        clock.advance(hours=25)

        # The abandoned tokens are never presented again
        registry.login("s1", "manager1", "1234")
        assert registry.active_count() == 1

    def test_no_ttl_never_expires(self, users, clock):
        registry = SessionRegistry(StoreDirectory(), users, ttl=None, clock=clock)
        token = registry.login("s1", "staff1", "1234").token
        clock.advance(days=365)
        assert registry.validate_session(token) is not None
        assert registry.purge_expired() == 0


class TestRequireRole:
    def test_matching_role_passes(self, registry):
        session = registry.authenticate(registry.login("s1", "manager1", "1234").token)
        require_role(session, "manager")

    def test_mismatch_is_forbidden(self, registry):
        session = registry.authenticate(registry.login("s1", "staff1", "1234").token)
        with pytest.raises(ForbiddenError, match="Manager only"):
            require_role(session, "manager")

    def test_actor_and_dict(self, registry, clock):
        session = registry.authenticate(registry.login("s1", "staff1", "1234").token)
        assert session.actor() == {"userId": "u1", "username": "staff1", "role": "staff"}
        assert session.to_dict()["createdAt"] == "2026-01-01T12:00:00Z"


class TestDirectory:
    def test_verify_password(self):
        hashed = hash_password("s3cret", 4)
        assert verify_password("s3cret", hashed)
        assert not verify_password("S3cret", hashed)
        assert not verify_password("s3cret", "not-a-bcrypt-hash")

    def test_duplicate_username_in_store_rejected(self):
        user = User(id="a", store_id="s1", username="x", password_hash="h", role="staff")
        dup = User(id="b", store_id="s1", username="x", password_hash="h", role="staff")
        with pytest.raises(ValueError):
            UserDirectory([user, dup])

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            UserDirectory([User(id="a", store_id="s1", username="x", password_hash="h", role="owner")])

    def test_load_directory_file(self, tmp_path):
        path = tmp_path / "directory.json"
        path.write_text(json.dumps({
            "stores": [{"id": "north", "name": "North"}],
            "users": [
                {"id": "n1", "storeId": "north", "username": "ann", "password": "pw", "role": "manager"},
                {"id": "n2", "storeId": "north", "username": "bob", "passwordHash": hash_password("pw2", 4)},
            ],
        }))

        stores, users = load_directory(path, rounds=4)
        directory = UserDirectory(users)

        assert [s.id for s in stores] == ["north"]
        assert directory.authenticate("north", "ann", "pw").role == "manager"
        assert directory.authenticate("north", "bob", "pw2").role == "staff"

    def test_load_directory_rejects_unknown_store(self, tmp_path):
        path = tmp_path / "directory.json"
        path.write_text(json.dumps({
            "stores": [{"id": "north", "name": "North"}],
            "users": [{"id": "x", "storeId": "south", "username": "x", "password": "pw"}],
        }))
        with pytest.raises(ValueError):
            load_directory(path, rounds=4)
