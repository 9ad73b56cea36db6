from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from practice_portal.core.config import Settings
from practice_portal.core.security import PasswordHasher, TokenService
from practice_portal.main import create_app
from practice_portal.store.memory import InMemoryCredentialStore

TEST_SECRET = "test-signing-secret-0123456789abcdef"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_settings(**overrides) -> Settings:
    values = dict(
        JWT_SECRET=TEST_SECRET,
        ENVIRONMENT="test",
        BCRYPT_ROUNDS=4,
        DATABASE_URL=None,
        STORE_BACKEND="memory",
        SEED_DEMO_ACCOUNTS=False,
        DEMO_SEED_ENABLED=False,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def tokens(clock):
    return TokenService(TEST_SECRET, clock=clock)


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
