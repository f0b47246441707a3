"""
Pytest configuration for Token Auth Service tests.
Provides key directories, token makers and a controllable clock.
"""

from datetime import datetime, timedelta, timezone

import pytest

from token_auth.auth.key_store import KeyStore
from token_auth.auth.token_maker import TokenMaker, TokenMakerConfig


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock():
    """Clock frozen at a fixed instant."""
    return FrozenClock(datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def key_dir(tmp_path):
    """Empty directory for a keypair."""
    return tmp_path / "keys"


@pytest.fixture
def keypair(key_dir):
    """Keypair generated on disk and loaded."""
    store = KeyStore(key_dir)
    store.ensure()
    return store.load()


@pytest.fixture
def token_config(key_dir):
    return TokenMakerConfig(
        token_lifetime=timedelta(minutes=15),
        key_directory=key_dir,
        issuer="test_issuer",
        audience="test_audience",
    )


@pytest.fixture
def token_maker(token_config, clock):
    """TokenMaker with generated keys and a frozen clock."""
    return TokenMaker(token_config, clock=clock)
