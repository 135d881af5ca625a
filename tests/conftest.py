import os
import tempfile

os.environ.setdefault("SESSION_LOG_DIR", tempfile.mkdtemp(prefix="session-logs-"))
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret-key-for-session-cookies")

import pytest

from Sessions.native_session import MemorySessionBackend, NativeSession
from Sessions.session_store import Session


class FakeClock:
    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemorySessionBackend(max_age_seconds=3600)


@pytest.fixture
def native(backend):
    return NativeSession("session", backend)


@pytest.fixture
def session(native, clock):
    return Session(native, principal_id=0, clock=clock)
