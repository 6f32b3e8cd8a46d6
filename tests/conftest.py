import pytest

from store import MemoryStore


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingSender:
    def __init__(self):
        self.sent = []
        self.expires = []

    def send(self, recipient, code, app_context=None, expire=None):
        self.sent.append((recipient, code, app_context))
        self.expires.append(expire)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def sender():
    return RecordingSender()
