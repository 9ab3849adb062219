import pytest

from idverify.api.rate_limit import reset_limiter
from idverify.store.session_repo import clear_sessions


@pytest.fixture(autouse=True)
def fresh_process_state():
    # Rate-limit counters and form sessions are process-wide
    reset_limiter()
    clear_sessions()
    yield
    reset_limiter()
    clear_sessions()


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
