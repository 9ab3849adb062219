from idverify.core.countdown import Countdown


def test_not_started_is_zero(clock):
    c = Countdown(clock=clock)
    assert c.remaining == 0
    assert not c.running


def test_strictly_decreases_one_per_second(clock):
    c = Countdown(clock=clock)
    c.start(30)
    seen = [c.remaining]
    for _ in range(30):
        clock.advance(1)
        seen.append(c.remaining)
    assert seen == list(range(30, -1, -1))
    assert not c.running


def test_partial_seconds_do_not_tick(clock):
    c = Countdown(clock=clock)
    c.start(30)
    clock.advance(0.5)
    assert c.remaining == 30
    clock.advance(0.25)
    assert c.remaining == 30
    clock.advance(0.25)
    assert c.remaining == 29


def test_stays_at_zero_after_expiry(clock):
    c = Countdown(clock=clock)
    c.start(3)
    clock.advance(100)
    assert c.remaining == 0
    clock.advance(100)
    assert c.remaining == 0


def test_cancel_drops_to_zero(clock):
    c = Countdown(clock=clock)
    c.start(30)
    clock.advance(5)
    c.cancel()
    assert c.remaining == 0


def test_restart_resets_to_full_duration(clock):
    c = Countdown(clock=clock)
    c.start(30)
    clock.advance(31)
    assert c.remaining == 0
    c.start(30)
    assert c.remaining == 30
