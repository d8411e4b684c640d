import math

from dogsearch.ratelimit.window import RateWindow, fixed_window_decide


def test_allows_up_to_limit_then_blocks():
    now = 1_000.0
    window = None
    allowed = 0
    for _ in range(10):
        window, decision = fixed_window_decide(now, window, limit=10, window_s=60)
        assert decision.allowed
        allowed += 1
    assert allowed == 10
    assert window.count == 10

    window, decision = fixed_window_decide(now + 1, window, limit=10, window_s=60)
    assert not decision.allowed
    assert decision.remaining == 0
    assert decision.retry_after_s > 0
    assert math.isclose(decision.retry_after_s, 59.0)


def test_remaining_counts_down():
    window, d1 = fixed_window_decide(0.0, None, limit=3, window_s=10)
    window, d2 = fixed_window_decide(1.0, window, limit=3, window_s=10)
    window, d3 = fixed_window_decide(2.0, window, limit=3, window_s=10)
    assert [d1.remaining, d2.remaining, d3.remaining] == [2, 1, 0]
    assert d1.reset_epoch_s == 10.0


def test_new_window_after_elapsed():
    window, _ = fixed_window_decide(0.0, None, limit=1, window_s=60)
    window, blocked = fixed_window_decide(30.0, window, limit=1, window_s=60)
    assert not blocked.allowed

    window, decision = fixed_window_decide(60.0, window, limit=1, window_s=60)
    assert decision.allowed
    assert window.window_start == 60.0
    assert window.count == 1


def test_denied_requests_do_not_consume_window():
    window = RateWindow(count=2, window_start=0.0, last_seen=0.0)
    for t in (1.0, 2.0, 3.0):
        window, decision = fixed_window_decide(t, window, limit=2, window_s=60)
        assert not decision.allowed
    assert window.count == 2
    assert window.last_seen == 3.0


def test_zero_limit_always_blocks():
    window, decision = fixed_window_decide(5.0, None, limit=0, window_s=60)
    assert not decision.allowed
    assert decision.retry_after_s == float("inf")
    assert window.last_seen == 5.0
