import pytest

from gamtrain.utils.retry import Retry


def test_retry_success_without_retry():
    """First call succeeds, nothing is retried."""
    call_count = {"n": 0}

    @Retry.decorator(max_attempts=3)
    def func():
        call_count["n"] += 1
        return "ok"

    assert func() == "ok"
    assert call_count["n"] == 1


def test_retry_success_after_failures(monkeypatch):
    """Two failures, then success."""
    monkeypatch.setattr("time.sleep", lambda t: None)
    call_count = {"n": 0}

    @Retry.decorator(max_attempts=5, delay=0.01, backoff=1)
    def func():
        call_count["n"] += 1
        if call_count["n"] < 3:
            raise OSError("fail")
        return "success"

    assert func() == "success"
    assert call_count["n"] == 3


def test_retry_raises_after_max_attempts(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda t: None)
    call_count = {"n": 0}

    @Retry.decorator(max_attempts=3, delay=0.01)
    def func():
        call_count["n"] += 1
        raise ValueError("fail")

    with pytest.raises(ValueError):
        func()

    assert call_count["n"] == 3


def test_retry_catches_specific_exception():
    """Exceptions outside the list propagate on the first attempt."""
    call_count = {"n": 0}

    @Retry.decorator(exceptions=(KeyError,), max_attempts=3)
    def func():
        call_count["n"] += 1
        raise ValueError("this is not KeyError")

    with pytest.raises(ValueError):
        func()

    assert call_count["n"] == 1


def test_exponential_backoff_without_jitter(monkeypatch):
    sleep_calls = []
    monkeypatch.setattr("time.sleep", lambda t: sleep_calls.append(t))

    def func():
        raise OSError("fail")

    with pytest.raises(OSError):
        Retry.run(func, exceptions=(OSError,), max_attempts=4, delay=1, backoff=2, jitter=False)

    assert sleep_calls == [1, 2, 4]


def test_backoff_delay_jitter_bounds():
    for attempt in (1, 2, 3):
        base = 0.5 * 3 ** (attempt - 1)
        wait = Retry.backoff_delay(attempt, 0.5, 3, jitter=True)
        assert 0.8 * base <= wait <= 1.2 * base
