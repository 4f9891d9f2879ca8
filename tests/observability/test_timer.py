import pytest

from gamtrain.observability.timer import Timer, stage_of


def test_timer_measures_elapsed(monkeypatch):
    ticks = iter([10.0, 12.5])
    monkeypatch.setattr("time.perf_counter", lambda: next(ticks, 12.5))

    timer = Timer()
    timer.start("bags@1")

    assert timer.end("bags@1") == 2.5


def test_timer_rolls_iterations_into_stages(monkeypatch):
    ticks = iter([0.0, 1.0, 5.0, 7.0, 8.0, 8.5])
    monkeypatch.setattr("time.perf_counter", lambda: next(ticks, 8.5))

    timer = Timer()
    for name in ("bags@1", "bags@2", "prune@1"):
        timer.start(name)
        timer.end(name)

    assert timer.stage_totals["bags"] == pytest.approx(3.0)
    assert timer.stage_totals["prune"] == pytest.approx(0.5)


def test_timer_end_without_start():
    assert Timer().end("never") == 0.0


def test_disabled_timer():
    timer = Timer(enabled=False)
    timer.start("x")
    assert timer.end("x") == 0.0
    assert dict(timer.stage_totals) == {}


def test_stage_of():
    assert stage_of("aggregate@12") == "aggregate"
    assert stage_of("model_init") == "model_init"
