import pytest

from gamtrain.pipeline.parallel.executor import ParallelExecutor
from gamtrain.pipeline.parallel.types import ParallelKind


def square(x):
    return x * x


def explode(x):
    if x == "bad":
        raise RuntimeError("boom")
    return x


def test_run_with_empty_items_does_nothing():
    called = []

    result = ParallelExecutor.run(kind=ParallelKind.BAG, items=[], handler=called.append)

    assert result == []
    assert called == []


def test_run_sequential_order_preserved():
    called = []

    def handler(x):
        called.append(x)
        return x.upper()

    result = ParallelExecutor.run(
        kind=ParallelKind.FEATURE, items=["a", "b", "c"], handler=handler, max_workers=1
    )

    assert called == ["a", "b", "c"]
    assert result == ["A", "B", "C"]


def test_run_parallel_returns_every_result():
    result = ParallelExecutor.run(
        kind=ParallelKind.BAG, items=[1, 2, 3, 4], handler=square, max_workers=2
    )

    assert sorted(result) == [1, 4, 9, 16]


def test_run_parallel_propagates_exception():
    with pytest.raises(RuntimeError, match="boom"):
        ParallelExecutor.run(
            kind=ParallelKind.BAG, items=["ok1", "bad", "ok2"], handler=explode, max_workers=2
        )


@pytest.mark.parametrize(
    "max_workers, n_items, expected",
    [(1, 5, 1), (8, 3, 3), (0, 3, 1), (2, 5, 2)],
)
def test_resolve_workers(max_workers, n_items, expected):
    assert ParallelExecutor._resolve_workers(list(range(n_items)), max_workers) == expected
