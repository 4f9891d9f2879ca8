# gamtrain/pipeline/parallel/executor.py
from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Callable, Iterable, List, TypeVar

from gamtrain.pipeline.parallel.types import ParallelKind
from gamtrain.utils.logger import logs

T = TypeVar("T")


class ParallelExecutor:
    """
    ParallelExecutor

    - one ProcessPoolExecutor wrapper for every fan-out in training
    - max_workers == 1 runs in-process, in item order
    - results come back in completion order; callers must not rely on it
    - the first handler exception propagates and fails the whole run
    """

    @staticmethod
    def run(
            *,
            kind: ParallelKind,
            items: Iterable[T],
            handler: Callable[[T], Any],
            max_workers: int | None = None,
    ) -> List[Any]:
        items = list(items)
        if not items:
            logs.info("[ParallelExecutor] no items to process")
            return []

        logs.info(
            f"[ParallelExecutor] start "
            f"kind={kind.value} total={len(items)}"
        )

        workers = ParallelExecutor._resolve_workers(items, max_workers)

        if workers == 1:
            return ParallelExecutor._run_sequential(items, handler)
        return ParallelExecutor._run_parallel(items, handler, workers)

    # ---------------- internal ----------------

    @staticmethod
    def _resolve_workers(items: list, max_workers: int | None) -> int:
        cpu = os.cpu_count() or 1
        if max_workers is None:
            return min(cpu, len(items))
        return max(1, min(max_workers, len(items)))

    @staticmethod
    def _run_sequential(
            items: list,
            handler: Callable[[Any], Any],
    ) -> List[Any]:
        return [handler(item) for item in items]

    @staticmethod
    def _run_parallel(
            items: list,
            handler: Callable[[Any], Any],
            workers: int,
    ) -> List[Any]:
        logs.info(
            f"[ParallelExecutor] run parallel | workers={workers}"
        )

        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(handler, item): item
                for item in items
            }
            results = []
            for fut in as_completed(futures):
                results.append(fut.result())

        return results
