#!filepath: gamtrain/utils/retry.py
import random
import time
from functools import wraps
from typing import Callable, Tuple, Type

from gamtrain.utils.logger import logs


class Retry:
    """
    Synchronous retry with exponential backoff and jitter.

    Wraps checkpoint writes, which can fail transiently on network mounts.
    Only ``exceptions`` are retried; anything else propagates at once.
    """

    @staticmethod
    def backoff_delay(attempt: int, delay: float, backoff: float, jitter: bool) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        wait = delay * backoff ** (attempt - 1)
        return wait * random.uniform(0.8, 1.2) if jitter else wait

    @staticmethod
    def run(
        func: Callable,
        *args,
        exceptions: Tuple[Type[Exception], ...] = (Exception,),
        max_attempts: int = 3,
        delay: float = 1.0,
        backoff: float = 2.0,
        jitter: bool = True,
        **kwargs,
    ):
        name = getattr(func, "__name__", repr(func))

        for attempt in range(1, max_attempts + 1):
            try:
                return func(*args, **kwargs)
            except exceptions as e:
                if attempt == max_attempts:
                    logs.error(f"[Retry] {name} failed after {max_attempts} attempts: {e}")
                    raise

                wait = Retry.backoff_delay(attempt, delay, backoff, jitter)
                logs.warning(
                    f"[Retry] {name} attempt {attempt}/{max_attempts} failed: {e}; "
                    f"retrying in {wait:.2f}s"
                )
                time.sleep(wait)

    @staticmethod
    def decorator(
        exceptions: Tuple[Type[Exception], ...] = (Exception,),
        max_attempts: int = 2,
        delay: float = 1.0,
        backoff: float = 2.0,
        jitter: bool = True,
    ):
        def wrapper(func: Callable):
            @wraps(func)
            def inner(*args, **kwargs):
                return Retry.run(
                    func,
                    *args,
                    exceptions=exceptions,
                    max_attempts=max_attempts,
                    delay=delay,
                    backoff=backoff,
                    jitter=jitter,
                    **kwargs,
                )

            return inner

        return wrapper
