#!filepath: gamtrain/utils/logger.py
import json
import os
import sys
from functools import wraps
from time import perf_counter
from typing import Callable, Optional

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {process.name} | {message}"


class Logging:
    """
    Trainer logging
    ---------------------------------------
    - stderr sink, always on
    - daily file sink under ``log_dir`` (rotation / retention), optional
    - ``catch``: decorator for timed, exception-logged entry points
    ---------------------------------------
    Bag workers run in child processes; the file sink is enqueued so
    their lines do not interleave.
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        rotation: str = "1 day",
        retention: str = "30 days",
        log_level: str = "INFO",
    ):
        self.log_dir = log_dir
        self.rotation = rotation
        self.retention = retention
        self.level = log_level
        self._install_sinks()

    def _install_sinks(self) -> None:
        logger.remove()
        logger.add(sys.stderr, level=self.level, format=_FORMAT)

        if not self.log_dir:
            return

        os.makedirs(self.log_dir, exist_ok=True)
        logger.add(
            os.path.join(self.log_dir, "gamtrain_{time:YYYY-MM-DD}.log"),
            level=self.level,
            format=_FORMAT,
            rotation=self.rotation,
            retention=self.retention,
            enqueue=True,
            backtrace=True,
            diagnose=True,
        )

    def reconfigure(
        self,
        log_dir: Optional[str] = None,
        rotation: Optional[str] = None,
        retention: Optional[str] = None,
        log_level: Optional[str] = None,
    ) -> None:
        """Swap sinks in place; every module keeps its reference to ``logs``."""
        self.log_dir = log_dir
        self.rotation = rotation or self.rotation
        self.retention = retention or self.retention
        self.level = log_level or self.level
        self._install_sinks()
        logger.info(
            f"[Logging] level={self.level} file_sink={self.log_dir or 'off'}"
        )

    # ---------- log methods ----------
    def debug(self, msg: str, *args, **kwargs):
        logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        logger.exception(msg, *args, **kwargs)

    # ---------- decorator ----------
    def catch(
        self,
        msg: str = "Exception occurred",
        log_inputs: bool = False,
        log_outputs: bool = False,
        log_time: bool = True,
    ) -> Callable:
        """
        Log the call (optionally its inputs / outputs and wall time) and
        log-then-reraise any exception.
        """

        def decorator(func: Callable):
            @wraps(func)
            def wrapper(*args, **kwargs):
                if log_inputs:
                    logger.info(
                        f"[CALL] {func.__name__} args={args!r:.200} "
                        f"kwargs={json.dumps(kwargs, default=str)[:200]}"
                    )

                start = perf_counter()
                try:
                    result = func(*args, **kwargs)
                except Exception:
                    logger.exception(f"[ERROR] {func.__name__}: {msg}")
                    raise

                if log_outputs:
                    logger.info(f"[RETURN] {func.__name__} result={result!r:.200}")
                if log_time:
                    logger.info(f"[TIME] {func.__name__} took {perf_counter() - start:.4f}s")
                return result

            return wrapper

        return decorator


# default global logs (reconfigured by the CLI)
logs = Logging()
