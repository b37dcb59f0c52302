"""
Detached background work.

``BackgroundWriter.submit`` hands a callable to a thread pool and returns
immediately. There is no result channel back to the caller: a failure is
logged and otherwise discarded, and a job keeps running after the request
that submitted it has finished.
"""

from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Optional

from core.logging import get_logger

logger = get_logger("background")


class BackgroundWriter:
    """
    Fire-and-forget executor for cache repopulation.

    Usage:
        writer = BackgroundWriter(max_workers=4)
        writer.submit("likers:u1:", cache.set_json, "likers:u1:", payload, 30)
        ...
        writer.shutdown()  # drains queued jobs at application shutdown
    """

    def __init__(self, max_workers: int = 4, executor: Optional[Executor] = None):
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="cache-writer"
        )
        self._closed = False

    def submit(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """
        Schedule ``fn(*args, **kwargs)`` without waiting for it.

        Args:
            label: Short description used in failure logs (e.g. the cache key)
            fn: Work to run
        """
        if self._closed:
            logger.warning("background_job_dropped", label=label, reason="writer_closed")
            return

        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except RuntimeError as e:
            # executor already shut down underneath us
            logger.warning("background_job_dropped", label=label, error=str(e))
            return

        future.add_done_callback(lambda f: self._log_outcome(label, f))

    @staticmethod
    def _log_outcome(label: str, future: Future) -> None:
        if future.cancelled():
            logger.warning("background_job_cancelled", label=label)
            return
        error = future.exception()
        if error is not None:
            logger.warning(
                "background_job_failed",
                label=label,
                error=str(error),
                error_type=type(error).__name__,
            )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs and optionally wait for queued ones to finish."""
        self._closed = True
        self._executor.shutdown(wait=wait)
