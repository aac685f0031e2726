"""Fire-and-forget side effects detached from the HTTP response.

Lambda freezes the execution environment as soon as the handler returns, so a
scheduled task may finish during a later invocation, or never if the
environment is torn down. Only schedule work that is safe to drop, e.g.
deleting records that also expire through store TTL.

Example:
    >>> tasks = BackgroundTasks()
    >>> tasks.schedule(session_dao.delete, token)
    >>> return response_200(...)  # doesn't wait on the deletion
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from collections.abc import Callable


logger = logging.getLogger(__name__)

# Shared by all invocations of a warm execution environment
_EXECUTOR = ThreadPoolExecutor(max_workers=4, thread_name_prefix='background')


def _log_failure(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.warning(
            'Background task failed.',
            exc_info=(type(error), error, error.__traceback__),
            extra={'error': error.__class__.__name__},
        )


class BackgroundTasks:
    """Collect tasks scheduled during one request."""

    def __init__(self, executor: ThreadPoolExecutor | None = None):
        self._executor = executor or _EXECUTOR
        self._futures: list[Future] = []

    def schedule(self, func: Callable, /, *args, **kwargs) -> Future:
        future = self._executor.submit(func, *args, **kwargs)
        future.add_done_callback(_log_failure)
        self._futures.append(future)
        return future

    def join(self, timeout: float | None = None) -> None:
        """Block until every scheduled task finished. Meant for tests and local runs."""
        wait(self._futures, timeout=timeout)

    def __len__(self) -> int:
        return len(self._futures)
