"""Bounded, failure-tolerant fan-out of registry queries."""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, Tuple, TypeVar

from sos_matching.clients.exceptions import UpstreamError

from .models import QueryOutcome

T = TypeVar("T")


def gather(
    tasks: Sequence[Tuple[str, Callable[[], T]]], max_workers: int = 4
) -> List[QueryOutcome[T]]:
    """Run keyed callables concurrently and collect one outcome per key.

    UpstreamError from a task becomes a failed outcome; any other exception
    propagates. Outcomes come back in task order regardless of completion
    order, and each task runs with a copy of the caller's contextvars so log
    context follows it into the worker thread.

    Args:
        tasks: (key, zero-argument callable) pairs
        max_workers: Upper bound on tasks in flight

    Returns:
        QueryOutcome per task, in input order
    """
    if not tasks:
        return []

    def run(key: str, fn: Callable[[], T]) -> QueryOutcome[T]:
        try:
            return QueryOutcome(key=key, value=fn())
        except UpstreamError as e:
            return QueryOutcome(key=key, error=e)

    if max_workers <= 1 or len(tasks) == 1:
        return [run(key, fn) for key, fn in tasks]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(tasks))) as pool:
        futures = [
            pool.submit(contextvars.copy_context().run, run, key, fn) for key, fn in tasks
        ]
        return [future.result() for future in futures]
