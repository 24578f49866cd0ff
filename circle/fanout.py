"""Bounded thread-pool fan-out used by every aggregation service."""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, List, Sequence

logger = logging.getLogger('steamcircle.fanout')

DEFAULT_MAX_WORKERS = 8


def fan_out(items: Sequence, task: Callable[[Any], Any],
            fallback: Callable[[Any, BaseException], Any],
            max_workers: int = DEFAULT_MAX_WORKERS,
            thread_name_prefix: str = 'circle') -> List[Any]:
    """Run *task* over *items* concurrently and return results in input order.

    Completion order never leaks into the result: futures are keyed by the
    index of their item and the list is rebuilt afterwards.  When a task
    raises, the exception is logged and ``fallback(item, exc)`` supplies the
    value for that slot; sibling tasks keep running.

    Args:
        items:              Inputs, one task per item.
        task:               Callable applied to each item (runs in a worker).
        fallback:           Called on the collecting thread for failed items.
        max_workers:        Upper bound on concurrent tasks.
        thread_name_prefix: Prefix for worker thread names.

    Returns:
        List of task results (or fallbacks), aligned with *items*.
    """
    if not items:
        return []

    results: List[Any] = [None] * len(items)
    workers = max(1, min(len(items), max_workers))
    # Each call opens its own executor, so a task may fan out again without
    # waiting on a slot in its caller's pool.
    with ThreadPoolExecutor(max_workers=workers,
                            thread_name_prefix=thread_name_prefix) as executor:
        future_map = {executor.submit(task, item): idx
                      for idx, item in enumerate(items)}
        for future in as_completed(future_map):
            idx = future_map[future]
            try:
                results[idx] = future.result()
            except Exception as exc:
                logger.warning("%s task for %r failed: %s",
                               thread_name_prefix, items[idx], exc)
                results[idx] = fallback(items[idx], exc)
    return results
