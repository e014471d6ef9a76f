import concurrent.futures as futures
from dataclasses import dataclass
import logging
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class TaskResult(Generic[T, R]):
    task: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def effective_workers(limit: int, n_tasks: int) -> int:
    """Pool size for a batch. A limit of 0 bounds the pool at the task count."""
    if limit < 0:
        raise ValueError(f"Concurrency limit must be >= 0, got {limit}")

    bound = n_tasks if limit == 0 else min(limit, n_tasks)
    return max(1, bound)


def run_all(
    tasks: Sequence[T],
    limit: int,
    worker: Callable[[T], R],
    on_complete: Optional[Callable[[TaskResult, int, int], Any]] = None,
) -> List[TaskResult]:
    """
    Run `worker` once per task with at most `limit` tasks in flight.

    A task raising an exception is recorded in its result and never stops the others.
    Results come back in completion order, each carrying its originating task.

    Args:
        tasks: Homogeneous work items
        limit: Maximum simultaneous tasks, 0 meaning one worker per task
        worker: Callable applied to each task
        on_complete: Called as (result, n_done, n_total) after every completion
    Returns:
        List[TaskResult]: Exactly one result per task
    """
    if not tasks:
        return []

    n_total = len(tasks)
    max_workers = effective_workers(limit, n_total)
    logger.debug(f"Running {n_total} tasks on {max_workers} workers")

    results = []
    with futures.ThreadPoolExecutor(max_workers=max_workers) as pool:
        future_to_task = {pool.submit(worker, task): task for task in tasks}

        for fut in futures.as_completed(future_to_task):
            task = future_to_task[fut]
            try:
                result = TaskResult(task=task, value=fut.result())
            except Exception as e:
                logger.debug(f"Task {task!r} failed: {e}")
                result = TaskResult(task=task, error=e)

            results.append(result)
            if on_complete is not None:
                on_complete(result, len(results), n_total)

    return results
