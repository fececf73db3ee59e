"""
Replicate dispatch for resampling phases.

Bootstrap and permutation replicates are independent refits, so each
phase is a stateless map over task records. The map runs in-process, or
on a joblib process pool that is created and torn down inside the call.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence, TypeVar

import joblib
from joblib import Parallel, delayed

from pyrepeatability.core.exceptions import ParallelWorkerError

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


def default_worker_count() -> int:
    """All available cores but one, never fewer than one."""
    return max(1, joblib.cpu_count() - 1)


def map_replicates(
    fn: Callable[[T], R],
    inputs: Sequence[T],
    *,
    parallel: bool = False,
    n_workers: int | None = None,
    phase: str = 'replicates',
) -> list[R]:
    """Apply fn to every input and return the results in input order.

    Args:
        fn: Task function. Must be picklable (module-level) when
            parallel=True.
        inputs: Task records, one per replicate.
        parallel: If False, run sequentially in the calling process.
        n_workers: Pool size. Default: default_worker_count().
        phase: Phase label carried by ParallelWorkerError.

    Returns:
        List of results, same length and order as inputs.

    Raises:
        ParallelWorkerError: If the pool fails or a task raises while
            running on the pool.
    """
    if not inputs:
        return []

    if not parallel:
        return [fn(item) for item in inputs]

    if n_workers is None:
        n_workers = default_worker_count()
        logger.info(
            "No worker count given for %s; using %d worker(s)",
            phase, n_workers,
        )
    if n_workers < 1:
        raise ValueError(f"n_workers must be >= 1, got {n_workers}")

    logger.debug(
        "Dispatching %d %s task(s) to %d worker(s)",
        len(inputs), phase, n_workers,
    )
    try:
        # The multiprocessing backend owns its pool: it is created on
        # __enter__ and terminated on __exit__.
        with Parallel(n_jobs=n_workers, backend='multiprocessing') as pool:
            results = pool(delayed(fn)(item) for item in inputs)
    except Exception as exc:
        raise ParallelWorkerError(
            f"Worker pool failed during {phase} phase: "
            f"{type(exc).__name__}: {exc}",
            phase=phase,
            n_tasks=len(inputs),
        ) from exc

    return list(results)
