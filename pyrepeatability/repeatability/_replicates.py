"""
Replicate task records and their execution.

A replicate is the observed dataset with its response column replaced.
Tasks are plain picklable records so they can be shipped to a process
pool; the task function is module-level for the same reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from pyrepeatability.core.compute.parallel import map_replicates
from pyrepeatability.core.exceptions import FitError
from pyrepeatability.core.protocols import ModelFitter
from pyrepeatability.mixed._formula import ModelSpec
from pyrepeatability.repeatability._common import (
    RepeatabilityEstimate, ReplicateSamples,
)
from pyrepeatability.repeatability._point import estimate_point
from pyrepeatability.repeatability._transform import LinkScale

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplicateTask:
    """One resampled dataset to refit."""
    index: int
    spec: ModelSpec
    data: dict[str, NDArray]
    response: NDArray
    groups: tuple[str, ...]
    scale: LinkScale
    fitter: ModelFitter

    def dataset(self) -> dict[str, NDArray]:
        """Copy of the base data with the response column substituted."""
        data = dict(self.data)
        data[self.spec.response] = self.response
        return data


def run_replicate(task: ReplicateTask) -> RepeatabilityEstimate:
    """Refit one replicate; a failed fit yields a missing estimate."""
    try:
        point = estimate_point(
            task.spec, task.dataset(), task.groups, task.scale,
            fitter=task.fitter,
        )
    except FitError as exc:
        logger.debug("Replicate %d refit failed: %s", task.index, exc)
        return RepeatabilityEstimate.missing(task.groups)
    return point.estimate


def run_replicates(
    responses: Sequence[NDArray],
    *,
    spec: ModelSpec,
    data: dict[str, NDArray],
    groups: tuple[str, ...],
    scale: LinkScale,
    fitter: ModelFitter,
    parallel: bool,
    n_workers: int | None,
    phase: str,
    offset: int = 0,
) -> ReplicateSamples:
    """Refit every response vector and collect the estimates.

    Results land in (len(responses) + offset, k) arrays allocated up
    front; the first `offset` rows are left as NaN for the caller.
    """
    tasks = [
        ReplicateTask(
            index=i, spec=spec, data=data, response=response,
            groups=groups, scale=scale, fitter=fitter,
        )
        for i, response in enumerate(responses)
    ]
    results = map_replicates(
        run_replicate, tasks,
        parallel=parallel, n_workers=n_workers, phase=phase,
    )

    n_rows = len(tasks) + offset
    link = np.full((n_rows, len(groups)), np.nan)
    original = np.full((n_rows, len(groups)), np.nan)
    for i, est in enumerate(results):
        link[offset + i] = est.link
        original[offset + i] = est.original

    n_failed = int(np.isnan(link[offset:]).all(axis=1).sum()) if groups else 0
    if n_failed:
        logger.debug("%s: %d of %d replicate(s) failed", phase, n_failed, len(tasks))

    return ReplicateSamples(link=link, original=original)
