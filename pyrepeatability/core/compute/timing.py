"""
Wall-clock timing of solver phases.

A Timer measures a whole run and accumulates named sections inside it,
so a long resampling run can report where its time went. Each finished
section is also logged at DEBUG level.
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class Timer:
    """
    Accumulating section timer.

    Usage:
        with Timer() as timer:
            with timer.section('point_estimate'):
                point = estimate_point(...)
            with timer.section('bootstrap'):
                boot = bootstrap_replicates(...)

        timer.result()
        # {'total_seconds': 4.2, 'point_estimate': 0.2, 'bootstrap': 3.9}

    start() and stop() are available for code paths that cannot wrap the
    run in a single block.
    """

    def __init__(self) -> None:
        self._sections: dict[str, float] = {}
        self._began: float | None = None
        self._total: float | None = None

    def __enter__(self) -> 'Timer':
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def start(self) -> None:
        self._began = time.perf_counter()
        self._total = None

    def stop(self) -> None:
        if self._began is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._began

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time a named block; repeated names accumulate."""
        began = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - began
            self._sections[name] = self._sections.get(name, 0.0) + elapsed
            logger.debug("%s finished in %.3fs", name, elapsed)

    def result(self) -> dict[str, float]:
        """'total_seconds' plus every section, in order of first use.

        Raises:
            RuntimeError: If the timer has not been stopped.
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}
