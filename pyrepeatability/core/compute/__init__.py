"""
Shared compute infrastructure for pyrepeatability.

Submodules:
    timing: Execution timing utilities
    parallel: Replicate dispatch (sequential or process pool)
"""

from pyrepeatability.core.compute.timing import Timer
from pyrepeatability.core.compute.parallel import (
    default_worker_count,
    map_replicates,
)

__all__ = [
    "Timer",
    "default_worker_count",
    "map_replicates",
]
