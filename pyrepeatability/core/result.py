"""
Result envelope shared by the mixed-model and repeatability solvers.

A solver returns its estimates as a frozen payload P wrapped in Result,
together with run metadata (method, link, replicate counts), per-phase
wall-clock timing and any non-fatal warnings it raised. Solution classes
read everything they expose from this envelope.

Notes:
    - timing is None when a Result is built by hand, as in unit tests
    - warnings mirror what went through warnings.warn, so they survive
      after a warnings filter has silenced them
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (estimates, samples, p-values)
        info: Structured metadata (method, convergence, replicate counts)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the code path that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=GLMMParams(...),
        ...     info={'method': 'Laplace', 'converged': True},
        ...     timing={'total_seconds': 0.2, 'optimization': 0.15},
        ...     backend_name='cpu_glmm'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
