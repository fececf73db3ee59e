"""
Repeatability (intraclass correlation) of binary responses.

Point estimates come from a binomial GLMM with an observation-level
random intercept; a parametric bootstrap gives standard errors and
intervals, a residual permutation test and likelihood-ratio tests give
p-values.

Public API:
    rpt_binary()          — full analysis, matches rptR::rptBinary
    RepeatabilitySolution — result accessors and summary
    RepeatabilityDesign   — validated analysis inputs
"""

from pyrepeatability.repeatability.design import RepeatabilityDesign
from pyrepeatability.repeatability.solution import RepeatabilitySolution
from pyrepeatability.repeatability.solvers import rpt_binary

__all__ = [
    "rpt_binary",
    "RepeatabilitySolution",
    "RepeatabilityDesign",
]
