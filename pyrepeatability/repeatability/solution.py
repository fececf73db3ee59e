"""
Solution wrapper for binary repeatability analyses.

RepeatabilitySolution wraps Result[RptParams] and provides per-group
accessors and an rptR-style summary.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyrepeatability.core.result import Result
from pyrepeatability.repeatability._common import LRTSummary, RptParams


def _fmt(value: float, digits: int = 3) -> str:
    return 'NA' if np.isnan(value) else f'{value:.{digits}f}'


class RepeatabilitySolution:
    """Result of rpt_binary().

    Per-group values are returned as dicts keyed by grouping factor;
    the raw replicate samples as arrays with one column per group.
    """

    def __init__(self, _result: Result[RptParams]):
        self._result = _result

    @property
    def params(self) -> RptParams:
        return self._result.params

    @property
    def groups(self) -> tuple[str, ...]:
        return self.params.groups

    # --- Point estimates ---

    @property
    def R(self) -> dict[str, dict[str, float]]:
        """Repeatability per group on both scales."""
        return {
            g: {'link': self.R_link[g], 'original': self.R_org[g]}
            for g in self.groups
        }

    @property
    def R_link(self) -> dict[str, float]:
        return dict(zip(self.groups, self.params.R.link.tolist()))

    @property
    def R_org(self) -> dict[str, float]:
        """Original-scale repeatability (NaN under probit)."""
        return dict(zip(self.groups, self.params.R.original.tolist()))

    # --- Uncertainty ---

    @property
    def se(self) -> dict[str, dict[str, float]]:
        """Bootstrap standard errors; NaN without bootstrap."""
        p = self.params
        return {
            g: {'link': float(p.se_link[i]), 'original': float(p.se_org[i])}
            for i, g in enumerate(self.groups)
        }

    @property
    def ci(self) -> dict[str, dict[str, tuple[float, float]]]:
        """Empirical bootstrap intervals (lower, upper); NaN without bootstrap."""
        p = self.params
        return {
            g: {
                'link': (float(p.ci_link[i, 0]), float(p.ci_link[i, 1])),
                'original': (float(p.ci_org[i, 0]), float(p.ci_org[i, 1])),
            }
            for i, g in enumerate(self.groups)
        }

    # --- Significance ---

    @property
    def p_values(self) -> dict[str, dict[str, float]]:
        """LRT and permutation p-values per group."""
        p = self.params
        return {
            g: {
                'lrt': float(p.p_lrt[i]),
                'permut_link': float(p.p_permut_link[i]),
                'permut_org': float(p.p_permut_org[i]),
            }
            for i, g in enumerate(self.groups)
        }

    @property
    def lrt(self) -> dict[str, LRTSummary]:
        return self.params.lrt

    # --- Replicate samples ---

    @property
    def R_boot_link(self) -> NDArray:
        """Bootstrap estimates, shape (nboot, k)."""
        return self.params.boot.link

    @property
    def R_boot_org(self) -> NDArray:
        return self.params.boot.original

    @property
    def R_permut_link(self) -> NDArray:
        """Permutation estimates, shape (npermut, k); row 0 is observed."""
        return self.params.permut.link

    @property
    def R_permut_org(self) -> NDArray:
        return self.params.permut.original

    # --- Data and model ---

    @property
    def ngroups(self) -> dict[str, int]:
        return self.params.ngroups

    @property
    def nobs(self) -> int:
        return self.params.nobs

    @property
    def overdisp(self) -> float:
        """Variance of the observation-level random intercept."""
        return self.params.overdisp

    @property
    def model(self):
        """The fitted full model."""
        return self.params.model

    @property
    def link(self) -> str:
        return self._result.info['link']

    @property
    def conf_level(self) -> float:
        return self._result.info['conf_level']

    @property
    def nboot(self) -> int:
        """Bootstrap replicates actually run."""
        return self._result.info['nboot']

    @property
    def npermut(self) -> int:
        return self._result.info['npermut']

    @property
    def info(self) -> dict:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Summary ---

    def summary(self) -> str:
        """rptR-style summary."""
        info = self._result.info
        lines = []
        lines.append("Repeatability estimation using the glmm method and "
                     f"{self.link} link")
        lines.append(f"Formula: {info['formula']}")
        lines.append(f"Data: {self.nobs} observations")
        lines.append("-" * 60)

        alpha = 1.0 - self.conf_level
        lower = f'{100 * alpha / 2:g}%'
        upper = f'{100 * (1 - alpha / 2):g}%'

        for g in self.groups:
            lines.append("")
            lines.append(f"{g} ({self.ngroups[g]} groups)")
            lines.append(
                f" {'':>10s} {'R':>8s} {'SE':>8s} {lower:>8s} {upper:>8s} "
                f"{'P_permut':>9s} {'LRT_P':>8s}"
            )
            pv = self.p_values[g]
            for scale, p_key in (('link', 'permut_link'), ('original', 'permut_org')):
                lo, hi = self.ci[g][scale]
                lines.append(
                    f" {scale.capitalize():>10s} {_fmt(self.R[g][scale]):>8s} "
                    f"{_fmt(self.se[g][scale]):>8s} {_fmt(lo):>8s} {_fmt(hi):>8s} "
                    f"{_fmt(pv[p_key]):>9s} {_fmt(pv['lrt']):>8s}"
                )

        lines.append("")
        lines.append(
            f"Bootstrapping: {self.nboot} replicates; "
            f"permutation: {self.npermut} replicates"
        )
        lines.append(f"Overdispersion (observation-level variance): "
                     f"{self.overdisp:.4f}")

        if self.warnings:
            lines.append("")
            for w in self.warnings:
                lines.append(f"WARNING: {w}")

        return '\n'.join(lines)

    def __repr__(self) -> str:
        r = ', '.join(f'{g}={_fmt(v)}' for g, v in self.R_link.items())
        return f"RepeatabilitySolution({self.link}, R_link: {r})"
