"""
Model specification for random-intercept binomial GLMMs.

A ModelSpec names the response column, the fixed-effect covariates (an
intercept is always included) and the grouping factors that each get a
random intercept. It can be parsed from a subset of lme4 formula syntax:

    y ~ x1 + x2 + (1 | individual) + (1 | year)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from pyrepeatability.core.exceptions import ValidationError

# Reserved name of the per-observation random intercept that models
# overdispersion.
OBSERVATION_LEVEL = 'obsid_'

_NAME = r'[A-Za-z_.][A-Za-z0-9_.]*'
_RANDOM_TERM = re.compile(r'\(\s*([^()|]*?)\s*\|\s*([^()|]*?)\s*\)')
_IDENTIFIER = re.compile(rf'^{_NAME}$')


@dataclass(frozen=True)
class ModelSpec:
    """Specification of a binomial GLMM with random intercepts.

    Attributes:
        response: Name of the 0/1 response column.
        fixed: Covariate column names. The intercept is implicit.
        random: Grouping-factor names, one random intercept each, in
            formula order.
    """
    response: str
    fixed: tuple[str, ...] = ()
    random: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'fixed', tuple(self.fixed))
        object.__setattr__(self, 'random', tuple(self.random))
        for name in (self.response, *self.fixed, *self.random):
            if not isinstance(name, str) or not name:
                raise ValidationError(
                    f"ModelSpec: column names must be non-empty strings, "
                    f"got {name!r}"
                )
        if len(set(self.random)) != len(self.random):
            raise ValidationError(
                f"ModelSpec: duplicate random terms in {list(self.random)}"
            )

    @classmethod
    def from_formula(cls, formula: str) -> ModelSpec:
        """Parse an lme4-style formula with random intercepts only.

        Raises:
            ValidationError: On syntax this model cannot represent.
        """
        if formula.count('~') != 1:
            raise ValidationError(
                f"formula: expected exactly one '~', got {formula!r}"
            )
        lhs, rhs = (part.strip() for part in formula.split('~'))
        if not _IDENTIFIER.match(lhs):
            raise ValidationError(
                f"formula: response must be a single column name, got {lhs!r}"
            )

        random = []
        for term, group in _RANDOM_TERM.findall(rhs):
            if term != '1':
                raise ValidationError(
                    f"formula: only random intercepts (1 | group) are "
                    f"supported, got ({term} | {group})"
                )
            if not _IDENTIFIER.match(group):
                raise ValidationError(
                    f"formula: invalid grouping factor {group!r}"
                )
            random.append(group)

        remainder = _RANDOM_TERM.sub('', rhs)
        if '(' in remainder or '|' in remainder:
            raise ValidationError(
                f"formula: cannot parse random terms in {rhs!r}"
            )

        fixed = []
        for term in (t.strip() for t in remainder.split('+')):
            if term in ('', '1'):
                continue
            if term in ('0', '-1') or term.startswith('-'):
                raise ValidationError(
                    "formula: the intercept cannot be removed; "
                    "repeatability on the original scale needs it"
                )
            if not _IDENTIFIER.match(term):
                raise ValidationError(
                    f"formula: unsupported fixed-effect term {term!r}"
                )
            fixed.append(term)

        return cls(response=lhs, fixed=tuple(fixed), random=tuple(random))

    @property
    def has_observation_level(self) -> bool:
        return OBSERVATION_LEVEL in self.random

    def with_observation_level(self) -> ModelSpec:
        """Return a spec with exactly one observation-level term appended."""
        if self.has_observation_level:
            return self
        return replace(self, random=self.random + (OBSERVATION_LEVEL,))

    def drop_random(self, group: str) -> ModelSpec:
        """Return a spec without the random intercept for one group."""
        if group not in self.random:
            raise ValidationError(
                f"drop_random: {group!r} is not a random term of {self}"
            )
        return replace(
            self, random=tuple(g for g in self.random if g != group)
        )

    def __str__(self) -> str:
        terms = ['1', *self.fixed, *(f'(1 | {g})' for g in self.random)]
        return f"{self.response} ~ {' + '.join(terms)}"
