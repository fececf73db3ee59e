"""Tests for bootstrap aggregation and replicate generation."""

from dataclasses import replace

import numpy as np
import pytest

from pyrepeatability.mixed import OBSERVATION_LEVEL
from pyrepeatability.repeatability._bootstrap import (
    bootstrap_replicates, bootstrap_se, empirical_ci, summarize_bootstrap,
)
from pyrepeatability.repeatability._common import ReplicateSamples
from pyrepeatability.repeatability._point import estimate_point
from pyrepeatability.repeatability.design import RepeatabilityDesign


class TestEmpiricalCI:

    def test_quantiles_linear_interpolation(self):
        samples = np.arange(1.0, 11.0).reshape(-1, 1)
        ci = empirical_ci(samples, 0.9)
        # type-7 quantiles of 1..10 at 0.05 and 0.95
        np.testing.assert_allclose(ci, [[1.45, 9.55]])

    def test_ignores_nan(self):
        samples = np.array([[0.1], [np.nan], [0.3], [0.2], [np.nan]])
        ci = empirical_ci(samples, 0.95)
        expected = np.quantile([0.1, 0.2, 0.3], [0.025, 0.975])
        np.testing.assert_allclose(ci[0], expected)

    def test_all_nan_column(self):
        samples = np.array([[0.1, np.nan], [0.2, np.nan]])
        ci = empirical_ci(samples, 0.95)
        assert np.all(np.isfinite(ci[0]))
        assert np.all(np.isnan(ci[1]))

    def test_empty(self):
        ci = empirical_ci(np.empty((0, 2)), 0.95)
        assert ci.shape == (2, 2)
        assert np.all(np.isnan(ci))

    def test_lower_not_above_upper(self, rng):
        samples = rng.uniform(size=(50, 3))
        ci = empirical_ci(samples, 0.8)
        assert np.all(ci[:, 0] <= ci[:, 1])


class TestBootstrapSE:

    def test_sample_sd(self):
        samples = np.array([[1.0], [2.0], [3.0], [4.0]])
        assert bootstrap_se(samples)[0] == pytest.approx(np.std([1, 2, 3, 4], ddof=1))

    def test_ignores_nan(self):
        samples = np.array([[1.0], [np.nan], [3.0]])
        assert bootstrap_se(samples)[0] == pytest.approx(np.sqrt(2.0))

    def test_too_few_values(self):
        samples = np.array([[1.0, np.nan], [np.nan, np.nan]])
        assert np.all(np.isnan(bootstrap_se(samples)))


class TestSummarizeBootstrap:

    def test_keys_and_shapes(self, rng):
        boot = ReplicateSamples(
            link=rng.uniform(size=(20, 2)), original=rng.uniform(size=(20, 2)),
        )
        summary = summarize_bootstrap(boot, 0.95)
        assert summary['se_link'].shape == (2,)
        assert summary['ci_org'].shape == (2, 2)


class TestBootstrapReplicates:

    def _design(self, data, fitter, nboot):
        return RepeatabilityDesign.for_binary(
            'y ~ (1 | id)', 'id', data, nboot=nboot, npermut=1, fitter=fitter,
        )

    def test_one_row_per_replicate(self, stub_data, make_stub_fitter, rng):
        fitter = make_stub_fitter({'id': 1.0, OBSERVATION_LEVEL: 0.2})
        design = self._design(stub_data, fitter, 6)
        point = estimate_point(
            design.spec, design.data, design.groups, design.scale, fitter=fitter,
        )
        boot = bootstrap_replicates(point, design, rng)
        assert boot.link.shape == (6, 1)
        np.testing.assert_allclose(boot.link, point.estimate.link[0])
        assert len(fitter.specs) == 7

    def test_zero_replicates(self, stub_data, make_stub_fitter, rng):
        fitter = make_stub_fitter({'id': 1.0, OBSERVATION_LEVEL: 0.2})
        design = self._design(stub_data, fitter, 0)
        point = estimate_point(
            design.spec, design.data, design.groups, design.scale, fitter=fitter,
        )
        boot = bootstrap_replicates(point, design, rng)
        assert boot.R == 0
        assert len(fitter.specs) == 1

    def test_failed_refits_are_missing(self, stub_data, make_stub_fitter, rng):
        fitter = make_stub_fitter(
            {'id': 1.0, OBSERVATION_LEVEL: 0.2}, fail_replicates=True,
        )
        design = self._design(stub_data, fitter, 5)
        point = estimate_point(
            design.spec, design.data, design.groups, design.scale, fitter=fitter,
        )
        boot = bootstrap_replicates(point, design, rng)
        assert boot.link.shape == (5, 1)
        assert np.all(np.isnan(boot.link))
        assert np.all(np.isnan(bootstrap_se(boot.link)))

    def test_refits_use_replicate_fitter(self, stub_data, make_stub_fitter,
                                         failing_fitter, rng):
        """The observed fit and the refits can use different fitters."""
        fitter = make_stub_fitter({'id': 1.0, OBSERVATION_LEVEL: 0.2})
        design = replace(
            self._design(stub_data, fitter, 4), replicate_fitter=failing_fitter,
        )
        point = estimate_point(
            design.spec, design.data, design.groups, design.scale,
            fitter=design.fitter,
        )
        boot = bootstrap_replicates(point, design, rng)
        assert np.all(np.isnan(boot.link))
        assert len(fitter.specs) == 1
