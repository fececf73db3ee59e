"""Tests for random intercept specification and Z matrix construction."""

import numpy as np
import pytest

from pyrepeatability.mixed._random_effects import (
    build_lambda,
    build_z_matrix,
    parse_random_intercepts,
    theta_lower_bounds,
    theta_start,
)


class TestParseRandomIntercepts:

    def test_single_factor(self):
        groups = {'subject': np.array([0, 0, 1, 1, 2, 2])}
        specs = parse_random_intercepts(groups, 6)
        assert len(specs) == 1
        assert specs[0].group_name == 'subject'
        assert specs[0].n_groups == 3

    def test_string_labels_mapped_to_ids(self):
        groups = {'nest': np.array(['b', 'a', 'b', 'c'])}
        spec = parse_random_intercepts(groups, 4)[0]
        np.testing.assert_array_equal(spec.levels, ['a', 'b', 'c'])
        np.testing.assert_array_equal(spec.group_ids, [1, 0, 1, 2])

    def test_crossed_factors_keep_order(self):
        groups = {
            'subject': np.array([0, 0, 1, 1, 2, 2]),
            'item': np.array([0, 1, 0, 1, 0, 1]),
        }
        specs = parse_random_intercepts(groups, 6)
        assert [s.group_name for s in specs] == ['subject', 'item']

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            parse_random_intercepts({'g': np.array([0, 1])}, 3)


class TestBuildZ:

    def test_indicator_blocks(self):
        groups = {
            'g': np.array([0, 0, 1]),
            'h': np.array([0, 1, 1]),
        }
        Z = build_z_matrix(parse_random_intercepts(groups, 3))
        expected = np.array([
            [1, 0, 1, 0],
            [1, 0, 0, 1],
            [0, 1, 0, 1],
        ], dtype=float)
        np.testing.assert_array_equal(Z, expected)

    def test_rows_sum_to_number_of_factors(self):
        groups = {'g': np.arange(5) % 2, 'obs': np.arange(5)}
        Z = build_z_matrix(parse_random_intercepts(groups, 5))
        np.testing.assert_array_equal(Z.sum(axis=1), 2.0)

    def test_empty_specs(self):
        with pytest.raises(ValueError):
            build_z_matrix([])


class TestLambda:

    def test_theta_repeated_per_level(self):
        groups = {'g': np.array([0, 1, 2]), 'h': np.array([0, 0, 1])}
        specs = parse_random_intercepts(groups, 3)
        lam = build_lambda(np.array([2.0, 0.5]), specs)
        np.testing.assert_array_equal(lam, [2.0, 2.0, 2.0, 0.5, 0.5])

    def test_bounds_and_start(self):
        specs = parse_random_intercepts({'g': np.array([0, 1])}, 2)
        np.testing.assert_array_equal(theta_lower_bounds(specs), [0.0])
        np.testing.assert_array_equal(theta_start(specs), [1.0])
