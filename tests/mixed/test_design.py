"""Tests for MixedDesign construction from arrays and from a ModelSpec."""

import numpy as np
import pytest

from pyrepeatability.core.exceptions import ValidationError
from pyrepeatability.mixed import ModelSpec, OBSERVATION_LEVEL
from pyrepeatability.mixed.design import MixedDesign


class TestValidate:

    def test_basic(self):
        y = np.array([0, 1, 1, 0])
        design = MixedDesign.validate(y, np.ones(4), {'g': [0, 0, 1, 1]})
        assert design.n == 4
        assert design.p == 1
        assert design.X.shape == (4, 1)
        assert design.coef_names == ('(Intercept)',)

    def test_bool_response(self):
        y = np.array([True, False, True])
        design = MixedDesign.validate(y, np.ones(3), {'g': [0, 1, 1]})
        np.testing.assert_array_equal(design.y, [1.0, 0.0, 1.0])

    def test_too_few_observations(self):
        with pytest.raises(ValidationError, match="at least 3"):
            MixedDesign.validate([0, 1], np.ones(2), {'g': [0, 1]})

    def test_row_mismatch(self):
        with pytest.raises(ValidationError, match="rows"):
            MixedDesign.validate([0, 1, 1], np.ones(4), {'g': [0, 1, 1]})

    def test_group_length_mismatch(self):
        with pytest.raises(ValidationError, match="elements"):
            MixedDesign.validate([0, 1, 1], np.ones(3), {'g': [0, 1]})

    def test_nan_response(self):
        with pytest.raises(ValidationError, match="NaN"):
            MixedDesign.validate([0, np.nan, 1], np.ones(3), {'g': [0, 1, 1]})

    def test_coef_names_length(self):
        with pytest.raises(ValidationError, match="coef_names"):
            MixedDesign.validate(
                [0, 1, 1], np.ones(3), {'g': [0, 1, 1]}, ('a', 'b'),
            )


class TestFromSpec:

    def test_numeric_covariate(self):
        data = {'y': [0, 1, 1, 0], 'x': [0.1, 0.2, 0.3, 0.4], 'g': [0, 0, 1, 1]}
        design = MixedDesign.from_spec(ModelSpec('y', ('x',), ('g',)), data)
        assert design.coef_names == ('(Intercept)', 'x')
        np.testing.assert_array_equal(design.X[:, 1], data['x'])

    def test_categorical_covariate_treatment_coded(self):
        data = {
            'y': [0, 1, 1, 0, 1, 0],
            'sex': np.array(['F', 'M', 'F', 'M', 'F', 'M']),
            'g': ['a', 'a', 'b', 'b', 'c', 'c'],
        }
        design = MixedDesign.from_spec(ModelSpec('y', ('sex',), ('g',)), data)
        assert design.coef_names == ('(Intercept)', 'sexM')
        np.testing.assert_array_equal(design.X[:, 1], [0, 1, 0, 1, 0, 1])

    def test_observation_level_generated(self):
        data = {'y': [0, 1, 1, 0], 'g': [0, 0, 1, 1]}
        spec = ModelSpec('y', random=('g', OBSERVATION_LEVEL))
        design = MixedDesign.from_spec(spec, data)
        np.testing.assert_array_equal(design.groups[OBSERVATION_LEVEL], np.arange(4))

    def test_missing_column(self):
        with pytest.raises(ValidationError, match="not found"):
            MixedDesign.from_spec(ModelSpec('y', random=('g',)), {'y': [0, 1, 1]})
