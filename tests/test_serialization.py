"""
Tests for weight table serialization
"""

import json
import math

import pytest
import numpy as np

from simple_estimator import (
    SimpleEstimator,
    weights_to_json,
    weights_from_json,
    estimator_to_json,
    estimator_from_json,
    weights_to_array,
    weights_lengths,
    weights_from_array,
)


def trained_estimator():
    estimator = SimpleEstimator(10.0, 0.4)
    estimator.estimate((2, 2, 2))
    for _ in range(4):
        estimator.update_with_estimation((2, 2, 2), 13.2)
    estimator.estimate((0, 3, 0))
    return estimator


class TestJson:
    def test_weights_json(self):
        estimator = trained_estimator()
        text = weights_to_json(estimator.get_weights())

        assert isinstance(json.loads(text), list)
        weights = weights_from_json(text)
        assert weights == estimator.get_weights()
        assert weights[2][2][2] == pytest.approx(12.78528)

    def test_estimator_json(self):
        estimator = trained_estimator()
        restored = estimator_from_json(estimator_to_json(estimator))

        assert restored.learning_rate == 0.4
        assert restored.default_value == 10.0
        assert restored.estimate((2, 2, 2)) == pytest.approx(12.78528)
        assert restored.estimate((9, 9, 9)) == 10.0

    def test_invalid_json(self):
        with pytest.raises(ValueError):
            weights_from_json("[[[1.0,")

    def test_wrong_nesting(self):
        with pytest.raises(ValueError):
            weights_from_json("[[1.0, 2.0]]")
        with pytest.raises(ValueError):
            weights_from_json('{"weights": []}')
        with pytest.raises(ValueError):
            weights_from_json('[["12"]]')
        with pytest.raises(ValueError):
            weights_from_json("[[[1.0, true]]]")
        with pytest.raises(ValueError):
            weights_from_json('[[["3.5"]]]')

    def test_estimator_json_requires_object(self):
        with pytest.raises(ValueError):
            estimator_from_json("[]")

    @pytest.mark.parametrize("text", [
        '{"learning_rate": null}',
        '{"learning_rate": [0.1]}',
        '{"default_value": {"v": 1}}',
        '{"default_value": "1.0"}',
        '{"weights": [["12"]]}',
    ])
    def test_estimator_json_rejects_bad_fields(self, text):
        with pytest.raises(ValueError, match="Invalid estimator JSON"):
            estimator_from_json(text)


class TestArray:
    def test_padded_shape(self):
        weights = [[], [[1.0], [2.0, 3.0, 4.0]]]
        arr = weights_to_array(weights)

        assert arr.shape == (2, 2, 3)
        assert arr.dtype == np.float64
        assert np.isnan(arr[0]).all()
        assert arr[1, 1].tolist() == [2.0, 3.0, 4.0]
        assert arr[1, 0, 0] == 1.0
        assert np.isnan(arr[1, 0, 1:]).all()

    def test_empty_table(self):
        arr = weights_to_array([])
        assert arr.shape == (0, 0, 0)
        assert weights_from_array(arr) == []

    def test_grown_table_survives_array(self):
        estimator = trained_estimator()
        weights = estimator.get_weights()
        assert weights_from_array(weights_to_array(weights)) == weights

    def test_custom_fill_value(self):
        weights = [[[1.0, 2.0]], [[3.0]]]
        arr = weights_to_array(weights, fill_value=-1.0)
        assert arr[1, 0, 1] == -1.0
        assert weights_from_array(arr, fill_value=-1.0) == weights

    def test_array_loads_into_estimator(self):
        arr = np.full((1, 2, 2), np.nan)
        arr[0, 1] = [5.0, 6.0]
        estimator = SimpleEstimator()
        estimator.set_weights(weights_from_array(arr))

        assert estimator.estimate((0, 1, 1)) == 6.0
        assert estimator.get_weights()[0][0] == []

    def test_lengths_mark_missing_rows(self):
        lengths = weights_lengths([[], [[1.0], [2.0, 3.0, 4.0]], [[]]])
        assert lengths.tolist() == [[-1, -1], [1, 3], [0, -1]]

    def test_lengths_keep_fill_valued_weights(self):
        weights = [[[1.0, math.nan]], [], [[], [math.nan]]]
        arr = weights_to_array(weights)
        restored = weights_from_array(arr, lengths=weights_lengths(weights))

        assert len(restored) == 3
        assert restored[0][0][0] == 1.0
        assert math.isnan(restored[0][0][1])
        assert restored[1] == []
        assert restored[2][0] == []
        assert math.isnan(restored[2][1][0])

    def test_nan_weight_survives_with_lengths(self):
        estimator = SimpleEstimator(1.0, 0.5)
        estimator.estimate((0, 0, 1))
        estimator.update_with_estimation((0, 0, 1), math.nan)
        weights = estimator.get_weights()

        restored = SimpleEstimator(1.0, 0.5)
        restored.set_weights(weights_from_array(weights_to_array(weights),
                                                lengths=weights_lengths(weights)))
        assert (0, 0, 1) in restored
        restored.update_with_estimation((0, 0, 1), 2.0)

    def test_without_lengths_trailing_fill_weight_is_dropped(self):
        weights = [[[1.0, math.nan]]]
        assert weights_from_array(weights_to_array(weights)) == [[[1.0]]]

    def test_rejects_mismatched_lengths(self):
        arr = np.zeros((1, 2, 2))
        with pytest.raises(ValueError):
            weights_from_array(arr, lengths=np.array([[1, 1, 1]]))
        with pytest.raises(ValueError):
            weights_from_array(arr, lengths=np.array([[3, 1]]))
        with pytest.raises(ValueError):
            weights_from_array(arr, lengths=np.array([[-1, 1]]))

    def test_rejects_wrong_rank(self):
        with pytest.raises(ValueError):
            weights_from_array(np.zeros((2, 2)))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
