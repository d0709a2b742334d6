"""
Simple Estimator - Lookup-and-Adapt Estimation over Categorical Keys

Returns a numeric estimate for a 3-part categorical key and adapts it
toward observed values with an exponential moving average.
"""

__version__ = "0.1.0"

from .constants import (
    DEFAULT_VALUE,
    DEFAULT_LEARNING_RATE,
    MIN_RECOMMENDED_LEARNING_RATE,
    MAX_RECOMMENDED_LEARNING_RATE,
)
from .estimator import (
    EstimatorConfig,
    EstimatorError,
    InvalidIndexError,
    OutOfBoundsError,
    SimpleEstimator,
)
from .serialization import (
    weights_to_json,
    weights_from_json,
    estimator_to_json,
    estimator_from_json,
    weights_to_array,
    weights_lengths,
    weights_from_array,
)

__all__ = [
    "DEFAULT_VALUE",
    "DEFAULT_LEARNING_RATE",
    "MIN_RECOMMENDED_LEARNING_RATE",
    "MAX_RECOMMENDED_LEARNING_RATE",
    "EstimatorConfig",
    "EstimatorError",
    "InvalidIndexError",
    "OutOfBoundsError",
    "SimpleEstimator",
    "weights_to_json",
    "weights_from_json",
    "estimator_to_json",
    "estimator_from_json",
    "weights_to_array",
    "weights_lengths",
    "weights_from_array",
]
