# simple_estimator/constants.py
"""
Simple Estimator Constants

Defaults used when an estimator is built without explicit parameters:

- DEFAULT_VALUE: initial weight of every newly materialized cell
- DEFAULT_LEARNING_RATE: EMA blend factor
- MIN/MAX_RECOMMENDED_LEARNING_RATE: advisory range, not enforced
"""


# =============================================================================
# Cell initialization
# =============================================================================

DEFAULT_VALUE = 1.0


# =============================================================================
# EMA update
# =============================================================================

DEFAULT_LEARNING_RATE = 0.1

# Values outside this range are accepted but logged as a warning
MIN_RECOMMENDED_LEARNING_RATE = 0.01
MAX_RECOMMENDED_LEARNING_RATE = 0.49

assert 0 < MIN_RECOMMENDED_LEARNING_RATE <= DEFAULT_LEARNING_RATE <= MAX_RECOMMENDED_LEARNING_RATE < 1, \
    "Recommended learning rates must satisfy 0 < min ≤ default ≤ max < 1"
