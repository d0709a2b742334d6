"""
Simple Estimator Module

Lookup-and-adapt estimator over a sparse three-level weight table.

The table is addressed by an index triple (i, j, k), most significant
category first. For categories KEYWORD, COUNTRY, LANGUAGE the first level
is KEYWORD, the second COUNTRY and the third LANGUAGE. The caller keeps
the category → index mapping stable.

Growth is lazy and ragged:

    table[i]        created empty when i is first seen
    table[i][j]     created empty when (i, j) is first seen
    table[i][j][k]  filled with the default value up to k

Updates blend toward an observed value with an exponential moving average:

    new = (1 - α) · old + α · observed
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Sequence, Tuple
from dataclasses import dataclass
import logging
import numbers

from .constants import (
    DEFAULT_VALUE,
    DEFAULT_LEARNING_RATE,
    MIN_RECOMMENDED_LEARNING_RATE,
    MAX_RECOMMENDED_LEARNING_RATE,
)


logger = logging.getLogger(__name__)

Index = Tuple[int, int, int]
Weights = List[List[List[float]]]


# =============================================================================
# SECTION 1: Errors
# =============================================================================

class EstimatorError(Exception):
    """Base class for estimator errors."""


class InvalidIndexError(EstimatorError, ValueError):
    """Index is not a triple of non-negative integers."""


class OutOfBoundsError(EstimatorError, IndexError):
    """Cell has not been materialized yet."""


def _check_index(index: Sequence[int]) -> Index:
    try:
        size = len(index)
    except TypeError:
        raise InvalidIndexError(f"Index must be a sequence of 3 integers, got {index!r}") from None
    if size != 3:
        raise InvalidIndexError(f"Index must have 3 components, got {size}")
    for position in index:
        if isinstance(position, bool) or not isinstance(position, numbers.Integral):
            raise InvalidIndexError(f"Index components must be integers, got {index!r}")
        if position < 0:
            raise InvalidIndexError(f"Index components must be non-negative, got {index!r}")
    i, j, k = index
    return int(i), int(j), int(k)


def _check_real(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"{what} must be a real number, got {value!r}")
    return float(value)


def _check_level(seq, what: str):
    if isinstance(seq, (str, bytes)):
        raise ValueError(f"{what} must be a sequence of numbers, got {seq!r}")
    try:
        return iter(seq)
    except TypeError:
        raise ValueError(f"{what} must be a sequence, got {seq!r}") from None


def copy_weights(weights: Iterable[Iterable[Iterable[float]]]) -> Weights:
    """
    Element-wise deep copy of a three-level nested structure.

    Raises:
        ValueError: a level is not a sequence (strings rejected) or a
            leaf is not a real number (bools rejected)
    """
    return [
        [
            [_check_real(value, f"Weight at [{i}][{j}][{k}]")
             for k, value in enumerate(_check_level(row, f"Row [{i}][{j}]"))]
            for j, row in enumerate(_check_level(plane, f"Plane [{i}]"))
        ]
        for i, plane in enumerate(_check_level(weights, "Weights"))
    ]


# =============================================================================
# SECTION 2: Configuration
# =============================================================================

@dataclass(frozen=True)
class EstimatorConfig:
    """
    Construction parameters of a SimpleEstimator.

    Both values must be real numbers. The learning rate range is not
    enforced; values outside the recommended range are logged and accepted.
    """
    default_value: float = DEFAULT_VALUE
    learning_rate: float = DEFAULT_LEARNING_RATE

    def __post_init__(self):
        object.__setattr__(self, 'default_value', _check_real(self.default_value, "default_value"))
        object.__setattr__(self, 'learning_rate', _check_real(self.learning_rate, "learning_rate"))
        if not (MIN_RECOMMENDED_LEARNING_RATE <= self.learning_rate <= MAX_RECOMMENDED_LEARNING_RATE):
            logger.warning(
                "Learning rate %s is outside the recommended range [%s, %s]",
                self.learning_rate, MIN_RECOMMENDED_LEARNING_RATE, MAX_RECOMMENDED_LEARNING_RATE,
            )


# =============================================================================
# SECTION 3: Estimator
# =============================================================================

class SimpleEstimator:
    """
    Sparse 3D weight table with EMA updates.

    Not thread-safe: share an instance across threads only behind a single
    lock held around every call.
    """

    def __init__(self, default_value: float = DEFAULT_VALUE,
                 learning_rate: float = DEFAULT_LEARNING_RATE):
        self._config = EstimatorConfig(default_value=default_value,
                                       learning_rate=learning_rate)
        self._state: Weights = []

    @classmethod
    def from_config(cls, config: EstimatorConfig) -> 'SimpleEstimator':
        return cls(default_value=config.default_value,
                   learning_rate=config.learning_rate)

    @property
    def config(self) -> EstimatorConfig:
        return self._config

    @property
    def learning_rate(self) -> float:
        """EMA blend factor, fixed at construction."""
        return self._config.learning_rate

    @property
    def default_value(self) -> float:
        """Initial weight of newly materialized cells."""
        return self._config.default_value

    def estimate(self, index: Sequence[int]) -> float:
        """
        Return the weight at index, materializing it if needed.

        Missing levels are grown by appending until each one covers the
        requested position. Existing values are never overwritten.

        Args:
            index: (i, j, k) of non-negative integers

        Returns:
            Current weight at (i, j, k)

        Raises:
            InvalidIndexError: index is not a triple of non-negative integers
        """
        i, j, k = _check_index(index)

        grown = False
        while len(self._state) <= i:
            self._state.append([])
            grown = True

        plane = self._state[i]
        while len(plane) <= j:
            plane.append([])
            grown = True

        row = plane[j]
        while len(row) <= k:
            row.append(self._config.default_value)
            grown = True

        if grown:
            logger.debug("Grew weight table to cover %s", (i, j, k))
        return row[k]

    def update_with_estimation(self, index: Sequence[int], estimation: float) -> None:
        """
        Blend the weight at index toward an observed value.

        The cell must already exist; call estimate() on the index first.

        Raises:
            InvalidIndexError: index is not a triple of non-negative integers
            OutOfBoundsError: the cell has not been materialized
            ValueError: estimation is not a real number
        """
        i, j, k = _check_index(index)
        observed = _check_real(estimation, "Estimation")
        if not self.contains((i, j, k)):
            raise OutOfBoundsError(f"Cell {(i, j, k)} has not been estimated yet")

        row = self._state[i][j]
        current = row[k]
        rate = self._config.learning_rate
        row[k] = (1.0 - rate) * current + rate * observed
        logger.debug("Updated %s: %s -> %s (observed %s)", (i, j, k), current, row[k], estimation)

    def contains(self, index: Sequence[int]) -> bool:
        """Check whether the cell at index exists, without growing the table."""
        i, j, k = _check_index(index)
        return (i < len(self._state)
                and j < len(self._state[i])
                and k < len(self._state[i][j]))

    def __contains__(self, index: Sequence[int]) -> bool:
        return self.contains(index)

    def __len__(self) -> int:
        return len(self._state)

    def cell_count(self) -> int:
        """Number of materialized cells."""
        return sum(len(row) for plane in self._state for row in plane)

    def get_weights(self) -> Weights:
        """Deep copy of the weight table, ragged as stored."""
        return copy_weights(self._state)

    def set_weights(self, weights: Iterable[Iterable[Iterable[float]]]) -> None:
        """
        Replace the weight table with a deep copy of weights.

        Any ragged shape is accepted. The copy completes before the
        current table is swapped out.
        """
        state = copy_weights(weights)
        self._state = state
        logger.debug("Replaced weight table: %d planes, %d cells", len(state), self.cell_count())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'default_value': self._config.default_value,
            'learning_rate': self._config.learning_rate,
            'weights': self.get_weights(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SimpleEstimator':
        estimator = cls(
            default_value=d.get('default_value', DEFAULT_VALUE),
            learning_rate=d.get('learning_rate', DEFAULT_LEARNING_RATE),
        )
        estimator.set_weights(d.get('weights', []))
        return estimator

    def __repr__(self) -> str:
        return (f"SimpleEstimator(default_value={self.default_value}, "
                f"learning_rate={self.learning_rate}, cells={self.cell_count()})")


__all__ = [
    'Index',
    'Weights',
    'EstimatorError',
    'InvalidIndexError',
    'OutOfBoundsError',
    'copy_weights',
    'EstimatorConfig',
    'SimpleEstimator',
]
