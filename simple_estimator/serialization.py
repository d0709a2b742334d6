"""
Weight Table Serialization

In-memory encoders for the ragged weight table returned by
SimpleEstimator.get_weights() and accepted by set_weights():

- JSON text, for transport between processes
- Dense numpy arrays, padded with a fill value, for vectorized analysis
"""

from __future__ import annotations
from typing import Iterable, Optional
import json
import logging
import math

import numpy as np

from .estimator import SimpleEstimator, Weights, copy_weights


logger = logging.getLogger(__name__)


# =============================================================================
# SECTION 1: JSON
# =============================================================================

def _decode_json(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid weights JSON: {e}") from e


def _as_weights(data) -> Weights:
    if not isinstance(data, list):
        raise ValueError(f"Expected nested list of weights, got {type(data).__name__}")
    return copy_weights(data)


def weights_to_json(weights: Iterable[Iterable[Iterable[float]]]) -> str:
    """Encode a weight table as a JSON array of arrays of arrays."""
    return json.dumps(copy_weights(weights))


def weights_from_json(text: str) -> Weights:
    """Decode a weight table produced by weights_to_json()."""
    return _as_weights(_decode_json(text))


def estimator_to_json(estimator: SimpleEstimator) -> str:
    """Encode parameters and weights of an estimator."""
    return json.dumps(estimator.to_dict())


def estimator_from_json(text: str) -> SimpleEstimator:
    """Rebuild an estimator from estimator_to_json() output."""
    d = _decode_json(text)
    if not isinstance(d, dict):
        raise ValueError(f"Expected JSON object, got {type(d).__name__}")
    try:
        return SimpleEstimator.from_dict(dict(d, weights=_as_weights(d.get('weights', []))))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid estimator JSON: {e}") from e


# =============================================================================
# SECTION 2: Dense arrays
# =============================================================================

def weights_to_array(weights: Iterable[Iterable[Iterable[float]]],
                     fill_value: float = math.nan) -> np.ndarray:
    """
    Pad a ragged weight table into a dense (I, J, K) float64 array.

    J and K are the longest second- and third-level lengths. Cells that
    do not exist in the table hold fill_value. Pair with weights_lengths()
    to keep the exact shape.
    """
    planes = copy_weights(weights)
    n_i = len(planes)
    n_j = max((len(plane) for plane in planes), default=0)
    n_k = max((len(row) for plane in planes for row in plane), default=0)

    arr = np.full((n_i, n_j, n_k), fill_value, dtype=np.float64)
    for i, plane in enumerate(planes):
        for j, row in enumerate(plane):
            arr[i, j, :len(row)] = row
    return arr


def weights_lengths(weights: Iterable[Iterable[Iterable[float]]]) -> np.ndarray:
    """
    Row lengths of a ragged weight table as an (I, J) int64 array.

    -1 marks a row that does not exist in its plane.
    """
    planes = [[len(row) for row in plane] for plane in copy_weights(weights)]
    n_j = max((len(plane) for plane in planes), default=0)

    lengths = np.full((len(planes), n_j), -1, dtype=np.int64)
    for i, plane in enumerate(planes):
        lengths[i, :len(plane)] = plane
    return lengths


def _lengths_from_fill(arr: np.ndarray, fill_value: float) -> np.ndarray:
    if math.isnan(fill_value):
        present = ~np.isnan(arr)
    else:
        present = arr != fill_value

    lengths = np.zeros(arr.shape[:2], dtype=np.int64)
    for i in range(arr.shape[0]):
        for j in range(arr.shape[1]):
            filled = np.flatnonzero(present[i, j])
            lengths[i, j] = int(filled[-1]) + 1 if filled.size else 0
    return lengths


def weights_from_array(arr: np.ndarray, fill_value: float = math.nan,
                       lengths: Optional[np.ndarray] = None) -> Weights:
    """
    Convert a padded array back into a ragged weight table.

    With lengths from weights_lengths(), the table is rebuilt exactly,
    including cells whose weight equals fill_value.

    Without lengths, the shape is inferred: trailing fill_value cells of
    each row are dropped, then trailing empty rows and planes. A stored
    weight equal to fill_value (e.g. NaN) at the end of a row is lost.

    Raises:
        ValueError: arr is not 3D, or lengths does not match arr
    """
    arr = np.asarray(arr, dtype=np.float64)
    if arr.ndim != 3:
        raise ValueError(f"Expected 3D array, got {arr.ndim}D")

    trim = lengths is None
    if trim:
        lengths = _lengths_from_fill(arr, fill_value)
    else:
        lengths = np.asarray(lengths)
        if lengths.shape != arr.shape[:2]:
            raise ValueError(f"Shape mismatch: lengths {lengths.shape} vs array {arr.shape[:2]}")
        if (lengths > arr.shape[2]).any():
            raise ValueError(f"Row lengths exceed array depth {arr.shape[2]}")

    weights: Weights = []
    for i in range(arr.shape[0]):
        plane = []
        for j in range(arr.shape[1]):
            length = int(lengths[i, j])
            if length < 0:
                if (lengths[i, j:] >= 0).any():
                    raise ValueError(f"Missing row [{i}][{j}] is followed by existing rows")
                break
            plane.append([float(v) for v in arr[i, j, :length]])
        if trim:
            while plane and not plane[-1]:
                plane.pop()
        weights.append(plane)
    if trim:
        while weights and not weights[-1]:
            weights.pop()

    logger.debug("Converted %s array to %d planes", arr.shape, len(weights))
    return weights


__all__ = [
    'weights_to_json',
    'weights_from_json',
    'estimator_to_json',
    'estimator_from_json',
    'weights_to_array',
    'weights_lengths',
    'weights_from_array',
]
