"""Robust accumulator of 9x9 Hessians built from four-lane Jacobian batches."""

from __future__ import annotations

import numpy as np

from sparseodom.accumulators import _TieredSum

_DIM = 9
_LANES = 4
_ROWS, _COLS = np.triu_indices(_DIM)
_ENTRIES = _ROWS.shape[0]  # 45 upper-triangle entries


def _lane_vector(values, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float32).reshape(-1)
    if arr.shape[0] != _LANES:
        raise ValueError(f"{name} must have {_LANES} values, got {arr.shape[0]}")
    return arr


class Accumulator9:
    """Accumulates ``J @ J.T`` (optionally weighted) for 9-dimensional Jacobians."""

    def __init__(self) -> None:
        self._sum = _TieredSum((_ENTRIES, _LANES))
        self.initialize()

    def initialize(self) -> None:
        """Reset the Hessian, the vector part and all partial sums."""
        self.H = np.zeros((_DIM, _DIM), dtype=np.float32)
        self.b = np.zeros(_DIM, dtype=np.float32)
        self._sum.initialize()
        self.num = 0

    def finish(self) -> np.ndarray:
        """Fold all partial sums into the symmetric matrix ``H`` and return it."""
        totals = self._sum.finish().sum(axis=1, dtype=np.float32)
        h = np.zeros((_DIM, _DIM), dtype=np.float32)
        h[_ROWS, _COLS] = totals
        h[_COLS, _ROWS] = totals
        self.H = h
        return self.H

    @staticmethod
    def _batch(jac) -> np.ndarray:
        arr = np.asarray(jac, dtype=np.float32)
        if arr.shape != (_DIM, _LANES):
            raise ValueError(f"expected a ({_DIM}, {_LANES}) array, got {arr.shape}")
        return arr

    @staticmethod
    def _sample(jac, lane: int) -> np.ndarray:
        vec = np.asarray(jac, dtype=np.float32).reshape(-1)
        if vec.shape[0] != _DIM:
            raise ValueError(f"expected {_DIM} values, got {vec.shape[0]}")
        if not 0 <= lane < _LANES:
            raise ValueError(f"lane must be between 0 and {_LANES - 1}, got {lane}")
        return vec

    def update_sse(self, jac) -> None:
        """Add four samples at once; ``jac`` has shape (9, 4), one column per sample."""
        arr = self._batch(jac)
        self.num += _LANES
        self._sum._add(arr[_ROWS] * arr[_COLS])

    def update_sse_weighted(self, jac, weight) -> None:
        """Add four samples, each weighted by the matching entry of ``weight``."""
        arr = self._batch(jac)
        w = _lane_vector(weight, "weight")
        self.num += _LANES
        self._sum._add((arr[_ROWS] * w) * arr[_COLS])

    def update_single(self, jac, lane: int = 0) -> None:
        """Add one 9-vector sample into the given lane (0 to 3)."""
        vec = self._sample(jac, lane)
        contribution = np.zeros((_ENTRIES, _LANES), dtype=np.float32)
        contribution[:, lane] = vec[_ROWS] * vec[_COLS]
        self.num += 1
        self._sum._add(contribution)

    def update_single_weighted(self, jac, weight: float, lane: int = 0) -> None:
        """Add one 9-vector sample weighted by ``weight`` into the given lane."""
        vec = self._sample(jac, lane)
        w = np.float32(weight)
        contribution = np.zeros((_ENTRIES, _LANES), dtype=np.float32)
        contribution[:, lane] = (vec[_ROWS] * w) * vec[_COLS]
        self.num += 1
        self._sum._add(contribution)