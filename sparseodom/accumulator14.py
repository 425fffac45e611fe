"""Robust accumulator of 14x14 Hessians built from four-lane Jacobian batches."""

from __future__ import annotations

import numpy as np

from sparseodom.accumulators import _TieredSum

_DIM = 14
_LANES = 4
_ROWS, _COLS = np.triu_indices(_DIM)
_ENTRIES = _ROWS.shape[0]  # 105 upper-triangle entries


class Accumulator14:
    """Accumulates ``J @ J.T`` for 14-dimensional Jacobians, four samples per lane group."""

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
        self.H = np.zeros((_DIM, _DIM), dtype=np.float32)
        self.H[_ROWS, _COLS] = totals
        self.H[_COLS, _ROWS] = totals
        self.num = self._sum.num
        return self.H

    def update_sse(self, jac) -> None:
        """Add four samples at once; ``jac`` has shape (14, 4), one column per sample."""
        arr = np.asarray(jac, dtype=np.float32)
        if arr.shape != (_DIM, _LANES):
            raise ValueError(f"expected a ({_DIM}, {_LANES}) array, got {arr.shape}")
        self._sum._add(arr[_ROWS] * arr[_COLS])
        self.num += _LANES

    def update_single(self, jac, lane: int = 0) -> None:
        """Add one 14-vector sample into the given lane (0 to 3)."""
        vec = np.asarray(jac, dtype=np.float32).reshape(-1)
        if vec.shape[0] != _DIM:
            raise ValueError(f"expected {_DIM} values, got {vec.shape[0]}")
        if not 0 <= lane < _LANES:
            raise ValueError(f"lane must be between 0 and {_LANES - 1}, got {lane}")
        contribution = np.zeros((_ENTRIES, _LANES), dtype=np.float32)
        contribution[:, lane] = vec[_ROWS] * vec[_COLS]
        self._sum._add(contribution)
        self.num += 1