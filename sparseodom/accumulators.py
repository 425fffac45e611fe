"""Numerically robust accumulators for dense matrices and vectors.

Sums are collected in three tiers: the running tier holds at most about a
thousand updates before it is folded into a second tier, which is in turn
folded into the final tier after about a thousand folds. This keeps
single-precision sums accurate over very long runs.
"""

from __future__ import annotations

import numpy as np

_SHIFT_LIMIT = 1000


class _TieredSum:
    """Three-tier float32 sum of arrays of a fixed shape."""

    def __init__(self, shape: tuple[int, ...]) -> None:
        self.shape = shape
        self.initialize()

    def initialize(self) -> None:
        """Reset all tiers and counters to zero."""
        self.A = np.zeros(self.shape, dtype=np.float32)
        self.A1k = np.zeros(self.shape, dtype=np.float32)
        self.A1m = np.zeros(self.shape, dtype=np.float32)
        self.num = 0
        self._in1 = 0
        self._in1k = 0
        self._in1m = 0

    def finish(self) -> np.ndarray:
        """Fold every tier into the final one and return the total."""
        self._shift_up(force=True)
        self.num = self._in1 + self._in1k + self._in1m
        return self.A1m

    def _add(self, value: np.ndarray) -> None:
        self.A += value
        self._in1 += 1
        self._shift_up(force=False)

    def _shift_up(self, force: bool) -> None:
        if self._in1 > _SHIFT_LIMIT or force:
            self.A1k += self.A
            self.A[...] = 0
            self._in1k += self._in1
            self._in1 = 0
        if self._in1k > _SHIFT_LIMIT or force:
            self.A1m += self.A1k
            self.A1k[...] = 0
            self._in1m += self._in1k
            self._in1k = 0


class AccumulatorXX(_TieredSum):
    """Accumulates weighted outer products ``w * L @ R.T`` into a rows x cols matrix."""

    def __init__(self, rows: int, cols: int) -> None:
        if rows <= 0 or cols <= 0:
            raise ValueError("matrix dimensions must be positive")
        self.rows = rows
        self.cols = cols
        super().__init__((rows, cols))

    def initialize(self) -> None:
        """Reset the accumulator."""
        super().initialize()

    def finish(self) -> np.ndarray:
        """Fold all partial sums; the result is in ``A1m`` and is returned."""
        return super().finish()

    def update(self, left, right, weight: float) -> None:
        """Add ``weight * outer(left, right)``."""
        lvec = np.asarray(left, dtype=np.float32).reshape(-1)
        rvec = np.asarray(right, dtype=np.float32).reshape(-1)
        if lvec.shape[0] != self.rows or rvec.shape[0] != self.cols:
            raise ValueError(
                f"expected vectors of length {self.rows} and {self.cols}, "
                f"got {lvec.shape[0]} and {rvec.shape[0]}"
            )
        self._add(np.float32(weight) * np.outer(lvec, rvec))


class AccumulatorX(_TieredSum):
    """Accumulates (weighted) vectors of a fixed length."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("vector size must be positive")
        self.size = size
        super().__init__((size,))

    def initialize(self) -> None:
        """Reset the accumulator."""
        super().initialize()

    def finish(self) -> np.ndarray:
        """Fold all partial sums; the result is in ``A1m`` and is returned."""
        return super().finish()

    def _as_vector(self, vec) -> np.ndarray:
        arr = np.asarray(vec, dtype=np.float32).reshape(-1)
        if arr.shape[0] != self.size:
            raise ValueError(f"expected a vector of length {self.size}, got {arr.shape[0]}")
        return arr

    def update(self, vec, weight: float) -> None:
        """Add ``weight * vec``."""
        self._add(np.float32(weight) * self._as_vector(vec))

    def update_no_weight(self, vec) -> None:
        """Add ``vec`` unweighted."""
        self._add(self._as_vector(vec))