"""Numerically robust accumulator for a single scalar sum, with four lanes."""

from __future__ import annotations

import numpy as np

_SHIFT_LIMIT = 1000
_LANES = 4


class Accumulator11:
    """Sums scalars or groups of four values into one total."""

    def __init__(self) -> None:
        self.initialize()

    def initialize(self) -> None:
        """Reset all partial sums and counters."""
        self.A = 0.0
        self.num = 0
        self._data = np.zeros(_LANES, dtype=np.float32)
        self._data1k = np.zeros(_LANES, dtype=np.float32)
        self._data1m = np.zeros(_LANES, dtype=np.float32)
        self._in1 = 0
        self._in1k = 0
        self._in1m = 0

    def finish(self) -> float:
        """Fold all partial sums and store the total in ``A``, which is returned."""
        self._shift_up(force=True)
        self.A = float(self._data1m.sum(dtype=np.float32))
        return self.A

    def update_single(self, value: float) -> None:
        """Add one scalar."""
        self.update_single_no_shift(value)
        self._shift_up(force=False)

    def update_sse(self, values) -> None:
        """Add four values at once."""
        self.update_sse_no_shift(values)
        self._shift_up(force=False)

    def update_single_no_shift(self, value: float) -> None:
        """Add one scalar without folding partial sums."""
        self._data[0] += np.float32(value)
        self.num += 1
        self._in1 += 1

    def update_sse_no_shift(self, values) -> None:
        """Add four values at once without folding partial sums."""
        arr = np.asarray(values, dtype=np.float32).reshape(-1)
        if arr.shape[0] != _LANES:
            raise ValueError(f"expected {_LANES} values, got {arr.shape[0]}")
        self._data += arr
        self.num += _LANES
        self._in1 += 1

    def _shift_up(self, force: bool) -> None:
        if self._in1 > _SHIFT_LIMIT or force:
            self._data1k += self._data
            self._in1k += self._in1
            self._in1 = 0
            self._data[...] = 0
        if self._in1k > _SHIFT_LIMIT or force:
            self._data1m += self._data1k
            self._in1m += self._in1k
            self._in1k = 0
            self._data1k[...] = 0