"""Accumulator for the 13x13 per-frame-pair Hessian of photometric residuals.

The upper-left 10x10 block is the outer sum of ``[x y] * [[a, b], [b, c]] * [x y]^T``
for 10-vectors ``x`` and ``y``; the last three rows and columns hold the
affine-brightness and residual terms.
"""

from __future__ import annotations

import numpy as np

from sparseodom.accumulators import _TieredSum

_TOP = 10
_DIM = 13
_ROWS, _COLS = np.triu_indices(_TOP)
_N_TOP_LEFT = _ROWS.shape[0]  # 55
_N_TOP_RIGHT = _TOP * 3  # 30
_N_BOT_RIGHT = 6
_TR_START = _N_TOP_LEFT
_BR_START = _TR_START + _N_TOP_RIGHT
_TOTAL = _BR_START + _N_BOT_RIGHT
_BR_ROWS = np.array([10, 10, 10, 11, 11, 12])
_BR_COLS = np.array([10, 11, 12, 11, 12, 12])


def _vector(values, size: int, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float32).reshape(-1)
    if arr.shape[0] != size:
        raise ValueError(f"{name} must have {size} values, got {arr.shape[0]}")
    return arr


class AccumulatorApprox:
    """Robust accumulator for the 13x13 Hessian of one host/target frame pair."""

    def __init__(self) -> None:
        self._sum = _TieredSum((_TOTAL,))
        self.initialize()

    def initialize(self) -> None:
        """Reset the Hessian and all partial sums."""
        self.H = np.zeros((_DIM, _DIM), dtype=np.float32)
        self._sum.initialize()
        self.num = 0

    def finish(self) -> np.ndarray:
        """Fold all partial sums into the symmetric matrix ``H`` and return it."""
        total = self._sum.finish()
        h = np.zeros((_DIM, _DIM), dtype=np.float32)

        top_left = total[:_N_TOP_LEFT]
        h[_ROWS, _COLS] = top_left
        h[_COLS, _ROWS] = top_left

        top_right = total[_TR_START:_BR_START].reshape(_TOP, 3)
        h[:_TOP, _TOP:] = top_right
        h[_TOP:, :_TOP] = top_right.T

        bot_right = total[_BR_START:]
        h[_BR_ROWS, _BR_COLS] = bot_right
        h[_BR_COLS, _BR_ROWS] = bot_right

        self.H = h
        self.num = self._sum.num
        return self.H

    def _add_top_left(self, x: np.ndarray, y: np.ndarray, a: float, b: float, c: float) -> None:
        a32, b32, c32 = np.float32(a), np.float32(b), np.float32(c)
        block = (
            a32 * np.outer(x, x)
            + c32 * np.outer(y, y)
            + b32 * (np.outer(x, y) + np.outer(y, x))
        )
        contribution = np.zeros(_TOTAL, dtype=np.float32)
        contribution[:_N_TOP_LEFT] = block[_ROWS, _COLS]
        self.num += 1
        self._sum._add(contribution)

    def update_sse(self, x, y, a: float, b: float, c: float) -> None:
        """Add the weighted outer sum for two 10-vectors ``x`` and ``y``."""
        self._add_top_left(_vector(x, _TOP, "x"), _vector(y, _TOP, "y"), a, b, c)

    def update(self, x4, x6, y4, y6, a: float, b: float, c: float) -> None:
        """Add the weighted outer sum for vectors given as 4 calibration and 6 pose parts."""
        x = np.concatenate([_vector(x4, 4, "x4"), _vector(x6, 6, "x6")])
        y = np.concatenate([_vector(y4, 4, "y4"), _vector(y6, 6, "y6")])
        self._add_top_left(x, y, a, b, c)

    def update_top_right(self, x4, x6, y4, y6, tr00, tr10, tr01, tr11, tr02, tr12) -> None:
        """Add the 10x3 block ``x * [tr00 tr01 tr02] + y * [tr10 tr11 tr12]``."""
        x = np.concatenate([_vector(x4, 4, "x4"), _vector(x6, 6, "x6")])
        y = np.concatenate([_vector(y4, 4, "y4"), _vector(y6, 6, "y6")])
        row0 = np.array([tr00, tr01, tr02], dtype=np.float32)
        row1 = np.array([tr10, tr11, tr12], dtype=np.float32)
        block = np.outer(x, row0) + np.outer(y, row1)
        self._sum.A[_TR_START:_BR_START] += block.reshape(-1)

    def update_bot_right(self, a00, a01, a02, a11, a12, a22) -> None:
        """Add the upper triangle of the 3x3 bottom-right block."""
        self._sum.A[_BR_START:] += np.array([a00, a01, a02, a11, a12, a22], dtype=np.float32)