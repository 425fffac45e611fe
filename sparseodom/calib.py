"""Image pyramid calibration derived from the full-resolution camera matrix."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

_log = logging.getLogger(__name__)

PYR_LEVELS = 6
_MIN_COARSE_PIXELS = 5000


@dataclass(frozen=True)
class PyramidLevel:
    """Resolution and pinhole intrinsics of one pyramid level, with their inverses."""

    width: int
    height: int
    k: np.ndarray
    ki: np.ndarray

    @property
    def fx(self) -> float:
        return float(self.k[0, 0])

    @property
    def fy(self) -> float:
        return float(self.k[1, 1])

    @property
    def cx(self) -> float:
        return float(self.k[0, 2])

    @property
    def cy(self) -> float:
        return float(self.k[1, 2])

    @property
    def fxi(self) -> float:
        return float(self.ki[0, 0])

    @property
    def fyi(self) -> float:
        return float(self.ki[1, 1])

    @property
    def cxi(self) -> float:
        return float(self.ki[0, 2])

    @property
    def cyi(self) -> float:
        return float(self.ki[1, 2])


@dataclass(frozen=True)
class PyramidCalibration:
    """Calibration of every pyramid level in use, finest first."""

    levels: list[PyramidLevel] = field(default_factory=list)
    w_m3: float = 0.0
    h_m3: float = 0.0

    @property
    def levels_used(self) -> int:
        return len(self.levels)


def set_global_calib(width: int, height: int, k, max_levels: int = PYR_LEVELS) -> PyramidCalibration:
    """Build the pyramid calibration for an image of the given size and camera matrix.

    Levels are halved while both sides stay even, the level has more than
    5000 pixels and fewer than ``max_levels`` levels are in use.
    """
    if width <= 0 or height <= 0:
        raise ValueError("image size must be positive")
    if max_levels < 1:
        raise ValueError("at least one pyramid level is required")
    k0 = np.asarray(k, dtype=np.float32)
    if k0.shape != (3, 3):
        raise ValueError(f"camera matrix must be 3x3, got {k0.shape}")

    wlvl, hlvl = width, height
    used = 1
    while wlvl % 2 == 0 and hlvl % 2 == 0 and wlvl * hlvl > _MIN_COARSE_PIXELS and used < max_levels:
        wlvl //= 2
        hlvl //= 2
        used += 1
    _log.info(
        "using pyramid levels 0 to %d. coarsest resolution: %d x %d!", used - 1, wlvl, hlvl
    )
    if wlvl > 100 and hlvl > 100:
        _log.warning(
            "using not enough pyramid levels; consider scaling to a resolution "
            "that is a multiple of a power of 2"
        )
    if used < 3:
        _log.warning("too few pyramid levels; a higher resolution is needed")

    levels = [PyramidLevel(width, height, k0.copy(), np.linalg.inv(k0).astype(np.float32))]
    fx = np.float32(k0[0, 0])
    fy = np.float32(k0[1, 1])
    cx0 = np.float32(k0[0, 2])
    cy0 = np.float32(k0[1, 2])
    for level in range(1, used):
        fx = np.float32(fx * 0.5)
        fy = np.float32(fy * 0.5)
        cx = np.float32((cx0 + 0.5) / (1 << level) - 0.5)
        cy = np.float32((cy0 + 0.5) / (1 << level) - 0.5)
        kl = np.array([[fx, 0.0, cx], [0.0, fy, cy], [0.0, 0.0, 1.0]], dtype=np.float32)
        levels.append(
            PyramidLevel(width >> level, height >> level, kl, np.linalg.inv(kl).astype(np.float32))
        )

    return PyramidCalibration(levels=levels, w_m3=float(width - 3), h_m3=float(height - 3))