"""Photometric calibration: inverse response (gamma) and vignette correction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from PIL import Image

_log = logging.getLogger(__name__)

_SIXTEEN_BIT_MODES = {"I;16", "I;16L", "I;16B", "I;16N", "I"}


@dataclass
class ImageAndExposure:
    """A float image together with its exposure time and timestamp."""

    width: int
    height: int
    timestamp: float = 0.0
    exposure_time: float = 1.0
    image: np.ndarray = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.image is None:
            self.image = np.zeros((self.height, self.width), dtype=np.float32)


def _read_gamma(path: str | Path) -> np.ndarray | None:
    try:
        with open(path, encoding="utf-8") as handle:
            line = handle.readline()
    except OSError:
        _log.warning("PhotometricUndistorter: could not open file %s", path)
        return None

    values: list[float] = []
    for token in line.split():
        try:
            values.append(float(token))
        except ValueError:
            break
    if len(values) < 256:
        _log.warning(
            "PhotometricUndistorter: invalid format! got %d entries in first line, "
            "expected at least 256!",
            len(values),
        )
        return None

    g = np.asarray(values, dtype=np.float32)
    if np.any(np.diff(g) <= 0):
        _log.warning("PhotometricUndistorter: G has to be strictly increasing")
        return None
    lo, hi = g[0], g[-1]
    return (np.float32(255.0) * (g - lo) / (hi - lo)).astype(np.float32)


def _read_vignette(path: str | Path) -> np.ndarray | None:
    try:
        with Image.open(path) as img:
            img.load()
            if img.mode in _SIXTEEN_BIT_MODES:
                return np.asarray(img).astype(np.float32)
            return np.asarray(img.convert("L")).astype(np.float32)
    except (OSError, ValueError):
        return None


class PhotometricUndistorter:
    """Maps raw pixel values to irradiance using a response curve and a vignette map."""

    def __init__(
        self,
        gamma_file: str | Path,
        vignette_file: str | Path,
        width: int,
        height: int,
        photometric_calibration: int = 2,
        use_exposure: bool = True,
    ) -> None:
        self.width = width
        self.height = height
        self.photometric_calibration = photometric_calibration
        self.use_exposure = use_exposure
        self.valid = False
        self.output = ImageAndExposure(width, height)
        self._g: np.ndarray | None = None
        self.vignette_map: np.ndarray | None = None
        self.vignette_map_inv: np.ndarray | None = None

        if not gamma_file or not vignette_file:
            _log.info("NO PHOTOMETRIC Calibration!")

        g = _read_gamma(gamma_file)
        if g is None:
            return
        if photometric_calibration == 0:
            depth = g.shape[0]
            g = (np.float32(255.0) * np.arange(depth, dtype=np.float32) / np.float32(depth - 1)).astype(
                np.float32
            )
        self._g = g

        vignette = _read_vignette(vignette_file)
        if vignette is None:
            _log.warning("PhotometricUndistorter: Invalid vignette image")
            return
        if vignette.shape != (height, width):
            _log.warning(
                "PhotometricUndistorter: Invalid vignette image size! got %d x %d, expected %d x %d",
                vignette.shape[1],
                vignette.shape[0],
                width,
                height,
            )
            return

        max_v = np.float32(vignette.max())
        with np.errstate(divide="ignore", invalid="ignore"):
            self.vignette_map = (vignette * (np.float32(1.0) / max_v)).astype(np.float32)
            self.vignette_map_inv = (np.float32(1.0) / self.vignette_map).astype(np.float32)
        self.valid = True

    @property
    def depth(self) -> int:
        """Number of entries of the response curve, or 0 if none was read."""
        return 0 if self._g is None else int(self._g.shape[0])

    def gamma(self) -> np.ndarray | None:
        """The normalized response curve, or None when the calibration is not valid."""
        return self._g if self.valid else None

    def process_frame(self, image, exposure_time: float, factor: float = 1.0) -> ImageAndExposure:
        """Convert a raw integer image to irradiance; the result is in ``output``."""
        raw = np.asarray(image)
        if raw.size != self.width * self.height:
            raise ValueError(
                f"image has {raw.size} pixels, expected {self.width * self.height}"
            )
        raw = raw.reshape(self.height, self.width)

        if not self.valid or exposure_time <= 0 or self.photometric_calibration == 0:
            data = (np.float32(factor) * raw.astype(np.float32)).astype(np.float32)
        else:
            data = self._g[raw.astype(np.intp)]
            if self.photometric_calibration == 2:
                data = (data * self.vignette_map_inv).astype(np.float32)

        self.output.image = data
        self.output.exposure_time = exposure_time if self.use_exposure else 1.0
        self.output.timestamp = 0.0
        return self.output

    def unmap_float_image(self, image) -> np.ndarray:
        """Apply the response curve to a float image with linear interpolation."""
        if self._g is None:
            raise RuntimeError("no response curve has been loaded")
        g = self._g
        depth = g.shape[0]
        color = np.asarray(image, dtype=np.float32)
        idx = np.clip(color, 0, depth - 2).astype(np.intp)
        frac = color - idx.astype(np.float32)
        interp = g[idx] * (np.float32(1) - frac) + g[idx + 1] * frac
        result = np.where(
            color < 1e-3,
            np.float32(0),
            np.where(color > depth - 1.01, np.float32(depth - 1.1), interp),
        ).astype(np.float32)
        return np.maximum(result, np.float32(0))