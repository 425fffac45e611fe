# sparseodom

Numerical building blocks for direct sparse visual odometry, built on numpy.

## What it provides

- **Robust accumulators.** Running single-precision sums are kept in three tiers. The running tier is folded into a second tier after about a thousand updates, and the second tier into the final one after about a thousand folds. This keeps long sums accurate. The accumulators are:
  - `sparseodom.accumulators`:
    - `AccumulatorXX(rows, cols)` sums weighted outer products `w * outer(L, R)`.
    - `AccumulatorX(size)` sums vectors, either weighted or unweighted.
  - `sparseodom.scalar_accumulator.Accumulator11` sums scalars, or groups of four values, into one total.
  - `sparseodom.accumulator9.Accumulator9` and `sparseodom.accumulator14.Accumulator14` accumulate the symmetric `J J^T` Hessians of 9- and 14-dimensional Jacobians. Samples come either four at a time, as a `(dim, 4)` array, or one at a time into a chosen lane. `Accumulator9` also has weighted variants.
  - `sparseodom.approx_accumulator.AccumulatorApprox` accumulates the 13x13 Hessian of one host/target frame pair. Its parts are:
    - a 10x10 block built from `[x y] [[a, b], [b, c]] [x y]^T`;
    - a 10x3 top-right block;
    - a 3x3 bottom-right block.

  Every accumulator has `initialize()` to reset it. It also has `finish()`, which folds all tiers together and returns the result. For `AccumulatorXX` and `AccumulatorX` the result is also kept in `A1m`. For the Hessian accumulators it is kept in `H`. For `Accumulator11` it is kept in `A`.
- **Photometric calibration.** `sparseodom.photometric.PhotometricUndistorter` does the following:
  - It reads an inverse response curve from the first line of a text file. The curve needs at least 256 strictly increasing values and is normalised to 0..255.
  - It reads a vignette image (8- or 16-bit) with Pillow.
  - `process_frame` turns a raw integer image into an `ImageAndExposure` holding irradiance values.
  - `unmap_float_image` applies the response curve to a float image, with linear interpolation.
- **Pyramid intrinsics.** `sparseodom.calib.set_global_calib(width, height, k, max_levels)` halves the image while both sides stay even and the level keeps more than 5000 pixels. It returns a `PyramidCalibration`: a list of `PyramidLevel`s, each with its size, camera matrix and inverse.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Examples

Pyramid intrinsics for a camera:

```python
import numpy as np
from sparseodom.calib import set_global_calib

k = np.array([[300.0, 0.0, 319.5], [0.0, 300.0, 239.5], [0.0, 0.0, 1.0]])
pyramid = set_global_calib(640, 480, k, 6)
for level in pyramid.levels:
    print(level.width, level.height, level.fx, level.cx)
```

Photometric correction of a raw 8-bit frame:

```python
import numpy as np
from sparseodom.photometric import PhotometricUndistorter

undistorter = PhotometricUndistorter("pcalib.txt", "vignette.png", 640, 480)
raw = np.zeros((480, 640), dtype=np.uint8)
frame = undistorter.process_frame(raw, 10.0, 1.0)
print(frame.image.shape, frame.exposure_time)
```

If the files cannot be read, or the vignette size does not match, the undistorter is not valid. In that case `gamma()` returns `None` and `process_frame` only scales the raw values by `factor`.

Accumulating a weighted outer product:

```python
import numpy as np
from sparseodom.accumulators import AccumulatorXX

acc = AccumulatorXX(8, 4)
acc.update(np.ones(8), np.ones(4), 0.5)
print(acc.finish())
```

## What this package does not do

This package does not do any of the following:

- geometric rectification: there are no lens distortion models and no calibration file reader;
- sliding-window optimisation: there is no stitching of per-frame-pair Hessians, no Schur complement and no solver;
- camera tracking;
- image sequence playback.

It has no command-line program and no viewer. It is a library of the numerical pieces listed above.

## Tests

```
pytest
```