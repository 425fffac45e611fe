"""Robust Hessian accumulators, photometric calibration and pyramid intrinsics for direct sparse odometry."""

__version__ = "0.1.0"