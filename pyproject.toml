[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sparseodom"
version = "0.1.0"
description = "Building blocks for direct sparse visual odometry: robust Hessian accumulators, photometric calibration and image pyramid intrinsics."
requires-python = ">=3.10"
keywords = ["visual-odometry", "slam", "photometric-calibration", "vignette", "hessian", "image-pyramid", "computer-vision"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sparseodom"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
