[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "scafmesh"
version = "0.1.0"
description = "Triangle and tetrahedral mesh utilities: tet quality, duplicate removal, OBJ reading, flip detection, gradients and quality-improving edge flips"
requires-python = ">=3.10"
keywords = ["mesh", "geometry", "tetrahedra", "triangles", "parameterization", "edge flip", "obj"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["scafmesh"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
