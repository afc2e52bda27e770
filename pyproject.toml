[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "streamclust"
version = "0.1.0"
description = "Data structures for stream clustering: micro-clusters, CF trees, coreset trees, density-peak trees, density grids and EDMStream."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "clustering",
    "data streams",
    "stream clustering",
    "micro-clusters",
    "density peaks",
    "coreset",
    "EDMStream",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["streamclust"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
