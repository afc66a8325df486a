[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spacetrader"
version = "0.1.0"
description = "Core models and diagnostics for a terminal space trading simulation"
requires-python = ">=3.10"
keywords = ["game", "simulation", "space", "trading", "diagnostics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
]
dependencies = [
    "psutil",
    "bcrypt",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["spacetrader"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
