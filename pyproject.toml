[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fgacli"
version = "0.1.0"
description = "Library for relationship-based authorization stores: tuple files, authorization models, store tests and output formatting"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "authorization",
    "fga",
    "rebac",
    "relationship-tuples",
    "access-control",
    "store-tests",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["fgacli"]

[tool.hatch.build.targets.sdist]
include = [
    "fgacli",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
