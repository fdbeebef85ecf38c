[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mmkit"
version = "0.1.0"
description = "Building blocks for long-read sequence mapping: minimizer sketching, low-complexity masking, seeding, chaining, pairing and local alignment"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bioinformatics",
    "sequence alignment",
    "minimizer",
    "chaining",
    "dust",
    "read mapping",
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
    "Topic :: Scientific/Engineering :: Bio-Informatics",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[project.scripts]
sdust = "mmkit.sdust:main"

[tool.hatch.build.targets.wheel]
packages = ["mmkit"]

[tool.hatch.build.targets.sdist]
include = [
    "mmkit",
    "tests",
    "README.md",
    "pyproject.toml",
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
