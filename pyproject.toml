[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gimme"
version = "0.1.0"
description = "Configuration, path and console helpers for a multi-repo manager"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["git", "repositories", "multi-repo", "configuration", "aliases", "pins"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gimme"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
