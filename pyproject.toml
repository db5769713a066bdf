[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ldbutil"
version = "0.1.0"
description = "Building blocks for a log-structured key-value store: binary coding, CRC32C, hashing, an LRU cache, comparators, histograms and a file-system environment."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "key-value",
    "storage",
    "varint",
    "crc32c",
    "lru-cache",
    "comparator",
    "histogram",
    "arena",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ldbutil"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
