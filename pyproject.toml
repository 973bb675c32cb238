[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "malairte"
version = "0.1.0"
description = "Transaction and block primitives, key-value storage and JSON-RPC helpers for the Malairt blockchain"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "blockchain",
    "cryptocurrency",
    "segwit",
    "merkle",
    "utxo",
    "varint",
]
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
    "Topic :: Office/Business :: Financial",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["malairte"]

[tool.hatch.build.targets.sdist]
include = ["malairte", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
