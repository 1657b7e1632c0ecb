[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netsqlite"
version = "0.1.0"
description = "A directory of SQLite databases served over gRPC, with a client for running statements and streaming query results"
requires-python = ">=3.10"
keywords = ["sqlite", "grpc", "database", "server", "client", "wal", "pool"]
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
    "Programming Language :: SQL",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Database :: Front-Ends",
]
dependencies = [
    "grpcio",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
netsqlite = "netsqlite.server:main"

[tool.hatch.build.targets.wheel]
packages = ["netsqlite"]

[tool.hatch.build.targets.sdist]
include = ["netsqlite", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
