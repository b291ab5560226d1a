[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syncollections"
version = "0.1.0"
description = "Ordered skip-list sets and maps and FIFO ring queues that threads can share, plus a simple hash set."
requires-python = ">=3.10"
dependencies = []
keywords = ["skiplist", "skipset", "skipmap", "queue", "concurrent", "thread-safe", "hashset"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["syncollections"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
