[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wayle"
version = "0.1.0"
description = "Reactive TOML configuration store, schema documentation pages and media player state tracking for desktop shells"
requires-python = ">=3.11"
keywords = ["desktop", "wayland", "configuration", "toml", "mpris", "media-player"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Desktop Environment",
]
dependencies = [
    "tomli-w",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["wayle"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
