[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "foodarena"
version = "1.0.0"
description = "Multiplayer food-eating arena game server speaking newline-delimited JSON over TCP"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "server", "multiplayer", "asyncio", "json", "tcp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Arcade",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
foodarena = "foodarena.server:main"

[tool.hatch.build.targets.wheel]
packages = ["foodarena"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
