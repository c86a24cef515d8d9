[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "smilesflights"
version = "1.0.0"
description = "Search Smiles award flights, find the cheapest days in miles, and serve the searches as JSON-RPC tools"
requires-python = ">=3.10"
keywords = ["smiles", "flights", "miles", "award travel", "mcp", "json-rpc", "airfare"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Natural Language :: Spanish",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
]
dependencies = [
    "httpx>=0.24",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[project.scripts]
smiles = "smilesflights.cli:main"
smiles-mcp = "smilesflights.server:main"

[tool.hatch.build.targets.wheel]
packages = ["smilesflights"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
