[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tdsvalues"
version = "0.1.0"
description = "Encode and decode Microsoft SQL Server (TDS) column values to and from Python types."
requires-python = ">=3.10"
dependencies = []
keywords = ["sqlserver", "mssql", "tds", "codec", "database"]
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
    "Topic :: Database",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tdsvalues"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
