[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "poloniusfacts"
version = "0.1.0"
description = "Intern, load, generate and dump borrow-checker fact relations, with a small program language and GraphViz rendering"
requires-python = ">=3.10"
dependencies = []
keywords = ["borrow-checker", "datalog", "facts", "graphviz", "compiler"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["poloniusfacts"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
