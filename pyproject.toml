[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "learnbase"
version = "0.1.0"
description = "Typed attribute grids for machine-learning datasets: CSV and ARFF parsing, views, sorting and compact serialization."
requires-python = ">=3.10"
dependencies = []
keywords = ["machine learning", "dataset", "csv", "arff", "instances", "attributes"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["learnbase"]

[tool.pytest.ini_options]
addopts = "-ra"
