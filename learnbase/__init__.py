"""Typed attribute grids for machine-learning datasets: storage, views, sorting, CSV, ARFF and archive I/O."""

__version__ = "0.1.0"