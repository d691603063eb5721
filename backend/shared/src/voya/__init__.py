"""Voya travel booking backend: shared models and services."""

__version__ = "0.1.0"
