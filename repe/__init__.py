"""Repe - workout tracking backend."""

__version__ = "0.1.0"
