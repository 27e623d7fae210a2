"""Procedural pixel monster sprite generator."""

__version__ = "0.1.0"
