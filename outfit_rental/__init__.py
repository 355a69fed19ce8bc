"""Outfit rental management core: half-day slot availability engine."""

__version__ = "0.1.0"
