"""Shelf - album service for a personal media library."""

__version__ = "0.1.0"
