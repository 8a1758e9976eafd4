"""Woviex: video embed resolver with an encrypted streaming proxy."""

__version__ = "0.1.0"
