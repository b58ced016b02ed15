"""Mood-aware chat companion backend."""

__version__ = "0.1.0"
