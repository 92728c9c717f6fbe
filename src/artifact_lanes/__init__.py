"""Artifact Lanes - classify, normalize and validate atomic note artifacts."""

__version__ = "0.1.0"
