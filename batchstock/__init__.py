"""Batchstock - two-tier batch and variant inventory engine."""

__version__ = "0.1.0"
