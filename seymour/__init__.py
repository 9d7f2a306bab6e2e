"""Seymour: streaming client for the civic-data assistant backend."""

__version__ = "0.1.0"
