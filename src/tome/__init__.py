"""Tome - personal document store with retrieval-augmented answers."""

__version__ = "0.1.0"
