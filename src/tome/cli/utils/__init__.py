"""Utilities for tome CLI."""

from tome.cli.utils.command import TomeCommand

__all__ = ["TomeCommand"]
