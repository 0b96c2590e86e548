"""Tome command line interface."""
