"""Tome CLI commands."""

from tome.cli.commands.add import AddCommand, AddFileCommand, AddUrlCommand, BulkAddCommand
from tome.cli.commands.documents import DeleteCommand, ListCommand, SearchCommand, StatsCommand
from tome.cli.commands.interactive import InteractiveCommand
from tome.cli.commands.maintenance import CleanCommand, InitCommand
from tome.cli.commands.query import QueryCommand
from tome.cli.commands.snapshot import BackupCommand, ExportCommand, ImportCommand

__all__ = [
    "AddCommand",
    "AddFileCommand",
    "AddUrlCommand",
    "BackupCommand",
    "BulkAddCommand",
    "CleanCommand",
    "DeleteCommand",
    "ExportCommand",
    "ImportCommand",
    "InitCommand",
    "InteractiveCommand",
    "ListCommand",
    "QueryCommand",
    "SearchCommand",
    "StatsCommand",
]
