"""Tome CLI main entry point.

This module provides the main CLI dispatcher for all tome commands. Each
command is a class that builds its own click command; the dispatcher
registers them on one click group.
"""

import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from tome.cli.commands import (
    AddCommand,
    AddFileCommand,
    AddUrlCommand,
    BackupCommand,
    BulkAddCommand,
    CleanCommand,
    DeleteCommand,
    ExportCommand,
    ImportCommand,
    InitCommand,
    InteractiveCommand,
    ListCommand,
    QueryCommand,
    SearchCommand,
    StatsCommand,
)
from tome.cli.utils.command import KnowledgeBaseFactory, TomeCommand
from tome.config import TomeConfig, load_config
from tome.exceptions import TomeError

# Initialize console with stderr to avoid buffering issues
console = Console(stderr=True)

_installed_handlers: list[logging.Handler] = []


def setup_logging(config: TomeConfig, verbose: bool = False) -> None:
    """Set up logging configuration."""
    # Disable chromadb's PostHog telemetry
    os.environ["ANONYMIZED_TELEMETRY"] = "False"

    log_file = config.paths.logs_dir / "tome.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    console_level = logging.DEBUG if verbose else logging.WARNING

    # Configure rich handler for console output
    rich_handler = RichHandler(
        console=console,
        show_path=False,
        omit_repeated_times=False,
        show_time=True,
        level=console_level,
    )

    # Configure file handler for log file
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    file_handler.setLevel(logging.INFO)

    # Replace handlers from a previous invocation in the same process
    root_logger = logging.getLogger()
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers[:] = [rich_handler, file_handler]

    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    root_logger.addHandler(rich_handler)
    root_logger.addHandler(file_handler)

    # Disable other handlers to prevent duplicate output
    logging.getLogger("sentence_transformers").handlers = []
    logging.getLogger("chromadb").handlers = []

    # Set specific loggers to WARNING
    for logger_name in [
        "sentence_transformers",
        "chromadb",
        "httpx",
        "openai",
        "anthropic",
        "posthog",
    ]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


class TomeCLI:
    """Main CLI dispatcher for tome commands."""

    def __init__(self, knowledge_base_factory: KnowledgeBaseFactory | None = None) -> None:
        """Initialize the CLI dispatcher.

        Args:
            knowledge_base_factory: Builds the knowledge base each command
                works on; defaults to a ChromaDB-backed one
        """
        self.knowledge_base_factory = knowledge_base_factory
        self.commands: dict[str, TomeCommand] = {}
        self._register_commands()

    def _register_commands(self) -> None:
        """Register all available commands."""
        command_classes: list[type[TomeCommand]] = [
            InitCommand,
            AddCommand,
            AddFileCommand,
            AddUrlCommand,
            BulkAddCommand,
            QueryCommand,
            SearchCommand,
            ListCommand,
            StatsCommand,
            DeleteCommand,
            ExportCommand,
            ImportCommand,
            InteractiveCommand,
            CleanCommand,
            BackupCommand,
        ]

        for cmd_class in command_classes:
            cmd = cmd_class(self.knowledge_base_factory)
            self.commands[cmd.name] = cmd

    def create_cli(self) -> click.Group:
        """Create the CLI application.

        Returns:
            The Click command group for the CLI.
        """

        @click.group()
        @click.option(
            "--config",
            "config_path",
            type=click.Path(path_type=Path),
            envvar="TOME_CONFIG",
            help="Path to a YAML configuration file",
        )
        @click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
        @click.pass_context
        def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
            """Tome - your personal knowledge base with AI answers."""
            try:
                config = load_config(str(config_path) if config_path else None)
            except TomeError as e:
                console.print(f"❌ {e.message}", style="red", markup=False)
                ctx.exit(e.exit_code)
            setup_logging(config, verbose=verbose)
            ctx.ensure_object(dict)
            ctx.obj["config"] = config

        # Register all discovered commands
        for cmd in self.commands.values():
            cli.add_command(cmd.create_command())

        return cli


def main() -> None:
    """Main entry point for the tome CLI."""
    try:
        cli = TomeCLI().create_cli()
        cli()
    except Exception as e:
        console.print(f"[red]ERROR:[/red] {e!s}")
        sys.exit(1)
