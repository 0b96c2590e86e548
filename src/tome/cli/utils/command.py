"""Base command utilities for tome CLI.

This module provides the base command class shared by all tome CLI
commands.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import click
from rich.console import Console

from tome.config import TomeConfig, load_config
from tome.exceptions import RebuildError, TomeError, get_recovery_strategy
from tome.knowledge_base import KnowledgeBase

# Initialize console with stderr to avoid buffering issues
console = Console(stderr=True)

KnowledgeBaseFactory = Callable[[TomeConfig], KnowledgeBase]


class TomeCommand(ABC):
    """Base class for all tome commands."""

    name: str
    help: str

    # Commands that only read records skip loading the semantic index
    needs_index = True

    def __init__(self, knowledge_base_factory: KnowledgeBaseFactory | None = None) -> None:
        """Initialize the base command.

        Args:
            knowledge_base_factory: Builds the knowledge base from the
                loaded configuration
        """
        self._knowledge_base_factory = knowledge_base_factory or KnowledgeBase

    @property
    def config(self) -> TomeConfig:
        """Configuration loaded by the command group, or the default lookup."""
        ctx = click.get_current_context(silent=True)
        if ctx is not None and isinstance(ctx.obj, dict) and "config" in ctx.obj:
            return ctx.obj["config"]
        return load_config()

    async def open_knowledge_base(self) -> KnowledgeBase:
        """Create and initialize the knowledge base for this command."""
        kb = self._knowledge_base_factory(self.config)
        await kb.initialize(with_index=self.needs_index)
        return kb

    async def save_changes(self, kb: KnowledgeBase) -> None:
        """Write the documents file when the store does not autosave."""
        if not kb.config.store.autosave:
            await kb.save()

    def run(self, **kwargs: Any) -> None:
        """Run the command with the given arguments.

        Tome errors are reported and turned into the error's exit code.

        Args:
            **kwargs: Command arguments
        """
        try:
            asyncio.run(self.run_async(**kwargs))
        except TomeError as e:
            self.handle_error(e)
            raise click.exceptions.Exit(e.exit_code) from e

    @abstractmethod
    async def run_async(self, **kwargs: Any) -> None:
        """Run the command asynchronously.

        Args:
            **kwargs: Command arguments
        """
        pass

    @abstractmethod
    def create_command(self) -> click.Command:
        """Create the click command.

        Returns:
            The click command instance
        """
        pass

    def log_info(self, message: str) -> None:
        """Log an info message to the console.

        Args:
            message: The message to log.
        """
        logging.info(f"[INFO] {message}")

    def log_error(self, message: str) -> None:
        """Log an error message to the console.

        Args:
            message: The message to log.
        """
        logging.error(f"[ERROR] {message}")

    def log_success(self, message: str) -> None:
        """Log a success message to the console.

        Args:
            message: The message to log.
        """
        logging.info(f"[SUCCESS] {message}")

    def log_warning(self, message: str) -> None:
        """Log a warning message to the console.

        Args:
            message: The message to log.
        """
        logging.warning(f"[WARNING] {message}")

    def handle_error(self, error: TomeError) -> None:
        """Report a tome error to the user.

        Args:
            error: The error to handle
        """
        if isinstance(error, RebuildError):
            self.log_error(str(error))
            hint = get_recovery_strategy(error)
            if hint:
                self.log_warning(f"Recovery hint: {hint}")
        else:
            self.log_error(error.message)
        console.print(f"❌ {error.message}", style="red", markup=False)
