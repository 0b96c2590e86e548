"""Init and clean commands."""

import logging
from typing import Any

import click

from tome.cli.utils.command import TomeCommand
from tome.cli.utils.display import output

logger = logging.getLogger(__name__)


class InitCommand(TomeCommand):
    """Create the data directories and build the index."""

    name = "init"
    help = "Initialize the knowledge base"

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        output.print(
            f"✅ Knowledge base ready with {len(kb.store)} documents in {kb.config.paths.data_dir}",
            style="green",
        )

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        def init() -> None:
            self.run()

        return init


class CleanCommand(TomeCommand):
    """Drop the semantic index and rebuild it from the stored documents."""

    name = "clean"
    help = "Clean and rebuild the vector store"
    needs_index = False

    async def run_async(self, **kwargs: Any) -> None:
        """Run the clean command asynchronously.

        Args:
            **kwargs: Command arguments
                force: Whether to actually rebuild
        """
        if not kwargs.get("force"):
            self.log_warning("Use --force to actually rebuild the vector store")
            output.print("⚠️  This will rebuild the vector store. Use --force to confirm.")
            return

        kb = await self.open_knowledge_base()
        await kb.rebuild()
        output.print(f"✅ Vector store rebuilt with {len(kb.store)} documents", style="green")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.option("--force", is_flag=True, help="Rebuild without confirmation")
        def clean(force: bool) -> None:
            self.run(force=force)

        return clean
