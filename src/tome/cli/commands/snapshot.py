"""Export, import and backup commands."""

import logging
from pathlib import Path
from typing import Any

import click

from tome.cli.utils.command import TomeCommand
from tome.cli.utils.display import output

logger = logging.getLogger(__name__)


class ExportCommand(TomeCommand):
    """Write every document to a snapshot file."""

    name = "export"
    help = "Export all documents to a snapshot file"
    needs_index = False

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        path = await kb.export_data()
        output.print(f"✅ Data exported to: {path}", style="green")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        def export() -> None:
            self.run()

        return export


class BackupCommand(ExportCommand):
    name = "backup"
    help = "Create a backup snapshot (same as export)"

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        path = await kb.export_data()
        output.print(f"✅ Backup created: {path}", style="green")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        def backup() -> None:
            self.run()

        return backup


class ImportCommand(TomeCommand):
    """Replace every document with the contents of a snapshot."""

    name = "import"
    help = "Import documents from a snapshot file, replacing the current ones"
    # import_data rebuilds the index itself
    needs_index = False

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        count = await kb.import_data(kwargs["file"])
        output.print(f"✅ Imported {count} documents", style="green")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.argument("file", type=click.Path(path_type=Path))
        def import_command(file: Path) -> None:
            self.run(file=file)

        return import_command
