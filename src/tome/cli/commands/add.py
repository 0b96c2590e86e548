"""Commands that add documents."""

import logging
from pathlib import Path
from typing import Any

import click

from tome.cli.utils.command import TomeCommand
from tome.cli.utils.display import output
from tome.store.models import DocumentDetails

logger = logging.getLogger(__name__)


def parse_tags(value: str | None) -> list[str]:
    """Split a ``tag1,tag2`` option into a list."""
    if not value:
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


class AddCommand(TomeCommand):
    """Add a document from text given on the command line."""

    name = "add"
    help = "Add a new document"

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        details = DocumentDetails(
            title=kwargs.get("title") or "Untitled",
            source=kwargs.get("source") or "cli-input",
            category=kwargs.get("category") or "general",
            tags=parse_tags(kwargs.get("tags")),
        )
        document = await kb.add_document(kwargs["content"], details)
        await self.save_changes(kb)
        output.print(f"✅ Document added with ID: {document.id}", style="green")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.argument("content", type=str)
        @click.option("--title", type=str, help="Document title")
        @click.option("--source", type=str, help="Where the content came from")
        @click.option("--category", type=str, help="Document category")
        @click.option("--tags", type=str, help='Comma-separated tags, e.g. "tag1,tag2"')
        def add(content: str, title: str | None, source: str | None, category: str | None, tags: str | None) -> None:
            self.run(content=content, title=title, source=source, category=category, tags=tags)

        return add


class AddFileCommand(TomeCommand):
    """Add a document from a local file."""

    name = "add-file"
    help = "Add a document from a file"

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        document = await kb.add_document_from_file(kwargs["path"], title=kwargs.get("title"))
        await self.save_changes(kb)
        output.print(f"✅ Document added from file with ID: {document.id}", style="green")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.argument("path", type=click.Path(path_type=Path))
        @click.option("--title", type=str, help="Document title (defaults to the file name)")
        def add_file(path: Path, title: str | None) -> None:
            self.run(path=path, title=title)

        return add_file


class AddUrlCommand(TomeCommand):
    """Add a document from a web page."""

    name = "add-url"
    help = "Add a document from a URL"

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        output.print("🔄 Fetching content from URL...")
        document = await kb.add_document_from_url(kwargs["url"], title=kwargs.get("title"))
        await self.save_changes(kb)
        output.print(f"✅ Document added from URL with ID: {document.id}", style="green")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.argument("url", type=str)
        @click.option("--title", type=str, help="Document title")
        def add_url(url: str, title: str | None) -> None:
            self.run(url=url, title=title)

        return add_url


class BulkAddCommand(TomeCommand):
    """Add every matching file in a directory."""

    name = "bulk-add"
    help = "Add multiple documents from a directory"

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        result = await kb.bulk_add(
            kwargs["directory"],
            pattern=kwargs.get("pattern") or "*.txt",
            category=kwargs.get("category"),
        )
        await self.save_changes(kb)

        for document in result.added:
            output.print(f"✅ Added: {Path(document.source).name} (ID: {document.id})")
        for name, reason in result.failed.items():
            output.print(f"❌ Failed to add {name}: {reason}", style="red", markup=False)

        output.print(
            f"\n📊 Bulk add complete: {len(result.added)} added, {len(result.failed)} failed",
            style="bold",
        )

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.argument("directory", type=click.Path(path_type=Path))
        @click.option("--pattern", type=str, default="*.txt", show_default=True, help="File name pattern")
        @click.option("--category", type=str, help="Category for every added document")
        def bulk_add(directory: Path, pattern: str, category: str | None) -> None:
            self.run(directory=directory, pattern=pattern, category=category)

        return bulk_add
