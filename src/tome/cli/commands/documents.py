"""Commands that inspect and delete stored documents."""

import logging
from typing import Any

import click

from tome.cli.commands.add import parse_tags
from tome.cli.utils.command import TomeCommand
from tome.cli.utils.display import output, print_documents, print_stats
from tome.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class SearchCommand(TomeCommand):
    """Filter documents by metadata."""

    name = "search"
    help = "Search documents by category and tags"
    needs_index = False

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        documents = kb.list_documents(
            category=kwargs.get("category"),
            tags=parse_tags(kwargs.get("tags")) or None,
            limit=kwargs.get("limit"),
        )
        print_documents(documents, heading="Search results")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.option("--category", type=str, help="Exact category to match")
        @click.option("--tags", type=str, help="Match documents carrying any of these tags")
        @click.option("--limit", type=click.IntRange(min=1), help="Maximum number of documents")
        def search(category: str | None, tags: str | None, limit: int | None) -> None:
            self.run(category=category, tags=tags, limit=limit)

        return search


class ListCommand(TomeCommand):
    name = "list"
    help = "List documents"
    needs_index = False

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        print_documents(kb.list_documents(limit=kwargs.get("limit")))

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.option("--limit", type=click.IntRange(min=1), help="Maximum number of documents")
        def list_command(limit: int | None) -> None:
            self.run(limit=limit)

        return list_command


class StatsCommand(TomeCommand):
    name = "stats"
    help = "Show knowledge base statistics"
    needs_index = False

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        print_stats(kb.stats())

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        def stats() -> None:
            self.run()

        return stats


class DeleteCommand(TomeCommand):
    """Delete a document and rebuild the index."""

    name = "delete"
    help = "Delete a document"
    # delete_document rebuilds the index itself
    needs_index = False

    async def run_async(self, **kwargs: Any) -> None:
        """Run the delete command asynchronously.

        Args:
            **kwargs: Command arguments
                document_id: Id of the document to delete
                force: Whether to skip confirmation
        """
        document_id = kwargs["document_id"]
        kb = await self.open_knowledge_base()

        document = kb.get_document(document_id)
        if document is None:
            raise NotFoundError(document_id)

        if not kwargs.get("force"):
            output.print(f'⚠️  This will delete "{document.title}".', markup=False)
            output.print("Use --force to confirm deletion")
            return

        if not await kb.delete_document(document_id):
            raise NotFoundError(document_id)
        await self.save_changes(kb)
        output.print(f"✅ Document {document_id} deleted", style="green")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.argument("document_id", type=str)
        @click.option("--force", is_flag=True, help="Delete without confirmation")
        def delete(document_id: str, force: bool) -> None:
            self.run(document_id=document_id, force=force)

        return delete
