"""Interactive shell over the knowledge base."""

import asyncio
import logging
from typing import Any

import click

from tome.cli.commands.add import parse_tags
from tome.cli.utils.command import TomeCommand
from tome.cli.utils.display import output, print_answer, print_documents, print_stats
from tome.exceptions import TomeError
from tome.knowledge_base import KnowledgeBase
from tome.rag.types import QueryOptions
from tome.store.models import DocumentDetails

logger = logging.getLogger(__name__)

LIST_LIMIT = 10

HELP_TEXT = """
🎯 Tome Commands:
  add <content>     Add a new document with content
  file <path>       Add a document from a file
  url <url>         Add a document from a URL
  query <question>  Ask a question
  list              List documents (first 10)
  stats             Show statistics
  delete <id>       Delete a document by ID
  help              Show this help message
  exit              Exit
"""


async def ask(prompt: str, default: str | None = None) -> str:
    """Prompt for a line of input without blocking the event loop."""
    if default is None:
        answer = await asyncio.to_thread(click.prompt, prompt, prompt_suffix=" ")
    else:
        answer = await asyncio.to_thread(
            click.prompt, prompt, default=default, show_default=False, prompt_suffix=" "
        )
    return str(answer).strip()


class InteractiveCommand(TomeCommand):
    """Read-eval loop for adding, querying and deleting documents."""

    name = "interactive"
    help = "Start interactive mode"

    async def _add(self, kb: KnowledgeBase, content: str) -> None:
        if not content:
            output.print("❌ Please provide content to add")
            return
        title = await ask("Title:", default="")
        source = await ask("Source (optional):", default="")
        category = await ask("Category (optional):", default="")
        tags = await ask("Tags (comma-separated, optional):", default="")
        document = await kb.add_document(
            content,
            DocumentDetails(
                title=title or "Untitled",
                source=source or "manual-input",
                category=category or "general",
                tags=parse_tags(tags),
            ),
        )
        output.print(f"✅ Document added with ID: {document.id}", style="green")

    async def _file(self, kb: KnowledgeBase, path: str) -> None:
        if not path:
            output.print("❌ Please provide a file path")
            return
        title = await ask("Title (optional):", default="")
        document = await kb.add_document_from_file(path, title=title or None)
        output.print(f"✅ Document added from file with ID: {document.id}", style="green")

    async def _url(self, kb: KnowledgeBase, url: str) -> None:
        if not url:
            output.print("❌ Please provide a URL")
            return
        title = await ask("Title (optional):", default="")
        output.print("🔄 Fetching content from URL...")
        document = await kb.add_document_from_url(url, title=title or None)
        output.print(f"✅ Document added from URL with ID: {document.id}", style="green")

    async def _query(self, kb: KnowledgeBase, question: str) -> None:
        if not question:
            output.print("❌ Please provide a question")
            return
        output.print("🔍 Searching...")
        print_answer(await kb.query(question, QueryOptions(include_metadata=True)))

    def _list(self, kb: KnowledgeBase) -> None:
        print_documents(kb.list_documents(limit=LIST_LIMIT))
        remaining = len(kb.store) - LIST_LIMIT
        if remaining > 0:
            output.print(f"\n... and {remaining} more documents")

    async def _delete(self, kb: KnowledgeBase, document_id: str) -> None:
        if not document_id:
            output.print("❌ Please provide a document ID")
            return
        document = kb.get_document(document_id)
        if document is None:
            output.print("❌ Document not found")
            return

        confirmed = await asyncio.to_thread(
            click.confirm, f'Are you sure you want to delete "{document.title}"?', default=False
        )
        if not confirmed:
            output.print("❌ Deletion cancelled")
            return

        if await kb.delete_document(document_id):
            output.print("✅ Document deleted successfully", style="green")
        else:
            output.print("❌ Failed to delete document")

    async def dispatch(self, kb: KnowledgeBase, line: str) -> bool:
        """Execute one input line.

        Returns:
            False when the user asked to leave
        """
        command, _, argument = line.strip().partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command in ("exit", "quit"):
            return False
        if command == "add":
            await self._add(kb, argument)
        elif command == "file":
            await self._file(kb, argument)
        elif command == "url":
            await self._url(kb, argument)
        elif command == "query":
            await self._query(kb, argument)
        elif command == "list":
            self._list(kb)
        elif command == "stats":
            print_stats(kb.stats())
        elif command == "delete":
            await self._delete(kb, argument)
        elif command == "help":
            output.print(HELP_TEXT, markup=False)
        elif command:
            output.print('❌ Unknown command. Type "help" for available commands.')
        return True

    async def run_async(self, **kwargs: Any) -> None:
        kb = await self.open_knowledge_base()
        output.print("\n🎯 Tome Interactive Interface", style="bold")
        output.print(HELP_TEXT, markup=False)

        try:
            while True:
                try:
                    line = await ask("tome>", default="")
                except click.Abort:
                    break

                try:
                    if not await self.dispatch(kb, line):
                        break
                except TomeError as e:
                    self.log_error(e.message)
                    output.print(f"❌ Error: {e}", style="red", markup=False)
        finally:
            await self.save_changes(kb)

        output.print("👋 Goodbye!")

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        def interactive() -> None:
            self.run()

        return interactive
