"""Query command."""

import logging
from typing import Any

import click

from tome.cli.commands.add import parse_tags
from tome.cli.utils.command import TomeCommand
from tome.cli.utils.display import output, print_answer
from tome.rag.types import QueryOptions

logger = logging.getLogger(__name__)


class QueryCommand(TomeCommand):
    """Ask a question about the stored documents."""

    name = "query"
    help = "Query the knowledge base"

    async def run_async(self, **kwargs: Any) -> None:
        """Run the command asynchronously.

        Args:
            **kwargs: Command arguments
        """
        kb = await self.open_knowledge_base()
        options = QueryOptions(
            max_results=kwargs.get("max_results"),
            category=kwargs.get("category"),
            tags=parse_tags(kwargs.get("tags")) or None,
            include_metadata=True,
        )

        output.print("🔍 Searching...")
        result = await kb.query(kwargs["question"], options)
        print_answer(result)

    def create_command(self) -> click.Command:
        @click.command(name=self.name, help=self.help)
        @click.argument("question", type=str)
        @click.option("--max-results", type=click.IntRange(min=1), help="Maximum number of source documents")
        @click.option("--category", type=str, help="Only search documents in this category")
        @click.option("--tags", type=str, help="Only use documents carrying any of these tags")
        def query(question: str, max_results: int | None, category: str | None, tags: str | None) -> None:
            """Query the knowledge base.

            Args:
                question: The question to answer
                max_results: Maximum number of source documents
                category: Category filter
                tags: Comma-separated tag filter
            """
            self.run(question=question, max_results=max_results, category=category, tags=tags)

        return query
