"""Rendering of documents, stats and answers for the terminal."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tome.rag.types import QueryResult
from tome.store.models import Document, StoreStats

output = Console(soft_wrap=True)

PREVIEW_LENGTH = 100


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    text = " ".join(text.split())
    return text if len(text) <= length else text[:length] + "..."


def print_documents(documents: list[Document], heading: str = "Documents") -> None:
    """Print one block per document."""
    if not documents:
        output.print("📭 No documents found")
        return

    output.print(f"📚 {heading} ({len(documents)}):", style="bold")
    for i, doc in enumerate(documents, 1):
        output.print(f"\n{i}. {escape(doc.title)}", style="bold")
        output.print(f"   ID: {doc.id}")
        output.print(f"   Category: {escape(doc.metadata.category)}")
        output.print(f"   Tags: {escape(', '.join(doc.metadata.tags)) or 'none'}")
        output.print(f"   Source: {escape(doc.source)}")
        output.print(f"   Added: {doc.metadata.added_date:%Y-%m-%d %H:%M:%S}")
        output.print(f"   Preview: {escape(preview(doc.content))}", style="dim")


def _count_table(title: str, counts: dict[str, int]) -> Table:
    table = Table(title=title, show_header=False, title_justify="left")
    table.add_column("Name")
    table.add_column("Count", justify="right")
    for name, count in sorted(counts.items(), key=lambda item: item[1], reverse=True):
        table.add_row(escape(name), str(count))
    return table


def print_stats(stats: StoreStats) -> None:
    output.print("📊 Knowledge Base Statistics", style="bold")
    output.print(f"Total documents: {stats.total_documents}")
    output.print(f"Added in the last 7 days: {stats.recent_documents}")
    for title, counts in (
        ("Categories", stats.categories),
        ("Tags", stats.tags),
        ("Sources", stats.sources),
    ):
        if counts:
            output.print(_count_table(title, counts))


def print_answer(result: QueryResult) -> None:
    """Print the answer followed by its numbered sources."""
    output.print("\n📝 Response:", style="bold")
    output.print(escape(result.response))

    if result.sources:
        output.print("\n📚 Sources:", style="bold")
        for i, source in enumerate(result.sources, 1):
            score = f" [{source.score:.2f}]" if source.score is not None else ""
            output.print(f"  {i}. {escape(source.title)} ({escape(source.source)}){escape(score)}")

    if result.metadata is not None:
        output.print(
            f"\nSearched {result.metadata.total_documents} documents "
            f"at {result.metadata.query_time:%Y-%m-%d %H:%M:%S}",
            style="dim",
        )
