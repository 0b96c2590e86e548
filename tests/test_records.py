"""Tests for the document record store."""

import json
from datetime import timedelta
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from conftest import MutableClock
from tome.exceptions import StorageError, ValidationError
from tome.store.models import DocumentDetails, DocumentFilter, StoreConfig
from tome.store.records import DocumentStore, default_title


@pytest.fixture
def store(store_config: StoreConfig, clock: MutableClock) -> DocumentStore:
    return DocumentStore(store_config, clock=clock)


@pytest.mark.asyncio
async def test_add_assigns_unique_ids(store: DocumentStore) -> None:
    """Every added document gets its own id."""
    ids = set()
    for i in range(20):
        doc = await store.add(f"Document number {i} with enough text")
        ids.add(doc.id)

    assert len(ids) == 20
    assert len(store) == 20


@pytest.mark.asyncio
async def test_ids_are_never_reissued(store: DocumentStore) -> None:
    """A deleted document's id is not handed out again."""
    first = await store.add("The first document body")
    await store.remove(first.id)

    with patch("tome.store.records.uuid.uuid4", side_effect=[first.id, "fresh-id"]):
        second = await store.add("The second document body")

    assert second.id == "fresh-id"


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "\n\t"])
async def test_add_rejects_empty_content(store: DocumentStore, content: str) -> None:
    with pytest.raises(ValidationError):
        await store.add(content)

    assert len(store) == 0
    assert not store.config.documents_path.exists()


@pytest.mark.asyncio
async def test_add_defaults(store: DocumentStore, clock: MutableClock) -> None:
    doc = await store.add("Some content for the defaults test")

    assert doc.title == default_title(clock.now)
    assert doc.source == "manual-input"
    assert doc.metadata.category == "general"
    assert doc.metadata.tags == []
    assert doc.metadata.added_date == clock.now


@pytest.mark.asyncio
async def test_add_persists_record_and_text_copy(store: DocumentStore) -> None:
    doc = await store.add(
        "Python is a programming language",
        DocumentDetails(title="Python", category="tech", tags=["python", "lang"], author="Guido"),
    )

    records = json.loads(store.config.documents_path.read_text())
    assert records[0]["id"] == doc.id
    assert records[0]["metadata"]["addedDate"]
    assert records[0]["metadata"]["tags"] == ["python", "lang"]
    assert records[0]["metadata"]["author"] == "Guido"

    copy = (store.config.data_dir / f"{doc.id}.txt").read_text()
    assert copy.startswith("Title: Python\n")
    assert "Category: tech" in copy
    assert "Tags: python, lang" in copy
    assert "Author: Guido" in copy
    assert copy.endswith("\n\nPython is a programming language")


@pytest.mark.asyncio
async def test_text_copies_can_be_disabled(tmp_path: Path) -> None:
    config = StoreConfig(data_dir=tmp_path, write_text_copies=False)
    store = DocumentStore(config)

    doc = await store.add("No copy should be written for this")

    assert not (tmp_path / f"{doc.id}.txt").exists()
    assert config.documents_path.exists()


@pytest.mark.asyncio
async def test_autosave_off_defers_persistence(tmp_path: Path) -> None:
    config = StoreConfig(data_dir=tmp_path, autosave=False)
    store = DocumentStore(config)

    await store.add("Held in memory until saved")
    assert not config.documents_path.exists()

    await store.persist_to_disk()
    assert len(json.loads(config.documents_path.read_text())) == 1


@pytest.mark.asyncio
async def test_failed_persist_rolls_back_add(store: DocumentStore) -> None:
    kept = await store.add("Document saved before the disk fills up")
    failure = StorageError("Could not save documents", str(store.config.documents_path))

    with patch.object(store, "persist_to_disk", AsyncMock(side_effect=failure)):
        with pytest.raises(StorageError):
            await store.add("Document that never reaches the disk")

    assert store.documents == [kept]
    assert sorted(p.name for p in store.config.data_dir.glob("*.txt")) == [f"{kept.id}.txt"]


@pytest.mark.asyncio
async def test_max_documents_is_advisory(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    store = DocumentStore(StoreConfig(data_dir=tmp_path, max_documents=1))

    await store.add("First document in a tiny store")
    await store.add("Second document beyond the limit")

    assert len(store) == 2
    assert "above the configured maximum" in caplog.text


@pytest.mark.asyncio
async def test_load_missing_file_is_empty(store: DocumentStore) -> None:
    assert await store.load_from_disk() == []
    assert await store.load_from_disk() == []
    assert len(store) == 0


@pytest.mark.asyncio
async def test_load_round_trip(store_config: StoreConfig, store: DocumentStore) -> None:
    doc = await store.add("Round trip content", DocumentDetails(title="RT", tags=["a"]))

    reloaded = DocumentStore(store_config)
    documents = await reloaded.load_from_disk()

    assert documents == [doc]


@pytest.mark.asyncio
async def test_load_naive_dates_as_utc(store_config: StoreConfig) -> None:
    store_config.data_dir.mkdir(parents=True)
    store_config.documents_path.write_text(
        json.dumps(
            [
                {
                    "id": "legacy",
                    "title": "Legacy",
                    "content": "Old record content",
                    "source": "manual-input",
                    "metadata": {"addedDate": "2024-01-01T10:00:00", "tags": [], "category": "general"},
                }
            ]
        )
    )

    store = DocumentStore(store_config)
    [doc] = await store.load_from_disk()

    assert doc.metadata.added_date.tzinfo is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ["{not json", '{"documents": []}', '[{"id": "x"}]'])
async def test_load_malformed_file_raises(store_config: StoreConfig, payload: str) -> None:
    store_config.data_dir.mkdir(parents=True)
    store_config.documents_path.write_text(payload)

    with pytest.raises(StorageError):
        await DocumentStore(store_config).load_from_disk()


@pytest.mark.asyncio
async def test_remove(store: DocumentStore) -> None:
    doc = await store.add("Document that will be removed")
    copy = store.config.data_dir / f"{doc.id}.txt"
    assert copy.exists()

    removed = await store.remove(doc.id)

    assert removed == doc
    assert store.get(doc.id) is None
    assert not copy.exists()
    assert json.loads(store.config.documents_path.read_text()) == []
    assert await store.remove(doc.id) is None


@pytest.mark.asyncio
async def test_remove_tolerates_missing_copy(store: DocumentStore, caplog: pytest.LogCaptureFixture) -> None:
    doc = await store.add("Document whose copy disappears")
    (store.config.data_dir / f"{doc.id}.txt").unlink()

    assert await store.remove(doc.id) == doc
    assert "Could not delete document file" in caplog.text


@pytest.mark.asyncio
async def test_list_filters(store: DocumentStore) -> None:
    a = await store.add("Alpha document text", DocumentDetails(title="A", category="x", tags=["t1"]))
    b = await store.add("Beta document text", DocumentDetails(title="B", category="y", tags=["t2"]))
    c = await store.add("Gamma document text", DocumentDetails(title="C", category="x", tags=["t2", "t3"]))

    assert store.list_documents() == [a, b, c]
    assert store.list_documents(DocumentFilter(category="x")) == [a, c]
    assert store.list_documents(DocumentFilter(tags=["t1", "t2"])) == [a, b, c]
    assert store.list_documents(DocumentFilter(tags=["t3"])) == [c]
    assert store.list_documents(DocumentFilter(category="x", tags=["t2"])) == [c]
    assert store.list_documents(DocumentFilter(limit=2)) == [a, b]
    assert store.list_documents(DocumentFilter(limit=0)) == []
    assert store.list_documents(DocumentFilter(category="missing")) == []


@pytest.mark.asyncio
async def test_stats(store: DocumentStore, clock: MutableClock) -> None:
    await store.add("Old note content", DocumentDetails(category="notes", tags=["a", "b"]))
    clock.advance(days=8)
    await store.add("Web page content", DocumentDetails(source="https://example.com", category="web", tags=["a"]))

    stats = store.stats()

    assert stats.total_documents == 2
    assert stats.categories == {"notes": 1, "web": 1}
    assert stats.tags == {"a": 2, "b": 1}
    assert stats.sources == {"file": 1, "web": 1}
    assert stats.recent_documents == 1


@pytest.mark.asyncio
async def test_stats_recency_boundary_is_exclusive(store: DocumentStore, clock: MutableClock) -> None:
    added = clock.now
    await store.add("Added exactly seven days before now")

    assert store.stats(now=added + timedelta(days=7)).recent_documents == 0
    assert store.stats(now=added + timedelta(days=7, seconds=-1)).recent_documents == 1


@pytest.mark.asyncio
async def test_categories_and_tags_in_first_seen_order(store: DocumentStore) -> None:
    await store.add("First doc content", DocumentDetails(category="b", tags=["y", "x"]))
    await store.add("Second doc content", DocumentDetails(category="a", tags=["x", "z"]))

    assert store.categories() == ["b", "a"]
    assert store.all_tags() == ["y", "x", "z"]


@pytest.mark.asyncio
async def test_replace_all_syncs_text_copies(tmp_path: Path, store: DocumentStore) -> None:
    kept = await store.add("Document present before and after")
    dropped = await store.add("Document missing from the import")
    imported = await DocumentStore(StoreConfig(data_dir=tmp_path / "elsewhere")).add(
        "Document that only exists in the import", DocumentDetails(title="Imported")
    )

    await store.replace_all([kept, imported])

    data_dir = store.config.data_dir
    assert not (data_dir / f"{dropped.id}.txt").exists()
    assert (data_dir / f"{kept.id}.txt").exists()
    assert (data_dir / f"{imported.id}.txt").read_text().startswith("Title: Imported")
    assert [record["id"] for record in json.loads(store.config.documents_path.read_text())] == [
        kept.id,
        imported.id,
    ]
