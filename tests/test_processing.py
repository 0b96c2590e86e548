"""Tests for file processing, web extraction and validation."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from tome.exceptions import StorageError, ValidationError
from tome.processing.files import FileProcessorFactory, json_to_text, process_file
from tome.processing.validator import ContentValidator
from tome.processing.web import extract_page


@pytest.mark.asyncio
async def test_process_text_file(tmp_path: Path) -> None:
    path = tmp_path / "note.txt"
    path.write_text("  plain text body  \n")

    processed = await process_file(path)

    assert processed.content == "plain text body"
    assert processed.metadata["file_type"] == "text"
    assert processed.metadata["extension"] == "txt"
    assert processed.metadata["size"] > 0


@pytest.mark.asyncio
async def test_process_markdown_collects_headings(tmp_path: Path) -> None:
    path = tmp_path / "doc.md"
    path.write_text("# Title\n\nIntro\n\n## Section One\nBody\n")

    processed = await process_file(path)

    assert processed.metadata["file_type"] == "markdown"
    assert processed.metadata["headings"] == ["Title", "Section One"]


@pytest.mark.asyncio
async def test_process_json(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"name": "Ada", "skills": ["math", "code"], "meta": {"age": 36}}))

    processed = await process_file(path)

    assert "name: Ada" in processed.content
    assert "meta.age: 36" in processed.content
    assert "skills: mathcode" in processed.content
    assert processed.metadata["json_structure"] == {"name": "str", "skills": "list", "meta": "dict"}


def test_json_to_text_nested_lists() -> None:
    text = json_to_text({"items": [{"id": 1}, {"id": 2}]})

    assert "items[0].id: 1" in text
    assert "items[1].id: 2" in text


@pytest.mark.asyncio
async def test_process_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{oops")

    with pytest.raises(ValidationError):
        await process_file(path)


@pytest.mark.asyncio
async def test_process_csv(tmp_path: Path) -> None:
    path = tmp_path / "people.csv"
    path.write_text("name, role\nAda, engineer\nGrace,admiral\n")

    processed = await process_file(path)

    assert processed.content.startswith("CSV Headers: name, role\n")
    assert "Row 1:\n  name: Ada\n  role: engineer" in processed.content
    assert "Row 2:\n  name: Grace\n  role: admiral" in processed.content
    assert processed.metadata["columns"] == ["name", "role"]
    assert processed.metadata["row_count"] == 2


@pytest.mark.asyncio
async def test_unknown_extension_read_as_text(tmp_path: Path) -> None:
    path = tmp_path / "script.log"
    path.write_text("log line one")

    processed = await process_file(path)

    assert processed.content == "log line one"
    assert processed.metadata["extension"] == "log"


@pytest.mark.asyncio
async def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(StorageError):
        await process_file(tmp_path / "missing.txt")


@pytest.mark.asyncio
async def test_documents_converted_with_markitdown(tmp_path: Path) -> None:
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4")
    converter = MagicMock()
    converter.convert.return_value = MagicMock(text_content="  # Report\n\nConverted text  ", title="Report")

    with patch("tome.processing.files.markitdown.MarkItDown", return_value=converter):
        processed = await process_file(path)

    converter.convert.assert_called_once_with(str(path))
    assert processed.content == "# Report\n\nConverted text"
    assert processed.metadata["file_type"] == "pdf"


def test_factory_lookup() -> None:
    assert FileProcessorFactory.get_processor("MD") is not None
    assert FileProcessorFactory.get_processor("exe") is None
    assert ".csv" in FileProcessorFactory.supported_extensions()


def test_extract_page() -> None:
    html = """
    <html><head>
      <title> Example Page </title>
      <meta name="description" content="A short description">
      <style>body { color: red; }</style>
    </head>
    <body>
      <script>var hidden = 1;</script>
      <h1>Hello</h1>
      <p>World &amp; friends</p>
    </body></html>
    """

    page = extract_page(html, "https://example.com")

    assert page.content == "Example Page Hello World & friends"
    assert page.metadata["title"] == "Example Page"
    assert page.metadata["description"] == "A short description"
    assert page.metadata["url"] == "https://example.com"


def test_extract_page_without_title() -> None:
    page = extract_page("<p>Body only</p>", "https://example.com")

    assert page.metadata["title"] == "Untitled"
    assert page.content == "Body only"


class TestContentValidator:
    def test_is_valid_content(self) -> None:
        assert ContentValidator.is_valid_content("more than ten chars")
        assert not ContentValidator.is_valid_content("   0123456789   ")

    def test_similarity(self) -> None:
        assert ContentValidator.calculate_similarity("a b c", []) == 0.0
        assert ContentValidator.calculate_similarity("a b c", ["a b c"]) == 1.0
        assert ContentValidator.calculate_similarity("a b", ["b c"]) == pytest.approx(1 / 3)

    def test_is_duplicate(self) -> None:
        assert ContentValidator.is_duplicate("Same words here", ["same words here"])
        assert not ContentValidator.is_duplicate("Same words here", ["entirely different text"])

    def test_supported_file_types(self) -> None:
        assert ContentValidator.is_supported_file_type("notes.MD")
        assert ContentValidator.is_supported_file_type(Path("data.csv"))
        assert not ContentValidator.is_supported_file_type("binary.exe")

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://example.com", True),
            ("http://localhost:8000/a", True),
            ("ftp://example.com", False),
            ("example.com", False),
            ("", False),
        ],
    )
    def test_is_valid_url(self, url: str, expected: bool) -> None:
        assert ContentValidator.is_valid_url(url) is expected
