"""Checks applied to content before it is stored."""

from pathlib import Path
from urllib.parse import urlparse

from tome.processing.files import FileProcessorFactory

MIN_CONTENT_LENGTH = 10
DUPLICATE_THRESHOLD = 0.8


class ContentValidator:
    """Validation helpers for new content, files and URLs."""

    @staticmethod
    def is_valid_content(content: str) -> bool:
        """Content must have more than ten characters once trimmed."""
        return len(content.strip()) > MIN_CONTENT_LENGTH

    @staticmethod
    def calculate_similarity(content: str, existing_contents: list[str]) -> float:
        """Highest Jaccard word overlap between ``content`` and any existing text."""
        if not existing_contents:
            return 0.0

        words = set(content.lower().split())
        best = 0.0
        for existing in existing_contents:
            other = set(existing.lower().split())
            union = words | other
            if not union:
                continue
            best = max(best, len(words & other) / len(union))
        return best

    @classmethod
    def is_duplicate(cls, content: str, existing_contents: list[str]) -> bool:
        return cls.calculate_similarity(content, existing_contents) > DUPLICATE_THRESHOLD

    @staticmethod
    def is_supported_file_type(file_path: Path | str) -> bool:
        return Path(file_path).suffix.lower() in FileProcessorFactory.supported_extensions()

    @staticmethod
    def is_valid_url(url: str) -> bool:
        """Only absolute http(s) URLs with a host are accepted."""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)
