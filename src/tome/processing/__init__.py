"""File, web and validation processors."""

from .files import FileProcessorFactory, ProcessedContent, process_file
from .validator import ContentValidator
from .web import scrape_url

__all__ = [
    "ContentValidator",
    "FileProcessorFactory",
    "ProcessedContent",
    "process_file",
    "scrape_url",
]
