"""Fetch web pages and reduce them to indexable text."""

import logging
import re
from datetime import datetime, timezone

import aiohttp
from bs4 import BeautifulSoup

from tome.exceptions import BackendError
from tome.processing.files import ProcessedContent

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
WHITESPACE = re.compile(r"\s+")


def extract_page(html: str, url: str) -> ProcessedContent:
    """Pull title, description and visible text out of an HTML page."""
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""

    description = ""
    meta = soup.find("meta", attrs={"name": "description"})
    if meta and meta.get("content"):
        description = str(meta["content"]).strip()

    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    text = WHITESPACE.sub(" ", soup.get_text(separator=" ")).strip()

    return ProcessedContent(
        content=text,
        metadata={
            "title": title or "Untitled",
            "description": description,
            "url": url,
            "scraped_at": datetime.now(timezone.utc),
        },
    )


async def scrape_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> ProcessedContent:
    """Download a page and extract its text.

    Raises:
        BackendError: If the page cannot be fetched
    """
    logger.info(f"Fetching {url}")
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
            async with session.get(url) as response:
                response.raise_for_status()
                html = await response.text()
    except (aiohttp.ClientError, TimeoutError) as e:
        raise BackendError(f"Failed to scrape URL {url}: {e}", backend="web") from e

    return extract_page(html, url)
