"""
URL text extraction.

Fetches a web page and converts it to plain text for use as a story prompt.
The content-extraction itself is delegated to html2text.

Usage:
    text = await extract("https://example.com/story")
"""

import re

import html2text
import httpx

from .errors import ExtractError, InputError
from .telemetry import logger

URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; QuipSync Extractor/1.0)"


def is_valid_url(url: str) -> bool:
    return isinstance(url, str) and bool(URL_RE.match(url))


def html_to_text(html: str) -> str:
    """Convert HTML to readable plain text (no links, no images)."""
    h = html2text.HTML2Text()
    h.ignore_links = True
    h.ignore_images = True
    h.ignore_emphasis = True
    h.body_width = 0
    return h.handle(html).strip()


async def extract(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Fetch `url` and return its text content.

    Raises:
        InputError: url is not an http(s) URL
        ExtractError: the fetch failed or returned a non-200 status
    """
    if not is_valid_url(url):
        raise InputError("Invalid URL")

    log = logger.bind(source="extract")
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(follow_redirects=True, timeout=timeout)

    try:
        resp = await client.get(url, headers={"User-Agent": user_agent})
    except httpx.HTTPError as e:
        raise ExtractError(f"Fetch failed for {url}: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    if resp.status_code != 200:
        raise ExtractError(f"HTTP {resp.status_code} for {url}")

    text = html_to_text(resp.text)
    log.info(f"Extracted {len(text):,} chars from {url}")
    return text


__all__ = ["URL_RE", "is_valid_url", "html_to_text", "extract"]
