"""Page title fetching for newly added links."""

from __future__ import annotations

from uuid import UUID

import httpx
from bs4 import BeautifulSoup
from loguru import logger


def extract_title(document: str) -> str | None:
    """Return the whitespace-collapsed text of the page ``<title>``, or None.

    Titles inside inline SVG name the graphic, not the page, and are skipped.
    """
    soup = BeautifulSoup(document, "html.parser")
    tag = next((t for t in soup.find_all("title") if t.find_parent("svg") is None), None)
    if tag is None:
        return None
    title = " ".join(tag.get_text().split())
    return title or None


class LinkTitleService:
    """Fetches ``<title>`` for a link.  One request per link id at a time."""

    def __init__(self, client: httpx.AsyncClient, *, timeout: float = 6.0, max_bytes: int = 200_000) -> None:
        self._client = client
        self._timeout = timeout
        self._max_bytes = max_bytes
        self._in_flight: set[UUID] = set()

    async def fetch_title(self, url: str, link_id: UUID) -> str | None:
        if link_id in self._in_flight:
            return None
        self._in_flight.add(link_id)
        logger.debug("Fetching title for {}", url)
        try:
            document = await self._fetch_head(url)
        finally:
            self._in_flight.discard(link_id)

        if document is None:
            return None
        title = extract_title(document)
        if title is None:
            logger.debug("Title parse failed for {}", url)
        return title

    async def _fetch_head(self, url: str) -> str | None:
        """Read at most ``max_bytes`` of the page body and decode it."""
        headers = {"Accept": "text/html,application/xhtml+xml"}
        try:
            async with self._client.stream(
                "GET", url, headers=headers, follow_redirects=True, timeout=self._timeout
            ) as response:
                if not response.is_success:
                    logger.debug("Title fetch got {} for {}", response.status_code, url)
                    return None
                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) >= self._max_bytes:
                        break
                encoding = response.charset_encoding or "utf-8"
        except httpx.HTTPError as exc:
            logger.debug("Title fetch error for {}: {}", url, exc)
            return None

        data = bytes(body[: self._max_bytes])
        try:
            return data.decode(encoding, errors="replace")
        except LookupError:
            return data.decode("utf-8", errors="replace")
