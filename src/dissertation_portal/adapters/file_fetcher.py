"""HTTP client for fetching exchanged files."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from dissertation_portal.domain.files import FetchedFile


class FileFetcher(Protocol):
    """Interface for downloading a public file URL."""

    async def fetch(self, url: str) -> FetchedFile:
        """Download the resource at url."""


@dataclass
class HttpxFileFetcher(FileFetcher):
    """File fetcher using httpx."""

    http_client: httpx.AsyncClient
    timeout: float = 20.0

    @classmethod
    def create(cls, timeout: float = 20.0) -> "HttpxFileFetcher":
        """Create a fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True), timeout=timeout
        )

    async def fetch(self, url: str) -> FetchedFile:
        """Download the file and keep its declared content type."""
        response = await self.http_client.get(url, timeout=self.timeout)
        response.raise_for_status()
        return FetchedFile(
            content_type=response.headers.get("content-type"),
            content=response.content,
            encoding=response.charset_encoding,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
