"""Viewing files exchanged on approved requests."""

import html
import logging
from dataclasses import dataclass

import httpx

from dissertation_portal.adapters.file_fetcher import FileFetcher
from dissertation_portal.domain.errors import (
    BackendOperationError,
    PermissionDeniedError,
)
from dissertation_portal.domain.files import FetchedFile, FileDisplay

logger = logging.getLogger(__name__)

_TEXT_PAGE = """<html>
  <head>
    <title>File Content</title>
    <style>
      body {{
        font-family: monospace;
        white-space: pre-wrap;
        padding: 20px;
        margin: 0;
        background: #f5f5f5;
      }}
      pre {{
        background: white;
        padding: 20px;
        border-radius: 8px;
        box-shadow: 0 1px 3px rgba(0,0,0,0.1);
      }}
    </style>
  </head>
  <body>
    <pre>{content}</pre>
  </body>
</html>
"""


@dataclass
class FileViewer:
    """Shows text files inline and sends everything else to its URL."""

    fetcher: FileFetcher
    allowed_prefix: str

    async def open_file(self, url: str) -> FileDisplay:
        """Return how the file at url should be displayed."""
        if not _is_under_prefix(url, self.allowed_prefix):
            raise PermissionDeniedError("Only portal files can be opened.")
        try:
            fetched = await self.fetcher.fetch(url)
        except Exception as exc:
            logger.exception("Error handling file", extra={"url": url})
            raise BackendOperationError(
                "Error opening file. Please try again."
            ) from exc
        if fetched.content_type and "text/" in fetched.content_type:
            return FileDisplay(html=render_text_page(_decode(fetched)))
        return FileDisplay(redirect_url=url)


def render_text_page(text: str) -> str:
    """Wrap text in a standalone HTML page."""
    return _TEXT_PAGE.format(content=html.escape(text))


def _decode(fetched: FetchedFile) -> str:
    return fetched.content.decode(fetched.encoding or "utf-8", errors="replace")


def _is_under_prefix(url: str, prefix: str) -> bool:
    """Compare the normalized URL against the prefix origin and path."""
    try:
        target = httpx.URL(url)
        allowed = httpx.URL(prefix)
    except httpx.InvalidURL:
        return False
    if (target.scheme, target.host, target.port) != (
        allowed.scheme,
        allowed.host,
        allowed.port,
    ):
        return False
    # Percent-encoded dot segments are not removed by normalization.
    if ".." in target.path.split("/"):
        return False
    return target.path.startswith(allowed.path)
