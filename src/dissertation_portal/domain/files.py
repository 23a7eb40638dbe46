"""Domain models for exchanged files."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedFile:
    """Raw response of a public file URL."""

    content_type: str | None
    content: bytes
    encoding: str | None = None


@dataclass(frozen=True)
class FileDisplay:
    """How a file is shown: inline HTML or a redirect to its URL."""

    html: str | None = None
    redirect_url: str | None = None

    @property
    def is_inline(self) -> bool:
        return self.html is not None
