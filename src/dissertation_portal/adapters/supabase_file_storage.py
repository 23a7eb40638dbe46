"""Supabase Storage object store."""

from dataclasses import dataclass

from supabase import Client

from dissertation_portal.services.dashboard import FileStorage


@dataclass
class SupabaseFileStorage(FileStorage):
    """Stores exchanged files in a public Supabase bucket."""

    client: Client
    bucket: str

    def upload(self, path: str, content: bytes, content_type: str | None) -> None:
        """Upload file bytes to the bucket."""
        file_options = {"content-type": content_type} if content_type else None
        self.client.storage.from_(self.bucket).upload(
            path, content, file_options=file_options
        )

    def get_public_url(self, path: str) -> str:
        """Return the public URL of a stored object."""
        return self.client.storage.from_(self.bucket).get_public_url(path)

