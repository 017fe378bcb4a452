"""Supabase implementation of the moderation blocklist."""

from dataclasses import dataclass

from supabase import Client

from niume_ai.services.moderation import BlocklistRepository

DEFAULT_TABLE = "content_blocklist"


@dataclass
class SupabaseBlocklistRepository(BlocklistRepository):
    """Reads blocked words maintained by administrators."""

    client: Client
    table_name: str = DEFAULT_TABLE

    def list_words(self) -> list[str]:
        """Return every blocked word, lowercased."""
        response = self.client.table(self.table_name).select("word").execute()
        return [
            str(row["word"]).strip().lower()
            for row in response.data or []
            if row.get("word")
        ]
