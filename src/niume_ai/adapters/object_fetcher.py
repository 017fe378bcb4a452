"""HTTP client for fetching stored objects by public URL."""

from dataclasses import dataclass

import httpx

from niume_ai.domain.errors import ObjectFetchError
from niume_ai.services.moderation import FetchedObject, ObjectFetcher

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class HttpxObjectFetcher(ObjectFetcher):
    """Object fetcher using httpx."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 20

    @classmethod
    def create(cls, timeout_seconds: float = 20) -> "HttpxObjectFetcher":
        """Create a fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True),
            timeout_seconds=timeout_seconds,
        )

    async def fetch(self, url: str) -> FetchedObject:
        """Download the object at ``url``."""
        try:
            response = await self.http_client.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ObjectFetchError(
                f"Failed to fetch {url}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ObjectFetchError(f"Failed to fetch {url}: {exc!r}") from exc
        return FetchedObject(
            content=response.content,
            content_type=response.headers.get("content-type", DEFAULT_CONTENT_TYPE),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
