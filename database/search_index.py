"""Search index lookups backed by Qdrant payload filtering."""

from typing import Any, Optional

from qdrant_client import AsyncQdrantClient
from qdrant_client.http.models import FieldCondition, Filter, MatchValue

from core.config import get_settings
from core.exceptions import SearchIndexError
from core.logger import LoggerMixin


class SearchIndex(LoggerMixin):
    """
    Exact-match document lookups against the article and case collections.

    Documents are the point payloads; no vectors are read.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> None:
        self._settings = get_settings()
        self._url = url or self._settings.QDRANT_URL
        self._api_key = api_key or self._settings.QDRANT_API_KEY
        self._page_size = page_size or self._settings.SEARCH_PAGE_SIZE
        self._client: Optional[AsyncQdrantClient] = None

    @property
    def client(self) -> AsyncQdrantClient:
        """
        Lazily initialize and return the Qdrant client.

        Raises:
            SearchIndexError: If the client cannot be created.
        """
        if self._client is None:
            try:
                self._client = AsyncQdrantClient(
                    url=self._url,
                    api_key=self._api_key,
                    timeout=self._settings.QDRANT_TIMEOUT,
                )
                self.logger.info(
                    "Qdrant client initialized",
                    url=self._url,
                )
            except Exception as e:
                self.logger.error(
                    "Failed to initialize Qdrant client",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise SearchIndexError(
                    message="Failed to connect to Qdrant",
                    details={"url": self._url, "error": str(e)},
                ) from e
        return self._client

    async def search(
        self,
        index: str,
        match_field: str,
        match_value: Any,
    ) -> list[dict[str, Any]]:
        """
        Return every document whose ``match_field`` equals ``match_value``.

        Scrolls through all result pages. No match yields an empty list;
        client errors are logged and re-raised unchanged.

        Args:
            index: Collection name (e.g., 'articles', 'cases').
            match_field: Payload key to match.
            match_value: Exact value to match.

        Returns:
            list[dict]: Document payloads.
        """
        client = self.client
        scroll_filter = Filter(
            must=[
                FieldCondition(
                    key=match_field,
                    match=MatchValue(value=match_value),
                )
            ]
        )

        documents: list[dict[str, Any]] = []
        offset = None
        try:
            while True:
                points, offset = await client.scroll(
                    collection_name=index,
                    scroll_filter=scroll_filter,
                    limit=self._page_size,
                    offset=offset,
                    with_payload=True,
                    with_vectors=False,
                )
                documents.extend(point.payload or {} for point in points)
                if offset is None:
                    break
        except Exception as e:
            self.logger.error(
                "Search index lookup failed",
                index=index,
                field=match_field,
                value=match_value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        self.logger.debug(
            "Search index lookup completed",
            index=index,
            field=match_field,
            value=match_value,
            documents=len(documents),
        )
        return documents

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            self.logger.info("Qdrant client closed")

    async def __aenter__(self) -> "SearchIndex":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
