"""OpenSearch index client for show/episode search documents.

Uses opensearch-py (sync) via asyncio.to_thread for an async API. Every
write targets the document id '<entityType>_<id>' with refresh=True, so a
write is visible to the next search once it returns.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from opensearchpy import AWSV4SignerAuth, OpenSearch, RequestsHttpConnection
from opensearchpy.exceptions import NotFoundError, OpenSearchException

from app.application.dtos.search import SearchDocument, SearchFilters
from app.core.config import Settings
from app.infrastructure.exceptions import SearchIndexError
from app.infrastructure.search.queries import (
    INDEX_MAPPINGS,
    build_featured_query,
    build_search_query,
)
from app.shared.telemetry.tracing import traced

logger = logging.getLogger(__name__)


def create_opensearch_client(settings: Settings) -> OpenSearch:
    """Build the low-level client from settings (basic auth or AWS SigV4)."""
    http_auth: Any = None
    if settings.opensearch_aws_sigv4:
        credentials = boto3.Session().get_credentials()
        http_auth = AWSV4SignerAuth(credentials, settings.aws_region, "es")
    elif settings.opensearch_username and settings.opensearch_password:
        http_auth = (
            settings.opensearch_username,
            settings.opensearch_password.get_secret_value(),
        )
    return OpenSearch(
        hosts=[settings.opensearch_endpoint],
        http_auth=http_auth,
        use_ssl=settings.opensearch_use_ssl,
        verify_certs=settings.opensearch_verify_certs,
        connection_class=RequestsHttpConnection,
        timeout=settings.opensearch_timeout_seconds,
    )


class SearchIndexClient:
    """Async wrapper over one OpenSearch index.

    Failures are raised as SearchIndexError; retrying is the caller's job.
    """

    def __init__(
        self,
        client: OpenSearch,
        index_name: str = "cms_content",
        max_results: int = 50,
    ) -> None:
        self._client = client
        self.index_name = index_name
        self.max_results = max_results

    @classmethod
    def from_settings(cls, settings: Settings) -> SearchIndexClient:
        return cls(
            create_opensearch_client(settings),
            index_name=settings.opensearch_index_name,
            max_results=settings.search_max_results,
        )

    async def ensure_index(self) -> bool:
        """Create the index with its mappings if missing. Returns True if created."""

        def _ensure() -> bool:
            if self._client.indices.exists(index=self.index_name):
                return False
            self._client.indices.create(index=self.index_name, body=INDEX_MAPPINGS)
            return True

        try:
            created = await asyncio.to_thread(_ensure)
        except OpenSearchException as e:
            raise SearchIndexError("ensure_index", str(e)) from e
        if created:
            logger.info("Created search index %s", self.index_name)
        return created

    @traced("search_index.upsert")
    async def upsert(self, document: SearchDocument) -> None:
        """Write the whole document under its index key (full overwrite)."""
        key = document.index_key

        def _index() -> Any:
            return self._client.index(
                index=self.index_name,
                id=key,
                body=document.to_source(),
                refresh=True,
            )

        try:
            await asyncio.to_thread(_index)
        except OpenSearchException as e:
            raise SearchIndexError("upsert", str(e), key) from e
        logger.debug("Indexed %s into %s", key, self.index_name)

    @traced("search_index.delete")
    async def delete(self, index_key: str) -> bool:
        """Remove a document. An already-absent document is not an error.

        Returns:
            True if a document was removed, False if none existed.
        """

        def _delete() -> Any:
            return self._client.delete(index=self.index_name, id=index_key, refresh=True)

        try:
            await asyncio.to_thread(_delete)
        except NotFoundError:
            logger.debug("Delete of %s: not in index", index_key)
            return False
        except OpenSearchException as e:
            raise SearchIndexError("delete", str(e), index_key) from e
        logger.debug("Deleted %s from %s", index_key, self.index_name)
        return True

    @traced("search_index.search")
    async def search(self, query: str, filters: SearchFilters | None = None) -> list[dict[str, Any]]:
        """Relevance-ranked document bodies, at most max_results."""
        body = build_search_query(query, filters, size=self.max_results)
        return await self._run_query("search", body)

    @traced("search_index.featured")
    async def featured(self, limit: int) -> list[dict[str, Any]]:
        """Newest document bodies first."""
        return await self._run_query("featured", build_featured_query(limit))

    async def _run_query(self, operation: str, body: dict[str, Any]) -> list[dict[str, Any]]:
        def _search() -> dict[str, Any]:
            return self._client.search(index=self.index_name, body=body)

        try:
            response = await asyncio.to_thread(_search)
        except OpenSearchException as e:
            raise SearchIndexError(operation, str(e)) from e
        return [hit["_source"] for hit in response.get("hits", {}).get("hits", [])]

    async def close(self) -> None:
        await asyncio.to_thread(self._client.close)
