"""SharePoint connector: the five read operations against the bound site."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sharepoint_mcp.graph.client import GraphClient, GraphResponseError, graph_client_from_config
from sharepoint_mcp.graph.content import DocumentContent, policy_for, resolve_content
from sharepoint_mcp.graph.models import (
    SEARCH_HITS,
    SEARCH_HITS_CONTAINERS,
    DocumentMetadata,
    ItemSummary,
    LibrarySummary,
    SearchHit,
    SiteSummary,
    odata_values,
)

if TYPE_CHECKING:
    from sharepoint_mcp.config import AppConfig

logger = logging.getLogger(__name__)

SEARCH_ENTITY_TYPES = ["driveItem"]
SEARCH_FIELDS = [
    "name",
    "webUrl",
    "lastModifiedDateTime",
    "createdDateTime",
    "size",
    "author",
    "filetype",
]
DEFAULT_MAX_RESULTS = 10


class SharePointConnector:
    """Read-only view of one SharePoint site through Microsoft Graph."""

    def __init__(self, graph_client: GraphClient, site_id: str) -> None:
        """Initialise the connector.

        Args:
            graph_client: Authenticated GraphClient instance.
            site_id: ID of the site that scopes drives, folders and documents.
        """
        self._graph = graph_client
        self._site_id = site_id

    @property
    def site_id(self) -> str:
        return self._site_id

    def search_documents(
        self, query: str, max_results: int = DEFAULT_MAX_RESULTS
    ) -> list[SearchHit]:
        """Run a Graph search over drive items.

        Calls POST /search/query with a single driveItem request and maps
        ``value[0].hitsContainers[0].hits`` to SearchHit objects.

        Args:
            query: Free-text search query.
            max_results: Maximum number of hits to return (at least 1).

        Returns:
            At most ``max_results`` hits, in the order Graph ranked them.

        Raises:
            ValueError: If max_results is less than 1.
            UpstreamError: If the call fails or the response has no hit container.
        """
        if max_results < 1:
            raise ValueError(f"max_results must be a positive integer, got {max_results}")

        body = {
            "requests": [
                {
                    "entityTypes": SEARCH_ENTITY_TYPES,
                    "query": {"queryString": query},
                    "from": 0,
                    "size": max_results,
                    "fields": SEARCH_FIELDS,
                }
            ]
        }
        try:
            response = self._graph.post("/search/query", body)
            raw_hits = self._first_hits_container(response).get(SEARCH_HITS) or []
            if not isinstance(raw_hits, list):
                raise GraphResponseError(f"Search response '{SEARCH_HITS}' is not a list")
            hits = [SearchHit.from_graph(raw, query) for raw in raw_hits[:max_results]]
        except Exception:
            logger.error("[search_documents] search failed; query:%s", query, exc_info=True)
            raise

        logger.info(
            "[search_documents] search complete; query:%s;max_results:%d;hits:%d",
            query,
            max_results,
            len(hits),
        )
        return hits

    def get_document_content(self, document_id: str) -> DocumentContent:
        """Fetch a document's metadata and its content.

        The file type (the name's extension, lower-cased) selects the content
        policy; see ``sharepoint_mcp.graph.content``.

        Args:
            document_id: Drive item ID of the document in the bound site.

        Returns:
            DocumentContent with metadata, the policy applied and the content.

        Raises:
            UpstreamError: If the metadata or the content call fails.
        """
        item_path = f"/sites/{self._site_id}/drive/items/{document_id}"
        try:
            metadata = DocumentMetadata.from_graph(self._graph.get(item_path))
            policy = policy_for(metadata.file_type)
            payload = None
            if policy.fetches_content:
                payload = self._graph.get_content(f"{item_path}/content")
        except Exception:
            logger.error(
                "[get_document_content] failed to get document; document_id:%s",
                document_id,
                exc_info=True,
            )
            raise

        logger.info(
            "[get_document_content] resolved content; document_id:%s;file_type:%s;policy:%s",
            document_id,
            metadata.file_type,
            policy.value,
        )
        return DocumentContent(
            metadata=metadata,
            policy=policy,
            content=resolve_content(policy, metadata.file_type, payload),
        )

    def list_sites(self) -> list[SiteSummary]:
        """List the sites visible to the application (GET /sites)."""
        try:
            response = self._graph.get("/sites")
            return [SiteSummary.from_graph(raw) for raw in odata_values(response, "sites")]
        except Exception:
            logger.error("[list_sites] failed to list sites", exc_info=True)
            raise

    def list_libraries(self) -> list[LibrarySummary]:
        """List the document libraries of the bound site."""
        try:
            response = self._graph.get(f"/sites/{self._site_id}/drives")
            return [LibrarySummary.from_graph(raw) for raw in odata_values(response, "drives")]
        except Exception:
            logger.error(
                "[list_libraries] failed to list document libraries; site_id:%s",
                self._site_id,
                exc_info=True,
            )
            raise

    def list_folder_contents(self, folder_id: str | None = None) -> list[ItemSummary]:
        """List the children of a folder, or of the drive root.

        Args:
            folder_id: Drive item ID of the folder; None or empty for the root.

        Returns:
            Files and sub-folders directly inside the folder.
        """
        path = self.folder_children_path(folder_id)
        try:
            response = self._graph.get(path)
            return [ItemSummary.from_graph(raw) for raw in odata_values(response, "children")]
        except Exception:
            logger.error(
                "[list_folder_contents] failed to list folder; folder_id:%s",
                folder_id,
                exc_info=True,
            )
            raise

    def folder_children_path(self, folder_id: str | None) -> str:
        """Return the Graph path listing a folder's children."""
        if folder_id:
            return f"/sites/{self._site_id}/drive/items/{folder_id}/children"
        return f"/sites/{self._site_id}/drive/root/children"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _first_hits_container(response: dict[str, Any]) -> dict[str, Any]:
        """Return ``value[0].hitsContainers[0]`` of a search response."""
        results = odata_values(response, "search")
        if not results or not isinstance(results[0], dict):
            raise GraphResponseError("Search response contains no result set")
        containers = results[0].get(SEARCH_HITS_CONTAINERS)
        if not isinstance(containers, list) or not containers:
            raise GraphResponseError(f"Search response has no '{SEARCH_HITS_CONTAINERS}'")
        if not isinstance(containers[0], dict):
            raise GraphResponseError(f"Search response has no '{SEARCH_HITS_CONTAINERS}'")
        return containers[0]  # type: ignore[no-any-return]


def sharepoint_connector_from_config(config: AppConfig) -> SharePointConnector:
    """Construct a SharePointConnector from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured SharePointConnector instance.
    """
    return SharePointConnector(
        graph_client=graph_client_from_config(config),
        site_id=config.site_id,
    )
