"""Unit tests for connector.py — SharePointConnector behaviour."""

from unittest.mock import MagicMock, patch

import pytest

from sharepoint_mcp.config import AppConfig
from sharepoint_mcp.connector import (
    SEARCH_FIELDS,
    SharePointConnector,
    sharepoint_connector_from_config,
)
from sharepoint_mcp.graph.client import GraphApiError, GraphResponseError, UpstreamError
from sharepoint_mcp.graph.content import ContentPolicy

SITE_ID = "contoso.sharepoint.com,site-guid,web-guid"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_connector() -> tuple[SharePointConnector, MagicMock]:
    """Return (connector, mock_graph_client)."""
    mock_graph = MagicMock()
    return SharePointConnector(graph_client=mock_graph, site_id=SITE_ID), mock_graph


def _raw_hit(n: int) -> dict:  # type: ignore[type-arg]
    return {
        "resource": {
            "id": f"hit-{n}",
            "properties": {
                "name": f"doc-{n}.docx",
                "webUrl": f"https://contoso/doc-{n}.docx",
                "lastModifiedDateTime": "2024-05-01T00:00:00Z",
                "createdDateTime": "2023-05-01T00:00:00Z",
                "size": n * 100,
                "author": "Ada",
                "filetype": "docx",
            },
        }
    }


def _search_response(count: int) -> dict:  # type: ignore[type-arg]
    return {"value": [{"hitsContainers": [{"hits": [_raw_hit(i) for i in range(count)]}]}]}


def _document(name: str) -> dict:  # type: ignore[type-arg]
    return {"id": "doc-1", "name": name, "webUrl": f"https://contoso/{name}"}


# ---------------------------------------------------------------------------
# search_documents tests
# ---------------------------------------------------------------------------


class TestSearchDocuments:
    def test_posts_drive_item_search_request(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.post.return_value = _search_response(1)

        connector.search_documents("budget", 7)

        path, body = mock_graph.post.call_args[0]
        assert path == "/search/query"
        request = body["requests"][0]
        assert request["entityTypes"] == ["driveItem"]
        assert request["query"] == {"queryString": "budget"}
        assert request["from"] == 0
        assert request["size"] == 7
        assert request["fields"] == SEARCH_FIELDS

    def test_maps_hits(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.post.return_value = _search_response(2)

        hits = connector.search_documents("budget", 10)

        assert [h.id for h in hits] == ["hit-0", "hit-1"]
        assert all(h.query == "budget" for h in hits)
        assert set(hits[0].to_dict()) == {
            "id",
            "name",
            "url",
            "lastModified",
            "created",
            "size",
            "author",
            "type",
        }

    def test_never_returns_more_than_max_results(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.post.return_value = _search_response(25)

        hits = connector.search_documents("budget", 3)

        assert len(hits) == 3

    def test_default_max_results_is_ten(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.post.return_value = _search_response(0)

        connector.search_documents("budget")

        assert mock_graph.post.call_args[0][1]["requests"][0]["size"] == 10

    def test_container_without_hits_is_empty_result(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.post.return_value = {"value": [{"hitsContainers": [{"total": 0}]}]}

        assert connector.search_documents("nothing") == []

    @pytest.mark.parametrize(
        "response",
        [
            {},
            {"value": []},
            {"value": [{"searchTerms": ["x"]}]},
            {"value": [{"hitsContainers": []}]},
        ],
    )
    def test_missing_hit_container_raises(self, response: dict) -> None:  # type: ignore[type-arg]
        connector, mock_graph = _make_connector()
        mock_graph.post.return_value = response

        with pytest.raises(GraphResponseError):
            connector.search_documents("budget")

    @pytest.mark.parametrize(
        "response",
        [
            {"value": ["not-an-object"]},
            {"value": [{"hitsContainers": {"0": {}}}]},
            {"value": [{"hitsContainers": ["not-an-object"]}]},
            {"value": [{"hitsContainers": [{"hits": {"x": 1}}]}]},
            {"value": [{"hitsContainers": [{"hits": ["not-an-object"]}]}]},
            {"value": [{"hitsContainers": [{"hits": [{"resource": {"id": 7}}]}]}]},
            {
                "value": [
                    {"hitsContainers": [{"hits": [{"resource": {"id": "h", "properties": ["a"]}}]}]}
                ]
            },
        ],
    )
    def test_malformed_search_shape_raises_response_error(
        self,
        response: dict,  # type: ignore[type-arg]
    ) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.post.return_value = response

        with pytest.raises(GraphResponseError) as exc_info:
            connector.search_documents("budget")
        assert isinstance(exc_info.value, UpstreamError)

    def test_upstream_failure_propagates(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.post.side_effect = GraphApiError(403, "Access denied")

        with pytest.raises(GraphApiError):
            connector.search_documents("budget")

    @pytest.mark.parametrize("max_results", [0, -1])
    def test_non_positive_max_results_raises(self, max_results: int) -> None:
        connector, mock_graph = _make_connector()

        with pytest.raises(ValueError, match="positive"):
            connector.search_documents("budget", max_results)
        mock_graph.post.assert_not_called()


# ---------------------------------------------------------------------------
# get_document_content tests
# ---------------------------------------------------------------------------


class TestGetDocumentContent:
    @pytest.mark.parametrize("name", ["a.txt", "b.HTML", "c.md", "d.Json", "e.csv"])
    def test_text_types_return_content_verbatim(self, name: str) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = _document(name)
        mock_graph.get_content.return_value = b"line 1\nline 2\n"

        result = connector.get_document_content("doc-1")

        assert result.policy is ContentPolicy.RAW_TEXT
        assert result.content == "line 1\nline 2\n"

    @pytest.mark.parametrize("name", ["a.docx", "b.XLSX", "c.pptx"])
    def test_office_types_return_raw_payload(self, name: str) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = _document(name)
        mock_graph.get_content.return_value = b"PK\x03\x04 raw office bytes"

        result = connector.get_document_content("doc-1")

        assert result.policy is ContentPolicy.OFFICE_PAYLOAD
        assert result.content == b"PK\x03\x04 raw office bytes"

    def test_pdf_returns_placeholder(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = _document("report.pdf")
        mock_graph.get_content.return_value = b"%PDF-1.7 real content"

        result = connector.get_document_content("doc-1")

        assert result.content == "PDF content would be extracted here"
        mock_graph.get_content.assert_called_once()

    def test_unsupported_type_skips_content_call(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = _document("diagram.png")

        result = connector.get_document_content("doc-1")

        assert result.content == "Content extraction not supported for file type: png"
        mock_graph.get_content.assert_not_called()

    def test_requests_metadata_then_content_paths(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = _document("a.txt")
        mock_graph.get_content.return_value = b""

        result = connector.get_document_content("doc-1")

        mock_graph.get.assert_called_once_with(f"/sites/{SITE_ID}/drive/items/doc-1")
        mock_graph.get_content.assert_called_once_with(
            f"/sites/{SITE_ID}/drive/items/doc-1/content"
        )
        assert result.metadata.name == "a.txt"
        assert result.metadata.file_type == "txt"

    def test_metadata_failure_propagates(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.side_effect = GraphApiError(404, "Item not found")

        with pytest.raises(GraphApiError):
            connector.get_document_content("missing")
        mock_graph.get_content.assert_not_called()

    def test_content_failure_propagates(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = _document("a.md")
        mock_graph.get_content.side_effect = GraphApiError(500, "Server error")

        with pytest.raises(GraphApiError):
            connector.get_document_content("doc-1")

    def test_metadata_without_name_raises_response_error(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = {"id": "doc-1"}

        with pytest.raises(GraphResponseError):
            connector.get_document_content("doc-1")


# ---------------------------------------------------------------------------
# Listing tests
# ---------------------------------------------------------------------------


class TestListings:
    def test_list_sites_calls_sites_endpoint(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = {"value": [{"id": "s1", "displayName": "HR"}]}

        sites = connector.list_sites()

        mock_graph.get.assert_called_once_with("/sites")
        assert [s.display_name for s in sites] == ["HR"]

    def test_list_libraries_is_scoped_to_site(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = {"value": [{"id": "d1", "name": "Documents"}]}

        libraries = connector.list_libraries()

        mock_graph.get.assert_called_once_with(f"/sites/{SITE_ID}/drives")
        assert libraries[0].name == "Documents"

    def test_list_folder_contents_without_id_targets_root(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = {"value": []}

        connector.list_folder_contents()

        mock_graph.get.assert_called_once_with(f"/sites/{SITE_ID}/drive/root/children")

    def test_list_folder_contents_with_id_targets_folder(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = {"value": [{"id": "f1", "name": "a.txt"}]}

        items = connector.list_folder_contents("folder-9")

        mock_graph.get.assert_called_once_with(
            f"/sites/{SITE_ID}/drive/items/folder-9/children"
        )
        assert items[0].name == "a.txt"

    def test_root_and_folder_paths_are_distinct(self) -> None:
        connector, _ = _make_connector()
        assert connector.folder_children_path(None) != connector.folder_children_path("f1")
        assert connector.folder_children_path("") == connector.folder_children_path(None)

    def test_listing_without_value_raises(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = {"unexpected": True}

        with pytest.raises(GraphResponseError):
            connector.list_libraries()

    @pytest.mark.parametrize(
        "child",
        [
            {"id": "f1", "name": "Projects", "folder": True},
            {"id": "f1", "name": "a.txt", "lastModifiedBy": "bob"},
            {"id": "f1", "name": 12},
        ],
    )
    def test_malformed_folder_child_raises_response_error(
        self,
        child: dict,  # type: ignore[type-arg]
    ) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.return_value = {"value": [child]}

        with pytest.raises(GraphResponseError):
            connector.list_folder_contents("folder-9")

    def test_listing_failure_propagates(self) -> None:
        connector, mock_graph = _make_connector()
        mock_graph.get.side_effect = GraphApiError(401, "Unauthorized")

        with pytest.raises(GraphApiError):
            connector.list_sites()


# ---------------------------------------------------------------------------
# Factory tests
# ---------------------------------------------------------------------------


class TestFromConfig:
    def test_binds_site_and_builds_graph_client(self) -> None:
        config = AppConfig(tenant_id="t", client_id="c", client_secret="s", site_id="site-7")

        with patch("sharepoint_mcp.connector.graph_client_from_config") as mock_factory:
            connector = sharepoint_connector_from_config(config)

        mock_factory.assert_called_once_with(config)
        assert connector.site_id == "site-7"
