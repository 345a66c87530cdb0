"""MCP server exposing the SharePoint connector as resources, a tool and prompts.

Resources and prompts fail hard: an upstream error becomes a protocol error.
The ``search-documents`` tool fails soft: the error is returned as an
``isError`` tool result and the session carries on.
"""

import asyncio
import base64
import json
import logging
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from pydantic import Field

from sharepoint_mcp import __version__
from sharepoint_mcp.connector import DEFAULT_MAX_RESULTS, SharePointConnector
from sharepoint_mcp.graph.client import UpstreamError

logger = logging.getLogger(__name__)

SERVER_NAME = "SharePoint Server"
URI_SCHEME = "sharepoint"
JSON_MIME_TYPE = "application/json"

SERVER_INSTRUCTIONS = (
    "Browse and search the documents of one SharePoint site. Use the "
    f"{URI_SCHEME}:// resources to list sites, libraries and folders or to read a "
    "document, and the search-documents tool to find documents by keyword."
)


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2)


def _document_text(content: str | bytes) -> str:
    """Render document content as resource text."""
    if isinstance(content, str):
        return content
    return _to_json({"encoding": "base64", "data": base64.b64encode(content).decode("ascii")})


def _text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def parse_max_results(raw: str | None) -> int:
    """Parse the string-typed maxResults tool argument.

    Raises:
        ValueError: If the value is not a base-10 integer.
    """
    if raw is None or not raw.strip():
        return DEFAULT_MAX_RESULTS
    return int(raw.strip(), 10)


def create_server(connector: SharePointConnector) -> FastMCP:
    """Build the MCP server around a connector.

    Args:
        connector: SharePointConnector bound to the configured site.

    Returns:
        FastMCP server with all resources, the search tool and the prompts registered.
    """
    mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    # FastMCP does not take a version; without it the handshake reports the mcp SDK's.
    mcp._mcp_server.version = __version__

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    @mcp.resource(
        f"{URI_SCHEME}://sites",
        name="sites",
        description="SharePoint sites visible to the application.",
        mime_type=JSON_MIME_TYPE,
    )
    async def sites() -> str:
        result = await asyncio.to_thread(connector.list_sites)
        return _to_json([site.to_dict() for site in result])

    @mcp.resource(
        f"{URI_SCHEME}://libraries",
        name="libraries",
        description="Document libraries of the configured site.",
        mime_type=JSON_MIME_TYPE,
    )
    async def libraries() -> str:
        result = await asyncio.to_thread(connector.list_libraries)
        return _to_json([library.to_dict() for library in result])

    @mcp.resource(
        f"{URI_SCHEME}://folder",
        name="root-folder",
        description="Contents of the root folder of the site's default library.",
        mime_type=JSON_MIME_TYPE,
    )
    async def root_folder() -> str:
        result = await asyncio.to_thread(connector.list_folder_contents, None)
        return _to_json([item.to_dict() for item in result])

    @mcp.resource(
        f"{URI_SCHEME}://folder/{{folderId}}",
        name="folder",
        description="Contents of a folder, by drive item ID.",
        mime_type=JSON_MIME_TYPE,
    )
    async def folder(folderId: str) -> str:  # noqa: N803
        result = await asyncio.to_thread(connector.list_folder_contents, folderId)
        return _to_json([item.to_dict() for item in result])

    @mcp.resource(
        f"{URI_SCHEME}://document/{{documentId}}",
        name="document",
        description="Content of a document, by drive item ID.",
    )
    async def document(documentId: str) -> str:  # noqa: N803
        result = await asyncio.to_thread(connector.get_document_content, documentId)
        return _document_text(result.content)

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    @mcp.tool(
        name="search-documents",
        description="Search the organization's SharePoint documents by keyword.",
    )
    async def search_documents(
        query: Annotated[str, Field(description="Search query to find documents")],
        maxResults: Annotated[  # noqa: N803
            str | None,
            Field(description="Maximum number of results to return (as a string)"),
        ] = None,
    ) -> CallToolResult:
        try:
            limit = parse_max_results(maxResults)
            hits = await asyncio.to_thread(connector.search_documents, query, limit)
        except (UpstreamError, ValueError) as exc:
            logger.warning(
                "[search_documents] returning error result; query:%s;error:%s", query, exc
            )
            return _text_result(f"Error searching documents: {exc}", is_error=True)
        return _text_result(_to_json([hit.to_dict() for hit in hits]))

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    @mcp.prompt(
        name="document-summary",
        description="Summarize a document's key points.",
    )
    def document_summary(
        documentId: Annotated[  # noqa: N803
            str, Field(description="The ID of the document to summarize")
        ],
    ) -> str:
        return (
            f"Please retrieve the document with ID {documentId} using the "
            f"{URI_SCHEME}://document/{documentId} resource, then provide a concise summary "
            "of its key points, main topics, and important information."
        )

    @mcp.prompt(
        name="find-relevant-documents",
        description="Find documents related to a topic.",
    )
    def find_relevant_documents(
        topic: Annotated[str, Field(description="The topic or subject to find documents about")],
        maxResults: Annotated[  # noqa: N803
            str, Field(description="Maximum number of results to return (as a string)")
        ] = "5",
    ) -> str:
        return (
            f"Please use the search-documents tool to find up to {maxResults} documents "
            f'related to "{topic}". For each document, provide the title, author, last '
            "modified date, and a brief description of what it appears to contain based on "
            "the metadata."
        )

    @mcp.prompt(
        name="explore-folder",
        description="Walk through the contents of a folder.",
    )
    def explore_folder(
        folderId: Annotated[  # noqa: N803
            str | None,
            Field(description="The ID of the folder to explore (leave empty for root folder)"),
        ] = None,
    ) -> str:
        listing = (
            "List all documents and subfolders, organizing them by type and providing key "
            "details about each item."
        )
        if folderId:
            return (
                f"Please explore the contents of the folder with ID {folderId} using the "
                f"{URI_SCHEME}://folder/{folderId} resource. {listing}"
            )
        return (
            f"Please explore the contents of the root folder using the {URI_SCHEME}://folder "
            f"resource. {listing}"
        )

    return mcp
