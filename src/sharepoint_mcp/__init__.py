"""MCP server for browsing and searching SharePoint through Microsoft Graph."""

__version__ = "1.0.0"
