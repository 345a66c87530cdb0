"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

TRANSPORTS = ("stdio", "sse", "streamable-http")


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Credentials and the site binding default to empty strings and are not
    validated here: the server starts regardless, and bad values surface as
    an authentication error on the first Graph call.
    """

    tenant_id: str = ""
    client_id: str = ""
    client_secret: str = ""
    site_id: str = ""

    # Process settings
    log_level: str = "INFO"
    transport: str = "stdio"


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Environment variables (all optional):
        TENANT_ID: Azure AD tenant ID.
        CLIENT_ID: Azure AD application (client) ID.
        CLIENT_SECRET: Azure AD application client secret.
        SITE_ID: ID of the SharePoint site all per-site operations use.
        LOG_LEVEL: Root logging level (default: INFO).
        MCP_TRANSPORT: One of stdio, sse, streamable-http (default: stdio).

    Returns:
        Configured AppConfig instance.

    Raises:
        ValueError: If MCP_TRANSPORT names an unknown transport.
    """
    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown MCP_TRANSPORT '{transport}'; expected one of {TRANSPORTS}")
    return AppConfig(
        tenant_id=os.environ.get("TENANT_ID", ""),
        client_id=os.environ.get("CLIENT_ID", ""),
        client_secret=os.environ.get("CLIENT_SECRET", ""),
        site_id=os.environ.get("SITE_ID", ""),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        transport=transport,
    )
