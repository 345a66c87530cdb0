"""Process entry point: load configuration and serve MCP over the configured transport."""

import logging
import sys

from sharepoint_mcp import __version__
from sharepoint_mcp.config import load_config
from sharepoint_mcp.connector import sharepoint_connector_from_config
from sharepoint_mcp.server import create_server

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout belongs to the stdio transport."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def main() -> None:
    """Start the SharePoint MCP server, exiting with status 1 if startup fails."""
    configure_logging("INFO")
    try:
        config = load_config()
        configure_logging(config.log_level)
        logger.info(
            "[main] starting server; version:%s;transport:%s;site_id:%s",
            __version__,
            config.transport,
            config.site_id,
        )
        server = create_server(sharepoint_connector_from_config(config))
        server.run(transport=config.transport)  # type: ignore[arg-type]
    except Exception:
        logger.exception("[main] error starting server")
        sys.exit(1)


if __name__ == "__main__":
    main()
