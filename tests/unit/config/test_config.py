"""Unit tests for config.py — AppConfig and load_config()."""

import os
from unittest.mock import patch

import pytest

from sharepoint_mcp.config import AppConfig, load_config

_ENV = {
    "TENANT_ID": "test-tenant-id",
    "CLIENT_ID": "test-client-id",
    "CLIENT_SECRET": "test-secret",
    "SITE_ID": "contoso.sharepoint.com,site-guid,web-guid",
}


# ---------------------------------------------------------------------------
# AppConfig tests
# ---------------------------------------------------------------------------


class TestAppConfig:
    def test_all_fields_have_defaults(self) -> None:
        config = AppConfig()
        assert config.tenant_id == ""
        assert config.site_id == ""
        assert config.log_level == "INFO"
        assert config.transport == "stdio"

    def test_is_immutable(self) -> None:
        config = AppConfig(site_id="s1")
        with pytest.raises(AttributeError):
            config.site_id = "s2"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# load_config tests
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_reads_credentials_and_site_from_env(self) -> None:
        with patch.dict(os.environ, _ENV, clear=True):
            config = load_config()
        assert config.tenant_id == "test-tenant-id"
        assert config.client_id == "test-client-id"
        assert config.client_secret == "test-secret"
        assert config.site_id == "contoso.sharepoint.com,site-guid,web-guid"

    def test_missing_variables_default_to_empty_strings(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()
        assert config == AppConfig()

    def test_log_level_is_uppercased(self) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            config = load_config()
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("transport", ["stdio", "sse", "streamable-http"])
    def test_reads_transport(self, transport: str) -> None:
        with patch.dict(os.environ, {"MCP_TRANSPORT": transport}, clear=True):
            config = load_config()
        assert config.transport == transport

    def test_rejects_unknown_transport(self) -> None:
        with (
            patch.dict(os.environ, {"MCP_TRANSPORT": "carrier-pigeon"}, clear=True),
            pytest.raises(ValueError, match="carrier-pigeon"),
        ):
            load_config()
