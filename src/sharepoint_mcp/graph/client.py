"""Microsoft Graph API client with MSAL authentication."""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError

import msal

if TYPE_CHECKING:
    from sharepoint_mcp.config import AppConfig

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]
AUTHORITY_BASE_URL = "https://login.microsoftonline.com"


class UpstreamError(Exception):
    """Base class for every failure talking to the Graph API."""


class GraphAuthError(UpstreamError):
    """Raised when MSAL token acquisition fails."""


class GraphConnectionError(UpstreamError):
    """Raised when a Graph request gets no HTTP response at all."""


class GraphResponseError(UpstreamError):
    """Raised when a Graph response body does not have the expected shape."""


class GraphApiError(UpstreamError):
    """Raised when the Graph API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Graph API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class GraphClient:
    """Authenticated client for Microsoft Graph API.

    The MSAL application is built on first use rather than in the
    constructor: MSAL resolves the authority eagerly, so building it with
    empty credentials would fail before the server could start.
    """

    def __init__(self, client_id: str, client_secret: str, tenant_id: str) -> None:
        """Store the client credentials.

        Args:
            client_id: Azure AD application (client) ID.
            client_secret: Azure AD application client secret.
            tenant_id: Azure AD tenant ID.
        """
        self._client_id = client_id
        self._client_secret = client_secret
        self._authority = f"{AUTHORITY_BASE_URL}/{tenant_id}"
        self._app: msal.ConfidentialClientApplication | None = None
        self._app_lock = threading.Lock()

    def _get_app(self) -> msal.ConfidentialClientApplication:
        """Return the MSAL confidential client, building it once.

        Raises:
            GraphAuthError: If MSAL rejects the credentials or authority.
        """
        with self._app_lock:
            if self._app is None:
                try:
                    self._app = msal.ConfidentialClientApplication(
                        client_id=self._client_id,
                        client_credential=self._client_secret,
                        authority=self._authority,
                    )
                except Exception as exc:
                    logger.error(
                        "[_get_app] MSAL application could not be created; authority:%s",
                        self._authority,
                    )
                    raise GraphAuthError(f"Invalid Graph credentials: {exc}") from exc
            return self._app

    def _acquire_token(self) -> str:
        """Acquire a Bearer token using client credentials flow.

        Returns:
            Access token string.

        Raises:
            GraphAuthError: If MSAL cannot acquire a token.
        """
        app = self._get_app()
        try:
            result: dict[str, Any] = app.acquire_token_for_client(scopes=GRAPH_SCOPES) or {}
        except Exception as exc:
            logger.error(
                "[_acquire_token] token request did not complete; authority:%s", self._authority
            )
            raise GraphAuthError(f"Token request failed: {exc}") from exc
        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[_acquire_token] MSAL token acquisition failed; error:%s", error)
            raise GraphAuthError(f"Token acquisition failed: {error}: {description}")
        return str(result["access_token"])

    def _send(self, req: urllib_request.Request) -> bytes:
        """Send a prepared request and return the raw response body.

        Raises:
            GraphApiError: If the API returns a non-2xx status code.
            GraphConnectionError: If no response was received.
        """
        try:
            with urllib_request.urlopen(req) as resp:
                return resp.read()  # type: ignore[no-any-return]
        except HTTPError as exc:
            raw = exc.read()
            try:
                detail = json.loads(raw).get("error", {}).get("message", exc.reason)
            except Exception:
                detail = exc.reason
            raise GraphApiError(exc.code, detail) from exc
        except URLError as exc:
            logger.error("[_send] request failed; url:%s;reason:%s", req.full_url, exc.reason)
            raise GraphConnectionError(f"Graph request failed: {exc.reason}") from exc

    @staticmethod
    def _decode_json(body: bytes, path: str) -> dict[str, Any]:
        try:
            parsed = json.loads(body)
        except ValueError as exc:
            raise GraphResponseError(f"Response from {path} is not valid JSON") from exc
        if not isinstance(parsed, dict):
            raise GraphResponseError(f"Response from {path} is not a JSON object")
        return parsed

    def get(self, path: str) -> dict[str, Any]:
        """Perform an authenticated GET request to the Graph API.

        Args:
            path: URL path relative to BASE_URL (must start with '/').

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the API returns a non-2xx status code.
            GraphResponseError: If the body is not a JSON object.
        """
        token = self._acquire_token()
        req = urllib_request.Request(
            f"{GRAPH_BASE_URL}{path}",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
            method="GET",
        )
        return self._decode_json(self._send(req), path)

    def get_content(self, path: str) -> bytes:
        """Perform an authenticated GET request and return the raw body.

        Used for ``/content`` endpoints, which redirect to the file download
        URL; urllib follows the redirect.

        Args:
            path: URL path relative to BASE_URL (must start with '/').

        Returns:
            Raw response bytes.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the API returns a non-2xx status code.
        """
        token = self._acquire_token()
        req = urllib_request.Request(
            f"{GRAPH_BASE_URL}{path}",
            headers={"Authorization": f"Bearer {token}"},
            method="GET",
        )
        return self._send(req)

    def post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Perform an authenticated JSON POST request to the Graph API.

        Args:
            path: URL path relative to BASE_URL (must start with '/').
            payload: JSON-serializable request body.

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If the API returns a non-2xx status code.
            GraphResponseError: If the body is not a JSON object.
        """
        token = self._acquire_token()
        req = urllib_request.Request(
            f"{GRAPH_BASE_URL}{path}",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            method="POST",
        )
        return self._decode_json(self._send(req), path)


def graph_client_from_config(config: AppConfig) -> GraphClient:
    """Construct a GraphClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured GraphClient instance.
    """
    return GraphClient(
        client_id=config.client_id,
        client_secret=config.client_secret,
        tenant_id=config.tenant_id,
    )
