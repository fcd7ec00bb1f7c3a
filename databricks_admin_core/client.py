"""
Databricks REST API Client

Request dispatcher shared by every operation: one HTTP request per call,
uniform error shape, no retries.
"""

import json
import logging
from typing import Any, Dict, Optional

import requests

from .config import WorkspaceConfig
from .errors import ApiError, TransportError
from .identity import user_agent

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
SCIM_CONTENT_TYPE = "application/scim+json"

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")
# Methods whose payload travels as query parameters instead of a body
QUERY_METHODS = ("GET", "DELETE")


def _query_value(value: Any) -> Any:
    # requests renders True as "True"; the REST API expects "true"
    if isinstance(value, bool):
        return str(value).lower()
    return value


def _error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            if body.get(key):
                return str(body[key])
    return fallback


class DatabricksClient:
    """Client for making requests to Databricks REST APIs.

    Every call performs exactly one round trip. Failures are raised as
    ``ApiError`` (non-2xx) or ``TransportError`` (no response); retrying is
    left to the caller.
    """

    def __init__(self, config: WorkspaceConfig, session: Optional[requests.Session] = None):
        """
        Initialize the dispatcher.

        Args:
            config: Workspace configuration (host, credentials, API version)
            session: Optional pre-built requests session (connection pooling, proxies)
        """
        self.config = config
        self._session = session or requests.Session()

    def __enter__(self) -> "DatabricksClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()

    @property
    def headers(self) -> Dict[str, str]:
        """Authentication and user-agent headers for one request."""
        headers = dict(self.config.auth_headers())
        headers["User-Agent"] = user_agent()
        return headers

    def build_url(self, path: str, api_version: Optional[str] = None) -> str:
        """
        Build the absolute URL for a normalized path.

        Args:
            path: Path suffix (e.g., "clusters/get") or a full "/api/..." path
            api_version: Per-endpoint API version; defaults to the configured one

        Returns:
            URL of the form ``<host>/api/<version>/<path>``
        """
        if path.startswith("/api/"):
            return f"{self.config.host}{path}"
        version = self.config.resolve_api_version(api_version)
        return f"{self.config.host}/api/{version}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        content_type: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send one request to the Databricks API.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            path: Normalized endpoint path
            payload: Query parameters (GET/DELETE) or JSON body (other methods)
            content_type: Body content type override (default: application/json)
            api_version: Per-endpoint API version

        Returns:
            Parsed JSON response (empty dict for 204 or empty responses)

        Raises:
            ApiError: If the host answers with a non-2xx status
            TransportError: If no response is obtained
            ValueError: If the method is not supported
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: '{method}'. Valid methods: {list(HTTP_METHODS)}")

        url = self.build_url(path, api_version)
        headers = self.headers
        params = None
        data = None

        if method in QUERY_METHODS:
            params = {k: _query_value(v) for k, v in (payload or {}).items() if v is not None}
        else:
            headers["Content-Type"] = content_type or JSON_CONTENT_TYPE
            data = json.dumps(payload or {})

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self.config.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed without a response: {e}")
            raise TransportError(f"Request to {url} failed: {e}", endpoint=url) from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        return self._parse_response(response, method, url)

    def _parse_response(self, response: requests.Response, method: str, url: str) -> Dict[str, Any]:
        if not 200 <= response.status_code < 300:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            message = _error_message(body, response.text or response.reason or "")
            error_code = body.get("error_code") if isinstance(body, dict) else None
            logger.warning(f"{method} {url} returned {response.status_code}: {message}")
            raise ApiError(
                http_status=response.status_code,
                message=message,
                endpoint=url,
                error_code=error_code,
                body=body,
            )

        # Handle 204 No Content responses
        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                http_status=response.status_code,
                message=f"Response was not valid JSON: {response.text[:200]}",
                endpoint=url,
                body=response.text,
            ) from e

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        """Make GET request to Databricks API."""
        return self.request("GET", path, params, **kwargs)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        """Make POST request to Databricks API."""
        return self.request("POST", path, json, **kwargs)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        """Make PUT request to Databricks API."""
        return self.request("PUT", path, json, **kwargs)

    def patch(self, path: str, json: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        """Make PATCH request to Databricks API."""
        return self.request("PATCH", path, json, **kwargs)

    def delete(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        """Make DELETE request to Databricks API."""
        return self.request("DELETE", path, params, **kwargs)
