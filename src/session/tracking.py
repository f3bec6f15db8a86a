"""HTTP client wrapper that remembers the last request and response."""
import logging
from typing import Any, Dict, Optional
import httpx

from src.analyzer.failure_parser import APIResponse

logger = logging.getLogger(__name__)


class TrackingClient:
    """HTTP client wrapper that tracks requests and responses."""

    def __init__(self, base_client: httpx.Client):
        self._client = base_client
        self._last_request: Optional[Dict[str, Any]] = None
        self._last_response: Optional[APIResponse] = None

    def _make_request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Internal method to make request and track it."""
        self._last_request = {
            "method": method,
            "url": str(url),
            "payload": kwargs.get("json"),
        }
        # Response from a previous request must not leak into this one's context
        self._last_response = None

        logger.debug(f"{method} {url}")
        response = self._client.request(method, url, **kwargs)
        self._last_response = APIResponse.from_response(response)
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    def get(self, url: str, **kwargs) -> httpx.Response:
        """GET request with tracking."""
        return self._make_request("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> httpx.Response:
        """POST request with tracking."""
        return self._make_request("POST", url, **kwargs)

    def put(self, url: str, **kwargs) -> httpx.Response:
        """PUT request with tracking."""
        return self._make_request("PUT", url, **kwargs)

    def delete(self, url: str, **kwargs) -> httpx.Response:
        """DELETE request with tracking."""
        return self._make_request("DELETE", url, **kwargs)

    def __getattr__(self, name):
        """Delegate other attributes to underlying client."""
        return getattr(self._client, name)

    def get_last_request(self) -> Optional[Dict[str, Any]]:
        """Get last request details."""
        return self._last_request

    def get_last_response(self) -> Optional[APIResponse]:
        """Get last response snapshot."""
        return self._last_response

    def reset(self) -> None:
        """Forget the tracked request/response pair."""
        self._last_request = None
        self._last_response = None
