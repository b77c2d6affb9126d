"""
HTTP Client - Timeout-bounded HTTP requests for nodes.

All HTTP calls MUST use timeouts.
This module wraps requests with a default timeout, default headers and
structured errors. There is no retry: a failed call fails the operation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import requests
from requests.exceptions import Timeout, RequestException


logger = logging.getLogger(__name__)

# Default timeout in seconds
DEFAULT_TIMEOUT = 30


class NodeTimeoutError(Exception):
    """Raised when an HTTP request times out."""

    def __init__(self, message: str, timeout: float, url: str):
        self.timeout = timeout
        self.url = url
        super().__init__(message)


class HttpApiError(Exception):
    """Transport-level failure (connection refused, DNS, TLS...)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        url: Optional[str] = None,
        method: Optional[str] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        self.url = url
        self.method = method
        super().__init__(message)


class HttpResponse:
    """
    Wrapper for HTTP response with convenient accessors.
    """

    def __init__(self, response: requests.Response):
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason(self) -> str:
        return self._response.reason or ""

    @property
    def text(self) -> str:
        return self._response.text

    @property
    def ok(self) -> bool:
        """True if status code is 2xx."""
        return self._response.ok

    def json(self) -> Any:
        """Parse response as JSON."""
        return self._response.json()

    def json_or_none(self) -> Any:
        """Parse response as JSON, None if the body is not JSON."""
        try:
            return self._response.json()
        except ValueError:
            return None

    def raise_for_status(self) -> None:
        """Raise HttpApiError if status code indicates error."""
        if not self.ok:
            raise HttpApiError(
                message=f"HTTP {self.status_code}: {self.reason}",
                status_code=self.status_code,
                response_body=self.text[:1000] if self.text else None,
                url=str(self._response.url),
                method=self._response.request.method if self._response.request else None,
            )


class HttpClient:
    """
    HTTP client with timeout enforcement and bearer-token injection.

    All requests have explicit timeouts.

    Usage:
        client = HttpClient(base_url="https://api.appstruct.cloud")
        client.set_bearer_token(token)
        response = client.post("/graphql", json={"query": "..."})
    """

    def __init__(
        self,
        base_url: str = "",
        default_headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        bearer_token: Optional[str] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Base URL for all requests
            default_headers: Headers to include in all requests
            timeout: Default timeout in seconds (REQUIRED)
            bearer_token: Bearer token for Authorization header
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers: Dict[str, str] = dict(default_headers or {})

        if bearer_token:
            self.set_bearer_token(bearer_token)

    def set_bearer_token(self, token: str) -> None:
        self.headers["Authorization"] = f"Bearer {token}"

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Union[Dict[str, Any], str, bytes]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> HttpResponse:
        """
        Make HTTP request with timeout enforcement.

        Non-2xx responses are returned, not raised: callers such as GraphQL
        clients need the error body.

        Raises:
            NodeTimeoutError: If request times out
            HttpApiError: If the request could not be made
        """
        url = f"{self.base_url}{endpoint}" if self.base_url else endpoint
        request_headers = {**self.headers, **(headers or {})}
        request_timeout = timeout or self.timeout

        logger.debug("HTTP %s %s", method, url)

        try:
            response = requests.request(
                method=method,
                url=url,
                params=params,
                json=json,
                data=data,
                headers=request_headers,
                timeout=request_timeout,
                **kwargs,
            )
            return HttpResponse(response)

        except Timeout as e:
            raise NodeTimeoutError(
                message=f"Request timed out after {request_timeout}s",
                timeout=request_timeout,
                url=url,
            ) from e

        except RequestException as e:
            raise HttpApiError(
                message=f"Request failed: {e}",
                url=url,
                method=method,
            ) from e

    def post(
        self,
        endpoint: str,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Union[Dict[str, Any], str, bytes]] = None,
        **kwargs: Any,
    ) -> HttpResponse:
        """Make POST request."""
        return self.request("POST", endpoint, json=json, data=data, **kwargs)
