"""Pytest configuration and fixtures."""
import json
import os
from typing import Any, Dict, List, Optional
from unittest.mock import Mock, patch

import pytest

# Keep a developer's .env or shell from leaking into tests
for _key in list(os.environ):
    if _key.startswith("APPSTRUCT_"):
        del os.environ[_key]


LOGIN_OK = {
    "data": {
        "login": {
            "access_token": "test-access-token",
            "refresh_token": "test-refresh-token",
        }
    }
}

CREDENTIALS = {"email": "ada@example.com", "password": "s3cret"}


def make_response(payload: Any, status_code: int = 200) -> Mock:
    """Build a stand-in for requests.Response.

    payload=None produces a body that is not JSON.
    """
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = "OK" if response.ok else "Error"
    response.url = "https://api.appstruct.cloud/graphql"
    if payload is None:
        response.text = "<html>bad gateway</html>"
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.text = json.dumps(payload)
        response.json.return_value = payload
    return response


class FakeGraphQL:
    """Replays queued responses for requests.request and records each call."""

    def __init__(self) -> None:
        self.responses: List[Any] = []
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *payloads: Any, status_code: int = 200) -> "FakeGraphQL":
        for payload in payloads:
            self.responses.append(make_response(payload, status_code))
        return self

    def queue_error(self, exc: Exception) -> "FakeGraphQL":
        self.responses.append(exc)
        return self

    def __call__(self, method: str, url: str, **kwargs: Any) -> Mock:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def queries(self) -> List[str]:
        return [call["json"]["query"] for call in self.calls]

    def variables(self, index: int) -> Optional[Dict[str, Any]]:
        return self.calls[index]["json"].get("variables")


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings between tests."""
    from appstruct.config import reset_settings

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def graphql():
    """Patch the HTTP layer; responses are served in queue order."""
    fake = FakeGraphQL()
    with patch("node_sdk.http.requests.request", side_effect=fake):
        yield fake


@pytest.fixture
def make_node():
    """Build a node with an execution context around the given parameters."""
    from node_sdk.basenode import NodeExecutionContext

    def _make(node_class, parameters, input_data=None, continue_on_fail=False, item_parameters=None):
        node = node_class()
        node.continue_on_fail = continue_on_fail
        node.set_context(NodeExecutionContext(
            parameters=parameters,
            credentials={"appStructApi": dict(CREDENTIALS)},
            input_data=input_data if input_data is not None else [{"json": {}}],
            node_name="AppStruct",
            item_parameters=item_parameters,
        ))
        return node

    return _make
