"""
AppStruct GraphQL client.

One POST per call, {query, variables} in, {data, errors} out. The login
mutation is the only authentication step; tokens are never cached between
invocations and the refresh token is ignored.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, List, Optional

from node_sdk.basenode import AuthenticationError, NodeApiError, NodeValidationError
from node_sdk.http import HttpClient

from appstruct import queries
from appstruct.config import AppStructSettings, get_settings

logger = logging.getLogger(__name__)

# Plain decimal or exponent notation; no underscores, nan or inf
NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def coerce_project_id(value: Any) -> float:
    """Project ids travel as GraphQL Float; reject anything non-numeric."""
    text = str(value).strip()
    if isinstance(value, bool) or not NUMERIC_RE.match(text) or not math.isfinite(float(text)):
        raise NodeValidationError(f'Project ID must be numeric, got "{value}"')
    return float(text)


def record_data(record: Dict[str, Any]) -> Dict[str, Any]:
    """The data column of a record, or {} when it is not a JSON object."""
    data = record.get("data")
    return data if isinstance(data, dict) else {}


def first_error_message(errors: List[Any]) -> str:
    first = errors[0]
    if isinstance(first, dict):
        return str(first.get("message") or first)
    return str(first)


class AppStructClient:
    """
    Thin client for the AppStruct GraphQL endpoint.

    Usage:
        client = AppStructClient()
        client.login(email, password)
        data = client.execute(queries.MY_PROJECTS_QUERY)
    """

    def __init__(
        self,
        settings: Optional[AppStructSettings] = None,
        http: Optional[HttpClient] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._http = http or HttpClient(
            base_url=self.settings.api_base_url,
            default_headers={"Content-Type": "application/json"},
            timeout=self.settings.request_timeout_s,
        )
        self._token: Optional[str] = None

    @classmethod
    def from_credentials(
        cls,
        credentials: Dict[str, Any],
        settings: Optional[AppStructSettings] = None,
    ) -> "AppStructClient":
        """Build a client and log in with an appStructApi credential dict."""
        client = cls(settings=settings)
        client.login(credentials.get("email", ""), credentials.get("password", ""))
        return client

    @property
    def token(self) -> Optional[str]:
        return self._token

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _post(self, query: str, variables: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        response = self._http.post(self.settings.graphql_path, json=payload)
        body = response.json_or_none()

        if isinstance(body, dict) and body.get("errors"):
            return body

        if not response.ok:
            raise NodeApiError(
                f"AppStruct API request failed with HTTP {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:1000] if response.text else None,
                description=response.reason,
            )

        if not isinstance(body, dict):
            raise NodeApiError(
                "AppStruct API returned a non-JSON response",
                status_code=response.status_code,
                response_body=response.text[:1000] if response.text else None,
            )

        return body

    def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Run one GraphQL document and return its data object.

        Raises:
            NodeApiError: The response carried a non-empty errors array,
                whatever its data, or the HTTP call failed.
        """
        body = self._post(query, variables)

        errors = body.get("errors")
        if errors:
            raise NodeApiError(
                first_error_message(errors),
                description=str(errors[0]),
                errors=errors,
            )

        return body.get("data") or {}

    def login(self, email: str, password: str) -> str:
        """Exchange email/password for a bearer token."""
        body = self._post(
            queries.LOGIN_MUTATION,
            {"loginInput": {"email": email, "password": password}},
        )

        errors = body.get("errors")
        token = ((body.get("data") or {}).get("login") or {}).get("access_token")
        if errors or not token:
            raise AuthenticationError(
                "Authentication failed",
                description=(
                    first_error_message(errors) if errors
                    else "Invalid credentials or login error"
                ),
                errors=errors or [],
            )

        self._token = token
        self._http.set_bearer_token(token)
        logger.debug("Authenticated against %s", self.settings.graphql_url)
        return token

    # ------------------------------------------------------------------
    # Queries shared by the action and trigger nodes
    # ------------------------------------------------------------------

    def list_projects(self) -> List[Dict[str, Any]]:
        data = self.execute(queries.MY_PROJECTS_QUERY)
        return data.get("myProjects") or []

    def list_tables(self, project_id: Any) -> List[str]:
        data = self.execute(
            queries.BACKEND_TABLES_QUERY,
            {"projectId": coerce_project_id(project_id)},
        )
        return data.get("getBackendTables") or []

    def get_table_schema(self, project_id: Any, table_name: str) -> Optional[Dict[str, Any]]:
        data = self.execute(
            queries.TABLE_SCHEMA_QUERY,
            {"projectId": coerce_project_id(project_id), "tableName": table_name},
        )
        return data.get("getTableSchema")

    def get_table_data(self, project_id: Any, table_name: str) -> List[Dict[str, Any]]:
        data = self.execute(
            queries.TABLE_DATA_QUERY,
            {"projectId": coerce_project_id(project_id), "tableName": table_name},
        )
        return data.get("getTableData") or []
