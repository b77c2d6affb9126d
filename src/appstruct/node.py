"""
AppStruct action node - project, table, column and record operations.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from node_sdk.basenode import BaseNode, NodeExecutionData

from appstruct.client import AppStructClient
from appstruct.observability import with_node_context
from appstruct.operations import dispatch

logger = logging.getLogger(__name__)

CREDENTIAL_NAME = "appStructApi"

PROJECT_ID_DESCRIPTION = (
    "The project to work with. Choose from the list, or specify an ID using an expression."
)
TABLE_NAME_DESCRIPTION = (
    "The table to work with. Choose from the list, or specify an ID using an expression."
)


def project_id_parameter(description: str, display_options: Dict[str, Any] | None = None) -> Dict[str, Any]:
    param: Dict[str, Any] = {
        "displayName": "Project Name or ID",
        "name": "projectId",
        "type": "options",
        "typeOptions": {"loadOptionsMethod": "getProjects"},
        "default": "",
        "required": True,
        "description": description,
    }
    if display_options:
        param["displayOptions"] = display_options
    return param


def table_name_parameter(description: str, display_options: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "displayName": "Table Name or ID",
        "name": "tableName",
        "type": "options",
        "typeOptions": {
            "loadOptionsMethod": "getTables",
            "loadOptionsDependsOn": ["projectId"],
        },
        "displayOptions": display_options,
        "default": "",
        "required": True,
        "description": description,
    }


class AppStructOptionsMixin:
    """Dropdown loaders shared by the action and trigger nodes."""

    option_loaders = {
        "getProjects": "get_projects_options",
        "getTables": "get_tables_options",
    }

    def _client(self) -> AppStructClient:
        return AppStructClient.from_credentials(self.get_credentials(CREDENTIAL_NAME))

    def get_projects_options(self) -> List[Dict[str, Any]]:
        projects = self._client().list_projects()
        return [
            {"name": project.get("projectName"), "value": str(project.get("id"))}
            for project in projects
        ]

    def get_tables_options(self) -> List[Dict[str, Any]]:
        project_id = self.get_node_parameter("projectId", 0, "")
        if not project_id:
            return []
        tables = self._client().list_tables(project_id)
        return [{"name": name, "value": name} for name in tables]


class AppStructNode(AppStructOptionsMixin, BaseNode):
    """
    AppStruct node.

    Logs in once per execution, then runs the selected operation for every
    input item in order. With continue_on_fail set, a failing item yields
    {"error": message} and the batch goes on.
    """

    type = "appStruct"
    version = 1

    description = {
        "displayName": "AppStruct",
        "name": "appStruct",
        "icon": "file:appstruct.svg",
        "group": ["transform"],
        "version": 1,
        "subtitle": '={{$parameter["operation"] + ": " + $parameter["resource"]}}',
        "description": "Interact with AppStruct API",
        "defaults": {"name": "AppStruct"},
        "inputs": ["main"],
        "outputs": ["main"],
        "credentials": [
            {"name": CREDENTIAL_NAME, "required": True},
        ],
    }

    properties = {
        "parameters": [
            {
                "displayName": "Resource",
                "name": "resource",
                "type": "options",
                "noDataExpression": True,
                "options": [
                    {"name": "Table", "value": "table"},
                    {"name": "Record", "value": "record"},
                    {"name": "Column", "value": "column"},
                    {"name": "Project", "value": "project"},
                ],
                "default": "table",
            },
            # Table operations
            {
                "displayName": "Operation",
                "name": "operation",
                "type": "options",
                "noDataExpression": True,
                "displayOptions": {"show": {"resource": ["table"]}},
                "options": [
                    {"name": "Create", "value": "create", "description": "Create a new table", "action": "Create a table"},
                    {"name": "Get Many", "value": "getMany", "description": "Get all tables in a project", "action": "Get many tables"},
                    {"name": "Get Schema", "value": "getSchema", "description": "Get table schema", "action": "Get table schema"},
                    {"name": "Delete", "value": "delete", "description": "Delete a table", "action": "Delete a table"},
                ],
                "default": "getMany",
            },
            # Record operations
            {
                "displayName": "Operation",
                "name": "operation",
                "type": "options",
                "noDataExpression": True,
                "displayOptions": {"show": {"resource": ["record"]}},
                "options": [
                    {"name": "Create", "value": "create", "description": "Insert a new record", "action": "Create a record"},
                    {"name": "Update", "value": "update", "description": "Update an existing record", "action": "Update a record"},
                    {"name": "Delete", "value": "delete", "description": "Delete a record", "action": "Delete a record"},
                    {"name": "Get Many", "value": "getMany", "description": "Get records from a table", "action": "Get many records"},
                ],
                "default": "getMany",
            },
            # Column operations
            {
                "displayName": "Operation",
                "name": "operation",
                "type": "options",
                "noDataExpression": True,
                "displayOptions": {"show": {"resource": ["column"]}},
                "options": [
                    {"name": "Add", "value": "add", "description": "Add a column to a table", "action": "Add a column"},
                    {"name": "Delete", "value": "delete", "description": "Delete a column from a table", "action": "Delete a column"},
                ],
                "default": "add",
            },
            # Project operations
            {
                "displayName": "Operation",
                "name": "operation",
                "type": "options",
                "noDataExpression": True,
                "displayOptions": {"show": {"resource": ["project"]}},
                "options": [
                    {"name": "Get Many", "value": "getMany", "description": "Get all projects", "action": "Get many projects"},
                ],
                "default": "getMany",
            },
            project_id_parameter(
                PROJECT_ID_DESCRIPTION,
                {"show": {"resource": ["table", "record", "column"]}},
            ),
            table_name_parameter(
                TABLE_NAME_DESCRIPTION,
                {"show": {"resource": ["record", "column"]}},
            ),
            {
                "displayName": "Table Name",
                "name": "tableName",
                "type": "string",
                "displayOptions": {
                    "show": {"resource": ["table"], "operation": ["create", "getSchema", "delete"]},
                },
                "default": "",
                "required": True,
                "description": "Name of the table",
            },
            {
                "displayName": "Record ID",
                "name": "recordId",
                "type": "string",
                "displayOptions": {
                    "show": {"resource": ["record"], "operation": ["update", "delete"]},
                },
                "default": "",
                "required": True,
                "description": "ID of the record to update or delete",
            },
            {
                "displayName": "Column Name",
                "name": "columnName",
                "type": "string",
                "displayOptions": {"show": {"resource": ["column"]}},
                "default": "",
                "required": True,
                "description": "Name of the column",
            },
            {
                "displayName": "Column Type",
                "name": "columnType",
                "type": "options",
                "displayOptions": {"show": {"resource": ["column"], "operation": ["add"]}},
                "options": [
                    {"name": "Boolean", "value": "boolean"},
                    {"name": "Date", "value": "date"},
                    {"name": "DateTime", "value": "datetime"},
                    {"name": "Number", "value": "number"},
                    {"name": "Text", "value": "text"},
                ],
                "default": "text",
                "required": True,
                "description": "Type of the column",
            },
            {
                "displayName": "Is Nullable",
                "name": "isNullable",
                "type": "boolean",
                "displayOptions": {"show": {"resource": ["column"], "operation": ["add"]}},
                "default": True,
                "description": "Whether the column can contain null values",
            },
            {
                "displayName": "Data",
                "name": "data",
                "type": "json",
                "displayOptions": {
                    "show": {"resource": ["record"], "operation": ["create", "update"]},
                },
                "default": "{}",
                "required": True,
                "description": "Record data as JSON object",
            },
            {
                "displayName": "Limit",
                "name": "limit",
                "type": "number",
                "typeOptions": {"minValue": 1},
                "displayOptions": {"show": {"resource": ["record"], "operation": ["getMany"]}},
                "default": 50,
                "description": "Max number of results to return",
            },
        ],
        "credentials": [
            {"name": CREDENTIAL_NAME, "required": True},
        ],
    }

    def execute(self) -> List[List[NodeExecutionData]]:
        items = self.get_input_data()
        client = self._client()

        results: List[NodeExecutionData] = []
        for i, _item in enumerate(items):
            try:
                resource = self.get_node_parameter("resource", i, "table")
                operation = self.get_node_parameter("operation", i, "getMany")

                response = dispatch(self, client, resource, operation, i)

                if isinstance(response, list):
                    results.extend({"json": entry, "pairedItem": {"item": i}} for entry in response)
                else:
                    results.append({"json": response, "pairedItem": {"item": i}})

            except Exception as e:
                if not self.continue_on_fail:
                    raise
                logger.warning(
                    "AppStruct item failed, continuing: %s",
                    e,
                    extra=with_node_context(node_type=self.type, item_index=i),
                )
                results.append({"json": {"error": str(e)}, "pairedItem": {"item": i}})

        return [results]
