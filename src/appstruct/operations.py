"""
Operation dispatcher for the AppStruct action node.

Each (resource, operation) pair maps to one GraphQL request. Functions
return either a dict (one output item) or a list of dicts (one output item
per element). Parameters are read per item through the node.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Union

from node_sdk.basenode import BaseNode, NodeOperationError, NodeValidationError

from appstruct import queries
from appstruct.client import AppStructClient, coerce_project_id, record_data

OperationResult = Union[Dict[str, Any], List[Dict[str, Any]]]

DEFAULT_RECORD_LIMIT = 100


def parse_json_object(value: Any, item_index: int) -> Dict[str, Any]:
    """Accept a JSON string or an already parsed dict."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise NodeValidationError("Invalid JSON in data field", item_index=item_index) from None
    if not isinstance(value, dict):
        raise NodeValidationError("Invalid JSON in data field", item_index=item_index)
    return value


def parse_limit(value: Any, item_index: int) -> int:
    """Record limit as an int; empty means no limit."""
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise NodeValidationError(f'Limit must be a number, got "{value}"', item_index=item_index)
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        raise NodeValidationError(f'Limit must be a number, got "{value}"', item_index=item_index) from None


def _unknown_operation(operation: str, item_index: int) -> NodeOperationError:
    return NodeOperationError(f'Unknown operation "{operation}"', item_index=item_index)


def execute_project_operation(
    node: BaseNode,
    client: AppStructClient,
    operation: str,
    item_index: int,
) -> OperationResult:
    if operation == "getMany":
        return client.list_projects()

    raise _unknown_operation(operation, item_index)


def execute_table_operation(
    node: BaseNode,
    client: AppStructClient,
    operation: str,
    item_index: int,
) -> OperationResult:
    project_id = coerce_project_id(node.get_node_parameter("projectId", item_index, ""))

    if operation == "getMany":
        return [{"tableName": name} for name in client.list_tables(project_id)]

    table_name = node.get_node_parameter("tableName", item_index, "")

    if operation == "create":
        data = client.execute(
            queries.CREATE_TABLE_MUTATION,
            {"projectId": project_id, "tableName": table_name, "columns": []},
        )
        return {"success": data.get("createTable") is True, "tableName": table_name}

    if operation == "getSchema":
        return client.get_table_schema(project_id, table_name) or {}

    if operation == "delete":
        data = client.execute(
            queries.DELETE_TABLE_MUTATION,
            {"projectId": project_id, "tableName": table_name},
        )
        return {"success": data.get("deleteTable") is True, "tableName": table_name}

    raise _unknown_operation(operation, item_index)


def execute_record_operation(
    node: BaseNode,
    client: AppStructClient,
    operation: str,
    item_index: int,
) -> OperationResult:
    project_id = coerce_project_id(node.get_node_parameter("projectId", item_index, ""))
    table_name = node.get_node_parameter("tableName", item_index, "")

    if operation == "getMany":
        limit = parse_limit(node.get_node_parameter("limit", item_index, DEFAULT_RECORD_LIMIT), item_index)
        records = [
            {"id": record.get("id"), **record_data(record)}
            for record in client.get_table_data(project_id, table_name)
        ]
        # The backend has no limit argument
        return records[:limit] if limit > 0 else records

    if operation == "create":
        fields = parse_json_object(node.get_node_parameter("data", item_index, "{}"), item_index)
        data = client.execute(
            queries.INSERT_RECORD_MUTATION,
            {"projectId": project_id, "tableName": table_name, "data": fields},
        )
        return {"success": data.get("insertRecord") is True, "data": fields}

    if operation == "update":
        record_id = node.get_node_parameter("recordId", item_index, "")
        fields = parse_json_object(node.get_node_parameter("data", item_index, "{}"), item_index)
        data = client.execute(
            queries.UPDATE_RECORD_MUTATION,
            {
                "projectId": project_id,
                "tableName": table_name,
                "id": record_id,
                "data": fields,
            },
        )
        updated = data.get("updateRecord") or {}
        return {"id": updated.get("id"), **record_data(updated)}

    if operation == "delete":
        record_id = node.get_node_parameter("recordId", item_index, "")
        data = client.execute(
            queries.DELETE_RECORD_MUTATION,
            {"projectId": project_id, "tableName": table_name, "id": record_id},
        )
        return {"success": data.get("deleteRecord") is True, "id": record_id}

    raise _unknown_operation(operation, item_index)


def execute_column_operation(
    node: BaseNode,
    client: AppStructClient,
    operation: str,
    item_index: int,
) -> OperationResult:
    project_id = coerce_project_id(node.get_node_parameter("projectId", item_index, ""))
    table_name = node.get_node_parameter("tableName", item_index, "")
    column_name = node.get_node_parameter("columnName", item_index, "")

    if operation == "add":
        column_type = node.get_node_parameter("columnType", item_index, "text")
        is_nullable = bool(node.get_node_parameter("isNullable", item_index, True))
        data = client.execute(
            queries.ADD_COLUMN_MUTATION,
            {
                "projectId": project_id,
                "tableName": table_name,
                "column": {"name": column_name, "type": column_type, "isNullable": is_nullable},
            },
        )
        return {
            "success": data.get("addColumn") is True,
            "columnName": column_name,
            "columnType": column_type,
            "isNullable": is_nullable,
        }

    if operation == "delete":
        data = client.execute(
            queries.DELETE_COLUMN_MUTATION,
            {"projectId": project_id, "tableName": table_name, "columnName": column_name},
        )
        return {"success": data.get("deleteColumn") is True, "columnName": column_name}

    raise _unknown_operation(operation, item_index)


RESOURCE_HANDLERS: Dict[str, Callable[[BaseNode, AppStructClient, str, int], OperationResult]] = {
    "project": execute_project_operation,
    "table": execute_table_operation,
    "record": execute_record_operation,
    "column": execute_column_operation,
}


def dispatch(
    node: BaseNode,
    client: AppStructClient,
    resource: str,
    operation: str,
    item_index: int,
) -> OperationResult:
    """Run the operation selected for one input item."""
    handler = RESOURCE_HANDLERS.get(resource)
    if handler is None:
        raise NodeOperationError(f'Unknown resource "{resource}"', item_index=item_index)
    return handler(node, client, operation, item_index)
