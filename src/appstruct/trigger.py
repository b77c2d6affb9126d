"""
AppStruct Trigger (polling).

Change detection is synthetic: the backend exposes no change feed, so each
poll fetches current state and compares record created_at values with the
watermark handed in by the host. Tables and columns carry no timestamp and
are emitted on every poll.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from node_sdk.basenode import (
    BasePollingNode,
    NodeOperationError,
    PollResult,
    return_json_array,
)

from appstruct.client import AppStructClient, record_data
from appstruct.node import (
    CREDENTIAL_NAME,
    AppStructOptionsMixin,
    project_id_parameter,
    table_name_parameter,
)
from appstruct.observability import with_node_context

logger = logging.getLogger(__name__)

EPOCH_WATERMARK = "1970-01-01T00:00:00.000Z"


def utc_now_iso() -> str:
    """Current time in the watermark format, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string or epoch milliseconds into an aware datetime.

    Returns None when the value cannot be parsed. Naive values are UTC.
    Precision is cut to milliseconds, the resolution of stored watermarks.
    """
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        else:
            parsed = date_parser.parse(str(value))
    except (ValueError, OverflowError, OSError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.replace(microsecond=parsed.microsecond // 1000 * 1000)


def is_new_record(record: Dict[str, Any], watermark: datetime) -> bool:
    """
    True when the record was created strictly after the watermark.

    Records without a created_at, or with one that does not parse, count as
    new.
    """
    created_at = record_data(record).get("created_at")
    if not created_at:
        return True
    created = parse_timestamp(created_at)
    if created is None:
        return True
    return created > watermark


def filter_new_rows(
    records: List[Dict[str, Any]],
    last_poll: str,
    table_name: str,
    now: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Select records newer than last_poll and shape them as trigger items."""
    watermark = parse_timestamp(last_poll)
    if watermark is None:
        logger.warning("Unreadable watermark %r, polling from the epoch", last_poll)
        watermark = parse_timestamp(EPOCH_WATERMARK)

    now = now or utc_now_iso()
    rows = []
    for record in records:
        if not is_new_record(record, watermark):
            continue
        data = record_data(record)
        rows.append({
            "id": record.get("id"),
            **data,
            "triggerType": "newRow",
            "tableName": table_name,
            "created_at": data.get("created_at") or now,
        })
    return rows


class AppStructTriggerNode(AppStructOptionsMixin, BasePollingNode):
    """
    Emits new rows, tables or columns of an AppStruct project.

    The host stores the returned watermark (lastPoll) and passes it back on
    the next cycle. Updated rows are not detectable yet and never fire.
    """

    type = "appStructTrigger"
    version = 1

    description = {
        "displayName": "AppStruct Trigger",
        "name": "appStructTrigger",
        "icon": "file:appstruct.svg",
        "group": ["trigger"],
        "version": 1,
        "description": "Triggers when something happens in AppStruct",
        "defaults": {"name": "AppStruct Trigger"},
        "polling": True,
        "inputs": [],
        "outputs": ["main"],
        "credentials": [
            {"name": CREDENTIAL_NAME, "required": True},
        ],
    }

    properties = {
        "parameters": [
            {
                "displayName": "Trigger On",
                "name": "triggerOn",
                "type": "options",
                "options": [
                    {"name": "New Row", "value": "newRow", "description": "Triggers when a new row is added to a table"},
                    {"name": "Updated Row", "value": "updatedRow", "description": "Triggers when a row is updated in a table"},
                    {"name": "New Table", "value": "newTable", "description": "Triggers when a new table is created"},
                    {"name": "New Column", "value": "newColumn", "description": "Triggers when a new column is added to a table"},
                ],
                "default": "newRow",
                "required": True,
            },
            project_id_parameter(
                "The project to monitor. Choose from the list, or specify an ID using an expression.",
            ),
            table_name_parameter(
                "The table to monitor. Choose from the list, or specify an ID using an expression.",
                {"show": {"triggerOn": ["newRow", "updatedRow", "newColumn"]}},
            ),
            {
                "displayName": "Poll Interval (Minutes)",
                "name": "pollInterval",
                "type": "number",
                "default": 5,
                "description": "How often to check for changes (in minutes)",
            },
        ],
        "credentials": [
            {"name": CREDENTIAL_NAME, "required": True},
        ],
    }

    def poll(self, last_poll: Optional[str]) -> PollResult:
        trigger_on = self.get_node_parameter("triggerOn", 0, "newRow")
        project_id = self.get_node_parameter("projectId", 0, "")
        table_name = self.get_node_parameter("tableName", 0, "")

        client = self._client()
        last_poll = last_poll or EPOCH_WATERMARK

        try:
            if trigger_on == "newRow":
                rows = self._poll_new_rows(client, project_id, table_name, last_poll)
            elif trigger_on == "updatedRow":
                rows = []
            elif trigger_on == "newTable":
                rows = self._poll_new_tables(client, project_id)
            elif trigger_on == "newColumn":
                rows = self._poll_new_columns(client, project_id, table_name)
            else:
                raise NodeOperationError(f'Unknown trigger "{trigger_on}"', node=self)
        except Exception as e:
            raise NodeOperationError(f"Polling failed: {e}", node=self) from e

        next_poll = utc_now_iso()
        if not rows:
            return PollResult(items=None, last_poll=next_poll)
        return PollResult(items=[return_json_array(rows)], last_poll=next_poll)

    def _poll_new_rows(
        self,
        client: AppStructClient,
        project_id: str,
        table_name: str,
        last_poll: str,
    ) -> List[Dict[str, Any]]:
        records = client.get_table_data(project_id, table_name)
        context = with_node_context(node_type=self.type, project_id=project_id, table_name=table_name)
        logger.debug(
            "AppStruct Trigger: found %d records since %s", len(records), last_poll, extra=context,
        )

        rows = filter_new_rows(records, last_poll, table_name)
        logger.debug("AppStruct Trigger: %d new records", len(rows), extra=context)
        return rows

    def _poll_new_tables(self, client: AppStructClient, project_id: str) -> List[Dict[str, Any]]:
        now = utc_now_iso()
        return [
            {"tableName": name, "triggerType": "newTable", "createdAt": now}
            for name in client.list_tables(project_id)
        ]

    def _poll_new_columns(
        self,
        client: AppStructClient,
        project_id: str,
        table_name: str,
    ) -> List[Dict[str, Any]]:
        schema = client.get_table_schema(project_id, table_name)
        if not schema:
            return []
        now = utc_now_iso()
        return [
            {**column, "tableName": schema.get("name"), "triggerType": "newColumn", "createdAt": now}
            for column in schema.get("columns") or []
        ]
