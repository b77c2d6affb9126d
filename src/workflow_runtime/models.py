"""
Workflow Models - JSON structures for node instances and their static data.

These models match the n8n workflow JSON node format.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class WorkflowNodePosition(BaseModel):
    """Node position in the canvas."""
    x: float = 0
    y: float = 0


class WorkflowNode(BaseModel):
    """
    A node in a workflow.

    Matches n8n workflow JSON node format.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Required
    name: str = Field(..., description="Node name (unique within workflow)")
    type: str = Field(..., description="Node type (e.g., 'appStruct')")

    # Optional
    type_version: int = Field(1, alias="typeVersion", description="Node type version")
    position: WorkflowNodePosition = Field(default_factory=WorkflowNodePosition)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    credentials: Dict[str, Any] = Field(default_factory=dict)
    disabled: bool = Field(False, description="If true, node is skipped")
    continue_on_fail: bool = Field(False, alias="continueOnFail")
    notes: Optional[str] = Field(None, description="Node notes")

    @property
    def id(self) -> str:
        """Node ID is its name."""
        return self.name


class StaticDataStore:
    """
    Persistent per-node scratch storage (n8n's workflow static data).

    Keyed by (workflow_id, node name). The in-memory implementation is what
    tests and single-process hosts use; a host with a database subclasses it
    and overrides get/set.
    """

    def __init__(self) -> None:
        self._data: Dict[Tuple[str, str], Dict[str, Any]] = {}

    def get(self, workflow_id: str, node_name: str) -> Dict[str, Any]:
        return dict(self._data.get((workflow_id, node_name), {}))

    def set(self, workflow_id: str, node_name: str, data: Dict[str, Any]) -> None:
        self._data[(workflow_id, node_name)] = dict(data)


def parse_node(data: Dict[str, Any]) -> WorkflowNode:
    """Parse node JSON into WorkflowNode."""
    return WorkflowNode.model_validate(data)


__all__ = [
    "WorkflowNode",
    "WorkflowNodePosition",
    "StaticDataStore",
    "parse_node",
]
