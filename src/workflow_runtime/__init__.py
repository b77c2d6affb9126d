"""
Workflow Runtime - Sync execution of nodes inside the host.

This package provides:
- WorkflowNode: JSON structure describing a node instance
- StaticDataStore: Per-node persistent scratch storage
- NodeRunner: Runs action nodes and poll cycles

All execution is synchronous.
"""

from .models import StaticDataStore, WorkflowNode, parse_node
from .executor import LAST_POLL_KEY, NodeRunner, NodeRunResult

__all__ = [
    # Models
    "WorkflowNode",
    "StaticDataStore",
    "parse_node",
    # Runner
    "NodeRunner",
    "NodeRunResult",
    "LAST_POLL_KEY",
]
