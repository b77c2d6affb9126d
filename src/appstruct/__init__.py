"""
AppStruct Node Pack - nodes for the AppStruct GraphQL backend.

This pack provides:
- AppStructNode: project, table, column and record operations
- AppStructTriggerNode: polling trigger for new rows, tables and columns
- AppStructApiCredential: email/password credential type

All nodes run synchronously.
"""

from .credentials import AppStructApiCredential
from .manifest import CREDENTIAL_CLASSES, MANIFEST, NODE_CLASSES, register_nodes
from .node import AppStructNode
from .trigger import AppStructTriggerNode

__version__ = "0.1.0"

__all__ = [
    "AppStructNode",
    "AppStructTriggerNode",
    "AppStructApiCredential",
    "MANIFEST",
    "NODE_CLASSES",
    "CREDENTIAL_CLASSES",
    "register_nodes",
]
