"""
AppStruct Node Pack Manifest - Registration function for entry-points.
"""

from node_registry.models import NodePackManifest

from appstruct.credentials import AppStructApiCredential
from appstruct.node import AppStructNode
from appstruct.trigger import AppStructTriggerNode


MANIFEST = NodePackManifest(
    name="appstruct",
    version="0.1.0",
    description="AppStruct projects, tables, columns and records, plus a polling trigger",
    author="appstruct-nodes",
    license="MIT",
    nodes=[
        AppStructNode.type,
        AppStructTriggerNode.type,
    ],
    credentials=[
        AppStructApiCredential.name,
    ],
    entry_point="appstruct",
)


# Node classes by type
NODE_CLASSES = {
    AppStructNode.type: AppStructNode,
    AppStructTriggerNode.type: AppStructTriggerNode,
}

CREDENTIAL_CLASSES = {
    AppStructApiCredential.name: AppStructApiCredential,
}


def register_nodes():
    """
    Entry point function for node pack discovery.

    Returns tuple of (manifest, node_classes).
    """
    return MANIFEST, NODE_CLASSES


__all__ = [
    "MANIFEST",
    "NODE_CLASSES",
    "CREDENTIAL_CLASSES",
    "register_nodes",
]
