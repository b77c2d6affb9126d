"""
Node Registry - node and credential types known to the host.

Packs come in two ways: register_pack() with a manifest and its node
classes, or discover_entry_points() over installed distributions that
publish the appstruct_nodes.nodepacks group.
"""

from __future__ import annotations

import importlib
import logging
from importlib.metadata import entry_points
from typing import Dict, Optional, Type, TYPE_CHECKING

from .models import CredentialDefinition, NodeDefinition, NodePackManifest


if TYPE_CHECKING:
    from node_sdk.basenode import BaseNode
    from node_sdk.credentials import BaseCredential


logger = logging.getLogger(__name__)

NODE_PACK_ENTRY_POINT = "appstruct_nodes.nodepacks"


class NodeRegistry:
    """
    Lookup tables from node type and credential name to their classes.

    Usage:
        registry = NodeRegistry()
        registry.discover_entry_points()
        node_class = registry.get_node_class("appStruct")
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, NodeDefinition] = {}
        self._node_classes: Dict[str, Type["BaseNode"]] = {}
        self._credentials: Dict[str, CredentialDefinition] = {}
        self._credential_classes: Dict[str, Type["BaseCredential"]] = {}
        self._packs: Dict[str, NodePackManifest] = {}
        self._discovered = False

    def register_node(
        self,
        node_class: Type["BaseNode"],
        node_type: Optional[str] = None,
        pack: Optional[str] = None,
    ) -> NodeDefinition:
        """Register a node class under node_type (default: node_class.type)."""
        definition = NodeDefinition.from_node_class(node_class)
        if node_type:
            definition.node_type = node_type
        definition.node_pack = pack

        self._nodes[definition.node_type] = definition
        self._node_classes[definition.node_type] = node_class
        logger.debug(f"Registered node: {definition.node_type}")
        return definition

    def register_credential(self, credential_class: Type["BaseCredential"]) -> CredentialDefinition:
        definition = CredentialDefinition.from_credential_class(credential_class)
        self._credentials[definition.name] = definition
        self._credential_classes[definition.name] = credential_class
        logger.debug(f"Registered credential: {definition.name}")
        return definition

    def register_pack(
        self,
        manifest: NodePackManifest,
        node_classes: Dict[str, Type["BaseNode"]],
    ) -> None:
        """
        Register every node of a pack.

        Credential names listed in the manifest are resolved through the
        CREDENTIAL_CLASSES mapping of the manifest's entry_point module.
        """
        self._packs[manifest.name] = manifest

        for node_type, node_class in node_classes.items():
            self.register_node(node_class, node_type, pack=manifest.name)

        if manifest.credentials and manifest.entry_point:
            credential_classes = getattr(
                importlib.import_module(manifest.entry_point), "CREDENTIAL_CLASSES", {}
            )
            for name in manifest.credentials:
                if name not in credential_classes:
                    logger.warning(f"Pack '{manifest.name}' lists unknown credential '{name}'")
                    continue
                self.register_credential(credential_classes[name])

        logger.info(f"Registered pack '{manifest.name}' with {len(node_classes)} nodes")

    def discover_entry_points(self, force: bool = False) -> int:
        """
        Load every pack published under NODE_PACK_ENTRY_POINT.

        An entry point is a function returning (manifest, node_classes) or a
        bare {node_type: node_class} dict. A pack that fails to load is
        logged and skipped. Returns the number of packs registered.
        """
        if self._discovered and not force:
            return len(self._packs)

        count = 0
        for ep in entry_points(group=NODE_PACK_ENTRY_POINT):
            try:
                result = ep.load()()
                if isinstance(result, tuple):
                    manifest, node_classes = result
                else:
                    manifest, node_classes = NodePackManifest(name=ep.name, nodes=list(result)), result
                self.register_pack(manifest, node_classes)
                count += 1
            except Exception as e:
                logger.error(f"Failed to load node pack '{ep.name}': {e}")

        self._discovered = True
        return count

    def get_node(self, node_type: str) -> Optional[NodeDefinition]:
        return self._nodes.get(node_type)

    def get_node_class(self, node_type: str) -> Optional[Type["BaseNode"]]:
        return self._node_classes.get(node_type)

    def get_pack(self, name: str) -> Optional[NodePackManifest]:
        return self._packs.get(name)

    def get_credential(self, name: str) -> Optional[CredentialDefinition]:
        return self._credentials.get(name)

    def get_credential_class(self, name: str) -> Optional[Type["BaseCredential"]]:
        return self._credential_classes.get(name)


_global_registry: Optional[NodeRegistry] = None


def get_global_registry() -> NodeRegistry:
    """Process-wide registry, filled from entry points on first use."""
    global _global_registry
    if _global_registry is None:
        _global_registry = NodeRegistry()
        _global_registry.discover_entry_points()
    return _global_registry


def reset_global_registry() -> None:
    """Forget the process-wide registry (useful for testing)."""
    global _global_registry
    _global_registry = None


__all__ = [
    "NodeRegistry",
    "get_global_registry",
    "reset_global_registry",
    "NODE_PACK_ENTRY_POINT",
]
