"""
Node Runner - Sync execution of single nodes and poll cycles.

Resolves credentials, builds the execution context, runs execute() for
action nodes and poll() for polling triggers. The runner owns the trigger
watermark: it reads lastPoll from static data, hands it to poll(), and
stores the value poll() returns.

All execution is synchronous.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from node_registry import NodeRegistry, get_global_registry
from node_sdk.basenode import (
    BaseNode,
    BasePollingNode,
    NodeExecutionContext,
    NodeExecutionData,
    NodeOperationError,
)

from .models import StaticDataStore, WorkflowNode, parse_node


logger = logging.getLogger(__name__)

LAST_POLL_KEY = "lastPoll"


@dataclass
class NodeRunResult:
    """
    Result of running one node.

    For poll runs, output is None when the trigger reported no new data.
    """
    node_name: str
    output: Optional[List[List[NodeExecutionData]]] = None
    duration_ms: float = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return self.output is not None


class NodeRunner:
    """
    Runs registered nodes the way the host would.

    Usage:
        runner = NodeRunner()  # packs from entry points
        runner.set_credentials("appstruct-main", {"email": "...", "password": "..."})
        result = runner.execute_node({"name": "AppStruct", "type": "appStruct", ...})
    """

    def __init__(
        self,
        registry: Optional[NodeRegistry] = None,
        credential_store: Optional[Dict[str, Dict[str, Any]]] = None,
        static_data: Optional[StaticDataStore] = None,
        workflow_id: str = "default",
    ):
        """
        Args:
            registry: Node and credential types (process-wide registry by default)
            credential_store: Map of credential_name -> credential dict
            static_data: Per-node persistent storage (in-memory by default)
            workflow_id: Workflow the node instances belong to
        """
        self.registry = registry if registry is not None else get_global_registry()
        self._credentials = credential_store or {}
        self.static_data = static_data or StaticDataStore()
        self.workflow_id = workflow_id

    def register_node(self, node_type: str, node_class: Type[BaseNode]) -> None:
        self.registry.register_node(node_class, node_type)

    def set_credentials(self, name: str, credentials: Dict[str, Any]) -> None:
        """Set credentials for use by nodes."""
        self._credentials[name] = credentials

    def _resolve_credentials(self, credentials: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        resolved: Dict[str, Dict[str, Any]] = {}
        for cred_type, cred_ref in credentials.items():
            if isinstance(cred_ref, str) and cred_ref in self._credentials:
                resolved[cred_type] = self._credentials[cred_ref]
            elif isinstance(cred_ref, dict):
                resolved[cred_type] = cred_ref
        # Fall back to a stored credential of the same type name
        for cred_type, cred in self._credentials.items():
            resolved.setdefault(cred_type, cred)
        return resolved

    def test_credentials(self, credential_type: str, credentials: Dict[str, Any] | str) -> Dict[str, Any]:
        """
        Run the credential type's test() on a stored name or an inline dict.

        Returns {"success": bool, "message": str}.
        """
        credential_class = self.registry.get_credential_class(credential_type)
        if credential_class is None:
            raise ValueError(f"Unknown credential type: {credential_type}")
        if isinstance(credentials, str):
            credentials = self._credentials.get(credentials, {})
        return credential_class(credentials).test()

    def build_node(
        self,
        node: WorkflowNode | Dict[str, Any],
        input_data: Optional[List[Dict[str, Any]]] = None,
        item_parameters: Optional[List[Dict[str, Any]]] = None,
    ) -> BaseNode:
        """Instantiate a node and attach its execution context."""
        if isinstance(node, dict):
            node = parse_node(node)

        node_class = self.registry.get_node_class(node.type)
        if node_class is None:
            raise ValueError(f"Unknown node type: {node.type}")

        instance = node_class()
        instance.continue_on_fail = node.continue_on_fail
        instance.set_context(NodeExecutionContext(
            parameters=node.parameters,
            credentials=self._resolve_credentials(node.credentials),
            input_data=input_data if input_data is not None else [{"json": {}}],
            workflow_id=self.workflow_id,
            node_name=node.name,
            item_parameters=item_parameters,
        ))
        return instance

    def execute_node(
        self,
        node: WorkflowNode | Dict[str, Any],
        input_data: Optional[List[Dict[str, Any]]] = None,
        item_parameters: Optional[List[Dict[str, Any]]] = None,
    ) -> NodeRunResult:
        """
        Run execute() over the input items.

        A disabled node is not run; its input passes through unchanged.
        """
        if isinstance(node, dict):
            node = parse_node(node)
        items = input_data if input_data is not None else [{"json": {}}]

        if node.disabled:
            logger.info(f"Node '{node.name}' is disabled, passing input through")
            return NodeRunResult(node_name=node.name, output=[items], metadata={"disabled": True})

        instance = self.build_node(node, items, item_parameters)

        start = time.perf_counter()
        output = instance.execute()
        duration_ms = (time.perf_counter() - start) * 1000

        logger.info(f"Node '{node.name}' executed in {duration_ms:.1f}ms")
        return NodeRunResult(node_name=node.name, output=output, duration_ms=duration_ms)

    def poll_node(self, node: WorkflowNode | Dict[str, Any]) -> NodeRunResult:
        """
        Run one poll cycle and persist the returned watermark.

        Calls for the same node must not overlap; the caller serializes them.
        A poll that raises leaves the stored watermark as it was, and so
        does a disabled node, which reports no data without polling.
        """
        if isinstance(node, dict):
            node = parse_node(node)
        state = self.static_data.get(self.workflow_id, node.name)

        if node.disabled:
            logger.info(f"Node '{node.name}' is disabled, skipping poll")
            return NodeRunResult(
                node_name=node.name,
                metadata={"disabled": True, LAST_POLL_KEY: state.get(LAST_POLL_KEY)},
            )

        instance = self.build_node(node, input_data=[])
        if not isinstance(instance, BasePollingNode):
            raise NodeOperationError(f"Node type '{instance.type}' does not poll", node=instance)

        start = time.perf_counter()
        result = instance.poll(state.get(LAST_POLL_KEY))
        duration_ms = (time.perf_counter() - start) * 1000

        state[LAST_POLL_KEY] = result.last_poll
        self.static_data.set(self.workflow_id, node.name, state)

        logger.info(
            f"Node '{node.name}' polled in {duration_ms:.1f}ms "
            f"({'new data' if result.has_data else 'no new data'})"
        )
        return NodeRunResult(
            node_name=node.name,
            output=result.items,
            duration_ms=duration_ms,
            metadata={LAST_POLL_KEY: result.last_poll},
        )


__all__ = [
    "NodeRunner",
    "NodeRunResult",
    "LAST_POLL_KEY",
]
