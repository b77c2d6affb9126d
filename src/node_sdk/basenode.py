"""
BaseNode - Abstract base classes for Python node implementations.

Action nodes inherit from BaseNode and implement execute().
Polling trigger nodes inherit from BasePollingNode and implement poll();
the host passes the last watermark in and persists the one returned.

execute() and poll() are synchronous.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field


logger = logging.getLogger(__name__)


# ==============================================================================
# NodeParameterType
# ==============================================================================

NodeParameterType = Literal[
    "string", "number", "boolean", "options", "multiOptions",
    "color", "json", "collection", "dateTime", "node",
    "resourceLocator", "notice", "array", "code",
]


# ==============================================================================
# NodeParameter - Pydantic model for defining parameters
# ==============================================================================

class NodeParameter(BaseModel):
    """
    A single parameter in the node's properties.

    Can be used both as Pydantic model and as dict in properties.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Parameter key (internal name)")
    display_name: str = Field(..., alias="displayName", description="Human-readable label")
    type: NodeParameterType = Field(..., description="Parameter type")
    default: Any = Field(None, description="Default value")
    required: bool = Field(False, description="Is parameter required?")
    description: Optional[str] = Field(None, description="Help text")
    placeholder: Optional[str] = Field(None, description="Input placeholder")
    options: Optional[List[Dict[str, Any]]] = Field(
        None,
        description="Options for options/multiOptions type"
    )
    type_options: Optional[Dict[str, Any]] = Field(
        None,
        alias="typeOptions",
        description="Extra type settings (loadOptionsMethod, minValue, password)"
    )
    display_options: Optional[Dict[str, Any]] = Field(
        None,
        alias="displayOptions",
        description="Conditional visibility"
    )


class NodeCredential(BaseModel):
    """Credential requirement definition."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Credential type name")
    required: bool = Field(True, description="Is credential required?")
    display_name: Optional[str] = Field(None, alias="displayName")
    display_options: Optional[Dict[str, Any]] = Field(None, alias="displayOptions")


# ==============================================================================
# NodeExecutionData - Output data format
# ==============================================================================

class NodeExecutionData(TypedDict, total=False):
    """
    Single item of execution output data.

    Format: {"json": {...}, "binary": {...}, "pairedItem": {"item": 0}}
    """
    json: Dict[str, Any]
    binary: Optional[Dict[str, Any]]
    pairedItem: Optional[Dict[str, int]]


def return_json_array(items: List[Dict[str, Any]]) -> List[NodeExecutionData]:
    """Wrap plain dicts as output items (n8n's helpers.returnJsonArray)."""
    return [{"json": item} for item in items]


@dataclass
class PollResult:
    """
    Outcome of one poll cycle.

    items is None when nothing qualified, so the host can skip the run.
    last_poll is the watermark the host must persist for the next cycle.
    """
    items: Optional[List[List[NodeExecutionData]]]
    last_poll: str

    @property
    def has_data(self) -> bool:
        return self.items is not None


# ==============================================================================
# BaseNode - Abstract base class
# ==============================================================================

class BaseNode(ABC):
    """
    Abstract base class for all Python node implementations.

    Nodes define:
    - type: Unique identifier (e.g., "appStruct")
    - version: Node version number
    - description: Node metadata dict
    - properties: Parameters and credentials

    And implement execute() which processes input items.

    All execution is synchronous.
    """

    # Required class attributes (override in subclasses)
    type: str = "base"
    version: int = 1

    description: Dict[str, Any] = {
        "displayName": "Base Node",
        "name": "base",
        "description": "",
        "group": [],
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    # Node configuration - parameters and credentials
    properties: Dict[str, Any] = {
        "parameters": [],
        "credentials": [],
    }

    # Continue processing other items if one fails
    continue_on_fail: bool = False

    def __init__(self) -> None:
        """Initialize node instance."""
        self.logger = logging.getLogger(f"node.{self.type}")
        self._context: Optional[NodeExecutionContext] = None

    @abstractmethod
    def execute(self) -> List[List[NodeExecutionData]]:
        """
        Execute node operation.

        Returns:
            List[List[NodeExecutionData]]: Nested list of execution results.
            - Outer list represents output branches (usually 1)
            - Inner list represents items in that branch

        Raises:
            NodeOperationError: On operation failure
            NodeApiError: On API call failure
        """
        raise NotImplementedError

    def load_options(self, method: str) -> List[Dict[str, Any]]:
        """
        Populate a dropdown for the editor.

        Dispatches to a method named in a parameter's
        typeOptions.loadOptionsMethod. Returns [{"name", "value"}] pairs.
        """
        loaders = getattr(self, "option_loaders", {})
        if method not in loaders:
            raise NodeOperationError(f'Unknown load options method "{method}"', node=self)
        return getattr(self, loaders[method])()

    # ==== Context Management ====

    def set_context(self, context: "NodeExecutionContext") -> None:
        """Set the execution context."""
        self._context = context

    @property
    def context(self) -> Optional["NodeExecutionContext"]:
        return self._context

    # ==== Helper methods for subclasses ====

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """
        Get parameter value.

        Args:
            name: Parameter name
            item_index: Index of item (for per-item overrides)
            default: Default if not set
        """
        if self._context is None:
            return default
        return self._context.get_node_parameter(name, item_index, default)

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """
        Get credentials by type name.

        Args:
            name: Credential type name (e.g., "appStructApi")

        Returns:
            Credentials dict with decrypted values
        """
        if self._context is None:
            raise NodeOperationError("No context set", node=self)
        return self._context.get_credentials(name)

    def get_input_data(self) -> List[Dict[str, Any]]:
        """
        Get input items from previous node.

        Returns:
            List of input items, each with 'json' key.
        """
        if self._context is None:
            return []
        return self._context.get_input_data()

    @classmethod
    def is_polling(cls) -> bool:
        return bool(cls.description.get("polling", False))

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Get full node definition for registration."""
        return {
            "type": cls.type,
            "version": cls.version,
            "description": cls.description,
            "properties": cls.properties,
        }


class BasePollingNode(BaseNode):
    """
    Base class for polling trigger nodes.

    The watermark is threaded through explicitly: poll() receives the value
    stored after the previous cycle (None on the first one) and returns the
    value to store next. The node keeps no state between calls.
    """

    @abstractmethod
    def poll(self, last_poll: Optional[str]) -> PollResult:
        """Fetch remote state and return the items newer than last_poll."""
        raise NotImplementedError

    def execute(self) -> List[List[NodeExecutionData]]:
        """Manual run: one poll cycle from scratch."""
        result = self.poll(None)
        if result.items is None:
            return [[]]
        return result.items


# ==============================================================================
# NodeExecutionContext - Runtime context for node execution
# ==============================================================================

class NodeExecutionContext:
    """
    Runtime context provided to nodes during execution.

    Provides access to:
    - Parameters (with optional per-item overrides)
    - Credentials
    - Input data
    """

    def __init__(
        self,
        parameters: Dict[str, Any],
        credentials: Dict[str, Dict[str, Any]],
        input_data: List[Dict[str, Any]],
        workflow_id: Optional[str] = None,
        node_name: Optional[str] = None,
        item_parameters: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self._parameters = parameters
        self._credentials = credentials
        self._input_data = input_data
        self._item_parameters = item_parameters or []
        self.workflow_id = workflow_id
        self.node_name = node_name

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """Get parameter value, preferring an override for item_index."""
        if item_index < len(self._item_parameters):
            overrides = self._item_parameters[item_index] or {}
            if name in overrides:
                return overrides[name]
        return self._parameters.get(name, default)

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """Get credentials by type name."""
        if name not in self._credentials:
            raise NodeOperationError(f"Credentials '{name}' not found")
        return self._credentials[name]

    def get_input_data(self) -> List[Dict[str, Any]]:
        """Get input items."""
        return self._input_data


# ==============================================================================
# Errors
# ==============================================================================

class NodeOperationError(Exception):
    """Error during node operation."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        item_index: Optional[int] = None,
        description: Optional[str] = None,
    ) -> None:
        self.message = message
        self.node = node
        self.item_index = item_index
        self.description = description
        super().__init__(message)


class NodeValidationError(NodeOperationError):
    """Input rejected locally, before any request is made."""


class NodeApiError(NodeOperationError):
    """Error from external API call."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        description: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        item_index: Optional[int] = None,
    ) -> None:
        super().__init__(message, node, item_index=item_index, description=description)
        self.status_code = status_code
        self.response_body = response_body
        self.errors = errors or []


class AuthenticationError(NodeApiError):
    """Login against the remote API failed."""


# ==============================================================================
# Exports
# ==============================================================================

__all__ = [
    "BaseNode",
    "BasePollingNode",
    "PollResult",
    "NodeExecutionContext",
    "NodeExecutionData",
    "NodeParameter",
    "NodeCredential",
    "NodeParameterType",
    "NodeOperationError",
    "NodeValidationError",
    "NodeApiError",
    "AuthenticationError",
    "return_json_array",
]
