"""
Node SDK - Minimal Python node execution semantics.

This package provides the runtime contract for Python nodes:
- BaseNode / BasePollingNode: Abstract base classes for node implementations
- NodeExecutionContext: Runtime context for a node
- BaseCredential: Credential type definitions
- HttpClient: Timeout-bounded HTTP

All nodes execute synchronously.
"""

from .basenode import (
    AuthenticationError,
    BaseNode,
    BasePollingNode,
    NodeApiError,
    NodeCredential,
    NodeExecutionContext,
    NodeExecutionData,
    NodeOperationError,
    NodeParameter,
    NodeParameterType,
    NodeValidationError,
    PollResult,
    return_json_array,
)
from .credentials import BaseCredential
from .http import HttpApiError, HttpClient, HttpResponse, NodeTimeoutError

__all__ = [
    "NodeExecutionData",
    "return_json_array",
    "PollResult",
    # Context
    "NodeExecutionContext",
    # Base classes
    "BaseNode",
    "BasePollingNode",
    "BaseCredential",
    "NodeParameter",
    "NodeCredential",
    "NodeParameterType",
    # Errors
    "NodeOperationError",
    "NodeValidationError",
    "NodeApiError",
    "AuthenticationError",
    "NodeTimeoutError",
    "HttpApiError",
    # HTTP
    "HttpClient",
    "HttpResponse",
]
