"""
Credential types - field definitions and connection tests.

A credential type lists the fields the editor asks for. test() checks the
required fields locally, then calls authenticate() against the service.
Failures come back as {"success": False, "message": ...}, never raised, so
the editor can show them next to the form.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List

from .basenode import AuthenticationError, NodeApiError
from .http import HttpApiError, NodeTimeoutError


logger = logging.getLogger(__name__)


class BaseCredential(ABC):
    """
    Base class for credential types.

    Subclasses set name, display_name and properties and implement
    authenticate().
    """

    name: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    documentation_url: ClassVar[str] = ""
    properties: ClassVar[List[Dict[str, Any]]] = []

    # Message reported by test() when authenticate() returns
    success_message: ClassVar[str] = "Connection successful"

    def __init__(self, data: Dict[str, Any]) -> None:
        self.data = data

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Credential type definition for registration."""
        return {
            "name": cls.name,
            "display_name": cls.display_name,
            "documentation_url": cls.documentation_url,
            "properties": cls.properties,
        }

    def missing_fields(self) -> List[str]:
        return [
            prop["name"]
            for prop in self.properties
            if prop.get("required", False) and not self.data.get(prop["name"])
        ]

    def validate(self) -> Dict[str, Any]:
        missing = self.missing_fields()
        if missing:
            return {"valid": False, "message": f"Missing required fields: {', '.join(missing)}"}
        return {"valid": True}

    @abstractmethod
    def authenticate(self) -> None:
        """
        Prove the credential against the service.

        Raises:
            AuthenticationError: The service rejected the credential
            NodeApiError, HttpApiError, NodeTimeoutError: The service could
                not be asked
        """
        raise NotImplementedError

    def test(self) -> Dict[str, Any]:
        """Validate required fields, then authenticate."""
        validation = self.validate()
        if not validation["valid"]:
            return {"success": False, "message": validation["message"]}

        try:
            self.authenticate()
        except AuthenticationError as e:
            message = f"{e.message}: {e.description}" if e.description else e.message
            return {"success": False, "message": message}
        except (NodeApiError, HttpApiError, NodeTimeoutError) as e:
            logger.warning("Credential test for '%s' could not reach the service: %s", self.name, e)
            return {"success": False, "message": f"Error testing {self.display_name} credential: {e}"}

        return {"success": True, "message": self.success_message}
