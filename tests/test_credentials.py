"""
Tests for the AppStruct API credential.
"""

import pytest
from requests.exceptions import Timeout

from node_sdk.basenode import AuthenticationError
from node_sdk.credentials import BaseCredential
from node_sdk.http import HttpApiError

from appstruct.credentials import AppStructApiCredential

from conftest import CREDENTIALS, LOGIN_OK


def test_definition():
    definition = AppStructApiCredential.get_definition()

    assert definition["name"] == "appStructApi"
    assert definition["documentation_url"] == "https://docs.appstruct.cloud"
    password = definition["properties"][1]
    assert password["typeOptions"] == {"password": True}


def test_validate_reports_missing_fields():
    result = AppStructApiCredential({"email": "ada@example.com"}).validate()

    assert result == {"valid": False, "message": "Missing required fields: password"}


def test_test_skips_network_when_incomplete(graphql):
    result = AppStructApiCredential({}).test()

    assert result["success"] is False
    assert graphql.calls == []


def test_test_success(graphql):
    graphql.queue(LOGIN_OK)

    assert AppStructApiCredential(dict(CREDENTIALS)).test() == {
        "success": True,
        "message": "Login successful",
    }


def test_test_rejected_login(graphql):
    graphql.queue({"errors": [{"message": "Wrong password"}]})

    result = AppStructApiCredential(dict(CREDENTIALS)).test()

    assert result == {"success": False, "message": "Authentication failed: Wrong password"}


def test_test_unreachable_api(graphql):
    graphql.queue_error(Timeout("timed out"))

    result = AppStructApiCredential(dict(CREDENTIALS)).test()

    assert result["success"] is False
    assert result["message"].startswith("Error testing AppStruct API credential")


class TestBaseCredential:
    """Connection-test contract shared by credential types."""

    class TokenCredential(BaseCredential):
        name = "tokenApi"
        display_name = "Token API"
        properties = [
            {"name": "token", "displayName": "Token", "type": "string", "required": True},
            {"name": "region", "displayName": "Region", "type": "string"},
        ]

        def __init__(self, data, error=None):
            super().__init__(data)
            self.error = error
            self.calls = 0

        def authenticate(self):
            self.calls += 1
            if self.error:
                raise self.error

    def test_cannot_instantiate_without_authenticate(self):
        with pytest.raises(TypeError):
            BaseCredential({})

    def test_optional_fields_are_not_required(self):
        assert self.TokenCredential({"token": "t"}).missing_fields() == []

    def test_missing_fields_skip_authenticate(self):
        credential = self.TokenCredential({})

        assert credential.test() == {"success": False, "message": "Missing required fields: token"}
        assert credential.calls == 0

    def test_default_success_message(self):
        assert self.TokenCredential({"token": "t"}).test() == {
            "success": True,
            "message": "Connection successful",
        }

    def test_rejection_without_description(self):
        credential = self.TokenCredential({"token": "t"}, error=AuthenticationError("Token revoked"))

        assert credential.test() == {"success": False, "message": "Token revoked"}

    def test_unreachable_service_is_reported_not_raised(self):
        credential = self.TokenCredential({"token": "t"}, error=HttpApiError("Request failed: refused"))

        result = credential.test()

        assert result == {
            "success": False,
            "message": "Error testing Token API credential: Request failed: refused",
        }
