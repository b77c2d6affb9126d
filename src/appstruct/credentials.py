"""
AppStruct API credential (email/password exchanged for a bearer token).
"""
from node_sdk.credentials import BaseCredential

from appstruct.client import AppStructClient


class AppStructApiCredential(BaseCredential):
    """Tested by running the login mutation."""

    name = "appStructApi"
    display_name = "AppStruct API"
    documentation_url = "https://docs.appstruct.cloud"
    success_message = "Login successful"
    properties = [
        {
            "name": "email",
            "displayName": "Email",
            "type": "string",
            "placeholder": "name@email.com",
            "default": "",
            "required": True,
            "description": "Your AppStruct account email",
        },
        {
            "name": "password",
            "displayName": "Password",
            "type": "string",
            "typeOptions": {"password": True},
            "default": "",
            "required": True,
            "description": "Your AppStruct account password",
        },
    ]

    def authenticate(self) -> None:
        AppStructClient.from_credentials(self.data)
