"""Configuration package."""
from appstruct.config.settings import AppStructSettings, get_settings, reset_settings

__all__ = ["get_settings", "reset_settings", "AppStructSettings"]
