"""Configuration management module.

This module provides configuration storage, loading, and data models for the application.

Submodules:
    manager: ConfigurationManager for loading/saving XML configuration
    schema: Data classes defining configuration structure (Installation, Settings, etc.)
    paths: AppPaths with default game install paths, client folder layout and config files
    path_validator: Path validation utilities to prevent dangerous file operations

The configuration is stored as XML in %APPDATA%/UIPackManager/configuration.xml.
"""

from .manager import ConfigurationManager
from .schema import AppConfiguration, ExportDefaults, ImportDefaults, Installation, Settings
from .paths import AppPaths

__all__ = [
    "ConfigurationManager",
    "AppConfiguration",
    "ExportDefaults",
    "ImportDefaults",
    "Installation",
    "Settings",
    "AppPaths",
]
