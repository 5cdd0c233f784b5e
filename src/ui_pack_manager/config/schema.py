"""Configuration data models"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class Installation:
    """Represents one client flavor folder (e.g. _retail_, _classic_)"""
    flavor: str
    root: Path
    enabled: bool = False

    def is_valid(self) -> bool:
        """Check if the installation folder exists.

        Returns:
            True if root is configured and exists
        """
        return self.root is not None and self.root.exists()


@dataclass
class ExportDefaults:
    """Stored defaults for the export command"""
    output_dir: Optional[Path] = None
    pack_name: str = "MyUI"
    pack_version: str = "1.0.0"
    include_account_layout: bool = False
    include_character_settings: bool = False
    anonymize_accounts: bool = True
    addon_allow_list: list[str] = field(default_factory=list)
    exclude_addons: list[str] = field(default_factory=list)


@dataclass
class ImportDefaults:
    """Stored defaults for the import command"""
    skip_backup: bool = False
    target_account: str = ""
    target_realm: str = ""
    target_character: str = ""


@dataclass
class Settings:
    """Application settings"""
    first_run_complete: bool = False
    game_root: Optional[Path] = None
    export: ExportDefaults = field(default_factory=ExportDefaults)
    import_: ImportDefaults = field(default_factory=ImportDefaults)


@dataclass
class AppConfiguration:
    """Complete application configuration"""
    settings: Settings = field(default_factory=Settings)
    installations: list[Installation] = field(default_factory=list)

    def get_enabled_installations(self) -> list[Installation]:
        """Get all enabled installations.

        Returns:
            List of enabled Installation objects
        """
        return [inst for inst in self.installations if inst.enabled]

    def default_root(self) -> Optional[Path]:
        """Root of the first enabled installation, used when no root is given."""
        for inst in self.get_enabled_installations():
            if inst.is_valid():
                return inst.root
        return None
