"""Configuration management - load/save XML configuration"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional
from xml.dom import minidom

from .paths import AppPaths
from .schema import (
    AppConfiguration,
    ExportDefaults,
    ImportDefaults,
    Installation,
    Settings,
)
from ..logging_config import get_logger

logger = get_logger("config_manager")


class ConfigurationManager:
    """Manages application configuration persistence.

    Handles loading and saving configuration to XML format,
    including first-run detection and default configuration creation.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or AppPaths.CONFIG_FILE
        self.config: Optional[AppConfiguration] = None

    def is_first_run(self) -> bool:
        """Check if this is the first run of the application.

        First run is detected if:
        - Configuration file does not exist, OR
        - Configuration exists but FirstRunComplete is False

        Returns:
            True if this is the first run
        """
        if not self.config_path.exists():
            return True

        try:
            self.load()
            return not self.config.settings.first_run_complete
        except (ET.ParseError, FileNotFoundError, ValueError, KeyError) as e:
            # Corrupted config = treat as first run
            logger.warning(f"Could not load config, treating as first run: {e}")
            return True

    def load(self) -> AppConfiguration:
        """Load configuration from XML file.

        Returns:
            AppConfiguration object with loaded settings

        Raises:
            FileNotFoundError: If config file doesn't exist
            ET.ParseError: If XML is malformed
        """
        logger.debug(f"Loading configuration from {self.config_path}")
        tree = ET.parse(self.config_path)
        root = tree.getroot()

        settings = Settings()
        settings_elem = root.find("Settings")
        if settings_elem is not None:
            settings.first_run_complete = self._parse_bool(settings_elem, "FirstRunComplete", False)
            settings.game_root = self._parse_path(settings_elem, "GameRoot")

            export_elem = settings_elem.find("Export")
            if export_elem is not None:
                settings.export = ExportDefaults(
                    output_dir=self._parse_path(export_elem, "OutputDir"),
                    pack_name=self._get_text(export_elem, "PackName", "MyUI"),
                    pack_version=self._get_text(export_elem, "PackVersion", "1.0.0"),
                    include_account_layout=self._parse_bool(export_elem, "IncludeAccountLayout", False),
                    include_character_settings=self._parse_bool(export_elem, "IncludeCharacterSettings", False),
                    anonymize_accounts=self._parse_bool(export_elem, "AnonymizeAccounts", True),
                    addon_allow_list=self._parse_list(export_elem, "AddonAllowList"),
                    exclude_addons=self._parse_list(export_elem, "ExcludeAddons"),
                )

            import_elem = settings_elem.find("Import")
            if import_elem is not None:
                settings.import_ = ImportDefaults(
                    skip_backup=self._parse_bool(import_elem, "SkipBackup", False),
                    target_account=self._get_text(import_elem, "TargetAccount", ""),
                    target_realm=self._get_text(import_elem, "TargetRealm", ""),
                    target_character=self._get_text(import_elem, "TargetCharacter", ""),
                )

        installations = []
        installations_elem = root.find("Installations")
        if installations_elem is not None:
            for inst_elem in installations_elem.findall("Installation"):
                inst_root = self._parse_path(inst_elem, "Root")
                flavor = inst_elem.get("flavor")
                if not flavor or inst_root is None:
                    logger.warning("Skipping malformed installation entry")
                    continue
                installations.append(Installation(
                    flavor=flavor,
                    root=inst_root,
                    enabled=inst_elem.get("enabled", "false").lower() == "true",
                ))

        self.config = AppConfiguration(settings=settings, installations=installations)
        logger.debug(f"Configuration loaded: {len(installations)} installations")
        return self.config

    def save(self) -> None:
        """Save current configuration to XML file.

        Creates the configuration directory if it doesn't exist.
        """
        if self.config is None:
            raise ValueError("No configuration to save")

        logger.debug(f"Saving configuration to {self.config_path}")
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        settings = self.config.settings
        root = ET.Element("UIPackManager", version="1.0")

        settings_elem = ET.SubElement(root, "Settings")
        ET.SubElement(settings_elem, "FirstRunComplete").text = str(settings.first_run_complete).lower()
        ET.SubElement(settings_elem, "GameRoot").text = str(settings.game_root) if settings.game_root else ""

        export = settings.export
        export_elem = ET.SubElement(settings_elem, "Export")
        ET.SubElement(export_elem, "OutputDir").text = str(export.output_dir or AppPaths.OUTPUT_DEFAULT)
        ET.SubElement(export_elem, "PackName").text = export.pack_name
        ET.SubElement(export_elem, "PackVersion").text = export.pack_version
        ET.SubElement(export_elem, "IncludeAccountLayout").text = str(export.include_account_layout).lower()
        ET.SubElement(export_elem, "IncludeCharacterSettings").text = str(export.include_character_settings).lower()
        ET.SubElement(export_elem, "AnonymizeAccounts").text = str(export.anonymize_accounts).lower()
        self._write_list(export_elem, "AddonAllowList", export.addon_allow_list)
        self._write_list(export_elem, "ExcludeAddons", export.exclude_addons)

        import_ = settings.import_
        import_elem = ET.SubElement(settings_elem, "Import")
        ET.SubElement(import_elem, "SkipBackup").text = str(import_.skip_backup).lower()
        ET.SubElement(import_elem, "TargetAccount").text = import_.target_account
        ET.SubElement(import_elem, "TargetRealm").text = import_.target_realm
        ET.SubElement(import_elem, "TargetCharacter").text = import_.target_character

        installations_elem = ET.SubElement(root, "Installations")
        for installation in self.config.installations:
            inst_elem = ET.SubElement(
                installations_elem,
                "Installation",
                flavor=installation.flavor,
                enabled=str(installation.enabled).lower(),
            )
            ET.SubElement(inst_elem, "Root").text = str(installation.root)

        # Write pretty-printed XML
        xml_str = minidom.parseString(ET.tostring(root, encoding="unicode")).toprettyxml(indent="  ")
        # Remove extra blank lines that minidom adds
        lines = [line for line in xml_str.split('\n') if line.strip()]
        xml_str = '\n'.join(lines)

        self.config_path.write_text(xml_str, encoding="utf-8")

    def create_default(self, installations: list[Installation] | None = None) -> AppConfiguration:
        """Create a default configuration.

        Args:
            installations: Optional list of pre-detected installations

        Returns:
            New AppConfiguration with default values
        """
        if installations is None:
            installations = []

        self.config = AppConfiguration(
            settings=Settings(
                first_run_complete=False,
                game_root=AppPaths.GAME_ROOT_DEFAULT,
                export=ExportDefaults(output_dir=AppPaths.OUTPUT_DEFAULT),
            ),
            installations=installations,
        )
        return self.config

    # Helper methods for XML parsing
    @staticmethod
    def _get_text(parent: ET.Element, tag: str, default: str = "") -> str:
        """Get text content of a child element."""
        elem = parent.find(tag)
        return elem.text if elem is not None and elem.text else default

    @staticmethod
    def _parse_bool(parent: ET.Element, tag: str, default: bool = False) -> bool:
        """Parse a boolean value from child element."""
        elem = parent.find(tag)
        if elem is not None and elem.text:
            return elem.text.lower() == "true"
        return default

    @staticmethod
    def _parse_path(parent: ET.Element, tag: str) -> Optional[Path]:
        """Parse a path value from child element."""
        elem = parent.find(tag)
        if elem is not None and elem.text and elem.text.strip():
            return AppPaths.expand_path(elem.text.strip())
        return None

    @staticmethod
    def _parse_list(parent: ET.Element, tag: str) -> list[str]:
        """Parse <Tag><Item>..</Item></Tag> into a list of strings."""
        elem = parent.find(tag)
        if elem is None:
            return []
        return [item.text for item in elem.findall("Item") if item.text]

    @staticmethod
    def _write_list(parent: ET.Element, tag: str, values: list[str]) -> None:
        list_elem = ET.SubElement(parent, tag)
        for value in values:
            ET.SubElement(list_elem, "Item").text = value
