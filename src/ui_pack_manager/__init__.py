"""UI Pack Manager - Addon and settings pack tool for World of Warcraft clients.

This application provides:
    - Export of addons, Config.wtf and SavedVariables into a portable zip pack
    - Optional anonymization of account folder names inside the pack
    - A "character template" that can be remapped onto any destination character
    - Import of a pack onto another machine/account with a safety backup
    - Dry-run preview of everything an import would copy

Package Structure:
    app: Command line entry point and orchestrator
    config: Configuration management, paths, schemas, and path validation
    core: Pack export/import engine, identity scanning, manifest handling

Quick Start:
    Run from command line::

        python -m ui_pack_manager export --source "C:\\...\\_retail_" --name MyUI --version 1.0
        python -m ui_pack_manager import MyUI-v1.0.zip --dest "C:\\...\\_retail_"

    Or programmatically::

        from ui_pack_manager.core import ExportOptions, PackBuilder
        PackBuilder().export(ExportOptions(...))

Configuration:
    - Config file: %APPDATA%/UIPackManager/configuration.xml
    - Log file: %APPDATA%/UIPackManager/ui_pack_manager.log
"""

__version__ = "1.0.0"
__app_name__ = "UI Pack Manager"
