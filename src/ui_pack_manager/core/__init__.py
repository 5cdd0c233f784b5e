"""Core business logic module.

This module contains the pack export/import engine.

Submodules:
    identity: Account/realm/character discovery and template character selection
    selection: Addon allow-list/block-list filter
    manifest: manifest.json codec and client version detection
    exporter: PackBuilder, assembles a staging tree and compresses it into a pack
    importer: PackInstaller, backs up the destination and installs a pack
    chooser: Pluggable prompts for choices the engine cannot make alone
    game_detector: Client flavor detection and the "game is running" guard
    installer_assets: Standalone installer scripts written into every pack
    fileops: Copy, zip and temp folder helpers
    errors: Exception hierarchy rooted at PackError
"""

from .chooser import ConsoleChooser, NonInteractiveChooser, ScriptedChooser
from .errors import (
    ArchiveShapeError,
    InputError,
    ManifestDecodeError,
    PackError,
    PackIOError,
    PreconditionError,
    SelectionError,
)
from .exporter import ExportOptions, ExportResult, PackBuilder
from .game_detector import GameDetector
from .identity import CharacterCandidate, Identity
from .importer import ImportOptions, ImportResult, PackInstaller
from .manifest import PackManifest

__all__ = [
    "ArchiveShapeError",
    "CharacterCandidate",
    "ConsoleChooser",
    "ExportOptions",
    "ExportResult",
    "GameDetector",
    "Identity",
    "ImportOptions",
    "ImportResult",
    "InputError",
    "ManifestDecodeError",
    "NonInteractiveChooser",
    "PackBuilder",
    "PackError",
    "PackIOError",
    "PackInstaller",
    "PackManifest",
    "PreconditionError",
    "ScriptedChooser",
    "SelectionError",
]
