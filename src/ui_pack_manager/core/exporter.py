"""Pack export: build a UI pack zip from a client folder"""

import os
import shutil
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from ..config.path_validator import sanitize_filename
from ..config.paths import AppPaths
from ..logging_config import get_logger
from .chooser import Chooser, NonInteractiveChooser
from .errors import PackIOError, PreconditionError, SelectionError
from .fileops import copy_file, copy_tree, create_zip, temp_workspace
from .game_detector import GAME_PROCESS_NAMES, ensure_game_not_running
from .identity import CharacterCandidate, Identity, list_accounts, list_realms, resolve_character, scan_candidates
from .installer_assets import write_installer_assets
from .manifest import MANIFEST_FILE, PackManifest, detect_client_version, write_manifest
from .selection import select_addons

logger = get_logger("exporter")

PAYLOAD_DIR = "payload"
TEMPLATE_DIR = "CharacterTemplate"
ANONYMOUS_ACCOUNT_PREFIX = "ACCOUNT_"


@dataclass
class ExportOptions:
    """Parameters of one export run"""
    source_root: Path
    output_dir: Path
    name: str
    version: str
    include_account_layout: bool = False
    include_character_settings: bool = False
    source_character: Optional[str] = None  # "Realm\Char" or "Account\Realm\Char"
    anonymize_accounts: bool = False
    addon_allow_list: list[str] = field(default_factory=list)
    exclude_addons: list[str] = field(default_factory=list)


@dataclass
class ExportResult:
    """Outcome of a successful export"""
    archive_path: Path
    manifest: PackManifest
    account_map: dict[str, str]
    template_source: Optional[Identity] = None


def build_account_map(accounts: list[str], anonymize: bool) -> dict[str, str]:
    """Map real account folder names to the names used inside the pack.

    Args:
        accounts: Account folder names in enumeration order
        anonymize: Replace names with ACCOUNT_1, ACCOUNT_2, ...

    Returns:
        real name -> export name
    """
    if not anonymize:
        return {account: account for account in accounts}
    return {
        account: f"{ANONYMOUS_ACCOUNT_PREFIX}{number}"
        for number, account in enumerate(accounts, start=1)
    }


def archive_filename(name: str, version: str) -> str:
    return f"{sanitize_filename(name)}-v{sanitize_filename(version)}.zip"


class PackBuilder:
    """Builds UI packs.

    Each export() call is independent: the account map, staging folder and
    selections live only for that call.

    Args:
        chooser: Used when several characters qualify for the template and
            no selector was given
        on_log: Receives one human-readable line per step
        process_check: Raises PreconditionError if the game is running
    """

    def __init__(
        self,
        chooser: Optional[Chooser] = None,
        on_log: Optional[Callable[[str], None]] = None,
        process_check: Callable[[], None] = ensure_game_not_running,
    ):
        self.chooser = chooser or NonInteractiveChooser()
        self.on_log = on_log
        self.process_check = process_check

    def _log(self, message: str) -> None:
        logger.info(message)
        if self.on_log is not None:
            self.on_log(message)

    def export(self, options: ExportOptions) -> ExportResult:
        """Build the pack described by options.

        Returns:
            ExportResult for the written archive

        Raises:
            PreconditionError: Game running, missing name/version/paths
            SelectionError: Empty addon selection or character selection failure
            InputError: A character choice is needed but no chooser is available
            PackIOError: A copy or the compression failed
        """
        self._check_preconditions(options)

        source = options.source_root
        output_dir = options.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        addons = select_addons(
            AppPaths.addons_dir(source),
            options.addon_allow_list,
            options.exclude_addons,
        )
        self._log(f"Selected {len(addons)} addon(s)")

        account_root = AppPaths.account_root(source)
        account_map = build_account_map(list_accounts(account_root), options.anonymize_accounts)

        template: Optional[CharacterCandidate] = None
        if options.include_character_settings:
            template = resolve_character(
                scan_candidates(account_root), options.source_character, self.chooser
            )
            self._log(f"Character template source: {template.identity}")

        archive_path = output_dir / archive_filename(options.name, options.version)

        try:
            with temp_workspace("uipack_export_") as staging:
                payload = staging / PAYLOAD_DIR
                payload.mkdir()

                self._copy_addons(source, payload, addons)
                self._copy_config(source, payload)
                self._copy_accounts(account_root, payload, account_map, options.include_account_layout)

                character_source = None
                if template is not None:
                    character_source = self._copy_template(template, payload, account_map)

                manifest = PackManifest(
                    name=options.name,
                    version=options.version,
                    wow_version=detect_client_version(source),
                    created_at=date.today(),
                    addons=tuple(addons),
                    has_character_template=template is not None,
                    character_source=character_source,
                )
                write_manifest(manifest, staging / MANIFEST_FILE)
                write_installer_assets(staging, manifest, GAME_PROCESS_NAMES)

                self._compress(staging, archive_path)
        except (OSError, shutil.Error) as e:
            logger.error(f"Export failed: {e}")
            raise PackIOError(f"Export failed: {e}") from e

        self._log(f"Pack written: {archive_path}")
        return ExportResult(
            archive_path=archive_path,
            manifest=manifest,
            account_map=account_map,
            template_source=template.identity if template else None,
        )

    def _check_preconditions(self, options: ExportOptions) -> None:
        if not options.name or not options.name.strip():
            raise PreconditionError("Pack name is required")
        if not options.version or not options.version.strip():
            raise PreconditionError("Pack version is required")
        if not options.output_dir:
            raise PreconditionError("Output directory is required")
        self.process_check()
        if not options.source_root or not options.source_root.is_dir():
            raise PreconditionError(f"Source folder does not exist: {options.source_root}")

    def _copy_addons(self, source: Path, payload: Path, addons: list[str]) -> None:
        src_dir = AppPaths.addons_dir(source)
        dest_dir = AppPaths.addons_dir(payload)
        for addon in addons:
            copy_tree(src_dir / addon, dest_dir / addon)
        self._log(f"Copied {len(addons)} addon folder(s)")

    def _copy_config(self, source: Path, payload: Path) -> None:
        config_file = source / AppPaths.WTF_DIR / AppPaths.CONFIG_WTF
        if config_file.is_file():
            copy_file(config_file, payload / AppPaths.WTF_DIR / AppPaths.CONFIG_WTF)
            self._log(f"Copied {AppPaths.CONFIG_WTF}")
        else:
            logger.debug(f"No {AppPaths.CONFIG_WTF} at {config_file}")

    def _copy_accounts(
        self,
        account_root: Path,
        payload: Path,
        account_map: dict[str, str],
        include_layout: bool,
    ) -> None:
        """Copy account-wide SavedVariables and, optionally, every layout file.

        Only the account folder is renamed; realm and character folder names
        are kept as they are.
        """
        dest_root = AppPaths.account_root(payload)
        for account, export_name in account_map.items():
            account_dir = account_root / account
            dest_account = dest_root / export_name

            saved_vars = account_dir / AppPaths.SAVED_VARIABLES_DIR
            if saved_vars.is_dir():
                copy_tree(saved_vars, dest_account / AppPaths.SAVED_VARIABLES_DIR)
                self._log(f"Copied account SavedVariables: {account} -> {export_name}")

            if not include_layout:
                continue
            for realm_dir in list_realms(account_dir):
                for char_dir in sorted(p for p in realm_dir.iterdir() if p.is_dir()):
                    layout = char_dir / AppPaths.LAYOUT_FILE
                    if layout.is_file():
                        copy_file(layout, dest_account / realm_dir.name / char_dir.name / AppPaths.LAYOUT_FILE)
                        logger.debug(f"Copied layout for {account}\\{realm_dir.name}\\{char_dir.name}")

    def _copy_template(
        self,
        template: CharacterCandidate,
        payload: Path,
        account_map: dict[str, str],
    ) -> str:
        """Copy the selected character into WTF/CharacterTemplate.

        Returns:
            The character source string, using the export-time account name
        """
        dest = payload / AppPaths.WTF_DIR / TEMPLATE_DIR
        copied = False
        if template.has_saved_variables:
            copy_tree(template.saved_variables_dir, dest / AppPaths.SAVED_VARIABLES_DIR)
            copied = True
        if template.has_layout:
            copy_file(template.layout_file, dest / AppPaths.LAYOUT_FILE)
            copied = True
        if not copied:
            raise SelectionError(f"Character {template.identity} has no data to use as a template")

        identity = template.identity
        export_identity = Identity(
            account_map.get(identity.account, identity.account),
            identity.realm,
            identity.character,
        )
        self._log(f"Copied character template from {export_identity}")
        return str(export_identity)

    def _compress(self, staging: Path, archive_path: Path) -> None:
        """Zip staging into archive_path, replacing it only once complete."""
        partial = archive_path.with_name(archive_path.name + ".partial")
        try:
            file_count = create_zip(staging, partial)
            os.replace(partial, archive_path)
        finally:
            if partial.exists():
                partial.unlink()
        self._log(f"Compressed {file_count} file(s)")
