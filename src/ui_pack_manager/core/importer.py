"""Pack import: install a UI pack zip into a client folder"""

import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from ..config.path_validator import sanitize_filename, validate_backup_path
from ..config.paths import AppPaths
from ..logging_config import get_logger
from .chooser import Chooser, NonInteractiveChooser
from .errors import ArchiveShapeError, InputError, PackIOError, PreconditionError, SelectionError
from .exporter import PAYLOAD_DIR, TEMPLATE_DIR
from .fileops import copy_file, copy_tree, extract_zip, temp_workspace
from .game_detector import ensure_game_not_running
from .identity import Identity, list_accounts
from .manifest import MANIFEST_FILE, PackManifest, load_manifest

logger = get_logger("importer")

BACKUP_PREFIX = "_UIBackup_"
_SPECIAL_WTF_ITEMS = (AppPaths.ACCOUNT_DIR, TEMPLATE_DIR)


@dataclass
class ImportOptions:
    """Parameters of one import run"""
    archive_path: Path
    dest_root: Path
    skip_backup: bool = False
    dry_run: bool = False
    target_account: Optional[str] = None
    target_realm: Optional[str] = None
    target_character: Optional[str] = None


@dataclass
class ImportResult:
    """Outcome of an import (or of a dry run)"""
    dry_run: bool
    manifest: Optional[PackManifest] = None
    actions: list[str] = field(default_factory=list)
    backup_dir: Optional[Path] = None
    account: Optional[str] = None
    template_target: Optional[Identity] = None


def _validate_folder_name(value: str, what: str) -> str:
    value = value.strip()
    if not value:
        raise InputError(f"A {what} name is required")
    if sanitize_filename(value) != value or value in (".", ".."):
        raise SelectionError(f"Invalid {what} name: {value!r}")
    return value


class _AccountResolver:
    """Resolves the destination account once per import run.

    Both the account data and the character template go to the account
    returned by the first resolve() call.
    """

    def __init__(self, account_root: Path, preference: Optional[str], chooser: Chooser):
        self.account_root = account_root
        self.preference = preference
        self.chooser = chooser
        self._resolved: Optional[str] = None

    def resolve(self) -> str:
        if self._resolved is None:
            self._resolved = self._resolve()
        return self._resolved

    def _resolve(self) -> str:
        if self.preference:
            return _validate_folder_name(self.preference, "account")

        existing = list_accounts(self.account_root)
        if len(existing) == 1:
            return existing[0]
        if len(existing) > 1:
            index = self.chooser.choose_one("Select the destination account:", existing)
            if not 0 <= index < len(existing):
                raise SelectionError(f"Selection out of range: {index + 1} (expected 1-{len(existing)})")
            return existing[index]

        value = self.chooser.ask_value("No account folder found. Enter the destination account folder name", "")
        return _validate_folder_name(value, "account")


class PackInstaller:
    """Installs UI packs.

    Args:
        chooser: Used for account/realm/character values that were not
            supplied and cannot be inferred
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

    def _log(self, message: str, result: Optional[ImportResult] = None) -> None:
        logger.info(message)
        if result is not None:
            result.actions.append(message)
        if self.on_log is not None:
            self.on_log(message)

    def install(self, options: ImportOptions) -> ImportResult:
        """Install the pack described by options.

        Returns:
            ImportResult listing performed (or, for a dry run, planned) actions

        Raises:
            PreconditionError: Game running, archive or destination missing
            ArchiveShapeError: Not a zip, no payload, or payload without Interface/WTF
            SelectionError: Invalid account choice or folder name
            InputError: A value is needed but no chooser can provide it
            PackIOError: A copy failed
        """
        self.process_check()
        if not options.archive_path or not options.archive_path.is_file():
            raise PreconditionError(f"Pack archive not found: {options.archive_path}")
        if not options.dest_root or not options.dest_root.is_dir():
            raise PreconditionError(f"Destination folder does not exist: {options.dest_root}")

        try:
            with temp_workspace("uipack_import_") as staging:
                extract_zip(options.archive_path, staging)
                payload = staging / PAYLOAD_DIR
                if not payload.is_dir():
                    raise ArchiveShapeError("Invalid pack: 'payload' folder not found")

                manifest = load_manifest(staging / MANIFEST_FILE)
                if manifest is not None:
                    self._log(f"Pack: {manifest.name} v{manifest.version} (client {manifest.wow_version})")
                else:
                    self._log("Pack has no usable manifest, continuing without it")

                has_interface = (payload / AppPaths.INTERFACE_DIR).is_dir()
                has_wtf = (payload / AppPaths.WTF_DIR).is_dir()
                if not has_interface and not has_wtf:
                    raise ArchiveShapeError("Invalid pack: payload contains neither Interface nor WTF")

                result = ImportResult(dry_run=options.dry_run, manifest=manifest)
                if options.dry_run:
                    self._preview(payload, options, result)
                else:
                    self._install(payload, options, manifest, result)
                return result
        except (OSError, shutil.Error) as e:
            logger.error(f"Import failed: {e}")
            raise PackIOError(f"Import failed: {e}") from e

    def _preview(self, payload: Path, options: ImportOptions, result: ImportResult) -> None:
        """Report what a live run would do without touching the destination."""
        dest = options.dest_root
        wtf = payload / AppPaths.WTF_DIR

        if not options.skip_backup:
            self._log(f"[dry run] Would back up existing Interface/WTF to {dest / (BACKUP_PREFIX + '<timestamp>')}", result)
        if (payload / AppPaths.INTERFACE_DIR).is_dir():
            self._log(f"[dry run] Would copy Interface -> {dest / AppPaths.INTERFACE_DIR}", result)
        if not wtf.is_dir():
            return

        for item in sorted(wtf.iterdir()):
            if item.name not in _SPECIAL_WTF_ITEMS:
                self._log(f"[dry run] Would copy WTF/{item.name} -> {dest / AppPaths.WTF_DIR / item.name}", result)

        account_target = options.target_account or "<account to be selected>"
        if (wtf / AppPaths.ACCOUNT_DIR).is_dir():
            exported = sorted(p.name for p in (wtf / AppPaths.ACCOUNT_DIR).iterdir() if p.is_dir())
            self._log(
                f"[dry run] Would copy account data ({', '.join(exported) or 'none'}) -> "
                f"WTF/Account/{account_target}",
                result,
            )
        if (wtf / TEMPLATE_DIR).is_dir():
            if options.target_realm and options.target_character:
                self._log(
                    f"[dry run] Would install character template -> "
                    f"WTF/Account/{account_target}/{options.target_realm}/{options.target_character}",
                    result,
                )
            else:
                self._log("[dry run] Would prompt for the target realm/character for the character template", result)

    def _install(
        self,
        payload: Path,
        options: ImportOptions,
        manifest: Optional[PackManifest],
        result: ImportResult,
    ) -> None:
        dest = options.dest_root
        src_interface = payload / AppPaths.INTERFACE_DIR
        src_wtf = payload / AppPaths.WTF_DIR
        src_accounts = src_wtf / AppPaths.ACCOUNT_DIR
        src_template = src_wtf / TEMPLATE_DIR
        dest_wtf = dest / AppPaths.WTF_DIR
        account_root = AppPaths.account_root(dest)

        # Resolve every identity before the first write so a bad choice
        # leaves the destination untouched
        resolver = _AccountResolver(account_root, options.target_account, self.chooser)
        account = None
        if src_accounts.is_dir():
            account = resolver.resolve()
        template_target = None
        if src_template.is_dir():
            template_target = self._resolve_template_target(resolver.resolve(), options, manifest)
            account = template_target.account
        result.account = account
        result.template_target = template_target

        if not options.skip_backup:
            result.backup_dir = self._backup(payload, dest, result)

        if src_interface.is_dir():
            copy_tree(src_interface, dest / AppPaths.INTERFACE_DIR)
            self._log(f"Copied Interface -> {dest / AppPaths.INTERFACE_DIR}", result)

        if not src_wtf.is_dir():
            return

        dest_wtf.mkdir(parents=True, exist_ok=True)
        for item in sorted(src_wtf.iterdir()):
            if item.name in _SPECIAL_WTF_ITEMS:
                continue
            if item.is_dir():
                copy_tree(item, dest_wtf / item.name)
            else:
                copy_file(item, dest_wtf / item.name)
            self._log(f"Copied WTF/{item.name}", result)

        if account is not None and src_accounts.is_dir():
            dest_account = account_root / account
            dest_account.mkdir(parents=True, exist_ok=True)
            for exported in sorted(p for p in src_accounts.iterdir() if p.is_dir()):
                copy_tree(exported, dest_account)
                self._log(f"Copied account data {exported.name} -> WTF/Account/{account}", result)

        if template_target is not None:
            self._install_template(src_template, account_root, template_target, result)

    def _resolve_template_target(
        self,
        account: str,
        options: ImportOptions,
        manifest: Optional[PackManifest],
    ) -> Identity:
        default_realm, default_character = ("", "")
        if manifest is not None:
            default_realm, default_character = manifest.source_realm_and_character()

        realm = options.target_realm or self.chooser.ask_value("Target realm", default_realm)
        character = options.target_character or self.chooser.ask_value("Target character", default_character)
        return Identity(
            account,
            _validate_folder_name(realm, "realm"),
            _validate_folder_name(character, "character"),
        )

    def _install_template(
        self,
        src_template: Path,
        account_root: Path,
        target: Identity,
        result: ImportResult,
    ) -> None:
        char_dir = account_root / target.account / target.realm / target.character
        char_dir.mkdir(parents=True, exist_ok=True)

        saved_vars = src_template / AppPaths.SAVED_VARIABLES_DIR
        if saved_vars.is_dir():
            copy_tree(saved_vars, char_dir / AppPaths.SAVED_VARIABLES_DIR)
        layout = src_template / AppPaths.LAYOUT_FILE
        if layout.is_file():
            copy_file(layout, char_dir / AppPaths.LAYOUT_FILE)
        self._log(f"Installed character template -> {target}", result)

    def _backup(self, payload: Path, dest: Path, result: ImportResult) -> Optional[Path]:
        """Copy the destination subtrees the payload will overwrite.

        Returns:
            The backup folder, or None if there was nothing to back up
        """
        subtrees = [
            name for name in (AppPaths.INTERFACE_DIR, AppPaths.WTF_DIR)
            if (payload / name).is_dir() and (dest / name).is_dir()
        ]
        if not subtrees:
            self._log("Nothing to back up", result)
            return None

        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        backup_dir = dest / f"{BACKUP_PREFIX}{stamp}"
        counter = 1
        while backup_dir.exists():
            backup_dir = dest / f"{BACKUP_PREFIX}{stamp}_{counter}"
            counter += 1

        is_valid, error = validate_backup_path(backup_dir, dest)
        if not is_valid:
            raise PreconditionError(f"Cannot create backup: {error}")

        backup_dir.mkdir()
        for name in subtrees:
            copy_tree(dest / name, backup_dir / name)
        self._log(f"Backup created: {backup_dir} ({', '.join(subtrees)})", result)
        return backup_dir
