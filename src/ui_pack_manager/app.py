"""Command line entry point and orchestrator"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .config.manager import ConfigurationManager
from .config.paths import AppPaths
from .config.schema import Installation
from .core.chooser import ConsoleChooser
from .core.errors import PackError, PreconditionError
from .core.exporter import ExportOptions, PackBuilder
from .core.game_detector import GameDetector
from .core.identity import scan_candidates, scan_hierarchy
from .core.importer import ImportOptions, PackInstaller
from .core.manifest import read_manifest_from_archive
from .logging_config import setup_logging, get_logger
from . import __version__

logger = get_logger("app")


def _split_names(values: Optional[list[str]]) -> Optional[list[str]]:
    """Accept both repeated flags and comma separated lists."""
    if values is None:
        return None
    names = []
    for value in values:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ui-pack-manager",
        description="Export and import addon/settings packs for World of Warcraft",
    )
    parser.add_argument("--debug", action="store_true", help="Also log to the console")
    parser.add_argument("--config", type=Path, default=None, help="Configuration file to use")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_export = sub.add_parser("export", help="Build a pack from a client folder")
    p_export.add_argument("--source", type=Path, default=None, help="Client folder (e.g. ...\\_retail_)")
    p_export.add_argument("--output", type=Path, default=None, help="Folder to write the pack into")
    p_export.add_argument("--name", default=None, help="Pack name")
    p_export.add_argument("--pack-version", default=None, help="Pack version string")
    p_export.add_argument("--include-layout", action="store_true", default=None,
                          help="Include every character's layout-local.txt")
    p_export.add_argument("--include-character", action="store_true", default=None,
                          help="Include one character's settings as a character template")
    p_export.add_argument("--character", default=None,
                          help="Template character: 'Realm\\Character' or 'Account\\Realm\\Character'")
    anonymize = p_export.add_mutually_exclusive_group()
    anonymize.add_argument("--anonymize", dest="anonymize", action="store_true", default=None,
                           help="Replace account folder names with ACCOUNT_<n>")
    anonymize.add_argument("--keep-account-names", dest="anonymize", action="store_false", default=None,
                           help="Keep real account folder names")
    p_export.add_argument("--addons", action="append", default=None,
                          help="Only include these addons (repeatable or comma separated)")
    p_export.add_argument("--exclude", action="append", default=None,
                          help="Exclude these addons (repeatable or comma separated)")
    p_export.add_argument("--save-defaults", action="store_true",
                          help="Remember these export options")

    p_import = sub.add_parser("import", help="Install a pack into a client folder")
    p_import.add_argument("archive", type=Path, help="Pack zip file")
    p_import.add_argument("--dest", type=Path, default=None, help="Client folder to install into")
    p_import.add_argument("--skip-backup", action="store_true", default=None, help="Do not back up Interface/WTF")
    p_import.add_argument("--dry-run", action="store_true", help="Only show what would be copied")
    p_import.add_argument("--account", default=None, help="Destination account folder")
    p_import.add_argument("--realm", default=None, help="Destination realm for the character template")
    p_import.add_argument("--character", default=None, help="Destination character for the character template")
    p_import.add_argument("--save-defaults", action="store_true",
                          help="Remember the destination account/realm/character")

    p_list = sub.add_parser("list", help="List accounts, realms and characters of a client folder")
    p_list.add_argument("root", type=Path, nargs="?", default=None, help="Client folder")

    p_inspect = sub.add_parser("inspect", help="Show the manifest of a pack")
    p_inspect.add_argument("archive", type=Path, help="Pack zip file")

    return parser


class UIPackManagerApp:
    """Application orchestrator.

    Handles configuration loading, first-run detection and command dispatch.
    """

    def __init__(self, config_path: Optional[Path] = None, chooser=None, out=print):
        self.config_manager = ConfigurationManager(config_path)
        self.chooser = chooser or ConsoleChooser()
        self.out = out

    def load_config(self):
        """Load the configuration, creating a default one on first run."""
        if self.config_manager.is_first_run():
            self._handle_first_run()
        elif self.config_manager.config is None:
            self.config_manager.load()
        return self.config_manager.config

    def _handle_first_run(self):
        """Detect client folders and store a default configuration."""
        detector = GameDetector()
        installations = detector.detect_all()
        config = self.config_manager.create_default(installations)
        config.settings.first_run_complete = True
        try:
            self.config_manager.save()
        except OSError as e:
            logger.warning(f"Could not save default configuration: {e}")

    def _default_root(self) -> Optional[Path]:
        return self.config_manager.config.default_root()

    def _check_client_folder(self, root: Path) -> None:
        """Warn when an existing folder has neither Interface/AddOns nor WTF."""
        status = GameDetector(root.parent).verify_installation(
            Installation(flavor=root.name, root=root, enabled=True)
        )
        if status["root"] and not (status["addons"] or status["wtf"]):
            logger.warning(f"{root} has no Interface/AddOns or WTF folder")
            self.out(f"Warning: {root} does not look like a client folder (no Interface/AddOns or WTF)")

    def run(self, args: argparse.Namespace) -> int:
        self.load_config()
        handler = {
            "export": self.cmd_export,
            "import": self.cmd_import,
            "list": self.cmd_list,
            "inspect": self.cmd_inspect,
        }[args.cmd]
        return handler(args)

    def cmd_export(self, args: argparse.Namespace) -> int:
        defaults = self.config_manager.config.settings.export
        source = args.source or self._default_root()
        if source is None:
            raise PreconditionError("No source folder given and no client folder detected (use --source)")

        options = ExportOptions(
            source_root=source,
            output_dir=args.output or defaults.output_dir or AppPaths.OUTPUT_DEFAULT,
            name=args.name or defaults.pack_name,
            version=args.pack_version or defaults.pack_version,
            include_account_layout=_pick(args.include_layout, defaults.include_account_layout),
            include_character_settings=_pick(args.include_character, defaults.include_character_settings),
            source_character=args.character,
            anonymize_accounts=_pick(args.anonymize, defaults.anonymize_accounts),
            addon_allow_list=_pick(_split_names(args.addons), defaults.addon_allow_list),
            exclude_addons=_pick(_split_names(args.exclude), defaults.exclude_addons),
        )

        result = PackBuilder(chooser=self.chooser, on_log=self.out).export(options)
        self.out(f"Created {result.archive_path}")

        if args.save_defaults:
            defaults.output_dir = options.output_dir
            defaults.pack_name = options.name
            defaults.pack_version = options.version
            defaults.include_account_layout = options.include_account_layout
            defaults.include_character_settings = options.include_character_settings
            defaults.anonymize_accounts = options.anonymize_accounts
            defaults.addon_allow_list = list(options.addon_allow_list)
            defaults.exclude_addons = list(options.exclude_addons)
            self.config_manager.save()
        return 0

    def cmd_import(self, args: argparse.Namespace) -> int:
        defaults = self.config_manager.config.settings.import_
        dest = args.dest or self._default_root()
        if dest is None:
            raise PreconditionError("No destination folder given and no client folder detected (use --dest)")
        self._check_client_folder(dest)

        options = ImportOptions(
            archive_path=args.archive,
            dest_root=dest,
            skip_backup=_pick(args.skip_backup, defaults.skip_backup),
            dry_run=args.dry_run,
            target_account=args.account or defaults.target_account or None,
            target_realm=args.realm or defaults.target_realm or None,
            target_character=args.character or defaults.target_character or None,
        )

        result = PackInstaller(chooser=self.chooser, on_log=self.out).install(options)
        if result.dry_run:
            self.out("Dry run complete, nothing was changed")
        else:
            self.out("Pack installed")
            if result.backup_dir:
                self.out(f"Backup: {result.backup_dir}")

        if args.save_defaults and not result.dry_run:
            defaults.target_account = result.account or ""
            if result.template_target is not None:
                defaults.target_realm = result.template_target.realm
                defaults.target_character = result.template_target.character
            self.config_manager.save()
        return 0

    def cmd_list(self, args: argparse.Namespace) -> int:
        root = args.root or self._default_root()
        if root is None:
            raise PreconditionError("No client folder given and none detected")
        self._check_client_folder(root)

        account_root = AppPaths.account_root(root)
        hierarchy = scan_hierarchy(account_root)
        exportable = {str(c.identity) for c in scan_candidates(account_root)}
        if not hierarchy:
            self.out(f"No accounts found under {account_root}")
            return 0

        for account, realms in hierarchy.items():
            self.out(account)
            for realm, characters in realms.items():
                self.out(f"  {realm}")
                for character in characters:
                    marker = "*" if f"{account}\\{realm}\\{character}" in exportable else " "
                    self.out(f"   {marker} {character}")
        self.out("* = has SavedVariables or layout-local.txt")
        return 0

    def cmd_inspect(self, args: argparse.Namespace) -> int:
        if not args.archive.is_file():
            raise PreconditionError(f"Pack archive not found: {args.archive}")
        manifest = read_manifest_from_archive(args.archive)
        if manifest is None:
            self.out("This pack has no usable manifest.json")
            return 0

        self.out(f"Name:               {manifest.name}")
        self.out(f"Version:            {manifest.version}")
        self.out(f"Client version:     {manifest.wow_version}")
        self.out(f"Created:            {manifest.created_at or 'unknown'}")
        self.out(f"Character template: {manifest.character_source or 'no'}")
        self.out(f"Addons ({len(manifest.addons)}):")
        for addon in manifest.addons:
            self.out(f"  {addon}")
        return 0


def _pick(value, default):
    """Command line value if given, stored default otherwise."""
    return default if value is None else value


def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)

    # Initialize logging first
    logger = setup_logging(debug=args.debug)
    logger.info(f"Starting UI Pack Manager v{__version__} ({args.cmd})")

    try:
        return UIPackManagerApp(config_path=args.config).run(args)
    except PackError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Unexpected error")
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 2
    finally:
        logger.info("UI Pack Manager shutting down")


if __name__ == "__main__":
    sys.exit(main())
