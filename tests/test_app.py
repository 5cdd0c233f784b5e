"""
Tests for the command line front end.
"""
import zipfile

import pytest

from ui_pack_manager import app as app_module
from ui_pack_manager.app import UIPackManagerApp, _split_names, build_parser, main
from ui_pack_manager.config import ConfigurationManager
from ui_pack_manager.config.paths import AppPaths
from ui_pack_manager.core import game_detector
from ui_pack_manager.core.chooser import ScriptedChooser

from conftest import ClientBuilder, corrupt_member, make_pack


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config/log files in tmp_path and report no running game."""
    config_dir = tmp_path / "appdata"
    monkeypatch.setattr(AppPaths, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(AppPaths, "CONFIG_FILE", config_dir / "configuration.xml")
    monkeypatch.setattr(AppPaths, "LOG_FILE", config_dir / "ui_pack_manager.log")
    monkeypatch.setattr(AppPaths, "GAME_ROOT_DEFAULT", tmp_path / "no_game")
    monkeypatch.setattr(game_detector.psutil, "process_iter", lambda attrs: iter([]))
    return config_dir


def run(argv, chooser=None):
    lines = []
    args = build_parser().parse_args(argv)
    application = UIPackManagerApp(config_path=args.config, chooser=chooser or ScriptedChooser(), out=lines.append)
    return application.run(args), lines


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "config.xml"


class TestParser:
    def test_split_names(self):
        assert _split_names(None) is None
        assert _split_names(["Bagnon, WeakAuras", "Details"]) == ["Bagnon", "WeakAuras", "Details"]

    def test_anonymize_flags(self):
        parser = build_parser()
        assert parser.parse_args(["export"]).anonymize is None
        assert parser.parse_args(["export", "--anonymize"]).anonymize is True
        assert parser.parse_args(["export", "--keep-account-names"]).anonymize is False
        with pytest.raises(SystemExit):
            parser.parse_args(["export", "--anonymize", "--keep-account-names"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    def test_export_then_inspect(self, client: ClientBuilder, tmp_path, config_file):
        client.addon("Bagnon").addon("WeakAuras").addon("Details").config_wtf()
        client.account("Acct1")
        out = tmp_path / "packs"

        code, lines = run([
            "--config", str(config_file), "export",
            "--source", str(client.root), "--output", str(out),
            "--name", "RaidUI", "--pack-version", "2.0",
            "--exclude", "Details", "--save-defaults",
        ])

        assert code == 0
        archive = out / "RaidUI-v2.0.zip"
        assert archive.is_file()
        assert f"Created {archive}" in lines

        stored = ConfigurationManager(config_file).load().settings.export
        assert stored.pack_name == "RaidUI"
        assert stored.exclude_addons == ["Details"]
        assert stored.output_dir == out

        code, lines = run(["--config", str(config_file), "inspect", str(archive)])
        assert code == 0
        assert "Name:               RaidUI" in lines
        assert "Addons (2):" in lines
        assert "  Bagnon" in lines
        assert "  Details" not in lines

    def test_import_dry_run(self, client: ClientBuilder, dest_client: ClientBuilder, tmp_path, config_file):
        client.addon("Bagnon").config_wtf()
        dest_client.addon("OldAddon")
        run([
            "--config", str(config_file), "export",
            "--source", str(client.root), "--output", str(tmp_path / "packs"),
        ])
        archive = next((tmp_path / "packs").glob("*.zip"))

        code, lines = run([
            "--config", str(config_file), "import", str(archive),
            "--dest", str(dest_client.root), "--dry-run",
        ])

        assert code == 0
        assert "Dry run complete, nothing was changed" in lines
        assert not (dest_client.root / "Interface/AddOns/Bagnon").exists()

    def test_import_saves_target_defaults(self, client: ClientBuilder, dest_client: ClientBuilder, tmp_path, config_file):
        client.addon("Bagnon").account("Acct1").character("Acct1", "Realm1", "Hero")
        dest_client.account("Me")
        run([
            "--config", str(config_file), "export", "--include-character",
            "--source", str(client.root), "--output", str(tmp_path / "packs"),
        ])
        archive = next((tmp_path / "packs").glob("*.zip"))

        code, lines = run(
            ["--config", str(config_file), "import", str(archive), "--dest", str(dest_client.root), "--save-defaults"],
            chooser=ScriptedChooser(values=["Home", None]),
        )

        assert code == 0
        assert "Pack installed" in lines
        assert (dest_client.root / "WTF/Account/Me/Home/Hero/layout-local.txt").is_file()
        stored = ConfigurationManager(config_file).load().settings.import_
        assert (stored.target_account, stored.target_realm, stored.target_character) == ("Me", "Home", "Hero")

    def test_list(self, client: ClientBuilder, config_file):
        client.account("Acct1").character("Acct1", "Realm1", "Hero")
        client.character("Acct1", "Realm1", "Bank", saved_variables=False, layout=False)

        code, lines = run(["--config", str(config_file), "list", str(client.root)])

        assert code == 0
        assert lines[:2] == ["Acct1", "  Realm1"]
        assert "   * Hero" in lines
        assert "     Bank" in lines

    def test_list_without_accounts(self, tmp_path, config_file):
        code, lines = run(["--config", str(config_file), "list", str(tmp_path)])
        assert code == 0
        assert lines[-1].startswith("No accounts found")

    def test_list_warns_about_non_client_folder(self, tmp_path, config_file):
        folder = tmp_path / "Documents"
        folder.mkdir()
        code, lines = run(["--config", str(config_file), "list", str(folder)])
        assert code == 0
        assert lines[0].startswith(f"Warning: {folder} does not look like a client folder")

    def test_list_client_folder_without_warning(self, client: ClientBuilder, config_file):
        client.addon("Bagnon")
        _, lines = run(["--config", str(config_file), "list", str(client.root)])
        assert not any(line.startswith("Warning:") for line in lines)

    def test_import_warns_about_non_client_folder(self, client: ClientBuilder, tmp_path, config_file):
        client.addon("Bagnon")
        run([
            "--config", str(config_file), "export",
            "--source", str(client.root), "--output", str(tmp_path / "packs"),
        ])
        archive = next((tmp_path / "packs").glob("*.zip"))
        dest = tmp_path / "empty"
        dest.mkdir()

        code, lines = run(["--config", str(config_file), "import", str(archive), "--dest", str(dest), "--dry-run"])

        assert code == 0
        assert any(line.startswith("Warning:") for line in lines)

    def test_first_run_writes_config(self, tmp_path, config_file):
        run(["--config", str(config_file), "list", str(tmp_path)])
        manager = ConfigurationManager(config_file)
        assert manager.is_first_run() is False
        assert all(not i.enabled for i in manager.config.installations)


class TestMain:
    def test_pack_error_exit_code(self, tmp_path, config_file, capsys):
        code = main(["--config", str(config_file), "inspect", str(tmp_path / "missing.zip")])
        assert code == 1
        assert "Pack archive not found" in capsys.readouterr().err

    def test_success_exit_code(self, tmp_path, config_file, isolated_environment):
        assert main(["--config", str(config_file), "list", str(tmp_path)]) == 0
        assert (isolated_environment / "ui_pack_manager.log").is_file()

    def test_unexpected_error_exit_code(self, tmp_path, config_file, monkeypatch):
        def broken(self, args):
            raise RuntimeError("boom")

        monkeypatch.setattr(app_module.UIPackManagerApp, "cmd_list", broken)
        assert main(["--config", str(config_file), "list", str(tmp_path)]) == 2

    def test_damaged_pack_exit_code(self, tmp_path, config_file, dest_client: ClientBuilder, capsys):
        dest_client.addon("OldAddon")
        member = "payload/Interface/AddOns/Bagnon/Bagnon.lua"
        archive = make_pack(tmp_path / "p.zip", {member: "-- saved data\n" * 300}, compression=zipfile.ZIP_DEFLATED)
        corrupt_member(archive, member)

        code = main(["--config", str(config_file), "import", str(archive), "--dest", str(dest_client.root)])

        assert code == 1
        assert "Unexpected error" not in capsys.readouterr().err
