"""Shared fixtures: fake client folders and pack helpers."""
import hashlib
import struct
import tempfile
import zipfile
from pathlib import Path

import pytest


def write(path: Path, text: str = "data") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class ClientBuilder:
    """Builds a fake client folder (Interface/AddOns + WTF) under a root."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def addon(self, name: str) -> "ClientBuilder":
        write(self.root / "Interface" / "AddOns" / name / f"{name}.toc", f"## Title: {name}")
        return self

    def config_wtf(self, text: str = 'SET locale "enUS"') -> "ClientBuilder":
        write(self.root / "WTF" / "Config.wtf", text)
        return self

    def account(self, account: str, saved_variables: bool = True) -> "ClientBuilder":
        account_dir = self.root / "WTF" / "Account" / account
        account_dir.mkdir(parents=True, exist_ok=True)
        if saved_variables:
            write(account_dir / "SavedVariables" / "Bagnon.lua", f"-- {account}")
        return self

    def character(
        self,
        account: str,
        realm: str,
        character: str,
        saved_variables: bool = True,
        layout: bool = True,
    ) -> "ClientBuilder":
        char_dir = self.root / "WTF" / "Account" / account / realm / character
        char_dir.mkdir(parents=True, exist_ok=True)
        if saved_variables:
            write(char_dir / "SavedVariables" / "WeakAuras.lua", f"-- {character}")
        if layout:
            write(char_dir / "layout-local.txt", f"layout {character}")
        return self

    def build_info(self, text: str) -> "ClientBuilder":
        write(self.root / ".build.info", text)
        return self


def snapshot(root: Path) -> dict[str, str]:
    """Relative path -> sha256 for every file and folder under root."""
    result = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        if path.is_file():
            result[rel] = hashlib.sha256(path.read_bytes()).hexdigest()
        else:
            result[rel + "/"] = ""
    return result


def make_pack(path: Path, files: dict[str, str], compression: int = zipfile.ZIP_STORED) -> Path:
    """Write a zip whose members are given as name -> text."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression) as zf:
        for name, text in files.items():
            zf.writestr(name, text)
    return path


def corrupt_member(archive: Path, member: str, length: int = 8) -> None:
    """Flip the first bytes of a member's compressed data in place."""
    with zipfile.ZipFile(archive) as zf:
        offset = zf.getinfo(member).header_offset
    data = bytearray(archive.read_bytes())
    # Local file header: 30 fixed bytes, then the name and extra field
    name_len, extra_len = struct.unpack("<HH", data[offset + 26:offset + 30])
    start = offset + 30 + name_len + extra_len
    for i in range(start, start + length):
        data[i] ^= 0xFF
    archive.write_bytes(bytes(data))


def no_game_running():
    pass


@pytest.fixture
def client(tmp_path):
    return ClientBuilder(tmp_path / "source" / "_retail_")


@pytest.fixture
def dest_client(tmp_path):
    return ClientBuilder(tmp_path / "dest" / "_retail_")


@pytest.fixture
def isolated_tempdir(tmp_path, monkeypatch):
    """Route tempfile.mkdtemp into a folder the test can inspect."""
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(temp_root))
    return temp_root
