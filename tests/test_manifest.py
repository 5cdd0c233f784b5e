"""
Tests for manifest.json encoding/decoding and client version detection.
"""
import json
from datetime import date

import pytest

from ui_pack_manager.core.errors import ArchiveShapeError, ManifestDecodeError
from ui_pack_manager.core.manifest import (
    PackManifest,
    decode_manifest,
    detect_client_version,
    encode_manifest,
    load_manifest,
    read_manifest_from_archive,
)

from conftest import make_pack


class TestManifestCodec:
    """encode_manifest() / decode_manifest()"""

    def test_round_trip_full(self):
        manifest = PackManifest(
            name="MyUI",
            version="2.1",
            wow_version="11.0.5.57212",
            created_at=date(2024, 11, 3),
            addons=("Bagnon", "WeakAuras"),
            has_character_template=True,
            character_source="ACCOUNT_1\\Realm1\\Hero",
        )
        assert decode_manifest(encode_manifest(manifest)) == manifest

    def test_round_trip_empty_addons_and_null_source(self):
        manifest = PackManifest(name="Empty", version="0.1", created_at=date(2024, 1, 1))
        decoded = decode_manifest(encode_manifest(manifest))
        assert decoded == manifest
        assert decoded.addons == ()
        assert decoded.character_source is None

    def test_exact_keys(self):
        data = json.loads(encode_manifest(PackManifest(name="A", version="1", created_at=date(2024, 5, 6))))
        assert set(data) == {
            "name", "version", "wowVersion", "createdAt", "addons",
            "hasCharacterTemplate", "characterSource", "notes",
        }
        assert data["createdAt"] == "2024-05-06"

    @pytest.mark.parametrize("text", [
        "not json",
        "[1, 2, 3]",
        '{"version": "1"}',
        '{"name": "A", "version": "1", "addons": [1, 2]}',
        '{"name": "A", "version": "1", "createdAt": "yesterday"}',
        '{"name": "A", "version": "1", "hasCharacterTemplate": "false"}',
        '{"name": "A", "version": "1", "hasCharacterTemplate": 1}',
    ])
    def test_malformed_raises_decode_error(self, text):
        with pytest.raises(ManifestDecodeError):
            decode_manifest(text)

    def test_missing_template_flag_defaults_to_false(self):
        assert decode_manifest('{"name": "A", "version": "1"}').has_character_template is False

    def test_string_template_flag_is_not_truthy(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_text('{"name": "A", "version": "1", "hasCharacterTemplate": "false"}', encoding="utf-8")
        assert load_manifest(path) is None

    def test_source_realm_and_character(self):
        manifest = PackManifest(name="A", version="1", character_source="Acct\\Realm1\\Hero")
        assert manifest.source_realm_and_character() == ("Realm1", "Hero")
        assert PackManifest(name="A", version="1").source_realm_and_character() == ("", "")


class TestLoadManifest:
    """Best-effort loading: absent or corrupt means None, never an exception."""

    def test_missing_file(self, tmp_path):
        assert load_manifest(tmp_path / "manifest.json") is None

    def test_corrupt_file_degrades(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_text("{ this is not json", encoding="utf-8")
        assert load_manifest(path) is None

    def test_bom_is_accepted(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_text('{"name": "A", "version": "1"}', encoding="utf-8-sig")
        assert load_manifest(path).name == "A"

    def test_read_from_archive(self, tmp_path):
        manifest = PackManifest(name="Zipped", version="3", created_at=date(2024, 2, 2))
        archive = make_pack(tmp_path / "p.zip", {"manifest.json": encode_manifest(manifest), "payload/x": "x"})
        assert read_manifest_from_archive(archive) == manifest

    def test_read_from_archive_without_manifest(self, tmp_path):
        archive = make_pack(tmp_path / "p.zip", {"payload/x": "x"})
        assert read_manifest_from_archive(archive) is None

    def test_read_from_archive_corrupt_manifest(self, tmp_path):
        archive = make_pack(tmp_path / "p.zip", {"manifest.json": "garbage"})
        assert read_manifest_from_archive(archive) is None

    def test_read_from_non_zip(self, tmp_path):
        path = tmp_path / "p.zip"
        path.write_text("not a zip")
        with pytest.raises(ArchiveShapeError):
            read_manifest_from_archive(path)


class TestClientVersion:
    """detect_client_version()"""

    def test_four_part_version(self, tmp_path):
        root = tmp_path / "wow" / "_retail_"
        root.mkdir(parents=True)
        (root / ".build.info").write_text("Branch!STRING:0|Version!STRING:0\nus|11.0.5.57212 and 1.2.3\n")
        assert detect_client_version(root) == "11.0.5.57212"

    def test_three_part_fallback(self, tmp_path):
        root = tmp_path / "wow" / "_retail_"
        root.mkdir(parents=True)
        (root / ".build.info").write_text("Version 1.15.4\n")
        assert detect_client_version(root) == "1.15.4"

    def test_install_root_build_info(self, tmp_path):
        root = tmp_path / "wow" / "_retail_"
        root.mkdir(parents=True)
        (root.parent / ".build.info").write_text("us|10.2.7.55664")
        assert detect_client_version(root) == "10.2.7.55664"

    def test_unknown(self, tmp_path):
        root = tmp_path / "wow" / "_retail_"
        root.mkdir(parents=True)
        assert detect_client_version(root) == "unknown"
        (root / ".build.info").write_text("no versions here 1.2")
        assert detect_client_version(root) == "unknown"
