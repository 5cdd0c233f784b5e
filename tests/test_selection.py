"""
Tests for the addon allow-list/block-list filter.
"""
import itertools

import pytest

from ui_pack_manager.core.errors import SelectionError
from ui_pack_manager.core.selection import include, select_addons

from conftest import ClientBuilder


class TestInclude:
    """include(name, allow, block)"""

    def test_no_lists_includes_everything(self):
        assert include("Bagnon", [], []) is True

    def test_allow_list_is_exclusive(self):
        assert include("Bagnon", ["Bagnon"], []) is True
        assert include("WeakAuras", ["Bagnon"], []) is False

    def test_block_list_removes(self):
        assert include("Bagnon", [], ["Bagnon"]) is False
        assert include("WeakAuras", [], ["Bagnon"]) is True

    def test_block_list_wins_over_allow_list(self):
        assert include("Bagnon", ["Bagnon"], ["Bagnon"]) is False

    def test_case_sensitive(self):
        assert include("bagnon", ["Bagnon"], []) is False
        assert include("bagnon", [], ["Bagnon"]) is True

    def test_truth_table(self):
        names = ["A", "B", "C"]
        lists = [[], ["A"], ["A", "B"], ["C"]]
        for name, allow, block in itertools.product(names, lists, lists):
            expected = (not allow or name in allow) and name not in block
            assert include(name, allow, block) is expected


class TestSelectAddons:
    """select_addons() over an AddOns folder"""

    def test_selects_sorted_folders(self, client: ClientBuilder):
        client.addon("WeakAuras").addon("Bagnon").addon("Details")
        selected = select_addons(client.root / "Interface" / "AddOns")
        assert selected == ["Bagnon", "Details", "WeakAuras"]

    def test_ignores_loose_files(self, client: ClientBuilder):
        client.addon("Bagnon")
        (client.root / "Interface" / "AddOns" / "readme.txt").write_text("x")
        assert select_addons(client.root / "Interface" / "AddOns") == ["Bagnon"]

    def test_allow_list_ignores_missing_names(self, client: ClientBuilder):
        client.addon("Bagnon").addon("WeakAuras")
        selected = select_addons(client.root / "Interface" / "AddOns", ["WeakAuras", "NotInstalled"], [])
        assert selected == ["WeakAuras"]

    def test_empty_selection_raises(self, client: ClientBuilder):
        client.addon("Bagnon")
        with pytest.raises(SelectionError):
            select_addons(client.root / "Interface" / "AddOns", ["Bagnon"], ["Bagnon"])

    def test_missing_addons_folder_raises(self, tmp_path):
        with pytest.raises(SelectionError):
            select_addons(tmp_path / "nope")
