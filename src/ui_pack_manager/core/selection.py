"""Addon allow-list/block-list filtering"""

from collections.abc import Collection
from pathlib import Path

from .errors import SelectionError


def include(name: str, allow_list: Collection[str], block_list: Collection[str]) -> bool:
    """Decide whether an addon is part of the pack.

    A non-empty allow-list is exclusive. The block-list is applied after it
    and wins, even for names on the allow-list. Matching is exact and
    case-sensitive.
    """
    if allow_list and name not in allow_list:
        return False
    return name not in block_list


def select_addons(
    addons_dir: Path,
    allow_list: Collection[str] = (),
    block_list: Collection[str] = (),
) -> list[str]:
    """Resolve the addon folders to export.

    Args:
        addons_dir: The Interface/AddOns folder
        allow_list: Names to keep (all when empty)
        block_list: Names to drop

    Returns:
        Selected addon folder names, sorted

    Raises:
        SelectionError: If nothing survives the filter
    """
    available = []
    if addons_dir.is_dir():
        available = sorted((p.name for p in addons_dir.iterdir() if p.is_dir()), key=str.lower)

    selected = [name for name in available if include(name, allow_list, block_list)]
    if not selected:
        raise SelectionError(
            f"No addons selected ({len(available)} found in {addons_dir}, all filtered out)"
        )
    return selected
