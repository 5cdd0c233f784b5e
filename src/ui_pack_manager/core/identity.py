"""Account/realm/character discovery under WTF/Account.

Layout scanned::

    WTF/Account/
        <account>/
            SavedVariables/            account-wide data, not a realm
            <realm>/
                <character>/
                    SavedVariables/
                    layout-local.txt

Every call rescans the filesystem; nothing is cached.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config.paths import AppPaths
from ..logging_config import get_logger
from .chooser import Chooser, NonInteractiveChooser
from .errors import SelectionError

logger = get_logger("identity")

# Selectors are written Windows style but forward slashes are accepted too
_SELECTOR_SPLIT = re.compile(r"[\\/]")


@dataclass(frozen=True)
class Identity:
    """One character's saved-state address."""
    account: str
    realm: str
    character: str

    def __str__(self) -> str:
        return f"{self.account}\\{self.realm}\\{self.character}"


@dataclass(frozen=True)
class CharacterCandidate:
    """A character folder holding data worth exporting."""
    identity: Identity
    path: Path

    @property
    def saved_variables_dir(self) -> Path:
        return self.path / AppPaths.SAVED_VARIABLES_DIR

    @property
    def layout_file(self) -> Path:
        return self.path / AppPaths.LAYOUT_FILE

    @property
    def has_saved_variables(self) -> bool:
        return self.saved_variables_dir.is_dir()

    @property
    def has_layout(self) -> bool:
        return self.layout_file.is_file()


def _subdirs(path: Path) -> list[Path]:
    """Sorted subdirectories of path, empty if path is missing."""
    if not path.is_dir():
        return []
    return sorted((p for p in path.iterdir() if p.is_dir()), key=lambda p: p.name.lower())


def list_accounts(account_root: Path) -> list[str]:
    """Account folder names in enumeration order."""
    return [p.name for p in _subdirs(account_root)]


def list_realms(account_dir: Path) -> list[Path]:
    """Realm folders of an account (everything except SavedVariables)."""
    return [p for p in _subdirs(account_dir) if p.name != AppPaths.SAVED_VARIABLES_DIR]


def scan_hierarchy(account_root: Path) -> dict[str, dict[str, list[str]]]:
    """Build the accounts -> realms -> characters view used by identity pickers.

    Includes every character folder, whether or not it holds exportable data.

    Args:
        account_root: The WTF/Account folder

    Returns:
        Nested mapping; empty if account_root does not exist
    """
    hierarchy: dict[str, dict[str, list[str]]] = {}
    for account_dir in _subdirs(account_root):
        realms: dict[str, list[str]] = {}
        for realm_dir in list_realms(account_dir):
            realms[realm_dir.name] = [c.name for c in _subdirs(realm_dir)]
        hierarchy[account_dir.name] = realms
    return hierarchy


def scan_candidates(account_root: Path) -> list[CharacterCandidate]:
    """Find every character with SavedVariables or a layout file.

    Args:
        account_root: The WTF/Account folder

    Returns:
        Candidates in account/realm/character order; empty if account_root
        does not exist
    """
    candidates = []
    for account_dir in _subdirs(account_root):
        for realm_dir in list_realms(account_dir):
            for char_dir in _subdirs(realm_dir):
                candidate = CharacterCandidate(
                    identity=Identity(account_dir.name, realm_dir.name, char_dir.name),
                    path=char_dir,
                )
                if candidate.has_saved_variables or candidate.has_layout:
                    candidates.append(candidate)

    logger.debug(f"Found {len(candidates)} character candidates under {account_root}")
    return candidates


def parse_selector(selector: str) -> list[str]:
    """Split a "realm\\character" or "account\\realm\\character" selector.

    Raises:
        SelectionError: If the selector does not have 2 or 3 non-empty segments
    """
    parts = [part.strip() for part in _SELECTOR_SPLIT.split(selector.strip())]
    if len(parts) not in (2, 3) or not all(parts):
        raise SelectionError(
            f"Invalid character selector '{selector}'. "
            "Use 'Realm\\Character' or 'Account\\Realm\\Character'."
        )
    return parts


def resolve_character(
    candidates: list[CharacterCandidate],
    selector: Optional[str] = None,
    chooser: Optional[Chooser] = None,
) -> CharacterCandidate:
    """Pick exactly one source character for the character template.

    Args:
        candidates: Output of scan_candidates()
        selector: Optional "realm\\character" or "account\\realm\\character"
        chooser: Asked for a numbered choice when several candidates exist
            and no selector is given

    Returns:
        The selected candidate

    Raises:
        SelectionError: No candidates, no/ambiguous match, bad selector or
            bad numbered choice
        InputError: A choice is needed and the chooser cannot provide one
    """
    if not candidates:
        raise SelectionError("No exportable character data found (no SavedVariables or layout-local.txt)")

    if not selector:
        if len(candidates) == 1:
            return candidates[0]
        chooser = chooser or NonInteractiveChooser()
        index = chooser.choose_one(
            "Select the character to use as the character template:",
            [str(c.identity) for c in candidates],
        )
        if not 0 <= index < len(candidates):
            raise SelectionError(f"Selection out of range: {index + 1} (expected 1-{len(candidates)})")
        return candidates[index]

    parts = parse_selector(selector)
    if len(parts) == 2:
        realm, character = parts
        matches = [
            c for c in candidates
            if c.identity.realm == realm and c.identity.character == character
        ]
        if len(matches) > 1:
            accounts = ", ".join(c.identity.account for c in matches)
            raise SelectionError(
                f"Character '{realm}\\{character}' exists in several accounts ({accounts}). "
                "Use 'Account\\Realm\\Character'."
            )
    else:
        wanted = Identity(*parts)
        matches = [c for c in candidates if c.identity == wanted]

    if not matches:
        raise SelectionError(f"No exportable character matches '{selector}'")
    return matches[0]
