"""Pack manifest (manifest.json) encoding, decoding and client version detection.

manifest.json keys::

    name, version, wowVersion, createdAt (YYYY-MM-DD), addons,
    hasCharacterTemplate, characterSource ("account\\realm\\character" or null),
    notes

Decoding is best-effort on the import side: load_manifest() returns None for
a missing or unreadable manifest instead of failing the import.
"""

import json
import re
import zipfile
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Optional

from ..config.paths import AppPaths
from ..logging_config import get_logger
from .errors import ArchiveShapeError, ManifestDecodeError

logger = get_logger("manifest")

MANIFEST_FILE = "manifest.json"
UNKNOWN_VERSION = "unknown"
DEFAULT_NOTES = "Generated by UI Pack Manager. Close the game before installing."

_FOUR_PART_VERSION = re.compile(r"\d+\.\d+\.\d+\.\d+")
_THREE_PART_VERSION = re.compile(r"\d+\.\d+\.\d+")


@dataclass(frozen=True)
class PackManifest:
    """Metadata describing one pack. Created once per export."""
    name: str
    version: str
    wow_version: str = UNKNOWN_VERSION
    created_at: Optional[date] = None
    addons: tuple[str, ...] = field(default_factory=tuple)
    has_character_template: bool = False
    character_source: Optional[str] = None
    notes: str = DEFAULT_NOTES

    def source_realm_and_character(self) -> tuple[str, str]:
        """Last two segments of character_source, or empty strings."""
        if not self.character_source:
            return "", ""
        parts = [p for p in re.split(r"[\\/]", self.character_source) if p]
        if len(parts) < 2:
            return "", ""
        return parts[-2], parts[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "wowVersion": self.wow_version,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "addons": list(self.addons),
            "hasCharacterTemplate": self.has_character_template,
            "characterSource": self.character_source,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackManifest":
        created_raw = data.get("createdAt")
        created_at = date.fromisoformat(created_raw[:10]) if created_raw else None

        addons = data.get("addons") or []
        if isinstance(addons, str):
            # Single-element lists are sometimes written as a bare string
            addons = [addons]
        if not isinstance(addons, list) or not all(isinstance(a, str) for a in addons):
            raise ValueError("'addons' must be a list of strings")

        has_template = data.get("hasCharacterTemplate", False)
        if not isinstance(has_template, bool):
            raise ValueError("'hasCharacterTemplate' must be true or false")

        source = data.get("characterSource")
        if source is not None and not isinstance(source, str):
            raise ValueError("'characterSource' must be a string")

        return cls(
            name=str(data["name"]),
            version=str(data["version"]),
            wow_version=str(data.get("wowVersion") or UNKNOWN_VERSION),
            created_at=created_at,
            addons=tuple(addons),
            has_character_template=has_template,
            character_source=source or None,
            notes=str(data.get("notes") or ""),
        )


def encode_manifest(manifest: PackManifest) -> str:
    """Serialize a manifest to JSON text."""
    return json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2)


def decode_manifest(text: str) -> PackManifest:
    """Parse manifest JSON text.

    Raises:
        ManifestDecodeError: If the text is not a valid manifest
    """
    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("manifest root must be an object")
        return PackManifest.from_dict(data)
    except (ValueError, KeyError, TypeError) as e:
        raise ManifestDecodeError(f"Invalid manifest: {e}") from e


def write_manifest(manifest: PackManifest, path: Path) -> None:
    path.write_text(encode_manifest(manifest), encoding="utf-8")


def load_manifest(path: Path) -> Optional[PackManifest]:
    """Read a manifest file, best-effort.

    A missing file means "no manifest". An undecodable file is logged and
    also treated as "no manifest"; ManifestDecodeError never escapes.

    Args:
        path: Path to manifest.json

    Returns:
        The manifest, or None if absent or unusable
    """
    if not path.is_file():
        return None
    try:
        # utf-8-sig: manifests edited on Windows may carry a BOM
        return decode_manifest(path.read_text(encoding="utf-8-sig"))
    except (ManifestDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning(f"Ignoring unusable manifest {path}: {e}")
        return None


def detect_client_version(root: Path) -> str:
    """Best-effort client build version from .build.info.

    Looks in the client folder and then in its parent (the install root,
    where the launcher keeps the file). The first 4-part dotted version wins,
    then the first 3-part one.

    Returns:
        The version string, or "unknown"
    """
    for candidate in (root / AppPaths.BUILD_INFO_FILE, root.parent / AppPaths.BUILD_INFO_FILE):
        if not candidate.is_file():
            continue
        try:
            text = candidate.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug(f"Could not read {candidate}: {e}")
            continue
        match = _FOUR_PART_VERSION.search(text) or _THREE_PART_VERSION.search(text)
        if match:
            return match.group(0)
    return UNKNOWN_VERSION


def read_manifest_from_archive(archive_path: Path) -> Optional[PackManifest]:
    """Read manifest.json straight from a pack zip, best-effort.

    Returns:
        The manifest, or None if the archive has no usable manifest

    Raises:
        ArchiveShapeError: If archive_path is not a zip file
    """
    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            try:
                raw = zf.read(MANIFEST_FILE)
            except KeyError:
                return None
    except zipfile.BadZipFile as e:
        raise ArchiveShapeError(f"Not a valid zip archive: {archive_path} ({e})") from e

    try:
        return decode_manifest(raw.decode("utf-8-sig"))
    except (ManifestDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Ignoring unusable manifest in {archive_path}: {e}")
        return None
