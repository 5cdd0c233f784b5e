"""Path validation utilities to prevent dangerous file operations.

Provides validation for paths used in file operations to prevent:
- Path traversal through crafted zip entries
- Operations outside the expected destination directory
- Unsafe characters in generated file names
"""

from pathlib import Path, PurePosixPath

from ..logging_config import get_logger

logger = get_logger("path_validator")


def is_path_under_root(path: Path, root: Path) -> bool:
    """Check if a path is under a given root directory.

    Args:
        path: The path to check
        root: The root directory

    Returns:
        True if path is under root, False otherwise
    """
    try:
        path_resolved = path.resolve()
        root_resolved = root.resolve()
        return path_resolved == root_resolved or root_resolved in path_resolved.parents
    except (OSError, ValueError) as e:
        logger.warning("Failed to check path relationship: %s", e)
        return False


def is_safe_archive_member(member_name: str, extract_root: Path) -> bool:
    """Check that a zip member name stays inside the extraction root.

    Rejects absolute names, drive-qualified names and ``..`` segments.

    Args:
        member_name: Name as stored in the zip (forward slashes)
        extract_root: Directory the archive is being extracted into

    Returns:
        True if the member can be extracted safely
    """
    normalized = member_name.replace("\\", "/")
    pure = PurePosixPath(normalized)
    if pure.is_absolute() or ".." in pure.parts:
        return False
    if pure.parts and ":" in pure.parts[0]:
        return False
    return is_path_under_root(extract_root / pure, extract_root)


def validate_backup_path(backup_path: Path, dest_root: Path) -> tuple[bool, str]:
    """Validate a backup path before performing operations.

    Args:
        backup_path: The backup path to validate
        dest_root: The destination root the backup must live under

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not backup_path:
        return False, "Backup path is empty"

    try:
        backup_path.resolve()  # Validate path can be resolved
    except (OSError, ValueError) as e:
        return False, f"Invalid path: {e}"

    if not is_path_under_root(backup_path, dest_root):
        return False, f"Backup must be under destination directory: {dest_root}"

    if backup_path.exists():
        return False, f"Backup directory already exists: {backup_path}"

    return True, ""


def sanitize_filename(filename: str) -> str:
    """Sanitize a filename by removing dangerous characters.

    Args:
        filename: The filename to sanitize

    Returns:
        Sanitized filename safe for use in file operations
    """
    # Remove or replace dangerous characters
    dangerous_chars = ['<', '>', ':', '"', '/', '\\', '|', '?', '*', '\0']
    result = filename

    for char in dangerous_chars:
        result = result.replace(char, '_')

    # Remove leading/trailing dots and spaces
    result = result.strip('. ')

    # Limit length
    if len(result) > 200:
        result = result[:200]

    # Ensure not empty
    if not result:
        result = "unnamed"

    return result
