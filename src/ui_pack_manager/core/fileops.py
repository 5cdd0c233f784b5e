"""File system helpers shared by export and import.

Copies are merge/overwrite at file level: existing destination files not
present in the source are left alone.
"""

import os
import shutil
import stat
import sys
import tempfile
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..config.path_validator import is_safe_archive_member
from ..logging_config import get_logger
from .errors import ArchiveShapeError

logger = get_logger("fileops")


def copy_tree(source: Path, dest: Path) -> None:
    """Recursively copy source into dest, overwriting files that exist."""
    shutil.copytree(str(source), str(dest), dirs_exist_ok=True)


def copy_file(source: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(str(source), str(dest))


def _clear_readonly(func, path, _exc):
    """Error handler for shutil.rmtree to handle read-only files."""
    os.chmod(path, stat.S_IWRITE)
    func(path)


def remove_tree(path: Path) -> None:
    """Delete a directory tree, clearing read-only flags on the way."""
    if not path.exists():
        return
    if sys.version_info >= (3, 12):
        shutil.rmtree(str(path), onexc=_clear_readonly)
    else:
        shutil.rmtree(str(path), onerror=_clear_readonly)


@contextmanager
def temp_workspace(prefix: str) -> Iterator[Path]:
    """Create a uniquely named temp directory and always remove it.

    Args:
        prefix: Name prefix, a random suffix is appended

    Yields:
        Path to the new directory

    A cleanup failure is logged, and raised only if the body succeeded;
    an exception already leaving the body is never replaced.
    """
    path = Path(tempfile.mkdtemp(prefix=prefix))
    logger.debug(f"Created temp directory {path}")
    body_failed = True
    try:
        yield path
        body_failed = False
    finally:
        try:
            remove_tree(path)
            logger.debug(f"Removed temp directory {path}")
        except OSError as e:
            logger.error(f"Failed to remove temp directory {path}: {e}")
            if not body_failed:
                raise


def create_zip(source_dir: Path, archive_path: Path) -> int:
    """Compress the contents of source_dir into archive_path.

    Entries are written in sorted order so identical trees give identical
    member lists. An existing archive at archive_path is replaced.

    Returns:
        Number of files written
    """
    file_count = 0
    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zf:
        for dirpath, dirnames, filenames in os.walk(source_dir):
            dirnames.sort()
            current = Path(dirpath)
            if current != source_dir and not dirnames and not filenames:
                # Keep empty folders (e.g. an empty SavedVariables)
                zf.write(current, current.relative_to(source_dir).as_posix() + "/")
            for filename in sorted(filenames):
                file_path = current / filename
                zf.write(file_path, file_path.relative_to(source_dir).as_posix())
                file_count += 1
    return file_count


def extract_zip(archive_path: Path, dest_dir: Path) -> None:
    """Extract an archive, refusing members that escape dest_dir.

    Raises:
        ArchiveShapeError: If the archive is corrupt, encrypted, uses an
            unsupported compression method or contains unsafe paths
    """
    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            unsafe = [n for n in zf.namelist() if not is_safe_archive_member(n, dest_dir)]
            if unsafe:
                raise ArchiveShapeError(f"Archive contains unsafe paths: {', '.join(unsafe[:3])}")
            zf.extractall(dest_dir)
    except zipfile.BadZipFile as e:
        raise ArchiveShapeError(f"Not a valid zip archive: {archive_path} ({e})") from e
    except (zlib.error, EOFError) as e:
        raise ArchiveShapeError(f"Corrupt data in zip archive: {archive_path} ({e})") from e
    except (RuntimeError, NotImplementedError) as e:
        # zipfile raises these for encrypted members and unknown compression methods
        raise ArchiveShapeError(f"Unsupported zip archive: {archive_path} ({e})") from e
