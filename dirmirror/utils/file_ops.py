"""
File Operation Utilities

Filesystem primitives used by the mirror: directory creation, recursive
tree copies honoring overwrite/filter options, emptying and removing paths.

Author: dirmirror Project
License: MIT
"""

import os
import shutil
from pathlib import Path
from typing import Callable, Optional

from .logger import get_logger

logger = get_logger(__name__)


def ensure_directory(directory: str) -> None:
    """
    Ensure a directory exists, creating parents as needed.

    Args:
        directory: Directory path

    Raises:
        OSError: If the directory cannot be created (e.g. a file is in the way)
    """
    Path(directory).mkdir(parents=True, exist_ok=True)


def remove_path(path: str) -> bool:
    """
    Remove a file, symlink or directory tree.

    Missing paths are not an error.

    Args:
        path: Path to remove

    Returns:
        True if something was removed
    """
    if os.path.islink(path) or os.path.isfile(path):
        os.unlink(path)
        return True
    if os.path.isdir(path):
        shutil.rmtree(path)
        return True
    return False


def empty_directory(directory: str) -> int:
    """
    Remove every entry inside a directory, keeping the directory itself.

    The directory is created if it does not exist.

    Args:
        directory: Directory to empty

    Returns:
        Number of top-level entries removed
    """
    dir_path = Path(directory)
    if not dir_path.exists():
        dir_path.mkdir(parents=True)
        return 0

    removed = 0
    for entry in list(dir_path.iterdir()):
        if remove_path(str(entry)):
            removed += 1
    return removed


def replace_with_directory(directory: str) -> None:
    """
    Ensure a real directory exists at ``directory``.

    A symlink or file occupying the path is removed first so nothing is
    created through it.
    """
    if os.path.islink(directory) or os.path.isfile(directory):
        os.unlink(directory)
    ensure_directory(directory)


def copy_file(source: str, target: str) -> None:
    """
    Copy a single file, replacing whatever is at the target.

    Parent directories of the target are created first. Symlinks are
    recreated as links rather than followed, and a link already at the
    target is replaced, never written through.
    """
    ensure_directory(os.path.dirname(target))

    if os.path.lexists(target) and (os.path.islink(target) or os.path.isdir(target)):
        remove_path(target)

    if os.path.islink(source):
        os.symlink(os.readlink(source), target)
        return

    shutil.copy(source, target)


def copy_tree(
    source: str,
    destination: str,
    overwrite: bool = True,
    error_on_exist: bool = False,
    path_filter: Optional[Callable[[str], bool]] = None
) -> int:
    """
    Recursively copy the contents of ``source`` into ``destination``.

    Args:
        source: Source directory
        destination: Destination directory (created if missing)
        overwrite: Replace files that already exist in the destination
        error_on_exist: With ``overwrite`` off, raise instead of skipping
            existing destination files
        path_filter: Predicate over absolute source paths; a rejected
            directory excludes its whole subtree

    Returns:
        Number of files copied

    Raises:
        FileNotFoundError: If the source directory does not exist
        FileExistsError: If a destination file exists and ``error_on_exist``
            is set while ``overwrite`` is off
        OSError: On any other filesystem failure
    """
    if not os.path.isdir(source):
        raise FileNotFoundError(f"Source directory not found: {source}")

    if path_filter is not None and not path_filter(source):
        logger.debug(f"Filter rejected source root: {source}")
        return 0

    return _copy_entries(source, destination, overwrite, error_on_exist, path_filter)


def _copy_entries(
    source: str,
    destination: str,
    overwrite: bool,
    error_on_exist: bool,
    path_filter: Optional[Callable[[str], bool]]
) -> int:
    ensure_directory(destination)
    copied = 0

    with os.scandir(source) as entries:
        for entry in entries:
            src_path = entry.path
            dest_path = os.path.join(destination, entry.name)

            if path_filter is not None and not path_filter(src_path):
                continue

            if entry.is_dir(follow_symlinks=False):
                # Subdirectories are never entered through a link in the destination
                if os.path.islink(dest_path):
                    os.unlink(dest_path)
                copied += _copy_entries(
                    src_path, dest_path, overwrite, error_on_exist, path_filter
                )
                continue

            if os.path.lexists(dest_path) and not overwrite:
                if error_on_exist:
                    raise FileExistsError(f"'{dest_path}' already exists")
                logger.debug(f"Skipping existing file: {dest_path}")
                continue

            copy_file(src_path, dest_path)
            copied += 1

    return copied
