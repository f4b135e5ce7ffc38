"""Copying configuration trees while keeping track of their symlinks.

Symlinks are dereferenced during the copy so the destination is complete
even if a link target later becomes unreachable. Each link's original
target is recorded in a symlink map, persisted as JSON, and replayed over
the destination once the bulk copy is done.
"""

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Optional

from ..models.errors import CopyError, SymlinkMapError, SymlinkRestoreError
from ..models.migration import RestoreReport

logger = logging.getLogger(__name__)


def _clear_destination(path: Path):
    """Remove whatever currently occupies ``path``."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()


def _raise_walk_error(error: OSError):
    raise CopyError(f"Cannot read directory {error.filename}: {error.strerror}", path=error.filename) from error


def _copy_link_entry(link: Path, dest: Path, relative: str, symlink_map: Dict[str, str]):
    """Record a symlink and copy what it points to."""
    target = os.readlink(link)
    symlink_map[relative] = target
    logger.debug(f"Recorded symlink {relative} -> {target}")

    try:
        resolved = link.resolve()
    except (OSError, RuntimeError) as e:
        logger.warning(f"Cannot resolve symlink {link} -> {target}: {e}, skipping copy")
        return

    if resolved.is_file():
        _clear_destination(dest)
        shutil.copy2(resolved, dest)
    elif resolved.is_dir():
        _clear_destination(dest)
        shutil.copytree(resolved, dest, ignore_dangling_symlinks=True)
    else:
        logger.warning(f"Symlink {link} -> {target} does not point to a file or directory, skipping copy")


def copy_tree(source_root: Path, dest_root: Path) -> Dict[str, str]:
    """Copy a configuration tree, dereferencing symlinks.

    Args:
        source_root: Directory to copy from
        dest_root: Directory to copy into, created if missing

    Returns:
        Symlink map of relative path to raw link target

    Raises:
        CopyError: If any entry cannot be read or written
    """
    source_root = Path(source_root)
    dest_root = Path(dest_root)
    symlink_map: Dict[str, str] = {}

    logger.info(f"Copying {source_root} to {dest_root}")

    for current, dirnames, filenames in os.walk(source_root, onerror=_raise_walk_error):
        current_dir = Path(current)
        dest_dir = dest_root / current_dir.relative_to(source_root)

        try:
            if dest_dir.is_symlink():
                dest_dir.unlink()
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CopyError(f"Cannot create directory {dest_dir}: {e}", path=dest_dir) from e

        # os.walk lists symlinked directories with the directories but does not descend into them
        entries = [name for name in dirnames if (current_dir / name).is_symlink()] + filenames

        for name in entries:
            src = current_dir / name
            dest = dest_dir / name
            relative = src.relative_to(source_root).as_posix()

            try:
                if src.is_symlink():
                    _copy_link_entry(src, dest, relative, symlink_map)
                elif src.is_file():
                    _clear_destination(dest)
                    shutil.copy2(src, dest)
                else:
                    logger.warning(f"Skipping {src}: not a regular file")
            except (OSError, shutil.Error) as e:
                raise CopyError(f"Failed to copy {src}: {e}", path=src) from e

    logger.info(f"Copied {source_root} ({len(symlink_map)} symlinks recorded)")
    return symlink_map


def persist_symlink_map(symlink_map: Dict[str, str], path: Path):
    """Write the symlink map as JSON, replacing any existing file.

    Args:
        symlink_map: Relative path to raw link target
        path: File to write
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Write to temp file first (atomic write)
    temp_file = path.with_name(path.name + ".tmp")
    with open(temp_file, 'w') as f:
        json.dump(symlink_map, f, indent=4, sort_keys=True)
        f.write("\n")

    temp_file.replace(path)
    logger.info(f"Saved {len(symlink_map)} symlinks to {path}")


def load_symlink_map(path: Path) -> Dict[str, str]:
    """Read a symlink map written by persist_symlink_map.

    Args:
        path: File to read

    Returns:
        Relative path to raw link target

    Raises:
        SymlinkMapError: If the file cannot be read or is not a string mapping
    """
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SymlinkMapError(f"Invalid symlink map {path}: {e}") from e
    except OSError as e:
        raise SymlinkMapError(f"Cannot read symlink map {path}: {e}") from e

    if not isinstance(data, dict):
        raise SymlinkMapError(f"Symlink map {path} must be a JSON object")

    for key, value in data.items():
        if not isinstance(value, str):
            raise SymlinkMapError(f"Symlink map {path}: target of {key!r} must be a string")

    return data


def _restore_one(dest_root: Path, relative: str, target: str):
    link = dest_root / relative
    if Path(relative).is_absolute() or ".." in Path(relative).parts:
        raise SymlinkRestoreError(
            f"Refusing to create {relative}: outside {dest_root}", path=relative, target=target
        )

    try:
        link.parent.mkdir(parents=True, exist_ok=True)
        _clear_destination(link)
        os.symlink(target, link)
    except OSError as e:
        raise SymlinkRestoreError(
            f"Failed to create symlink {link} -> {target}: {e}", path=relative, target=target
        ) from e


def restore_symlinks(dest_root: Path, map_path: Path, symlink_map: Optional[Dict[str, str]] = None) -> RestoreReport:
    """Recreate recorded symlinks in the destination tree.

    Whatever sits at each recorded path is replaced by a symlink to the
    original target. A missing map file is not an error. Failures are
    collected per entry and never stop the remaining restorations.

    Args:
        dest_root: Destination tree
        map_path: Symlink map file
        symlink_map: Already loaded map, skips reading map_path

    Returns:
        RestoreReport with restored and failed entries

    Raises:
        SymlinkMapError: If the map file exists but is malformed
    """
    dest_root = Path(dest_root)
    report = RestoreReport()

    if symlink_map is None:
        if not Path(map_path).exists():
            logger.info(f"No symlink map at {map_path}, nothing to restore")
            return report
        symlink_map = load_symlink_map(map_path)

    report.entries = dict(symlink_map)

    for relative, target in symlink_map.items():
        try:
            _restore_one(dest_root, relative, target)
        except SymlinkRestoreError as e:
            logger.error(str(e))
            report.failed[relative] = e
            continue

        logger.debug(f"Restored {relative} -> {target}")
        report.restored.append(relative)

    logger.info(f"Restored {len(report.restored)} symlinks, {len(report.failed)} failed")
    return report
