"""Informational scan of the runtime tunables found in a configuration tree."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Set

import yaml

from ..utils.constants import DEFAULT_TUNABLE_SUFFIXES

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
COMMENT_PREFIXES = ("#", ";")


def _flatten(data: Any, prefix: str = "", ancestors: Optional[Set[int]] = None) -> Dict[str, str]:
    """Flatten nested mappings into dotted keys.

    Mappings that contain themselves through YAML aliases are not followed again.
    """
    if not isinstance(data, dict):
        return {prefix: str(data)} if prefix else {}

    ancestors = (ancestors or set()) | {id(data)}
    flat = {}
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            if id(value) in ancestors:
                logger.debug(f"Skipping recursive alias at {name}")
                continue
            flat.update(_flatten(value, name, ancestors))
        else:
            flat[name] = "" if value is None else str(value)
    return flat


def parse_yaml_tunables(text: str) -> Dict[str, str]:
    """Parse tunables from a YAML document.

    Args:
        text: File contents

    Returns:
        Dotted key to value mapping
    """
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        return {}
    return _flatten(data)


def parse_key_value_tunables(text: str) -> Dict[str, str]:
    """Parse ``key = value`` / ``key: value`` lines, ini sections included.

    Args:
        text: File contents

    Returns:
        Key to value mapping, keys prefixed with their section
    """
    tunables = {}
    section = ""

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue

        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip()
            continue

        # Split on the first separator only
        positions = [pos for pos in (line.find("="), line.find(":")) if pos > 0]
        if not positions:
            continue

        split_at = min(positions)
        key = line[:split_at].strip()
        value = line[split_at + 1:].strip().strip('"').strip("'")
        if not key:
            continue

        if key.startswith("export "):
            key = key[len("export "):].strip()

        tunables[f"{section}.{key}" if section else key] = value

    return tunables


def scan_tunables(root: Path, suffixes: Optional[Sequence[str]] = None) -> Dict[str, Dict[str, str]]:
    """Report the tunables found in a configuration tree.

    Nothing is modified. Unreadable or malformed files are skipped with a warning.

    Args:
        root: Tree to scan
        suffixes: File suffixes to parse as key/value files, YAML is always parsed

    Returns:
        Relative file path to its tunables, only for files that have any
    """
    root = Path(root)
    suffixes = tuple(s.lower() for s in (suffixes if suffixes is not None else DEFAULT_TUNABLE_SUFFIXES))
    report: Dict[str, Dict[str, str]] = {}

    for current, _dirnames, filenames in os.walk(root):
        for name in sorted(filenames):
            path = Path(current) / name
            suffix = path.suffix.lower()
            if path.is_symlink() or suffix not in YAML_SUFFIXES + suffixes:
                continue

            relative = path.relative_to(root).as_posix()
            try:
                text = path.read_text(encoding="utf-8")
                if suffix in YAML_SUFFIXES:
                    tunables = parse_yaml_tunables(text)
                else:
                    tunables = parse_key_value_tunables(text)
            except yaml.YAMLError as e:
                logger.warning(f"YAML parsing error in {relative}: {e}")
                continue
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Cannot read {relative}: {e}")
                continue

            if tunables:
                report[relative] = tunables
                logger.info(f"Found {len(tunables)} tunables in {relative}")
                for key, value in tunables.items():
                    logger.debug(f"  {relative}: {key} = {value}")

    logger.info(f"Scanned {root}: {sum(len(t) for t in report.values())} tunables in {len(report)} files")
    return report
