"""Directory scanner for prompt definition files.

Walks a root directory recursively and returns every ``.yaml``/``.yml`` file
in lexicographic path order. Unreadable directories and entries are skipped
and recorded as warnings; scanning always continues.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

PROMPT_FILE_EXTENSIONS = frozenset({".yaml", ".yml"})


@dataclass
class ScanResult:
    """Files found by a scan plus any non-fatal problems encountered."""

    files: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def is_prompt_file(path: Path) -> bool:
    """Check whether a path has a prompt file extension (case-insensitive)."""
    return path.suffix.lower() in PROMPT_FILE_EXTENSIONS


def scan_prompt_files(root: str | Path) -> ScanResult:
    """Recursively enumerate prompt files under ``root``.

    Symlinked directories are not followed, which keeps the walk finite on
    cyclic links.

    Args:
        root: Directory to scan

    Returns:
        ScanResult with files sorted by path
    """
    root = Path(root)
    result = ScanResult()

    if not root.exists():
        _warn(result, f"Prompts directory not found: {root}")
        return result
    if not root.is_dir():
        _warn(result, f"Prompts path is not a directory: {root}")
        return result

    _scan_directory(root, result)
    result.files.sort()
    logger.debug(f"Scanned {root}: {len(result.files)} prompt files")
    return result


def _scan_directory(directory: Path, result: ScanResult) -> None:
    try:
        entries = list(directory.iterdir())
    except OSError as e:
        _warn(result, f"Cannot scan directory {directory}: {e}")
        return

    for entry in entries:
        try:
            if entry.is_symlink() and entry.is_dir():
                continue
            if entry.is_dir():
                _scan_directory(entry, result)
            elif entry.is_file() and is_prompt_file(entry):
                result.files.append(entry)
        except OSError as e:
            _warn(result, f"Cannot access {entry}: {e}")


def _warn(result: ScanResult, message: str) -> None:
    logger.warning(message)
    result.warnings.append(message)
