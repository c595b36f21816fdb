"""Filesystem helpers for sitekit."""

from __future__ import annotations

import shutil
from pathlib import Path


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


def is_within(path: Path, root: Path) -> bool:
    """Return True if ``path`` is ``root`` or lies below it."""
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True
