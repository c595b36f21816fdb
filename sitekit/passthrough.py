"""Passthrough copy for sitekit.

Files and directories listed as passthrough rules are copied into the
output directory untouched, without going through the template engine.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from .config import PassthroughRule


def copy_passthrough(
    rules: Iterable[PassthroughRule], project_root: Path, output_dir: Path
) -> list[Path]:
    """Copy every passthrough source into the output directory.

    Directory sources are copied recursively, merging into any existing
    target. Missing sources are skipped with a notice.

    Args:
        rules: Passthrough rules from the site configuration.
        project_root: Directory rule sources are relative to.
        output_dir: Directory rule targets are relative to.

    Returns:
        Destination paths of every copied file.
    """
    copied: list[Path] = []
    for rule in rules:
        source = project_root / rule.source
        target = output_dir / rule.target
        if not source.exists():
            print(f"Passthrough source not found; skipping: {rule.source}")
            continue
        if source.is_dir():
            copied.extend(_copy_tree(source, target))
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            copied.append(target)
    return copied


def _copy_tree(source: Path, target: Path) -> list[Path]:
    copied: list[Path] = []
    for item in sorted(source.rglob("*")):
        if item.is_dir():
            continue
        dest = target / item.relative_to(source)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(item, dest)
        copied.append(dest)
    return copied
