"""Asset processors for sitekit.

Each processor turns one bundler entry point into its built form. The
pipeline in ``assets`` picks a processor per entry and renames the result
with a content hash.

Key classes:
- TailwindCSSProcessor: Compiles CSS through the Tailwind CLI.
- JSProcessor: Minifies JavaScript with rjsmin.
- StaticAssetProcessor: Copies anything else unchanged.
- AssetProcessorRegistry: Picks the processor for a file.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from rjsmin import jsmin

# Side-effect CSS imports are dropped from JS; CSS entries are built on their own.
CSS_IMPORT_RE = re.compile(r"""^\s*import\s+['"][^'"]+\.css['"]\s*;?\s*$""", re.MULTILINE)
IMPORT_META_ENV_RE = re.compile(r"\bimport\.meta\.env\.(DEV|PROD)\b")


def find_executable(name: str, project_root: Path | None = None) -> str | None:
    """Find an executable in PATH or the project's node_modules/.bin.

    Args:
        name: Executable name, e.g. ``tailwindcss``.
        project_root: Optional project root for a local install.

    Returns:
        Full path to the executable, or None when not found.
    """
    found = shutil.which(name)
    if found:
        return found
    if project_root is not None:
        local = project_root / "node_modules" / ".bin" / name
        if local.exists():
            return str(local)
    return None


class BaseAssetProcessor(ABC):
    """Base class for asset processors."""

    @property
    @abstractmethod
    def priority(self) -> int:
        """Return processor priority (higher = checked first)."""
        ...

    @abstractmethod
    def can_process(self, path: Path) -> bool:
        """Check if this processor can handle the given asset."""
        ...

    @abstractmethod
    def process(self, source: Path, dest: Path) -> bool:
        """Build ``source`` into ``dest``.

        Returns:
            True if processing was successful.
        """
        ...

    def ensure_dest_dir(self, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)


class TailwindCSSProcessor(BaseAssetProcessor):
    """Compiles CSS entries with the Tailwind CLI.

    Falls back to copying the source when the CLI is missing or fails, so a
    machine without Node can still build the site.
    """

    def __init__(self, project_root: Path, minify: bool = True, sourcemap: bool = False):
        self.project_root = project_root
        self.minify = minify
        self.sourcemap = sourcemap

    @property
    def priority(self) -> int:
        return 90

    def can_process(self, path: Path) -> bool:
        return path.suffix.lower() == ".css"

    def command(self, tailwind_bin: str, source: Path, dest: Path) -> list[str]:
        cmd = [tailwind_bin, "-i", str(source), "-o", str(dest)]
        if self.minify:
            cmd.append("--minify")
        if self.sourcemap:
            cmd.append("--map")
        return cmd

    def process(self, source: Path, dest: Path) -> bool:
        self.ensure_dest_dir(dest)

        tailwind_bin = find_executable("tailwindcss", self.project_root)
        if not tailwind_bin:
            print("Tailwind CSS CLI not found; copying CSS unprocessed.")
            print("Install with `npm install -D tailwindcss @tailwindcss/cli` in the project.")
            shutil.copy2(source, dest)
            return True

        result = subprocess.run(
            self.command(tailwind_bin, source, dest),
            capture_output=True,
            text=True,
            cwd=self.project_root,
        )
        if result.returncode != 0:
            print("Tailwind build failed:", result.stderr.strip())
            shutil.copy2(source, dest)
        return True


class JSProcessor(BaseAssetProcessor):
    """Minifies JavaScript entries with rjsmin.

    ``import.meta.env.DEV``/``PROD`` are replaced with literals and CSS
    imports are removed before minifying.
    """

    def __init__(self, dev: bool = False):
        self.dev = dev

    @property
    def priority(self) -> int:
        return 80

    def can_process(self, path: Path) -> bool:
        return path.suffix.lower() in (".js", ".mjs")

    def transform(self, code: str) -> str:
        code = CSS_IMPORT_RE.sub("", code)
        flags = {"DEV": self.dev, "PROD": not self.dev}
        code = IMPORT_META_ENV_RE.sub(lambda m: "true" if flags[m.group(1)] else "false", code)
        return jsmin(code)

    def process(self, source: Path, dest: Path) -> bool:
        self.ensure_dest_dir(dest)
        code = source.read_text(encoding="utf-8")
        dest.write_text(self.transform(code), encoding="utf-8")
        return True


class StaticAssetProcessor(BaseAssetProcessor):
    """Copies assets that need no processing."""

    @property
    def priority(self) -> int:
        return 0

    def can_process(self, path: Path) -> bool:
        return True

    def process(self, source: Path, dest: Path) -> bool:
        self.ensure_dest_dir(dest)
        shutil.copy2(source, dest)
        return True


class AssetProcessorRegistry:
    """Registry for asset processors, ordered by priority."""

    def __init__(self):
        self._processors: list[BaseAssetProcessor] = []

    def register(self, processor: BaseAssetProcessor) -> None:
        self._processors.append(processor)
        self._processors.sort(key=lambda p: p.priority, reverse=True)

    def get_processor(self, path: Path) -> BaseAssetProcessor | None:
        for processor in self._processors:
            if processor.can_process(path):
                return processor
        return None

    def process(self, source: Path, dest: Path) -> bool:
        """Process an asset, returning False if no processor accepts it."""
        processor = self.get_processor(source)
        if processor:
            return processor.process(source, dest)
        return False


def create_default_registry(project_root: Path, dev: bool = False, sourcemap: bool = False) -> AssetProcessorRegistry:
    """Create a registry with the default processors.

    Args:
        project_root: Root directory of the project.
        dev: Build for the dev server (unminified CSS, ``DEV`` flag set).
        sourcemap: Ask Tailwind for a CSS source map.

    Returns:
        Configured AssetProcessorRegistry.
    """
    registry = AssetProcessorRegistry()
    registry.register(TailwindCSSProcessor(project_root, minify=not dev, sourcemap=sourcemap))
    registry.register(JSProcessor(dev=dev))
    registry.register(StaticAssetProcessor())
    return registry
