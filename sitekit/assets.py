"""Asset pipeline for sitekit.

Builds the bundler entry points (Tailwind CSS, JavaScript) into the output
directory under content-hashed names and records them in a manifest that
templates read through ``asset_url``.

Key classes:
- AssetManifest: Entry path to public URL mapping.
- AssetPipeline: Builds every configured entry point.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from .asset_processors import AssetProcessorRegistry, create_default_registry
from .config import SiteConfig
from .filters import content_hash

MANIFEST_NAME = "manifest.json"


def output_name(pattern: str, source: Path, digest: str) -> str:
    """Fill ``[name]``, ``[hash]`` and ``[extname]`` in an output pattern.

    Examples:
        >>> output_name("assets/[name].[hash][extname]", Path("main.css"), "1a2b3c4d")
        'assets/main.1a2b3c4d.css'
    """
    return (
        pattern.replace("[name]", source.stem)
        .replace("[hash]", digest)
        .replace("[extname]", source.suffix)
    )


@dataclass
class AssetManifest:
    """Maps entry points to their public URLs.

    Attributes:
        entries: Project-relative entry path to URL, e.g.
            ``src/assets/css/main.css`` -> ``/assets/main.1a2b3c4d.css``.
    """

    entries: dict[str, str] = field(default_factory=dict)

    def add(self, entry: str, url: str) -> None:
        self.entries[entry] = url

    def lookup(self, name: str, config: SiteConfig | None = None) -> str | None:
        """Find the URL for an entry path, aliased path or basename."""
        if name in self.entries:
            return self.entries[name]
        if config is not None and name.startswith("/"):
            resolved = config.resolve_alias(name)
            try:
                rel = resolved.relative_to(config.project_root).as_posix()
            except ValueError:
                rel = None
            if rel in self.entries:
                return self.entries[rel]
        for entry, url in self.entries.items():
            if Path(entry).name == name:
                return url
        return None

    def write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.entries, indent=2, sort_keys=True) + "\n", encoding="utf-8")


class AssetPipeline:
    """Builds the configured entry points into the output directory.

    Attributes:
        config: Site configuration.
        output_dir: Directory the site is written to.
        processor_registry: Processors used for each entry.
    """

    def __init__(
        self,
        config: SiteConfig,
        output_dir: Path | None = None,
        processor_registry: AssetProcessorRegistry | None = None,
        dev: bool = False,
    ):
        self.config = config
        self.output_dir = output_dir or config.output_path
        self.dev = dev
        self.processor_registry = processor_registry or create_default_registry(
            config.project_root,
            dev=dev,
            sourcemap=dev and config.bundler.css_dev_sourcemap,
        )

    def run(self) -> AssetManifest:
        """Build every entry point and write ``assets/manifest.json``.

        Missing entries are skipped with a notice.

        Returns:
            Manifest of the built entries.
        """
        manifest = AssetManifest()
        for entry in self.config.bundler.entries:
            source = self.config.project_root / entry
            if not source.is_file():
                print(f"Asset entry not found; skipping: {entry}")
                continue
            url = self._build_entry(source)
            if url:
                manifest.add(entry, url)
        if manifest.entries:
            manifest.write(self.output_dir / "assets" / MANIFEST_NAME)
        return manifest

    def _build_entry(self, source: Path) -> str | None:
        staging = self.output_dir / "assets" / f".{source.name}"
        if not self.processor_registry.process(source, staging):
            return None
        digest = content_hash(staging.read_text(encoding="utf-8", errors="replace"))
        rel = output_name(self._pattern_for(source), source, digest)
        target = self.output_dir / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        os.replace(staging, target)
        return "/" + rel.lstrip("/")

    def _pattern_for(self, source: Path) -> str:
        if source.suffix.lower() in (".js", ".mjs"):
            return self.config.bundler.entry_file_names
        return self.config.bundler.asset_file_names
