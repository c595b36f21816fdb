"""Site configuration for sitekit.

Configuration is read once per build from ``sitekit.yaml`` at the project
root (optional) and from the ``IMAGEKIT_URL`` environment variable. The
resulting SiteConfig is passed explicitly to every component; nothing
reads the environment after start-up.

Key pieces:
- ImageKitConfig: The CDN account base URL.
- PassthroughRule: A source path copied unchanged into the output.
- BundlerOptions: Asset entry points, output naming and dev server port.
- SiteConfig: Everything above plus the directory layout.
- load_config: Build a SiteConfig for a project root.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "sitekit.yaml"
IMAGEKIT_URL_ENV = "IMAGEKIT_URL"
DEFAULT_IMAGEKIT_URL = "https://ik.imagekit.io/your-account"


class ConfigError(Exception):
    """Error raised when sitekit.yaml cannot be read or parsed.

    Attributes:
        path: Path to the offending configuration file.
        message: Human-readable error message.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


@dataclass(frozen=True)
class ImageKitConfig:
    """ImageKit account configuration.

    Attributes:
        url: Base URL every transformation URL starts with, no trailing slash
            handling is applied.
    """

    url: str = DEFAULT_IMAGEKIT_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ImageKitConfig:
        """Read ``IMAGEKIT_URL``, falling back to the placeholder account.

        An empty value counts as absent.
        """
        env = os.environ if environ is None else environ
        return cls(url=env.get(IMAGEKIT_URL_ENV) or DEFAULT_IMAGEKIT_URL)


@dataclass(frozen=True)
class PassthroughRule:
    """Copy ``source`` (project-relative) to ``target`` (output-relative)."""

    source: str
    target: str


@dataclass
class BundlerOptions:
    """Asset build settings.

    Attributes:
        port: Dev server port.
        open: Open a browser when the dev server starts.
        empty_out_dir: Wipe the output directory before each build.
        css_dev_sourcemap: Ask Tailwind for a source map in dev builds.
        entries: Project-relative entry points (CSS and JS).
        alias: Import prefixes mapped to directories.
        asset_file_names: Output pattern for CSS and other assets.
        entry_file_names: Output pattern for JS entries.
    """

    port: int = 8080
    open: bool = False
    empty_out_dir: bool = False
    css_dev_sourcemap: bool = True
    entries: list[str] = field(
        default_factory=lambda: ["src/assets/css/main.css", "src/assets/js/main.js"]
    )
    alias: dict[str, str] = field(default_factory=lambda: {"/src": "src"})
    asset_file_names: str = "assets/[name].[hash][extname]"
    entry_file_names: str = "assets/[name].[hash].js"


def _default_passthrough() -> list[PassthroughRule]:
    return [
        PassthroughRule("src/assets/images", "images"),
        PassthroughRule("src/assets/fonts", "fonts"),
        PassthroughRule("src/robots.txt", "robots.txt"),
    ]


@dataclass
class SiteConfig:
    """Complete configuration for one site build.

    Directory names other than ``input_dir`` and ``output_dir`` are relative
    to the input directory.
    """

    project_root: Path
    input_dir: str = "src"
    output_dir: str = "_site"
    includes_dir: str = "_includes"
    data_dir: str = "_data"
    template_formats: list[str] = field(default_factory=lambda: ["jinja", "md", "html"])
    html_template_engine: str = "jinja"
    markdown_template_engine: str = "jinja"
    passthrough: list[PassthroughRule] = field(default_factory=_default_passthrough)
    collections: dict[str, str] = field(
        default_factory=lambda: {"pages": "src/pages/**/*.jinja"}
    )
    bundler: BundlerOptions = field(default_factory=BundlerOptions)
    imagekit: ImageKitConfig = field(default_factory=ImageKitConfig)

    @property
    def input_path(self) -> Path:
        return self.project_root / self.input_dir

    @property
    def output_path(self) -> Path:
        return self.project_root / self.output_dir

    @property
    def includes_path(self) -> Path:
        return self.input_path / self.includes_dir

    @property
    def data_path(self) -> Path:
        return self.input_path / self.data_dir

    def resolve_alias(self, path: str) -> Path:
        """Resolve an aliased import such as ``/src/assets/x.css``."""
        for prefix, target in self.bundler.alias.items():
            if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
                rest = path[len(prefix) :].lstrip("/")
                return self.project_root / target / rest
        return self.project_root / path.lstrip("/")


_SIMPLE_KEYS = (
    "input_dir",
    "output_dir",
    "includes_dir",
    "data_dir",
    "html_template_engine",
    "markdown_template_engine",
)


def load_config(
    project_root: Path, environ: Mapping[str, str] | None = None
) -> SiteConfig:
    """Load site configuration for a project.

    Values from ``sitekit.yaml`` override the defaults; unknown keys are
    ignored. ``IMAGEKIT_URL`` is read here and nowhere else.

    Args:
        project_root: Root directory of the project.
        environ: Environment mapping, defaults to ``os.environ``.

    Returns:
        SiteConfig with defaults applied.

    Raises:
        ConfigError: If sitekit.yaml exists but is not valid YAML.
    """
    config = SiteConfig(project_root=project_root)
    loaded = _read_yaml(project_root / CONFIG_FILENAME)
    _apply(config, loaded)
    config.imagekit = ImageKitConfig.from_env(environ)
    return config


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(path, f"Invalid YAML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(path, f"Could not read file: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _apply(config: SiteConfig, loaded: dict[str, Any]) -> None:
    for key in _SIMPLE_KEYS:
        if key in loaded:
            setattr(config, key, str(loaded[key]))

    formats = loaded.get("template_formats")
    if isinstance(formats, list):
        config.template_formats = [str(f).lstrip(".") for f in formats]

    passthrough = loaded.get("passthrough")
    if isinstance(passthrough, dict):
        config.passthrough = [
            PassthroughRule(str(src), str(dest)) for src, dest in passthrough.items()
        ]
    elif isinstance(passthrough, list):
        # Bare paths keep their name at the output root.
        config.passthrough = [
            PassthroughRule(str(src), Path(str(src)).name) for src in passthrough
        ]

    collections = loaded.get("collections")
    if isinstance(collections, dict):
        config.collections = {str(k): str(v) for k, v in collections.items()}

    bundler = loaded.get("bundler")
    if isinstance(bundler, dict):
        options = config.bundler
        for key in ("asset_file_names", "entry_file_names"):
            if key in bundler:
                setattr(options, key, str(bundler[key]))
        for key in ("open", "empty_out_dir", "css_dev_sourcemap"):
            if key in bundler:
                setattr(options, key, bool(bundler[key]))
        if "port" in bundler:
            options.port = int(bundler["port"])
        if isinstance(bundler.get("entries"), list):
            options.entries = [str(e) for e in bundler["entries"]]
        if isinstance(bundler.get("alias"), dict):
            options.alias = {str(k): str(v) for k, v in bundler["alias"].items()}
