"""Site building for sitekit.

One build pass: load configuration and data, build the asset entry points,
render every page, copy passthrough files.

Key functions:
- build_site: Build the whole site.
- load_data: Load global data files from the data directory.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateNotFound, TemplateSyntaxError

from .assets import AssetManifest, AssetPipeline
from .collections import build_collections
from .config import SiteConfig, load_config
from .content import ContentProcessor, Page
from .images import ImageUrlBuilder
from .passthrough import copy_passthrough
from .templates import TemplateEngine
from .utils import ensure_clean_dir


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the source file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class BuildResult:
    """Result of a site build.

    Attributes:
        pages: Every rendered page.
        output_dir: Directory the site was written to.
        manifest: Built asset entry points.
        data: Global data available to templates.
    """

    pages: list[Page]
    output_dir: Path
    manifest: AssetManifest
    data: dict[str, Any]


def load_data(data_dir: Path) -> dict[str, Any]:
    """Load global data from JSON and YAML files, keyed by file stem.

    Args:
        data_dir: Directory holding data files.

    Returns:
        Mapping of file stem to parsed contents.

    Raises:
        BuildError: If a data file cannot be parsed.
    """
    data: dict[str, Any] = {}
    if not data_dir.exists():
        return data
    for path in sorted(data_dir.iterdir()):
        suffix = path.suffix.lower()
        if not path.is_file() or suffix not in (".json", ".yaml", ".yml"):
            continue
        try:
            with open(path, encoding="utf-8") as f:
                if suffix == ".json":
                    data[path.stem] = json.load(f)
                else:
                    data[path.stem] = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise BuildError(path, f"Could not parse data file: {exc}", exc) from exc
    return data


def build_site(
    project_root: Path,
    config: SiteConfig | None = None,
    output_dir_override: Path | None = None,
    dev: bool = False,
) -> BuildResult:
    """Build the entire static site.

    Args:
        project_root: Root directory of the project.
        config: Preloaded configuration; loaded from project_root when omitted.
        output_dir_override: Write the site here instead of the configured output.
        dev: Build for the dev server.

    Returns:
        BuildResult describing the written site.
    """
    config = config or load_config(project_root)
    output_dir = output_dir_override or config.output_path
    if config.bundler.empty_out_dir:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    if not config.input_path.exists():
        raise FileNotFoundError(f"Expected input directory at {config.input_path}")

    data = load_data(config.data_path)
    manifest = AssetPipeline(config, output_dir, dev=dev).run()
    pages = ContentProcessor(config).load()

    engine = TemplateEngine(config, data, ImageUrlBuilder(config.imagekit), manifest)
    engine.update_collections(
        build_collections(pages, config.collections, config.project_root)
    )
    for page in pages:
        try:
            rendered = engine.render_page(page)
        except TemplateSyntaxError as exc:
            raise BuildError(
                page.path,
                f"Template syntax error on line {exc.lineno}: {exc.message}",
                exc,
            ) from exc
        except TemplateNotFound as exc:
            raise BuildError(page.path, f"Template not found: {exc.name}", exc) from exc
        except Exception as exc:
            raise BuildError(page.path, _format_error_message(exc), exc) from exc
        _write_page(output_dir, page, rendered)

    copy_passthrough(config.passthrough, config.project_root, output_dir)
    return BuildResult(pages=pages, output_dir=output_dir, manifest=manifest, data=data)


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message."""
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"

    return f"{error_type}: {error_msg}"


def _write_page(output_dir: Path, page: Page, rendered: str) -> None:
    target = page.output_file(output_dir)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        f.write(rendered)
