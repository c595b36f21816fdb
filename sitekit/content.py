"""Content discovery for sitekit.

This module finds the templates in the input directory and turns each into
a Page: front matter, raw body and output URL. Rendering happens later in
the TemplateEngine.

Key classes:
- Page: Dataclass representing one input template.
- FileContentLoader: Finds input files matching the template formats.
- UrlDeriver: Maps input paths to output URLs.
- ContentProcessor: Facade that loads every Page.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import SiteConfig
from .utils import is_within

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)

SOURCE_TYPES = {"md": "markdown", "html": "html"}


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML front matter from content.

    Malformed or non-mapping front matter is treated as absent.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (front matter dict, remaining content).
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        return {}, text
    if not isinstance(data, dict):
        return {}, text
    return data, text[match.end() :]


@dataclass
class Page:
    """Represents one input template.

    Attributes:
        path: Absolute path to the source file.
        input_path: Path relative to the input directory, posix style.
        url: Output URL, e.g. ``/about/``.
        body: Template source without front matter.
        source_type: "jinja", "markdown" or "html".
        frontmatter: Parsed front matter.
    """

    path: Path
    input_path: str
    url: str
    body: str
    source_type: str
    frontmatter: dict[str, Any] = field(default_factory=dict)

    @property
    def layout(self) -> str | None:
        layout = self.frontmatter.get("layout")
        return str(layout) if layout else None

    @property
    def title(self) -> str:
        return str(self.frontmatter.get("title", ""))

    @property
    def file_slug(self) -> str:
        return self.path.name.split(".", 1)[0]

    def output_file(self, output_dir: Path) -> Path:
        """Return the file this page is written to."""
        url_path = self.url.lstrip("/")
        if not url_path or url_path.endswith("/"):
            return output_dir / url_path / "index.html"
        return output_dir / url_path


def source_type_for(path: Path) -> str:
    return SOURCE_TYPES.get(path.suffix.lstrip(".").lower(), "jinja")


class FileContentLoader:
    """Finds input files whose extension is one of the template formats.

    The includes and data directories are skipped, as is anything under
    the output directory when it sits inside the input directory.
    """

    def __init__(self, config: SiteConfig):
        self.config = config

    def iter_files(self) -> list[Path]:
        """Return matching files sorted by path."""
        input_dir = self.config.input_path
        if not input_dir.exists():
            return []
        formats = {f.lower() for f in self.config.template_formats}
        excluded = [
            self.config.includes_path,
            self.config.data_path,
            self.config.output_path,
        ]
        files: list[Path] = []
        for path in sorted(input_dir.rglob("*")):
            if path.is_dir():
                continue
            if path.suffix.lstrip(".").lower() not in formats:
                continue
            if any(is_within(path, root) for root in excluded):
                continue
            files.append(path)
        return files


class UrlDeriver:
    """Derives output URLs for pages.

    ``index.*`` maps to its folder, every other file to ``/folder/stem/``.
    A ``permalink`` in front matter wins.
    """

    def derive(self, rel: Path, frontmatter: dict[str, Any] | None = None) -> str:
        """Derive the URL for a page.

        Args:
            rel: Path relative to the input directory.
            frontmatter: Page front matter.

        Returns:
            URL path starting with ``/``.
        """
        permalink = (frontmatter or {}).get("permalink")
        if permalink:
            text = str(permalink)
            return text if text.startswith("/") else f"/{text}"
        stem = rel.name.split(".", 1)[0]
        segments = [p for p in rel.parent.parts if p not in ("", ".")]
        if stem != "index":
            segments.append(stem)
        path = "/".join(segments)
        return f"/{path}/" if path else "/"


class ContentProcessor:
    """Loads every input template as a Page.

    Attributes:
        config: Site configuration.
    """

    def __init__(
        self,
        config: SiteConfig,
        content_loader: FileContentLoader | None = None,
        url_deriver: UrlDeriver | None = None,
    ):
        self.config = config
        self._content_loader = content_loader or FileContentLoader(config)
        self._url_deriver = url_deriver or UrlDeriver()

    def load(self) -> list[Page]:
        return [self.build(path) for path in self._content_loader.iter_files()]

    def build(self, path: Path) -> Page:
        """Build a Page from a source file."""
        rel = path.relative_to(self.config.input_path)
        frontmatter, body = extract_frontmatter(path.read_text(encoding="utf-8"))
        return Page(
            path=path,
            input_path=rel.as_posix(),
            url=self._url_deriver.derive(rel, frontmatter),
            body=body,
            source_type=source_type_for(path),
            frontmatter=frontmatter,
        )
