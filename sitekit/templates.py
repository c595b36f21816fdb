"""Template rendering engine for sitekit.

This module configures Jinja2 with the site's shortcodes, filters, data and
collections, and renders pages through their layout chain.

Key classes:
- FrontMatterLoader: FileSystemLoader that hides front matter from Jinja.
- TemplateEngine: Renders Page objects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import mistune
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from markupsafe import Markup

from .collections import Collections
from .config import SiteConfig
from .content import Page, extract_frontmatter
from .filters import default_filters
from .images import ImageUrlBuilder
from .shortcodes import ShortcodeRegistry, create_default_shortcodes

if TYPE_CHECKING:
    from .assets import AssetManifest

__all__ = ["FrontMatterLoader", "LayoutError", "TemplateEngine"]

LAYOUT_SUFFIXES = ("", ".jinja", ".html.jinja", ".html")
MAX_LAYOUT_DEPTH = 10


class LayoutError(Exception):
    """Raised for layout cycles or chains deeper than MAX_LAYOUT_DEPTH."""


class FrontMatterLoader(FileSystemLoader):
    """FileSystemLoader that strips YAML front matter before compiling."""

    def get_source(self, environment, template):
        source, filename, uptodate = super().get_source(environment, template)
        _, body = extract_frontmatter(source)
        return body, filename, uptodate


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        config: Site configuration.
        data: Global data loaded from the data directory.
        builder: Image builder behind the image shortcodes.
        env: Jinja2 environment.
        collections: Current page collections.
    """

    def __init__(
        self,
        config: SiteConfig,
        data: dict[str, Any],
        builder: ImageUrlBuilder | None = None,
        manifest: AssetManifest | None = None,
        shortcodes: ShortcodeRegistry | None = None,
    ):
        """Initialize the template engine.

        Args:
            config: Site configuration.
            data: Global site data.
            builder: Optional image builder, created from config when omitted.
            manifest: Optional asset manifest for ``asset_url``.
            shortcodes: Optional custom shortcode registry.
        """
        self.config = config
        self.data = data
        self.builder = builder or ImageUrlBuilder(config.imagekit)
        self.manifest = manifest
        self.env = Environment(
            loader=FrontMatterLoader([config.includes_path, config.input_path]),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
        )
        self.collections = Collections({})
        self._markdown = mistune.create_markdown(
            escape=False, plugins=["strikethrough", "footnotes", "table", "url"]
        )

        self.shortcodes = shortcodes or create_default_shortcodes(self.builder)
        self._install_globals()

    def _install_globals(self) -> None:
        """Install shortcodes, filters and globals in the Jinja environment."""
        self.shortcodes.install(self.env)
        self.env.filters.update(default_filters())
        self.env.globals["data"] = self.data
        self.env.globals.update(self.data)
        self.env.globals["collections"] = self.collections
        self.env.globals["asset_url"] = self._asset_url

    def update_collections(self, collections: Collections) -> None:
        self.collections = collections
        self.env.globals["collections"] = collections

    def _asset_url(self, name: str) -> str:
        """Return the public URL of a bundled asset.

        Accepts an entry basename (``main.css``), a project-relative entry
        path or an aliased path (``/src/assets/js/main.js``). Names not in
        the manifest are returned unchanged.
        """
        if self.manifest is None:
            return name
        return self.manifest.lookup(name, self.config) or name

    def page_context(self, page: Page) -> dict[str, Any]:
        context = dict(page.frontmatter)
        context["page"] = {
            "url": page.url,
            "input_path": page.input_path,
            "file_slug": page.file_slug,
            "source_type": page.source_type,
        }
        context["collections"] = self.collections
        return context

    def render_page(self, page: Page) -> str:
        """Render a page body and wrap it in its layouts.

        Args:
            page: Page to render.

        Returns:
            Rendered HTML string.
        """
        context = self.page_context(page)
        content = self.render_body(page, context)
        return self._apply_layouts(page.layout, content, context)

    def render_body(self, page: Page, context: dict[str, Any]) -> str:
        """Render the page body through Jinja and, for markdown, mistune."""
        body = page.body
        if page.source_type == "markdown":
            if self.config.markdown_template_engine == "jinja":
                body = self.render_string(body, context)
            return self._markdown(body)
        if page.source_type == "html" and self.config.html_template_engine != "jinja":
            return body
        return self.render_string(body, context)

    def _apply_layouts(
        self, layout: str | None, content: str, context: dict[str, Any]
    ) -> str:
        seen: list[str] = []
        while layout:
            if layout in seen or len(seen) >= MAX_LAYOUT_DEPTH:
                chain = " -> ".join(seen + [layout])
                raise LayoutError(f"Layout chain too deep or cyclic: {chain}")
            seen.append(layout)
            name = self._resolve_layout_name(layout)
            layout_front = self._layout_frontmatter(name)
            layout_context = {**layout_front, **context}
            template = self.env.get_template(name)
            content = template.render({**layout_context, "content": Markup(content)})
            layout = layout_front.get("layout")
        return content

    def _resolve_layout_name(self, layout: str) -> str:
        """Find the template in the includes directory for a layout name."""
        for suffix in LAYOUT_SUFFIXES:
            candidate = f"{layout}{suffix}"
            if (self.config.includes_path / candidate).is_file():
                return candidate
        raise TemplateNotFound(layout)

    def _layout_frontmatter(self, name: str) -> dict[str, Any]:
        path = self.config.includes_path / name
        frontmatter, _ = extract_frontmatter(path.read_text(encoding="utf-8"))
        return frontmatter

    def render_string(self, template: str, context: dict[str, Any]) -> str:
        """Render a template string.

        Args:
            template: Template string to render.
            context: Variables to make available in the template.

        Returns:
            Rendered string.
        """
        tmpl = self.env.from_string(template)
        return tmpl.render(context)
