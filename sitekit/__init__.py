"""sitekit static site builder.

Wires Jinja2 templates, Tailwind CSS and ImageKit image URLs into a single
build pass for a content website. The image shortcodes (``img``,
``picture``, ``bgimg``, ``lazyimg``, ``avatar``) produce ImageKit
transformation URLs that double as CDN cache keys, so their output is kept
stable byte for byte.

The main entry point is the CLI module, which provides commands for
building the site, serving it locally, and printing image URLs.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
