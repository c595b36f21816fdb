"""Template shortcodes for sitekit.

Shortcodes are callables installed as Jinja globals, so templates use them
as ``{{ img("hero.jpg", "Hero", 1200) }}``. The image shortcodes delegate to
an ImageUrlBuilder; ``year`` and ``icon`` are self-contained.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any

from markupsafe import Markup

from .images import ImageUrlBuilder


def current_year(now: Callable[[], datetime] = datetime.now) -> str:
    """Return the current year as a string."""
    return str(now().year)


def icon(name: Any, size: Any = 24, class_name: Any = "") -> Markup:
    """Render a Lucide icon placeholder, replaced client-side by lucide.js.

    Examples:
        >>> str(icon("mail", 16))
        '<i data-lucide="mail" class="inline-block " style="width:16px;height:16px;"></i>'
    """
    return Markup(
        f'<i data-lucide="{name}" class="inline-block {class_name}" '
        f'style="width:{size}px;height:{size}px;"></i>'
    )


class ShortcodeRegistry:
    """Named collection of shortcode callables.

    Registering a name twice replaces the earlier shortcode.
    """

    def __init__(self):
        self._shortcodes: dict[str, Callable[..., Any]] = {}

    def register(self, name: str, func: Callable[..., Any]) -> None:
        self._shortcodes[name] = func

    def get(self, name: str) -> Callable[..., Any] | None:
        return self._shortcodes.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._shortcodes

    def __iter__(self) -> Iterator[str]:
        return iter(self._shortcodes)

    def __len__(self) -> int:
        return len(self._shortcodes)

    def install(self, env) -> None:
        """Expose every shortcode as a global of a Jinja environment."""
        env.globals.update(self._shortcodes)


def create_default_shortcodes(builder: ImageUrlBuilder) -> ShortcodeRegistry:
    """Create a registry with the site's shortcodes.

    Args:
        builder: Image builder shared by the image shortcodes.

    Returns:
        Registry holding img, picture, bgimg, lazyimg, avatar, year and icon.
    """
    registry = ShortcodeRegistry()
    registry.register("img", builder.simple_image)
    registry.register("picture", builder.responsive_image)
    registry.register("bgimg", _safe(builder.background_image_url))
    registry.register("lazyimg", builder.lazy_placeholder_image)
    registry.register("avatar", builder.avatar_image)
    registry.register("year", _safe(current_year))
    registry.register("icon", icon)
    return registry


def _safe(func: Callable[..., str]) -> Callable[..., Markup]:
    """Wrap a string-returning shortcode so autoescape leaves its output alone."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return Markup(func(*args, **kwargs))

    return wrapper
