"""Image URL builder for sitekit.

This module turns a source image identifier plus display parameters into
ImageKit transformation URLs and the ``<img>`` markup around them.

Key pieces:
- TransformSegment: Builds the ``tr:key-value,...`` path segment.
- TransformedURL: A base URL, transform segment and asset path.
- ImageOptions: Default values for every shortcode parameter.
- ImageUrlBuilder: The five image operations used by the templates.

Nothing here is URL-encoded. Source paths and parameter values are
formatted into the URL exactly as given, so content must supply
already-safe identifiers. The literal URL strings double as CDN cache keys,
which is why the order of transform pairs is fixed per operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jinja2 import Undefined
from markupsafe import Markup

from .config import ImageKitConfig

RESPONSIVE_WIDTHS = (400, 800, 1200, 1600)

# Low-resolution blurred preview used by lazy_placeholder_image.
PLACEHOLDER_PAIRS = (("w", 40), ("bl", 30), ("q", 20))


class TransformSegment:
    """Ordered builder for an ImageKit ``tr:`` path segment.

    Pairs are emitted in insertion order, never sorted.

    Examples:
        >>> str(TransformSegment().add("w", 800).add("f", "auto"))
        'tr:w-800,f-auto'
    """

    PREFIX = "tr:"

    def __init__(self) -> None:
        self._parts: list[str] = []

    def add(self, key: str, value: Any) -> TransformSegment:
        """Append a ``key-value`` pair, formatting the value with ``str``."""
        self._parts.append(f"{key}-{_text(value)}")
        return self

    def add_raw(self, flags: Any) -> TransformSegment:
        """Append opaque, pre-formatted flags verbatim.

        Empty flags are skipped so the segment never holds an empty pair.
        """
        text = _text(flags)
        if text:
            self._parts.append(text)
        return self

    @classmethod
    def from_pairs(cls, pairs) -> TransformSegment:
        segment = cls()
        for key, value in pairs:
            segment.add(key, value)
        return segment

    def __str__(self) -> str:
        return self.PREFIX + ",".join(self._parts)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"TransformSegment({str(self)!r})"


@dataclass(frozen=True)
class TransformedURL:
    """A CDN URL split into its three parts.

    Attributes:
        base_url: Account endpoint, e.g. https://ik.imagekit.io/acct.
        transform_segment: The ``tr:`` segment.
        asset_path: Source path relative to the account.
    """

    base_url: str
    transform_segment: str
    asset_path: str

    def __str__(self) -> str:
        return build_transformed_url(
            self.base_url, self.transform_segment, self.asset_path
        )


def build_transformed_url(base_url: str, transform_segment: Any, source_path: Any) -> str:
    """Join base URL, transform segment and source path with single slashes.

    No component is encoded or normalised.

    Examples:
        >>> build_transformed_url("https://ik.imagekit.io/acct", "tr:w-1920,f-auto,q-80", "hero.jpg")
        'https://ik.imagekit.io/acct/tr:w-1920,f-auto,q-80/hero.jpg'
    """
    return f"{base_url}/{transform_segment}/{_text(source_path)}"


@dataclass(frozen=True)
class ImageOptions:
    """Defaults applied when a shortcode argument is omitted.

    Attributes:
        width: Display width for img, lazyimg and the picture fallback src.
        sizes: ``sizes`` attribute for responsive images.
        class_name: Extra CSS class; omitted from markup when empty.
        extra_flags: Transform flags appended verbatim to the img segment.
        background_width: Width used for background image URLs.
        avatar_size: Edge length of square avatars.
        quality: ``q-`` value for full-resolution images.
    """

    width: int = 800
    sizes: str = "100vw"
    class_name: str = ""
    extra_flags: str = ""
    background_width: int = 1920
    avatar_size: int = 64
    quality: int = 80


DEFAULT_OPTIONS = ImageOptions()


class ImageUrlBuilder:
    """Builds ImageKit URLs and image markup for templates.

    The base URL comes from an ImageKitConfig resolved once at start-up;
    every URL produced by one builder shares it.

    Attributes:
        config: ImageKit account configuration.
        options: Default parameter values.
    """

    def __init__(
        self,
        config: ImageKitConfig,
        options: ImageOptions | None = None,
    ):
        self.config = config
        self.options = options or DEFAULT_OPTIONS

    @property
    def base_url(self) -> str:
        return self.config.url

    def url(self, source_path: Any, segment: TransformSegment | str) -> TransformedURL:
        """Return the TransformedURL for a source path and segment."""
        return TransformedURL(self.base_url, str(segment), _text(source_path))

    def full_segment(self, width: Any, extra_flags: Any = "") -> TransformSegment:
        """Segment for a full-resolution image: ``w-{width},f-auto,q-80``."""
        return (
            TransformSegment()
            .add("w", width)
            .add("f", "auto")
            .add("q", self.options.quality)
            .add_raw(extra_flags)
        )

    def simple_image(
        self,
        source_path: Any,
        alt: Any,
        width: Any = None,
        extra_flags: Any = None,
    ) -> Markup:
        """Render a single-source lazy ``<img>``.

        Args:
            source_path: Asset path relative to the ImageKit account.
            alt: Alt text, inserted as given.
            width: Display width, defaults to ``options.width``.
            extra_flags: Transform flags appended after the defaults.

        Returns:
            Markup for the image tag.
        """
        width = _given(width, self.options.width)
        extra_flags = _given(extra_flags, self.options.extra_flags)
        src = self.url(source_path, self.full_segment(width, extra_flags))
        return _img_tag(
            ("src", src),
            ("alt", alt),
            ("loading", "lazy"),
            ("decoding", "async"),
            ("class", "rounded-lg"),
        )

    def srcset(self, source_path: Any, widths=RESPONSIVE_WIDTHS) -> str:
        """Return ``"{url} {w}w"`` candidates joined by ``", "``, widths ascending."""
        return ", ".join(
            f"{self.url(source_path, self.full_segment(w))} {w}w"
            for w in sorted(widths)
        )

    def responsive_image(
        self,
        source_path: Any,
        alt: Any,
        sizes: Any = None,
        class_name: Any = None,
    ) -> Markup:
        """Render an ``<img>`` with a srcset over the fixed breakpoints.

        The fallback ``src`` always uses width 800. The class attribute is
        left out entirely when ``class_name`` is empty.
        """
        sizes = _given(sizes, self.options.sizes)
        class_name = _given(class_name, self.options.class_name)
        attrs = [
            ("src", self.url(source_path, self.full_segment(800))),
            ("srcset", self.srcset(source_path)),
            ("sizes", sizes),
            ("alt", alt),
            ("loading", "lazy"),
            ("decoding", "async"),
        ]
        if _text(class_name):
            attrs.append(("class", class_name))
        return _img_tag(*attrs)

    def background_image_url(self, source_path: Any, width: Any = None) -> str:
        """Return the bare URL for use as a CSS value."""
        width = _given(width, self.options.background_width)
        return str(self.url(source_path, self.full_segment(width)))

    def lazy_placeholder_image(
        self,
        source_path: Any,
        alt: Any,
        width: Any = None,
        class_name: Any = None,
    ) -> Markup:
        """Render a blurred placeholder that swaps to the full image on load.

        The placeholder segment (``w-40,bl-30,q-20``) carries blur and a lower
        quality, so it differs from the full segment for every width,
        including 40. The swap itself is the ``onload`` attribute; no script
        is involved here.
        """
        width = _given(width, self.options.width)
        class_name = _given(class_name, self.options.class_name)
        placeholder = self.url(source_path, TransformSegment.from_pairs(PLACEHOLDER_PAIRS))
        full = self.url(source_path, self.full_segment(width))
        classes = f"lazyload {_text(class_name)}"
        return _img_tag(
            ("src", placeholder),
            ("data-src", full),
            ("alt", alt),
            ("loading", "lazy"),
            ("decoding", "async"),
            ("class", classes),
            ("onload", "this.src=this.dataset.src"),
        )

    def avatar_image(self, source_path: Any, alt: Any, size: Any = None) -> Markup:
        """Render a face-cropped, fully rounded square avatar.

        Explicit width/height attributes reserve layout space.
        """
        size = _given(size, self.options.avatar_size)
        segment = (
            TransformSegment()
            .add("w", size)
            .add("h", size)
            .add("fo", "face")
            .add("r", "max")
            .add("f", "auto")
        )
        return _img_tag(
            ("src", self.url(source_path, segment)),
            ("alt", alt),
            ("width", size),
            ("height", size),
            ("loading", "lazy"),
            ("class", "rounded-full"),
        )


def _given(value: Any, default: Any) -> Any:
    # A missing template variable arrives as Undefined and counts as omitted.
    if value is None or isinstance(value, Undefined):
        return default
    return value


def _text(value: Any) -> str:
    # Jinja's Undefined and None both render as empty segments.
    if value is None or isinstance(value, Undefined):
        return ""
    return str(value)


def _img_tag(*attrs: tuple[str, Any]) -> Markup:
    rendered = " ".join(f'{name}="{_text(value)}"' for name, value in attrs)
    return Markup(f"<img {rendered}>")
