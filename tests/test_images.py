import re

from markupsafe import Markup

from sitekit.config import ImageKitConfig
from sitekit.images import (
    ImageOptions,
    ImageUrlBuilder,
    TransformedURL,
    TransformSegment,
    build_transformed_url,
)

BASE = "https://ik.imagekit.io/acct"


def make_builder(**options):
    return ImageUrlBuilder(ImageKitConfig(url=BASE), ImageOptions(**options))


def attr(markup, name):
    match = re.search(rf'\s{re.escape(name)}="([^"]*)"', str(markup))
    return match.group(1) if match else None


def test_build_transformed_url_joins_without_encoding():
    assert (
        build_transformed_url(BASE, "tr:w-1920,f-auto,q-80", "hero.jpg")
        == "https://ik.imagekit.io/acct/tr:w-1920,f-auto,q-80/hero.jpg"
    )
    assert (
        build_transformed_url(BASE, "tr:w-10", "my photos/ä b.jpg?x=1")
        == "https://ik.imagekit.io/acct/tr:w-10/my photos/ä b.jpg?x=1"
    )


def test_transform_segment_keeps_insertion_order_and_skips_empty_flags():
    segment = TransformSegment().add("w", 96).add("h", 96).add("fo", "face").add_raw("")
    assert str(segment) == "tr:w-96,h-96,fo-face"
    segment.add_raw("e-grayscale,bl-2")
    assert str(segment) == "tr:w-96,h-96,fo-face,e-grayscale,bl-2"


def test_transformed_url_str():
    url = TransformedURL(BASE, "tr:w-5", "a.png")
    assert str(url) == f"{BASE}/tr:w-5/a.png"


def test_simple_image_defaults_and_attribute_order():
    html = make_builder().simple_image("team/photo.jpg", "Team")
    assert isinstance(html, Markup)
    assert str(html) == (
        f'<img src="{BASE}/tr:w-800,f-auto,q-80/team/photo.jpg" alt="Team" '
        'loading="lazy" decoding="async" class="rounded-lg">'
    )
    assert str(html).count(" src=") == 1


def test_simple_image_width_and_extra_flags():
    html = make_builder().simple_image("a.jpg", "A", 1200, "e-sharpen")
    assert attr(html, "src") == f"{BASE}/tr:w-1200,f-auto,q-80,e-sharpen/a.jpg"


def test_simple_image_empty_alt_is_passed_through():
    html = make_builder().simple_image("a.jpg", "")
    assert 'alt=""' in str(html)


def test_responsive_image_srcset_ascending():
    html = make_builder().responsive_image("hero.jpg", "Hero")
    srcset = attr(html, "srcset")
    entries = srcset.split(", ")
    assert len(entries) == 4
    assert [int(e.rsplit(" ", 1)[1][:-1]) for e in entries] == [400, 800, 1200, 1600]
    assert entries[0] == f"{BASE}/tr:w-400,f-auto,q-80/hero.jpg 400w"
    assert attr(html, "src") == f"{BASE}/tr:w-800,f-auto,q-80/hero.jpg"
    assert attr(html, "sizes") == "100vw"


def test_responsive_image_class_attribute_only_when_given():
    builder = make_builder()
    without = str(builder.responsive_image("hero.jpg", "Hero"))
    assert "class=" not in without
    with_class = builder.responsive_image("hero.jpg", "Hero", "(min-width: 768px) 50vw", "w-full")
    assert attr(with_class, "class") == "w-full"
    assert attr(with_class, "sizes") == "(min-width: 768px) 50vw"
    names = re.findall(r'\s([a-z-]+)="', str(with_class))
    assert names == ["src", "srcset", "sizes", "alt", "loading", "decoding", "class"]


def test_background_image_url_literal():
    builder = make_builder()
    assert builder.background_image_url("hero.jpg") == (
        "https://ik.imagekit.io/acct/tr:w-1920,f-auto,q-80/hero.jpg"
    )
    assert builder.background_image_url("hero.jpg", 1920) == builder.background_image_url("hero.jpg")
    assert builder.background_image_url("hero.jpg", 640).endswith("/tr:w-640,f-auto,q-80/hero.jpg")


def test_lazy_placeholder_image():
    builder = make_builder()
    html = builder.lazy_placeholder_image("hero.jpg", "Hero", 1200, "rounded")
    assert attr(html, "src") == f"{BASE}/tr:w-40,bl-30,q-20/hero.jpg"
    assert attr(html, "data-src") == f"{BASE}/tr:w-1200,f-auto,q-80/hero.jpg"
    assert attr(html, "class") == "lazyload rounded"
    assert attr(html, "onload") == "this.src=this.dataset.src"
    assert html == builder.lazy_placeholder_image("hero.jpg", "Hero", 1200, "rounded")


def test_lazy_placeholder_differs_even_at_placeholder_width():
    html = make_builder().lazy_placeholder_image("hero.jpg", "Hero", 40)
    assert attr(html, "src") != attr(html, "data-src")
    assert attr(html, "class") == "lazyload "


def test_avatar_image():
    html = make_builder().avatar_image("p.jpg", "Jane", 96)
    assert 'width="96"' in html
    assert 'height="96"' in html
    assert "tr:w-96,h-96,fo-face,r-max,f-auto" in html
    assert attr(html, "class") == "rounded-full"
    assert attr(make_builder().avatar_image("p.jpg", "Jane"), "width") == "64"


def test_unvalidated_sizes_are_formatted_as_given():
    builder = make_builder()
    assert "tr:w--5,f-auto,q-80" in builder.background_image_url("a.jpg", -5)
    assert "tr:w-wide,f-auto,q-80" in builder.background_image_url("a.jpg", "wide")
    assert "tr:w-0,h-0," in builder.avatar_image("a.jpg", "", 0)


def test_missing_values_become_empty_segments():
    builder = make_builder()
    assert builder.background_image_url(None) == f"{BASE}/tr:w-1920,f-auto,q-80/"
    assert 'alt=""' in builder.simple_image("a.jpg", None)


def test_options_override_defaults():
    builder = make_builder(width=640, sizes="50vw", background_width=2560, avatar_size=32)
    assert "tr:w-640," in builder.simple_image("a.jpg", "A")
    assert attr(builder.responsive_image("a.jpg", "A"), "sizes") == "50vw"
    assert "tr:w-2560," in builder.background_image_url("a.jpg")
    assert 'width="32"' in builder.avatar_image("a.jpg", "A")
    # The responsive fallback src is pinned to 800.
    assert attr(builder.responsive_image("a.jpg", "A"), "src").endswith("tr:w-800,f-auto,q-80/a.jpg")
