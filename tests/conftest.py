from pathlib import Path

import pytest


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def create_project(root: Path) -> Path:
    src = root / "src"
    write(
        src / "_includes" / "base.html.jinja",
        "<html><head><link rel=\"stylesheet\" href=\"{{ asset_url('main.css') }}\"></head>"
        "<body><h1>{{ title }}</h1>{{ content }}<footer>{{ year() }}</footer></body></html>",
    )
    write(
        src / "_includes" / "post.jinja",
        "---\nlayout: base.html.jinja\n---\n<article>{{ content }}</article>",
    )
    write(src / "_data" / "site.json", '{"name": "Example"}')
    write(src / "_data" / "nav.yaml", "- label: Home\n  url: /\n")
    write(
        src / "index.jinja",
        "---\nlayout: base.html.jinja\ntitle: Home\n---\n"
        "{{ picture('hero.jpg', 'Hero') }}"
        "<ul>{% for p in collections.pages %}<li>{{ p.url }}</li>{% endfor %}</ul>"
        "<p>{{ site.name }}</p>",
    )
    write(
        src / "about.md",
        "---\nlayout: post\ntitle: About\n---\n# About {{ site.name }}\n\n{{ avatar('me.jpg', 'Me', 96) }}\n",
    )
    write(src / "pages" / "contact.jinja", "---\ntitle: Contact\n---\n<p>{{ title | slugify }}</p>")
    write(src / "pages" / "team" / "index.jinja", "<p>team</p>")
    write(src / "assets" / "css" / "main.css", "@import \"tailwindcss\";\nbody { color: red; }\n")
    write(
        src / "assets" / "js" / "main.js",
        "import '../css/main.css';\n"
        "document.addEventListener('DOMContentLoaded', () => {\n"
        "  if (window.lucide) { lucide.createIcons(); }\n"
        "});\n"
        "if (import.meta.env.DEV) { console.log('dev'); }\n",
    )
    write(src / "assets" / "images" / "logo.svg", "<svg></svg>")
    write(src / "assets" / "fonts" / "inter.woff2", "font")
    write(src / "robots.txt", "User-agent: *\n")
    return root


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.setenv("IMAGEKIT_URL", "https://ik.imagekit.io/acct")
    # Keep builds independent of any Tailwind install on the machine.
    monkeypatch.setattr("sitekit.asset_processors.find_executable", lambda name, root=None: None)
    return create_project(tmp_path)
