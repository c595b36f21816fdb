from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from pathlib import Path

from .content import Page


class PageCollection(Sequence[Page]):
    """Lightweight helper for working with lists of Pages in templates and code."""

    def __init__(self, pages: Iterable[Page]):
        self._pages = list(pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        return self._pages[item]

    def urls(self) -> list[str]:
        return [p.url for p in self._pages]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageCollection({len(self._pages)} pages)"


class Collections(Mapping[str, PageCollection]):
    """Named page collections, readable as attributes in templates.

    ``collections.pages`` and ``collections["pages"]`` are equivalent.
    ``all`` always holds every page.
    """

    def __init__(self, mapping: dict[str, Iterable[Page]]):
        self._mapping = {k: PageCollection(v) for k, v in mapping.items()}

    def __getitem__(self, key: str) -> PageCollection:
        return self._mapping[key]

    def __getattr__(self, name: str) -> PageCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._mapping[name]
        except KeyError:
            raise AttributeError(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"Collections({sorted(self._mapping)})"


def filter_by_glob(pages: Iterable[Page], pattern: str, project_root: Path) -> PageCollection:
    """Return pages whose source file matches a project-relative glob.

    ``**`` spans any number of directories, including none. Results are
    ordered by input path.
    """
    matched = {p.resolve() for p in project_root.glob(pattern) if p.is_file()}
    selected = [page for page in pages if page.path.resolve() in matched]
    return PageCollection(sorted(selected, key=lambda p: p.input_path))


def build_collections(
    pages: Iterable[Page], globs: dict[str, str], project_root: Path
) -> Collections:
    """Build every configured collection plus ``all``.

    Args:
        pages: All loaded pages.
        globs: Collection name to project-relative glob.
        project_root: Directory the globs are relative to.

    Returns:
        Collections mapping.
    """
    pages = list(pages)
    mapping: dict[str, Iterable[Page]] = {
        "all": sorted(pages, key=lambda p: p.input_path)
    }
    for name, pattern in globs.items():
        mapping[name] = filter_by_glob(pages, pattern, project_root)
    return Collections(mapping)
