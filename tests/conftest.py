"""Shared fixtures: content trees built under tmp_path."""

from collections.abc import Callable
from pathlib import Path

import pytest

from pagewright.pages.cache import CacheStore


def _write(root: Path, files: dict[str, str]) -> Path:
    for relative, text in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text)
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Build a content tree from ``{relative path: text}`` under tmp_path."""

    def make(files: dict[str, str]) -> Path:
        root = (tmp_path / "pages").resolve()
        root.mkdir(exist_ok=True)
        return _write(root, files)

    return make


@pytest.fixture
def store() -> CacheStore:
    return CacheStore()


@pytest.fixture
def pages(make_tree: Callable[[dict[str, str]], Path]) -> Path:
    """A content tree exercising every naming convention."""
    return make_tree(
        {
            "index.html": "<h1>Home</h1>",
            "_layout.html": "<html><%content%></html>",
            "about.html": "<p>About</p>",
            "contact.htm": "<p>Contact</p>",
            "blog/_layout.html": "<section><%content%></section>",
            "blog/index.html": "<p>Blog index</p>",
            "blog/[slug].html": "<article>{slug}</article>",
            "users/user/index.html": "<p>User page</p>",
            "users/[id]/index.html": "<p>User {id}</p>",
            "users/[id]/posts/[post]/index.html": "<p>{id}/{post}</p>",
            "(marketing)/_layout.html": "<div class='mk'><%content%></div>",
            "(marketing)/pricing.html": "<p>Pricing</p>",
            "docs/(guides)/_layout.html": "<nav><%content%></nav>",
            "docs/(guides)/index.html": "<p>Guides</p>",
            "_private.html": "<p>secret</p>",
            ".hidden.html": "<p>hidden</p>",
        }
    )
