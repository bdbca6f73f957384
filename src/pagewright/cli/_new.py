"""``pagewright new`` — project scaffolding command.

Creates a project directory with an ``app.py`` and a starter
``pages/`` tree: a root layout, a home page, a custom 404 and a dynamic
blog route.
"""

import argparse
import sys
from pathlib import Path

from pagewright.cli._templates import APP_PY, INDEX_HTML, LAYOUT_HTML, NOT_FOUND_HTML, POST_HTML


def create_project(args: argparse.Namespace) -> None:
    """Generate a new pagewright project directory.

    Creates the project at ``./<args.name>/`` relative to cwd.
    Refuses to overwrite an existing directory.
    """
    project_dir = Path(args.name)

    if project_dir.exists():
        print(
            f"Error: directory '{args.name}' already exists",
            file=sys.stderr,
        )
        raise SystemExit(1)

    _create_project(project_dir, project_dir.name)

    print(f"Created project '{args.name}'")
    print()
    print(f"  cd {args.name} && pagewright run app:app")
    print()


def _create_project(project_dir: Path, name: str) -> None:
    pages_dir = project_dir / "pages"
    blog_dir = pages_dir / "blog"
    blog_dir.mkdir(parents=True)

    (project_dir / "app.py").write_text(APP_PY.format(name=name))
    (pages_dir / "_layout.html").write_text(LAYOUT_HTML.format(name=name))
    (pages_dir / "index.html").write_text(INDEX_HTML.format(name=name))
    (pages_dir / "404.html").write_text(NOT_FOUND_HTML.format(name=name))
    (blog_dir / "[slug].html").write_text(POST_HTML.format(name=name))
