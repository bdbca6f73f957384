"""Pagewright CLI — project scaffolding and the server runner.

Entry point registered as ``pagewright`` in ``pyproject.toml``::

    [project.scripts]
    pagewright = "pagewright.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``pagewright`` command."""
    parser = argparse.ArgumentParser(
        prog="pagewright",
        description="Pagewright — file-convention pages with layouts and a client bridge.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- pagewright new ---------------------------------------------------
    new_parser = subparsers.add_parser("new", help="Create a new project")
    new_parser.add_argument("name", help="Project directory name")

    # -- pagewright run ---------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start dev or production server")
    run_parser.add_argument(
        "app",
        help="Import string (e.g. site:app)",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--production",
        action="store_true",
        help="Run in production mode (multi-worker, no content watcher)",
    )
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect, production only)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "new":
        from pagewright.cli._new import create_project

        create_project(args)
    elif args.command == "run":
        from pagewright.cli._run import run_server

        run_server(args)
