"""Client script assets.

``.js`` files from ``AppConfig.scripts_dir`` are served under
``AppConfig.scripts_path`` and referenced from every rendered page.

Security: the requested name is resolved and must stay inside the
scripts directory; anything else is a 404.
"""

from pathlib import Path

import anyio

from pagewright.errors import NotFound
from pagewright.http.response import Response

_JS_CONTENT_TYPE = "application/javascript; charset=utf-8"


def discover_scripts(directory: str | Path | None) -> tuple[str, ...]:
    """Sorted names of the ``.js`` files directly inside *directory*."""
    if directory is None:
        return ()
    root = Path(directory)
    if not root.is_dir():
        return ()
    return tuple(
        sorted(
            item.name
            for item in root.iterdir()
            if item.is_file() and item.suffix == ".js" and not item.name.startswith(".")
        )
    )


def script_urls(names: tuple[str, ...], scripts_path: str) -> tuple[str, ...]:
    prefix = scripts_path.rstrip("/")
    return tuple(f"{prefix}/{name}" for name in names)


async def serve_script(
    directory: str | Path | None,
    name: str,
    *,
    cache_control: str = "no-cache",
) -> Response:
    """Serve one script asset.

    Raises:
        NotFound: No scripts directory, no such file, or a name that
            escapes the directory.
    """
    if directory is None or not name:
        raise NotFound()
    root = Path(directory).resolve()
    target = (root / name).resolve()
    if not target.is_relative_to(root) or target.suffix != ".js" or not target.is_file():
        raise NotFound()

    body = await anyio.Path(target).read_bytes()
    return Response(body=body, content_type=_JS_CONTENT_TYPE).with_header(
        "Cache-Control", cache_control
    )
