"""URL path to content file resolution.

Walks the content tree one segment at a time to find the file serving a
request path, then collects the layouts and middleware that wrap it.

Matching rules, evaluated independently at every directory level:

1. ``segment.html`` / ``segment.htm`` when the segment is the last one
2. an exact-name subdirectory
3. a dynamic ``[name]`` subdirectory, binding ``params[name]``
4. a dynamic ``[name].html`` file when the segment is the last one
5. a ``(group)`` subdirectory, which consumes no segment

The first success wins. ``find_page`` is a pure function over a
directory-listing callable so it can be tested against an in-memory
tree; ``RouteResolver`` wraps it with the route cache.
"""

import logging
import os
import time
from collections.abc import Callable, Sequence
from pathlib import Path

import anyio

from pagewright.pages.cache import CacheStore
from pagewright.pages.types import DirectoryEntries, PageLocation, RouteMatch

logger = logging.getLogger("pagewright.pages")

ListDir = Callable[[Path], DirectoryEntries]

_CONTENT_SUFFIXES = (".html", ".htm")
_INDEX_FILES = ("index.html", "index.htm")


def list_directory(directory: Path) -> DirectoryEntries:
    """Read one directory from disk.

    Dotfiles are skipped. A missing or unreadable directory lists as
    empty, which the search treats as "no match here".
    """
    files: set[str] = set()
    dirs: list[str] = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                if entry.name.startswith("."):
                    continue
                if entry.is_dir():
                    dirs.append(entry.name)
                elif entry.is_file():
                    files.add(entry.name)
    except OSError:
        return DirectoryEntries()
    return DirectoryEntries(files=frozenset(files), dirs=tuple(sorted(dirs)))


def split_path(request_path: str) -> list[str]:
    """Split a request path into its non-empty segments.

    The query string is dropped. Segments are returned as-is, without
    decoding.
    """
    path = request_path.split("?", 1)[0]
    return [part for part in path.split("/") if part]


def normalize_path(request_path: str) -> str:
    """Route cache key for *request_path*: ``/a/b`` for ``a//b/?x=1``."""
    return "/" + "/".join(split_path(request_path))


def is_dynamic(name: str) -> bool:
    return len(name) > 2 and name.startswith("[") and name.endswith("]")


def is_group(name: str) -> bool:
    return len(name) > 2 and name.startswith("(") and name.endswith(")")


def _is_hidden(name: str) -> bool:
    return name.startswith(("_", "."))


def _dynamic_file_param(name: str) -> str | None:
    """``[slug].html`` -> ``slug``; anything else -> ``None``."""
    for suffix in _CONTENT_SUFFIXES:
        if name.endswith(suffix):
            stem = name[: -len(suffix)]
            if is_dynamic(stem):
                return stem[1:-1]
    return None


def _bind(params: dict[str, str], name: str, value: str) -> dict[str, str]:
    # Copy so sibling branches never see each other's bindings; an
    # existing key keeps its first-occurrence position.
    bound = dict(params)
    bound[name] = value
    return bound


def find_page(
    root: Path,
    segments: Sequence[str],
    list_dir: ListDir = list_directory,
) -> PageLocation | None:
    """Search the content tree under *root* for *segments*.

    Returns the matched file with every directory walked to reach it
    (route groups included), or ``None`` when nothing matches.
    """
    return _search(root, tuple(segments), list_dir, (root,), {})


def _search(
    directory: Path,
    segments: tuple[str, ...],
    list_dir: ListDir,
    trail: tuple[Path, ...],
    params: dict[str, str],
) -> PageLocation | None:
    entries = list_dir(directory)

    if not segments:
        return _find_index(directory, entries, list_dir, trail, params)

    segment, rest = segments[0], segments[1:]
    is_last = not rest
    visible = not _is_hidden(segment)

    if is_last and visible:
        for suffix in _CONTENT_SUFFIXES:
            if segment + suffix in entries.files:
                return PageLocation(directory / (segment + suffix), trail, params)

    if visible and segment in entries.dirs:
        child = directory / segment
        found = _search(child, rest, list_dir, (*trail, child), params)
        if found is not None:
            return found

    for name in entries.dirs:
        if is_dynamic(name):
            child = directory / name
            bound = _bind(params, name[1:-1], segment)
            found = _search(child, rest, list_dir, (*trail, child), bound)
            if found is not None:
                return found

    if is_last:
        for name in sorted(entries.files):
            param = _dynamic_file_param(name)
            if param is not None:
                return PageLocation(directory / name, trail, _bind(params, param, segment))

    for name in entries.dirs:
        if is_group(name):
            child = directory / name
            found = _search(child, segments, list_dir, (*trail, child), params)
            if found is not None:
                return found

    return None


def _find_index(
    directory: Path,
    entries: DirectoryEntries,
    list_dir: ListDir,
    trail: tuple[Path, ...],
    params: dict[str, str],
) -> PageLocation | None:
    for index in _INDEX_FILES:
        if index in entries.files:
            return PageLocation(directory / index, trail, params)

    # One level into route groups only.
    for name in entries.dirs:
        if is_group(name):
            child = directory / name
            child_entries = list_dir(child)
            for index in _INDEX_FILES:
                if index in child_entries.files:
                    return PageLocation(child / index, (*trail, child), params)
    return None


def build_route_match(
    location: PageLocation,
    root: Path,
    *,
    layout_name: str = "_layout.html",
    middleware_name: str = "_middleware.py",
    list_dir: ListDir = list_directory,
) -> RouteMatch:
    """Collect layouts and middleware along the path to a matched file.

    Both sequences are ordered by depth below *root*, shallowest first.
    """
    layouts: list[Path] = []
    middlewares: list[Path] = []
    for directory in location.directories:
        files = list_dir(directory).files
        if layout_name in files:
            layouts.append(directory / layout_name)
        if middleware_name in files:
            middlewares.append(directory / middleware_name)

    def depth(path: Path) -> int:
        return len(path.parent.relative_to(root).parts)

    return RouteMatch(
        matched_file=location.file,
        layouts=tuple(sorted(layouts, key=depth)),
        middlewares=tuple(sorted(middlewares, key=depth)),
        params=dict(location.params),
    )


def resolve_path(
    root: Path,
    request_path: str,
    *,
    layout_name: str = "_layout.html",
    middleware_name: str = "_middleware.py",
    list_dir: ListDir = list_directory,
) -> RouteMatch:
    """Resolve *request_path* without touching any cache.

    A path that does not match yields an empty ``RouteMatch``: no file,
    and none of the layouts or middleware seen on the way.
    """
    location = find_page(root, split_path(request_path), list_dir)
    if location is None:
        return RouteMatch()
    return build_route_match(
        location,
        root,
        layout_name=layout_name,
        middleware_name=middleware_name,
        list_dir=list_dir,
    )


class RouteResolver:
    """Cache-backed resolver for one content root.

    Usage::

        resolver = RouteResolver(Path("pages").resolve(), CacheStore())
        match = resolver.resolve("/blog/hello-world")
        match.matched_file   # .../pages/blog/[slug].html
        match.params         # {"slug": "hello-world"}

    With ``verify=True`` (development), a cached match whose file has
    disappeared is dropped and resolved again. Otherwise cached matches
    are trusted for the life of the process.
    """

    __slots__ = ("_list_dir", "layout_name", "middleware_name", "root", "store", "verify")

    def __init__(
        self,
        root: Path,
        store: CacheStore,
        *,
        layout_name: str = "_layout.html",
        middleware_name: str = "_middleware.py",
        verify: bool = False,
        list_dir: ListDir = list_directory,
    ) -> None:
        self.root = root
        self.store = store
        self.layout_name = layout_name
        self.middleware_name = middleware_name
        self.verify = verify
        self._list_dir = list_dir

    def resolve(self, request_path: str) -> RouteMatch:
        """Return the ``RouteMatch`` for *request_path*, cached when found."""
        key = normalize_path(request_path)
        cached = self.store.routes.get(key)
        if cached is not None:
            if not self.verify or (cached.matched_file is not None and cached.matched_file.is_file()):
                logger.debug("Route cache hit: %s", key)
                return cached
            logger.debug("Dropping stale route cache entry: %s", key)
            self.store.routes.invalidate(key)

        start = time.perf_counter()
        match = resolve_path(
            self.root,
            key,
            layout_name=self.layout_name,
            middleware_name=self.middleware_name,
            list_dir=self._list_dir,
        )
        elapsed = (time.perf_counter() - start) * 1000
        if match.found:
            self.store.routes.set(key, match)
            logger.debug(
                "Resolved %s -> %s (%d layouts, %d middleware) in %.2fms",
                key,
                match.matched_file,
                len(match.layouts),
                len(match.middlewares),
                elapsed,
            )
        else:
            logger.debug("No page for %s (%.2fms)", key, elapsed)
        return match

    async def resolve_async(self, request_path: str) -> RouteMatch:
        """Like ``resolve``, with directory scans run in a worker thread.

        A cache hit that needs no file check is answered on the event
        loop.
        """
        if not self.verify:
            cached = self.store.routes.get(normalize_path(request_path))
            if cached is not None:
                return cached
        return await anyio.to_thread.run_sync(self.resolve, request_path)
