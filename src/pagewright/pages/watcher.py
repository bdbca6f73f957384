"""Cache invalidation on content tree changes.

``apply_change()`` maps one filesystem event onto the cache store and is
independent of any real watcher. ``ContentWatcher`` feeds it events from
``watchfiles`` while the app runs in development mode.

Policy:

- ``_layout.html``: drop its file and layout entries, clear all routes
- ``_middleware.py``: drop its middleware entry, clear all routes
- other ``.html`` / ``.htm``: drop its file entry; on change, drop only
  the routes that matched it; on add or unlink, clear all routes, since
  a new or removed file can change which file wins for a cached path
- anything else: ignored
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from pathlib import Path

from watchfiles import Change, awatch

from pagewright.pages.cache import CacheStore, cache_key
from pagewright.pages.types import ChangeEvent, ChangeKind

logger = logging.getLogger("pagewright.watcher")

_CONTENT_SUFFIXES = frozenset({".html", ".htm"})

_CHANGE_KINDS = {
    Change.added: ChangeKind.ADD,
    Change.modified: ChangeKind.CHANGE,
    Change.deleted: ChangeKind.UNLINK,
}


@dataclass(frozen=True, slots=True)
class Invalidation:
    """What one change event evicted.

    Attributes:
        file: The file-content entry was removed.
        layout: The layout-body entry was removed.
        middleware: The middleware entry was removed.
        routes: Number of route entries removed.
        routes_cleared: The whole route cache was cleared.
    """

    file: bool = False
    layout: bool = False
    middleware: bool = False
    routes: int = 0
    routes_cleared: bool = False

    @property
    def changed(self) -> bool:
        return self.file or self.layout or self.middleware or self.routes > 0


def apply_change(
    event: ChangeEvent,
    store: CacheStore,
    *,
    layout_name: str = "_layout.html",
    middleware_name: str = "_middleware.py",
) -> Invalidation:
    """Evict the cache entries made stale by *event*."""
    path = event.path
    key = cache_key(path)

    if path.name == layout_name:
        return Invalidation(
            file=store.files.invalidate(key),
            layout=store.layouts.invalidate(key),
            routes=store.routes.clear(),
            routes_cleared=True,
        )

    if path.name == middleware_name:
        return Invalidation(
            middleware=store.middleware.invalidate(key),
            routes=store.routes.clear(),
            routes_cleared=True,
        )

    if path.suffix not in _CONTENT_SUFFIXES:
        return Invalidation()

    file_removed = store.files.invalidate(key)
    if event.kind is ChangeKind.CHANGE:
        removed = store.routes.invalidate_where(lambda match: match.matched_file == path)
        return Invalidation(file=file_removed, routes=len(removed))
    return Invalidation(file=file_removed, routes=store.routes.clear(), routes_cleared=True)


def to_change_event(change: Change, path: str) -> ChangeEvent | None:
    """Translate one ``watchfiles`` change into a ``ChangeEvent``."""
    kind = _CHANGE_KINDS.get(change)
    if kind is None:
        return None
    return ChangeEvent(kind, Path(path))


def is_dotfile(path: str | Path, root: Path) -> bool:
    """Whether *path* or any directory between it and *root* is hidden."""
    try:
        parts = Path(path).relative_to(root).parts
    except ValueError:
        parts = Path(path).parts
    return any(part.startswith(".") for part in parts)


class ContentWatcher:
    """Watches the content tree and invalidates caches as files change.

    Runs as an asyncio task on the server's event loop::

        watcher = ContentWatcher(Path("pages").resolve(), store)
        watcher.start()
        ...
        await watcher.stop()
    """

    __slots__ = ("_stop_event", "_task", "layout_name", "middleware_name", "root", "store")

    def __init__(
        self,
        root: Path,
        store: CacheStore,
        *,
        layout_name: str = "_layout.html",
        middleware_name: str = "_middleware.py",
    ) -> None:
        self.root = root
        self.store = store
        self.layout_name = layout_name
        self.middleware_name = middleware_name
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def handle(self, event: ChangeEvent) -> Invalidation:
        """Apply one event to the store and log what it evicted."""
        result = apply_change(
            event,
            self.store,
            layout_name=self.layout_name,
            middleware_name=self.middleware_name,
        )
        if result.routes_cleared:
            logger.info(
                "%s %s: cleared route cache (%d entries)",
                event.kind.value,
                event.path,
                result.routes,
            )
        elif result.changed:
            logger.info(
                "%s %s: invalidated file entry, %d route entries",
                event.kind.value,
                event.path,
                result.routes,
            )
        return result

    def start(self) -> None:
        """Start watching. Must be called from a running event loop."""
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Watching %s for changes", self.root)

    async def stop(self) -> None:
        """Stop watching and wait for the task to finish."""
        if self._task is None:
            return
        if self._stop_event is not None:
            self._stop_event.set()
        task, self._task = self._task, None
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Stopped watching %s", self.root)

    async def _run(self) -> None:
        assert self._stop_event is not None

        def watch_filter(change: Change, path: str) -> bool:
            return not is_dotfile(path, self.root)

        async for changes in awatch(
            self.root,
            watch_filter=watch_filter,
            stop_event=self._stop_event,
        ):
            for change, raw_path in sorted(changes, key=lambda item: item[1]):
                event = to_change_event(change, raw_path)
                if event is not None:
                    self.handle(event)
