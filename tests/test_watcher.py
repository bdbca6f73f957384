"""Tests for pagewright.pages.watcher — cache invalidation on file changes."""

from pathlib import Path

from watchfiles import Change

from pagewright.pages.cache import CacheStore
from pagewright.pages.compose import load_layouts, read_file
from pagewright.pages.resolve import RouteResolver
from pagewright.pages.types import ChangeEvent, ChangeKind
from pagewright.pages.watcher import ContentWatcher, apply_change, is_dotfile, to_change_event


def _change(path: Path) -> ChangeEvent:
    return ChangeEvent(ChangeKind.CHANGE, path)


class TestLayoutChanges:
    async def test_layout_change_clears_routes_and_layout_body(
        self, pages: Path, store: CacheStore
    ) -> None:
        resolver = RouteResolver(pages, store)
        before = resolver.resolve("/blog/post-1")
        resolver.resolve("/about")
        layout = pages / "blog" / "_layout.html"
        await load_layouts(list(before.layouts), store)
        assert store.layouts.has(str(layout))

        result = apply_change(_change(layout), store)

        assert result.layout
        assert result.routes_cleared
        assert result.routes == 2
        assert not store.layouts.has(str(layout))
        assert store.layouts.has(str(pages / "_layout.html"))
        after = resolver.resolve("/blog/post-1")
        assert after is not before
        assert after == before

    async def test_new_layout_is_picked_up(self, pages: Path, store: CacheStore) -> None:
        resolver = RouteResolver(pages, store)
        assert resolver.resolve("/about").layouts == (pages / "_layout.html",)
        layout = pages / "users" / "_layout.html"
        layout.write_text("<div><%content%></div>")
        assert resolver.resolve("/users/42").layouts == (pages / "_layout.html", layout)
        resolver.resolve("/users/7")
        apply_change(ChangeEvent(ChangeKind.ADD, layout), store)
        assert len(store.routes) == 0


class TestMiddlewareChanges:
    def test_middleware_change_evicts_module_and_routes(
        self, pages: Path, store: CacheStore
    ) -> None:
        module = pages / "_middleware.py"
        store.middleware.set(str(module), lambda request, response: None)
        RouteResolver(pages, store).resolve("/about")

        result = apply_change(_change(module), store)

        assert result.middleware
        assert result.routes_cleared
        assert not store.middleware.has(str(module))
        assert len(store.routes) == 0

    def test_new_middleware_is_discovered(self, pages: Path, store: CacheStore) -> None:
        resolver = RouteResolver(pages, store)
        assert resolver.resolve("/about").middlewares == ()
        module = pages / "_middleware.py"
        module.write_text("def middleware(request, response):\n    pass\n")
        apply_change(ChangeEvent(ChangeKind.ADD, module), store)
        assert resolver.resolve("/about").middlewares == (module,)


class TestContentChanges:
    async def test_change_evicts_file_and_matching_routes_only(
        self, pages: Path, store: CacheStore
    ) -> None:
        resolver = RouteResolver(pages, store)
        post = resolver.resolve("/blog/post-1")
        resolver.resolve("/blog/post-2")
        about = resolver.resolve("/about")
        slug_file = pages / "blog" / "[slug].html"
        assert await read_file(slug_file, store.files) == "<article>{slug}</article>"

        slug_file.write_text("<article>v2 {slug}</article>")
        result = apply_change(_change(slug_file), store)

        assert result.file
        assert result.routes == 2
        assert not result.routes_cleared
        assert resolver.resolve("/about") is about
        assert resolver.resolve("/blog/post-1") is not post
        assert await read_file(slug_file, store.files) == "<article>v2 {slug}</article>"

    def test_add_clears_all_routes(self, pages: Path, store: CacheStore) -> None:
        resolver = RouteResolver(pages, store)
        assert resolver.resolve("/blog/post-1").matched_file == pages / "blog" / "[slug].html"
        static = pages / "blog" / "post-1.html"
        static.write_text("<p>static</p>")

        result = apply_change(ChangeEvent(ChangeKind.ADD, static), store)

        assert result.routes_cleared
        assert resolver.resolve("/blog/post-1").matched_file == static

    def test_unlink_clears_all_routes(self, pages: Path, store: CacheStore) -> None:
        resolver = RouteResolver(pages, store)
        resolver.resolve("/about")
        resolver.resolve("/contact")
        about = pages / "about.html"
        store.files.set(str(about), "<p>About</p>")
        about.unlink()

        result = apply_change(ChangeEvent(ChangeKind.UNLINK, about), store)

        assert result.file
        assert result.routes == 2
        assert not resolver.resolve("/about").found

    def test_unrelated_files_are_ignored(self, pages: Path, store: CacheStore) -> None:
        RouteResolver(pages, store).resolve("/about")
        store.files.set(str(pages / "notes.txt"), "x")
        result = apply_change(_change(pages / "notes.txt"), store)
        assert not result.changed
        assert len(store.routes) == 1
        assert store.files.has(str(pages / "notes.txt"))

    def test_uncached_change_reports_nothing(self, pages: Path, store: CacheStore) -> None:
        result = apply_change(_change(pages / "about.html"), store)
        assert not result.changed
        assert not result.routes_cleared

    def test_custom_file_names(self, pages: Path, store: CacheStore) -> None:
        layout = pages / "layout.tpl"
        store.layouts.set(str(layout), "<%content%>")
        result = apply_change(_change(layout), store, layout_name="layout.tpl")
        assert result.layout


class TestEventTranslation:
    def test_watchfiles_changes(self) -> None:
        assert to_change_event(Change.added, "/p/a.html") == ChangeEvent(
            ChangeKind.ADD, Path("/p/a.html")
        )
        assert to_change_event(Change.modified, "/p/a.html") == ChangeEvent(
            ChangeKind.CHANGE, Path("/p/a.html")
        )
        assert to_change_event(Change.deleted, "/p/a.html") == ChangeEvent(
            ChangeKind.UNLINK, Path("/p/a.html")
        )

    def test_dotfiles(self) -> None:
        root = Path("/srv/pages")
        assert is_dotfile("/srv/pages/.hidden.html", root)
        assert is_dotfile("/srv/pages/.git/config", root)
        assert not is_dotfile("/srv/pages/blog/post.html", root)

    def test_dotted_parent_of_root_is_not_hidden(self) -> None:
        root = Path("/home/me/.sites/pages")
        assert not is_dotfile("/home/me/.sites/pages/index.html", root)


class TestContentWatcher:
    def test_handle_applies_change(self, pages: Path, store: CacheStore) -> None:
        RouteResolver(pages, store).resolve("/about")
        watcher = ContentWatcher(pages, store)
        result = watcher.handle(_change(pages / "_layout.html"))
        assert result.routes_cleared
        assert len(store.routes) == 0

    async def test_start_and_stop(self, pages: Path, store: CacheStore) -> None:
        watcher = ContentWatcher(pages, store)
        assert not watcher.running
        watcher.start()
        assert watcher.running
        watcher.start()
        await watcher.stop()
        assert not watcher.running
        await watcher.stop()
