"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=8080, pages_dir="site/pages")

    ``debug=True`` is development mode: the content watcher runs, route
    cache hits are re-checked against the filesystem, and pages are
    served with ``Cache-Control: no-cache``.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = (".html", ".htm")
    reload_dirs: tuple[str, ...] = ()

    # Content tree
    pages_dir: str | Path = "pages"
    layout_name: str = "_layout.html"
    middleware_name: str = "_middleware.py"
    not_found_page: str = "404.html"

    # Watch the content tree and invalidate caches (debug only)
    watch: bool = True

    # Client bridge
    http_url: str = ""  # Base URL for client calls; "" means same origin
    tcp_url: str = ""
    invoke_path: str = "/__pagewright__/invoke"
    scripts_path: str = "/__pagewright__/scripts"
    scripts_dir: str | Path | None = None

    # Response caching headers for rendered pages
    cache_control_production: str = "public, max-age=3600"
    cache_control_development: str = "no-cache"

    # Production
    workers: int = 0  # 0 = auto-detect from CPU count
    log_level: str = "info"
    log_format: str = "text"

    @property
    def cache_control(self) -> str:
        """The ``Cache-Control`` value for rendered pages in this mode."""
        if self.debug:
            return self.cache_control_development
        return self.cache_control_production
