"""Pagewright application class.

Mutable during setup (exposed functions, variables, lifecycle hooks).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, overload

from pagewright._internal.asgi import Receive, Scope, Send
from pagewright.bridge.registry import FunctionRegistry
from pagewright.bridge.scripts import discover_scripts, script_urls
from pagewright.config import AppConfig
from pagewright.errors import ConfigurationError
from pagewright.middleware.runner import MiddlewareProvider, load_middleware
from pagewright.pages.cache import CacheStore
from pagewright.pages.render import PageRenderer
from pagewright.pages.watcher import ContentWatcher
from pagewright.server.handler import handle_request

logger = logging.getLogger("pagewright.server")


class App:
    """The pagewright application.

    Serves the pages directory named by ``config.pages_dir``::

        app = App(AppConfig(debug=True))

        @app.expose
        def greet(name):
            return f"Hello, {name}!"

        app.expose_variable("site_name", "My Site")
        app.run()

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the app, even under free-threading where
        multiple ASGI workers could call ``__call__()`` concurrently on
        first request. Each cache in the store guards itself.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_middleware_provider",
        "_registry",
        # Compiled state (populated by _freeze)
        "_renderer",
        "_shutdown_hooks",
        "_startup_hooks",
        "_store",
        "_watcher",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        store: CacheStore | None = None,
        middleware_provider: MiddlewareProvider | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._store: CacheStore = store or CacheStore()
        self._registry: FunctionRegistry = FunctionRegistry()
        self._middleware_provider: MiddlewareProvider = middleware_provider or load_middleware
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._renderer: PageRenderer | None = None
        self._watcher: ContentWatcher | None = None

    # -- Bridge registration --

    @overload
    def expose(self, func: Callable[..., Any], /) -> Callable[..., Any]: ...

    @overload
    def expose(
        self,
        *,
        name: str | None = None,
        args: Sequence[str] | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]: ...

    def expose(
        self,
        func: Callable[..., Any] | None = None,
        /,
        *,
        name: str | None = None,
        args: Sequence[str] | None = None,
    ) -> Any:
        """Expose a server function to every page's client bridge.

        Usable bare or with options::

            @app.expose
            def add(a, b):
                return a + b

            @app.expose(name="whoami")
            def current_user(request):
                return request.headers.get("x-user")

        A first parameter named ``request`` receives the calling
        request and is not counted as a client argument.
        """

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            self._registry.expose_function(name or fn.__name__, fn, args)
            return fn

        if func is not None:
            return decorator(func)
        return decorator

    def expose_variable(self, name: str, value: Any) -> None:
        """Expose a JSON-serialisable value as ``pagewright.vars[name]``."""
        self._registry.expose_variable(name, value)

    @property
    def registry(self) -> FunctionRegistry:
        return self._registry

    @property
    def store(self) -> CacheStore:
        """The app's cache store (routes, files, layouts, middleware)."""
        return self._store

    def clear_caches(self) -> dict[str, int]:
        """Empty every cache. Returns evicted counts per cache."""
        evicted = self._store.clear()
        logger.info("Cleared caches: %s", evicted)
        return evicted

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a startup hook (sync or async).

        Hooks run in registration order during ASGI lifespan startup,
        before the content watcher starts.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a shutdown hook (sync or async)."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the server (dev or production based on config.debug).

        - **Development mode** (debug=True): single worker, auto-reload,
          content watcher
        - **Production mode** (debug=False): multi-worker, caches trusted
          for the process lifetime
        """
        self._ensure_frozen()

        _host = host or self.config.host
        _port = port or self.config.port

        if self.config.debug:
            from pagewright.server.dev import run_dev_server

            run_dev_server(
                self,
                _host,
                _port,
                reload=True,
                reload_include=self.config.reload_include,
                reload_dirs=self.config.reload_dirs,
            )
        else:
            from pagewright.server.production import run_production_server

            run_production_server(
                self,
                host=_host,
                port=_port,
                workers=self.config.workers,
                log_format=self.config.log_format,
                log_level=self.config.log_level,
            )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._renderer is not None

        await handle_request(
            scope,
            receive,
            send,
            config=self.config,
            renderer=self._renderer,
            registry=self._registry,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), runs
        startup hooks, then starts the content watcher in development
        mode. Shutdown stops the watcher and runs shutdown hooks.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    self._start_watcher()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                if self._watcher is not None:
                    await self._watcher.stop()
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    def _start_watcher(self) -> None:
        if not (self.config.debug and self.config.watch):
            return
        assert self._renderer is not None
        self._watcher = ContentWatcher(
            self._renderer.root,
            self._store,
            layout_name=self.config.layout_name,
            middleware_name=self.config.middleware_name,
        )
        self._watcher.start()

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its runtime state.

        MUST only be called while holding _freeze_lock.
        """
        root = Path(self.config.pages_dir).resolve()
        if not root.is_dir():
            msg = f"Pages directory not found: {root}"
            raise ConfigurationError(msg)

        scripts = script_urls(discover_scripts(self.config.scripts_dir), self.config.scripts_path)
        self._renderer = PageRenderer(
            self.config,
            root,
            self._store,
            self._registry,
            provider=self._middleware_provider,
            scripts=scripts,
        )
        self._frozen = True
        logger.info(
            "Serving %s (%s mode, %d exposed functions)",
            root,
            "development" if self.config.debug else "production",
            len(self._registry),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register hooks before calling app.run()."
            )
            raise RuntimeError(msg)
