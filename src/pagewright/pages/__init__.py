"""Filesystem page routing with layout nesting and cached composition.

The ``pages/`` directory structure defines URL paths, layout nesting
and middleware scope.

Conventions::

    pages/
      _layout.html          # Root layout, wraps everything via <%content%>
      _middleware.py        # Runs before every page below it
      index.html            # GET /
      404.html              # Custom not-found page
      about.html            # GET /about
      (marketing)/          # Route group: consumes no URL segment
        pricing.html        # GET /pricing
      blog/
        _layout.html        # Nested layout
        [slug].html         # GET /blog/<anything>, params["slug"]
      users/
        [id]/
          index.html        # GET /users/<id>, {id} substituted
"""

from pagewright.pages.cache import Cache, CacheEntry, CacheStore
from pagewright.pages.compose import BridgeState, compose
from pagewright.pages.resolve import RouteResolver, find_page, resolve_path
from pagewright.pages.types import ChangeEvent, ChangeKind, RouteMatch
from pagewright.pages.watcher import ContentWatcher, apply_change

__all__ = [
    "BridgeState",
    "Cache",
    "CacheEntry",
    "CacheStore",
    "ChangeEvent",
    "ChangeKind",
    "ContentWatcher",
    "RouteMatch",
    "RouteResolver",
    "apply_change",
    "compose",
    "find_page",
    "resolve_path",
]
