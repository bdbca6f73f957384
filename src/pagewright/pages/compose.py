"""Page composition: layout nesting, parameter substitution, client bridge.

``compose()`` is a pure function: the same content, layout bodies,
params and bridge state always produce byte-identical output. Reading
files happens beforehand, in ``read_file()`` and ``load_layouts()``,
through the file and layout caches.

Conventions::

    <%content%>   where a layout places the content it wraps
    {name}        replaced by the value of path parameter ``name``

Each piece of text (the page itself and each layout's own markup) gets
exactly one substitution pass. Substituted values are never rescanned.
"""

import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import anyio

from pagewright.bridge.registry import FunctionSpec
from pagewright.errors import ContentReadError, LayoutReadError
from pagewright.pages.cache import Cache, CacheStore, cache_key

logger = logging.getLogger("pagewright.pages")

CONTENT_TOKEN = "<%content%>"

_PARAM_TOKEN_RE = re.compile(r"\{([^{}\s]+)\}")


@dataclass(frozen=True, slots=True)
class BridgeState:
    """Everything the injected client scripts need for one page.

    Attributes:
        route: The raw request path.
        http_url: Base URL for client calls ("" = same origin).
        tcp_url: Socket URL exposed to the client runtime.
        invoke_path: Path prefix of the invocation endpoint.
        scripts: URLs of client script assets, in load order.
        functions: Registered functions, in registration order.
        variables: Registered variables (JSON-serialisable values).
    """

    route: str = "/"
    http_url: str = ""
    tcp_url: str = ""
    invoke_path: str = "/__pagewright__/invoke"
    scripts: tuple[str, ...] = ()
    functions: tuple[FunctionSpec, ...] = ()
    variables: Mapping[str, Any] = field(default_factory=dict)


# -- Substitution --


def substitute_params(text: str, params: Mapping[str, str]) -> str:
    """Replace ``{name}`` tokens whose name is a key of *params*.

    Unknown tokens are left verbatim. One left-to-right pass: a value
    that itself contains ``{other}`` is inserted literally.
    """
    if not params:
        return text

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in params:
            return str(params[name])
        return match.group(0)

    return _PARAM_TOKEN_RE.sub(replace, text)


def apply_layout(layout: str, content: str, params: Mapping[str, str]) -> str:
    """Wrap *content* in one layout body.

    The layout's own markup is substituted; *content* is inserted as-is
    at the first ``<%content%>``. A layout without the token yields its
    own body and the content is dropped.
    """
    before, token, after = layout.partition(CONTENT_TOKEN)
    if not token:
        return substitute_params(layout, params)
    return substitute_params(before, params) + content + substitute_params(after, params)


def apply_layouts(content: str, layouts: Sequence[str], params: Mapping[str, str]) -> str:
    """Substitute *content*, then nest it in *layouts* (outermost first)."""
    result = substitute_params(content, params)
    for layout in reversed(layouts):
        result = apply_layout(layout, result, params)
    return result


# -- Client bridge --


def to_js(value: Any) -> str:
    """Serialise *value* as JSON that is safe inside a ``<script>`` element."""
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


def render_state_block(params: Mapping[str, str], bridge: BridgeState) -> str:
    """The script block exposing params, route and connection config."""
    return (
        "<script>\n"
        f"  window.__params = {to_js(dict(params))};\n"
        f"  window.__route = {to_js(bridge.route)};\n"
        "  window.pagewright = {\n"
        f"    httpUrl: {to_js(bridge.http_url)},\n"
        f"    tcpUrl: {to_js(bridge.tcp_url)},\n"
        "    fn: {},\n"
        "    vars: {},\n"
        "  };\n"
        "</script>"
    )


def render_script_tags(scripts: Sequence[str]) -> str:
    return "\n".join(f'<script src="{src}"></script>' for src in scripts)


def render_function_proxies(bridge: BridgeState) -> str:
    """One async proxy per registered function.

    Each proxy POSTs its arguments as a JSON array to the invocation
    endpoint, resolves with ``result`` and rejects with ``error`` when
    the response status is not 2xx.
    """
    if not bridge.functions:
        return ""
    lines = ["<script>"]
    for fn in bridge.functions:
        url = to_js(f"{bridge.http_url}{bridge.invoke_path}/{fn.name}")
        lines.append(
            f"  window.pagewright.fn.{fn.name} = async function(...args) {{\n"
            f"    const res = await fetch({url}, {{\n"
            '      method: "POST",\n'
            '      headers: { "Content-Type": "application/json" },\n'
            "      body: JSON.stringify(args),\n"
            "    });\n"
            "    const data = await res.json();\n"
            "    if (!res.ok) {\n"
            "      throw new Error(data.error);\n"
            "    }\n"
            "    return data.result;\n"
            "  };"
        )
    lines.append("</script>")
    return "\n".join(lines)


def render_variables(bridge: BridgeState) -> str:
    if not bridge.variables:
        return ""
    lines = ["<script>"]
    for name, value in bridge.variables.items():
        lines.append(f"  window.pagewright.vars[{to_js(name)}] = {to_js(value)};")
    lines.append("</script>")
    return "\n".join(lines)


def compose(
    content: str,
    layouts: Sequence[str],
    params: Mapping[str, str],
    bridge: BridgeState,
) -> str:
    """Build the final document for one page.

    Args:
        content: Raw text of the matched content file.
        layouts: Layout bodies, outermost (shallowest) first.
        params: Path parameters of the match.
        bridge: Client bridge state for the injected scripts.
    """
    blocks = [
        render_state_block(params, bridge),
        render_script_tags(bridge.scripts),
        render_function_proxies(bridge),
        render_variables(bridge),
        apply_layouts(content, layouts, params),
    ]
    return "\n".join(block for block in blocks if block)


# -- Cached reads --


async def read_file(path: Path, cache: Cache[str]) -> str:
    """Return the text of *path* through *cache*, reading it on a miss.

    Raises:
        ContentReadError: The file is missing or unreadable.
    """
    key = cache_key(path)
    cached = cache.get(key)
    if cached is not None:
        return cached
    try:
        text = await anyio.Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentReadError(path, str(exc)) from exc
    return cache.set(key, text)


async def load_layouts(paths: Sequence[Path], store: CacheStore) -> list[str]:
    """Read layout bodies through the layout cache, in order.

    A layout that cannot be read is logged and left out; the remaining
    layouts still apply.
    """
    bodies: list[str] = []
    for path in paths:
        try:
            bodies.append(await _read_layout(path, store))
        except LayoutReadError as exc:
            logger.error("Skipping layout %s: %s", exc.path, exc.reason)
    return bodies


async def _read_layout(path: Path, store: CacheStore) -> str:
    key = cache_key(path)
    cached = store.layouts.get(key)
    if cached is not None:
        return cached
    try:
        text = await anyio.Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LayoutReadError(path, str(exc)) from exc
    return store.layouts.set(key, text)
