"""Function and variable registry for the client bridge.

Application code exposes server functions and values; every rendered
page gets a client proxy per function and a JSON assignment per
variable, and the invocation endpoint dispatches calls by name.

Free-threading safety:
    - FunctionSpec and ExposedFunction are frozen dataclasses
    - registration happens during app setup; a lock guards the dicts so
      a late registration never races a page render
"""

import inspect
import json
import keyword
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from pagewright.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class FunctionSpec:
    """A registered function as seen by the client: name and argument names."""

    name: str
    arg_names: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ExposedFunction:
    """A registered function with its server-side handler.

    Attributes:
        name: Client-visible name, a valid identifier.
        handler: The sync or async callable to invoke.
        arg_names: Positional arguments the client must send.
        wants_request: Whether the handler's first parameter is
            ``request``, injected by the endpoint and not counted.
    """

    name: str
    handler: Callable[..., Any]
    arg_names: tuple[str, ...]
    wants_request: bool = False

    @property
    def spec(self) -> FunctionSpec:
        return FunctionSpec(self.name, self.arg_names)


_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _signature_args(fn: Callable[..., Any]) -> tuple[tuple[str, ...], bool]:
    """Positional parameter names of *fn*, minus a leading ``request``."""
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError):
        return (), False
    names = [p.name for p in params if p.kind in _POSITIONAL]
    if names and names[0] == "request":
        return tuple(names[1:]), True
    return tuple(names), False


def _check_name(name: str, kind: str) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        msg = f"Exposed {kind} name must be a valid identifier, got {name!r}"
        raise ConfigurationError(msg)


class FunctionRegistry:
    """Registered bridge functions and variables.

    Usage::

        registry = FunctionRegistry()
        registry.expose_function("add", lambda a, b: a + b)
        registry.expose_variable("site_name", "My Site")
        registry.list_functions()   # [FunctionSpec("add", ("a", "b"))]
        registry.list_variables()   # {"site_name": "My Site"}
    """

    __slots__ = ("_functions", "_lock", "_variables")

    def __init__(self) -> None:
        self._functions: dict[str, ExposedFunction] = {}
        self._variables: dict[str, Any] = {}
        self._lock = threading.Lock()

    def expose_function(
        self,
        name: str,
        fn: Callable[..., Any],
        args: Sequence[str] | None = None,
    ) -> ExposedFunction:
        """Register *fn* under *name*.

        Argument names are taken from the signature unless *args* is
        given. A first parameter named ``request`` receives the current
        request and is not part of the client-facing arity.

        Raises:
            ConfigurationError: *name* is not an identifier or *fn* is
                not callable.
        """
        _check_name(name, "function")
        if not callable(fn):
            msg = f"Exposed function {name!r} is not callable"
            raise ConfigurationError(msg)
        inferred, wants_request = _signature_args(fn)
        arg_names = tuple(args) if args is not None else inferred
        for arg in arg_names:
            _check_name(arg, "argument")
        exposed = ExposedFunction(name, fn, arg_names, wants_request)
        with self._lock:
            self._functions[name] = exposed
        return exposed

    def expose_variable(self, name: str, value: Any) -> None:
        """Register a JSON-serialisable *value* under *name*.

        Raises:
            ConfigurationError: *name* is not an identifier or *value*
                cannot be serialised.
        """
        _check_name(name, "variable")
        try:
            json.dumps(value)
        except (TypeError, ValueError) as exc:
            msg = f"Exposed variable {name!r} is not JSON-serialisable: {exc}"
            raise ConfigurationError(msg) from exc
        with self._lock:
            self._variables[name] = value

    def get(self, name: str) -> ExposedFunction | None:
        """Look up a function by name. Returns ``None`` if not registered."""
        with self._lock:
            return self._functions.get(name)

    def list_functions(self) -> list[FunctionSpec]:
        with self._lock:
            return [fn.spec for fn in self._functions.values()]

    def list_variables(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._variables)

    def clear(self) -> None:
        """Forget every registered function and variable."""
        with self._lock:
            self._functions.clear()
            self._variables.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._functions)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._functions
