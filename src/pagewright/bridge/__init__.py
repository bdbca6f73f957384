"""Client bridge: exposed server functions and variables.

Pages get a proxy per exposed function that calls the invocation
endpoint, plus a JSON assignment per exposed variable::

    @app.expose
    def add(a, b):
        return a + b

    // in the browser
    await pagewright.fn.add(1, 2)   // 3
"""

from pagewright.bridge.registry import ExposedFunction, FunctionRegistry, FunctionSpec

__all__ = [
    "ExposedFunction",
    "FunctionRegistry",
    "FunctionSpec",
]
