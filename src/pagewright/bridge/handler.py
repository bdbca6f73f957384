"""Invocation endpoint for exposed bridge functions.

``POST {invoke_path}/{name}`` with a JSON array of positional arguments.

- 200 ``{"result": ...}``
- 400 ``{"error": "Invalid arguments"}``: wrong arity, or not a JSON array
- 404 ``{"error": "Function not found"}``
- 405 for any method but POST
- 500 ``{"error": "Failed to execute function"}``
"""

import json as json_module
import logging

from pagewright._internal.invoke import invoke
from pagewright.bridge.registry import FunctionRegistry
from pagewright.http.request import Request
from pagewright.http.response import Response, json_response

logger = logging.getLogger("pagewright.bridge")


async def handle_invoke(request: Request, name: str, registry: FunctionRegistry) -> Response:
    """Call the exposed function *name* with the request's JSON arguments."""
    if request.method != "POST":
        return json_response({"error": "Method not allowed"}, status=405).with_header(
            "Allow", "POST"
        )

    exposed = registry.get(name)
    if exposed is None:
        logger.warning("[%s] Unknown function %r", request.request_id, name)
        return json_response({"error": "Function not found"}, status=404)

    raw = await request.body()
    try:
        args = json_module.loads(raw) if raw.strip() else []
    except ValueError:
        return json_response({"error": "Invalid arguments"}, status=400)
    if not isinstance(args, list) or len(args) != len(exposed.arg_names):
        return json_response({"error": "Invalid arguments"}, status=400)

    try:
        if exposed.wants_request:
            result = await invoke(exposed.handler, request, *args)
        else:
            result = await invoke(exposed.handler, *args)
        response = json_response({"result": result})
    except Exception:
        logger.exception("[%s] Function %r failed", request.request_id, name)
        return json_response({"error": "Failed to execute function"}, status=500)

    logger.debug("[%s] Invoked %s(%d args)", request.request_id, name, len(args))
    return response
