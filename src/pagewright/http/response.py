"""HTTP responses.

``Response`` is the immutable value the server sends, built through a
chainable ``.with_*()`` API. ``ResponseWriter`` is the mutable response
context handed to page middleware: it collects status and headers and
records the moment a response is committed, so the middleware chain can
stop as soon as one is sent.
"""

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> "Response":
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> "Response":
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def header(self, name: str) -> str | None:
        """Return the first value of header *name* (case-insensitive)."""
        if name.lower() == "content-type":
            return self.content_type
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None


def json_response(data: Any, status: int = 200) -> Response:
    """Build a JSON ``Response``."""
    return Response(
        body=json_module.dumps(data),
        status=status,
        content_type="application/json",
    )


class ResponseWriter:
    """Mutable response context for page middleware.

    Middleware receives ``(request, response)`` and may set headers, or
    commit a full response with ``send()``, ``json()`` or ``redirect()``.
    Once committed, ``headers_sent`` is true and further sends raise::

        def middleware(request, response):
            if request.headers.get("x-api-key") != "secret":
                response.status(401).send("Unauthorized")

    Headers set without sending are carried over onto the rendered page.
    """

    __slots__ = ("_content_type", "_headers", "_response", "_status")

    def __init__(self) -> None:
        self._status = 200
        self._content_type = "text/html; charset=utf-8"
        self._headers: list[tuple[str, str]] = []
        self._response: Response | None = None

    @property
    def headers_sent(self) -> bool:
        """True once a response has been committed."""
        return self._response is not None

    @property
    def response(self) -> Response | None:
        """The committed response, or ``None`` if nothing was sent."""
        return self._response

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        """Headers set so far."""
        return tuple(self._headers)

    @property
    def status_code(self) -> int:
        return self._status

    @property
    def content_type(self) -> str:
        return self._content_type

    def status(self, code: int) -> "ResponseWriter":
        """Set the status code. Chainable."""
        self._status = code
        return self

    def set_header(self, name: str, value: str) -> "ResponseWriter":
        """Set a header, replacing an earlier value with the same name."""
        if name.lower() == "content-type":
            self._content_type = value
            return self
        self._headers = [(k, v) for k, v in self._headers if k.lower() != name.lower()]
        self._headers.append((name, value))
        return self

    def send(self, body: str | bytes = "") -> Response:
        """Commit the response with *body*."""
        if self._response is not None:
            msg = "A response has already been sent"
            raise RuntimeError(msg)
        self._response = Response(
            body=body,
            status=self._status,
            content_type=self._content_type,
            headers=tuple(self._headers),
        )
        return self._response

    def json(self, data: Any) -> Response:
        """Commit a JSON response."""
        self._content_type = "application/json"
        return self.send(json_module.dumps(data))

    def redirect(self, url: str, status: int = 302) -> Response:
        """Commit a redirect to *url*."""
        self._status = status
        self.set_header("Location", url)
        return self.send("")
