"""Tests for pagewright.http — headers, query params, requests and responses."""

import json

import pytest

from pagewright.http.headers import Headers
from pagewright.http.query import QueryParams
from pagewright.http.request import Request
from pagewright.http.response import Response, ResponseWriter, json_response


def _h(*pairs: tuple[str, str]) -> Headers:
    """Shorthand: build Headers from string pairs."""
    raw = tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs)
    return Headers(raw)


def _make_scope(**overrides: object) -> dict[str, object]:
    """Build a minimal valid ASGI HTTP scope."""
    base: dict[str, object] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/",
        "raw_path": b"/",
        "query_string": b"",
        "root_path": "",
        "headers": [],
        "server": ("localhost", 8000),
        "client": ("127.0.0.1", 54321),
    }
    base.update(overrides)
    return base


def _make_receive(*bodies: bytes):
    """Create an ASGI receive callable that yields bodies."""
    messages = []
    for i, body in enumerate(bodies):
        is_last = i == len(bodies) - 1
        messages.append({"type": "http.request", "body": body, "more_body": not is_last})
    if not messages:
        messages.append({"type": "http.request", "body": b"", "more_body": False})
    it = iter(messages)

    async def receive():
        return next(it)

    return receive


class TestHeaders:
    def test_case_insensitive(self) -> None:
        h = _h(("Content-Type", "text/html"))
        assert h["content-type"] == "text/html"
        assert h["CONTENT-TYPE"] == "text/html"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            _h(("Accept", "*/*"))["X-Missing"]

    def test_contains(self) -> None:
        h = _h(("Accept", "*/*"))
        assert "accept" in h
        assert "x-missing" not in h
        assert 42 not in h  # type: ignore[operator]

    def test_iter_yields_unique_lowercase_keys(self) -> None:
        h = _h(("Accept", "*/*"), ("Content-Type", "text/html"), ("Accept", "text/xml"))
        assert list(h) == ["accept", "content-type"]
        assert len(h) == 2

    def test_get_and_get_list(self) -> None:
        h = _h(("X-Tag", "a"), ("X-Tag", "b"))
        assert h.get("x-tag") == "a"
        assert h.get("x-missing", "fallback") == "fallback"
        assert h.get_list("X-Tag") == ["a", "b"]
        assert h.get_list("X-Missing") == []


class TestQueryParams:
    def test_getitem_and_get(self) -> None:
        q = QueryParams(b"q=hello&page=2")
        assert q["q"] == "hello"
        assert q.get("page") == "2"
        assert q.get("missing") is None

    def test_get_list(self) -> None:
        q = QueryParams(b"tag=python&tag=rust")
        assert q.get_list("tag") == ["python", "rust"]
        assert q.get_list("missing") == []

    def test_blank_value_preserved(self) -> None:
        assert QueryParams(b"flag=")["flag"] == ""

    def test_raw(self) -> None:
        assert QueryParams(b"a=1").raw == b"a=1"


class TestRequest:
    def test_basic_fields(self) -> None:
        scope = _make_scope(method="POST", path="/users", query_string=b"draft=1")
        req = Request.from_asgi(scope, _make_receive(), request_id="req_abc")

        assert req.method == "POST"
        assert req.path == "/users"
        assert req.query["draft"] == "1"
        assert req.url == "/users?draft=1"
        assert req.server == ("localhost", 8000)
        assert req.client == ("127.0.0.1", 54321)
        assert req.request_id == "req_abc"

    def test_raw_path_keeps_percent_encoding(self) -> None:
        scope = _make_scope(path="/blog/a/b c", raw_path=b"/blog/a%2Fb%20c")
        req = Request.from_asgi(scope, _make_receive())
        assert req.path == "/blog/a/b c"
        assert req.raw_path == "/blog/a%2Fb%20c"

    def test_raw_path_drops_query(self) -> None:
        scope = _make_scope(path="/x", raw_path=b"/x?y=1", query_string=b"y=1")
        assert Request.from_asgi(scope, _make_receive()).raw_path == "/x"

    def test_raw_path_falls_back_to_path(self) -> None:
        scope = _make_scope(path="/plain")
        del scope["raw_path"]
        assert Request.from_asgi(scope, _make_receive()).raw_path == "/plain"

    def test_path_params(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(), path_params={"id": "42"})
        assert req.path_params == {"id": "42"}

    def test_path_params_default_empty(self) -> None:
        assert Request.from_asgi(_make_scope(), _make_receive()).path_params == {}

    def test_frozen(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive())
        with pytest.raises(AttributeError):
            req.path = "/other"  # type: ignore[misc]

    def test_content_type(self) -> None:
        scope = _make_scope(headers=[(b"content-type", b"application/json")])
        assert Request.from_asgi(scope, _make_receive()).content_type == "application/json"

    async def test_body_chunks_joined_and_cached(self) -> None:
        req = Request.from_asgi(_make_scope(method="POST"), _make_receive(b"[1, ", b"2]"))
        assert await req.body() == b"[1, 2]"
        assert await req.body() == b"[1, 2]"
        assert await req.json() == [1, 2]
        assert await req.text() == "[1, 2]"

    async def test_no_receive_means_empty_body(self) -> None:
        req = Request.from_asgi(_make_scope(), None)
        assert await req.body() == b""


class TestResponse:
    def test_defaults(self) -> None:
        r = Response("hi")
        assert r.status == 200
        assert r.content_type == "text/html; charset=utf-8"
        assert r.body_bytes == b"hi"

    def test_chaining_returns_new_objects(self) -> None:
        base = Response("hi")
        changed = base.with_status(201).with_header("X-A", "1").with_headers({"X-B": "2"})
        assert base.status == 200
        assert base.headers == ()
        assert changed.status == 201
        assert changed.headers == (("X-A", "1"), ("X-B", "2"))

    def test_header_lookup(self) -> None:
        r = Response("hi").with_header("X-Request-ID", "req_1")
        assert r.header("x-request-id") == "req_1"
        assert r.header("content-type") == "text/html; charset=utf-8"
        assert r.header("x-missing") is None

    def test_bytes_body_text(self) -> None:
        assert Response(b"caf\xc3\xa9").text == "café"

    def test_json_response(self) -> None:
        r = json_response({"error": "nope"}, status=404)
        assert r.status == 404
        assert r.content_type == "application/json"
        assert json.loads(r.text) == {"error": "nope"}


class TestResponseWriter:
    def test_fresh_writer(self) -> None:
        w = ResponseWriter()
        assert not w.headers_sent
        assert w.response is None
        assert w.status_code == 200
        assert w.headers == ()

    def test_send(self) -> None:
        w = ResponseWriter()
        sent = w.status(401).set_header("WWW-Authenticate", "Bearer").send("Unauthorized")
        assert w.headers_sent
        assert w.response is sent
        assert sent.status == 401
        assert sent.text == "Unauthorized"
        assert sent.header("www-authenticate") == "Bearer"

    def test_second_send_raises(self) -> None:
        w = ResponseWriter()
        w.send("one")
        with pytest.raises(RuntimeError, match="already been sent"):
            w.send("two")

    def test_set_header_replaces(self) -> None:
        w = ResponseWriter()
        w.set_header("X-A", "1").set_header("x-a", "2")
        assert w.headers == (("x-a", "2"),)

    def test_content_type_header(self) -> None:
        w = ResponseWriter()
        w.set_header("Content-Type", "text/plain")
        assert w.content_type == "text/plain"
        assert w.headers == ()

    def test_json(self) -> None:
        w = ResponseWriter()
        sent = w.json({"ok": True})
        assert sent.content_type == "application/json"
        assert json.loads(sent.text) == {"ok": True}

    def test_redirect(self) -> None:
        w = ResponseWriter()
        sent = w.redirect("/login")
        assert sent.status == 302
        assert sent.header("Location") == "/login"
