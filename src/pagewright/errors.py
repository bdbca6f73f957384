"""Pagewright exception hierarchy.

Shared across the resolver, composer, middleware runner and request
handler so every module raises and catches the same types.
"""

from dataclasses import dataclass
from pathlib import Path


class PagewrightError(Exception):
    """Base for all pagewright-specific errors."""


class ConfigurationError(PagewrightError):
    """Raised when app configuration is invalid.

    Typically raised while registering bridge functions or variables,
    or during ``App._freeze()`` at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(PagewrightError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no content file matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — the endpoint exists but not for this HTTP method."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class FileAccessError(PagewrightError):
    """A file in the content tree could not be read or loaded."""

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = Path(path)
        self.reason = reason
        message = f"{self.path}: {reason}" if reason else str(self.path)
        super().__init__(message)


class LayoutReadError(FileAccessError):
    """A layout vanished or became unreadable between discovery and read."""


class ContentReadError(FileAccessError):
    """The matched content file vanished or is unreadable at render time."""


class MiddlewareLoadError(FileAccessError):
    """A middleware module could not be executed or exports no callable."""
