"""Data models for filesystem-based page routing.

Immutable frozen dataclasses describing a directory listing, the result
of resolving a URL path, and a filesystem change notification.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DirectoryEntries:
    """The visible contents of one directory in the content tree.

    Dotfiles are never listed. Names are sorted so resolution is
    deterministic across platforms.
    """

    files: frozenset[str] = frozenset()
    dirs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PageLocation:
    """Raw result of the tree search, before layout discovery.

    Attributes:
        file: Absolute path of the matched content file.
        directories: Every directory walked from the content root down
            to the file's parent, route groups included, root first.
        params: Bracket-segment bindings in first-occurrence order.
    """

    file: Path
    directories: tuple[Path, ...]
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """The resolved outcome of a path lookup.

    Attributes:
        matched_file: Absolute path to the content file, or ``None``
            when nothing matched (the normal not-found outcome).
        layouts: Layout files, outermost (shallowest) first.
        middlewares: Middleware modules, root to leaf.
        params: Parameter name -> raw URL segment.
    """

    matched_file: Path | None = None
    layouts: tuple[Path, ...] = ()
    middlewares: tuple[Path, ...] = ()
    params: dict[str, str] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.matched_file is not None


class ChangeKind(Enum):
    """Kind of filesystem change notification."""

    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A single filesystem change in the content tree.

    Attributes:
        kind: What happened to the file.
        path: Absolute path of the affected file.
    """

    kind: ChangeKind
    path: Path
