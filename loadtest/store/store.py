"""Contract every real-time backing store implements."""

from dataclasses import dataclass
from typing import Any, Callable, Protocol


class StoreError(RuntimeError):
    """A backing-store call failed."""


@dataclass(frozen=True)
class Snapshot:
    """Value found at a path; ``None`` means nothing is stored there."""

    path: str
    value: Any

    @property
    def exists(self) -> bool:
        return self.value is not None


OnChange = Callable[[Snapshot], None]
Unsubscribe = Callable[[], None]


def normalize_path(path: str) -> str:
    """Strip surrounding and duplicate slashes; the root is ``""``."""
    return "/".join(part for part in path.split("/") if part)


def join_path(*parts: str) -> str:
    return normalize_path("/".join(parts))


def is_related(a: str, b: str) -> bool:
    """True when one path is equal to, or an ancestor of, the other."""
    a, b = normalize_path(a), normalize_path(b)
    if not a or not b or a == b:
        return True
    return b.startswith(a + "/") or a.startswith(b + "/")


class IStore(Protocol):
    """Read/write/subscribe contract of a real-time JSON tree."""

    async def init(self) -> None:
        """Open connections."""
        ...

    async def close(self) -> None:
        """Detach subscriptions and close connections."""
        ...

    async def write(self, path: str, value: Any) -> None:
        """Replace the value at path."""
        ...

    async def update(self, path: str, patch: dict[str, Any]) -> None:
        """Atomically apply a multi-path patch relative to path.

        ``None`` values delete the addressed child.
        """
        ...

    async def read(self, path: str) -> Snapshot:
        """Point read."""
        ...

    def subscribe(self, path: str, on_change: OnChange) -> Unsubscribe:
        """Invoke on_change for every change under path; return a detach handle."""
        ...
