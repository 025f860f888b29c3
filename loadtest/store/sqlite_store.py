"""SQLite-backed local store implementing the real-time contract."""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

import aiosqlite

from ..config import resolve_db_path
from ..logging_config import get_logger
from .store import OnChange, Snapshot, Unsubscribe, is_related, join_path, normalize_path

logger = get_logger(__name__)


@dataclass
class _Listener:
    path: str
    on_change: OnChange
    active: bool = True


def _flatten(path: str, value: Any) -> Iterator[tuple[str, str]]:
    """Yield (path, json) rows for every leaf under value."""
    if value is None:
        return
    if isinstance(value, dict):
        for key, child in value.items():
            yield from _flatten(join_path(path, str(key)), child)
    elif isinstance(value, (list, tuple)):
        for index, child in enumerate(value):
            yield from _flatten(join_path(path, str(index)), child)
    else:
        yield path, json.dumps(value)


def _restore_lists(node: Any) -> Any:
    """Turn dicts keyed 0..n-1 back into lists."""
    if not isinstance(node, dict):
        return node
    restored = {key: _restore_lists(child) for key, child in node.items()}
    if restored and all(key.isdigit() for key in restored):
        indexes = sorted(int(key) for key in restored)
        if indexes == list(range(len(indexes))):
            return [restored[str(i)] for i in indexes]
    return restored


def _ancestors(path: str) -> Iterator[str]:
    parts = path.split("/") if path else []
    for i in range(len(parts)):
        yield "/".join(parts[:i])


class SqliteStore:
    """JSON tree persisted in SQLite with in-process subscriptions.

    Mutations are serialised with an asyncio lock so a multi-path update is
    committed atomically. Subscribers are notified on separate tasks after
    the commit, and once right after they attach.
    """

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._listeners: dict[int, _Listener] = {}
        self._next_listener_id = 0
        self._pending: set[asyncio.Task] = set()

    async def init(self) -> None:
        """Open the database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Drop listeners, finish pending deliveries and close the connection."""
        self._listeners.clear()
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise RuntimeError("Store not initialized")
        return self._conn

    async def write(self, path: str, value: Any) -> None:
        path = normalize_path(path)
        async with self._lock:
            conn = self._require_conn()
            try:
                await self._replace(conn, path, value)
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
        self._notify([path])

    async def update(self, path: str, patch: dict[str, Any]) -> None:
        base = normalize_path(path)
        changed = [join_path(base, key) for key in patch]
        async with self._lock:
            conn = self._require_conn()
            try:
                for full_path, value in zip(changed, patch.values()):
                    await self._replace(conn, full_path, value)
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
        self._notify(changed)

    async def read(self, path: str) -> Snapshot:
        path = normalize_path(path)
        async with self._lock:
            conn = self._require_conn()
            if path:
                cursor = await conn.execute(
                    """
                    SELECT path, value FROM nodes
                    WHERE path = ? OR substr(path, 1, ?) = ?
                    """,
                    (path, len(path) + 1, path + "/"),
                )
            else:
                cursor = await conn.execute("SELECT path, value FROM nodes")
            rows = await cursor.fetchall()
            await cursor.close()
        return Snapshot(path=path, value=self._build(path, rows))

    def subscribe(self, path: str, on_change: OnChange) -> Unsubscribe:
        listener_id = self._next_listener_id
        self._next_listener_id += 1
        listener = _Listener(path=normalize_path(path), on_change=on_change)
        self._listeners[listener_id] = listener
        self._schedule(listener)

        def unsubscribe() -> None:
            listener.active = False
            self._listeners.pop(listener_id, None)

        return unsubscribe

    async def _replace(self, conn: aiosqlite.Connection, path: str, value: Any) -> None:
        """Replace the subtree at path inside the current transaction."""
        if path:
            await conn.execute(
                "DELETE FROM nodes WHERE path = ? OR substr(path, 1, ?) = ?",
                (path, len(path) + 1, path + "/"),
            )
        else:
            await conn.execute("DELETE FROM nodes")

        # A scalar stored at an ancestor would shadow the new children.
        for ancestor in _ancestors(path):
            await conn.execute("DELETE FROM nodes WHERE path = ?", (ancestor,))

        rows = list(_flatten(path, value))
        if rows:
            await conn.executemany("INSERT INTO nodes (path, value) VALUES (?, ?)", rows)

    @staticmethod
    def _build(path: str, rows: list[tuple[str, str]]) -> Any:
        tree: dict[str, Any] = {}
        for row_path, raw in rows:
            if row_path == path:
                return json.loads(raw)
            relative = row_path[len(path) + 1 :] if path else row_path
            node = tree
            *parents, leaf = relative.split("/")
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = json.loads(raw)
        return _restore_lists(tree) if tree else None

    def _notify(self, changed_paths: list[str]) -> None:
        for listener in list(self._listeners.values()):
            if any(is_related(listener.path, changed) for changed in changed_paths):
                self._schedule(listener)

    def _schedule(self, listener: _Listener) -> None:
        task = asyncio.create_task(self._deliver(listener))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, listener: _Listener) -> None:
        if not listener.active:
            return
        snapshot = await self.read(listener.path)
        if not listener.active:
            return
        try:
            listener.on_change(snapshot)
        except Exception as e:
            logger.error("Error in subscriber for %s: %s", listener.path, e)
