"""SQLite client for the local mirror of the task collection and app state."""

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Any

import aiosqlite

from ascetic_planner.core.config import settings
from ascetic_planner.core.errors import PersistenceIOError


logger = logging.getLogger(__name__)


SCHEMA: list[str] = [
    """CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        position INTEGER NOT NULL,
        payload TEXT NOT NULL
    )""",
    """CREATE TABLE IF NOT EXISTS app_state (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )""",
]


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_running_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop_id = id(asyncio.get_running_loop())
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key not in _db_connections:
        return

    try:
        async with _db_lock:
            conn = _db_connections.pop(cache_key, None)
            if conn is not None:
                await conn.close()
                logger.info("Closed SQLite connection", extra={"db_path": str(path)})
    except Exception as e:
        logger.warning("Error closing SQLite connection", extra={"error": str(e), "db_path": str(path)})


async def init_db(*, db_path: str | None = None) -> None:
    """Create the tables if they do not exist yet."""
    try:
        conn = await get_connection(db_path=db_path)
        for statement in SCHEMA:
            await conn.execute(statement)
        await conn.commit()
        logger.info("Database schema ready", extra={"db_path": str(get_db_path(db_path))})
    except Exception as e:
        logger.error("init_db_failed", extra={"error": str(e)})
        msg = f"Failed to initialize database: {e}"
        raise PersistenceIOError(msg) from e


async def load_tasks(*, db_path: str | None = None) -> list[dict[str, Any]]:
    """Return every stored task payload in collection order."""
    try:
        conn = await get_connection(db_path=db_path)
        cursor = await conn.execute("SELECT payload FROM tasks ORDER BY position ASC")
        rows = await cursor.fetchall()
        payloads = [json.loads(row[0]) for row in rows]

        logger.info("Loaded task payloads", extra={"count": len(payloads)})
        return payloads
    except Exception as e:
        logger.error("load_tasks_failed", extra={"error": str(e)})
        msg = f"Failed to load tasks: {e}"
        raise PersistenceIOError(msg) from e


async def replace_all_tasks(payloads: list[dict[str, Any]], *, db_path: str | None = None) -> None:
    """Clear the tasks table and insert the given payloads in one transaction."""
    conn = await get_connection(db_path=db_path)
    try:
        await conn.execute("DELETE FROM tasks")
        await conn.executemany(
            "INSERT INTO tasks (id, position, payload) VALUES (?, ?, ?)",
            [(payload["id"], position, json.dumps(payload)) for position, payload in enumerate(payloads)],
        )
        await conn.commit()
        logger.info("Replaced stored tasks", extra={"count": len(payloads)})
    except Exception as e:
        await conn.rollback()
        logger.error("replace_all_tasks_failed", extra={"error": str(e)})
        msg = f"Failed to replace tasks: {e}"
        raise PersistenceIOError(msg) from e


async def get_app_state(*, db_path: str | None = None) -> dict[str, str]:
    """Return all stored app-state key/value pairs."""
    try:
        conn = await get_connection(db_path=db_path)
        cursor = await conn.execute("SELECT key, value FROM app_state")
        rows = await cursor.fetchall()
        return {key: value for key, value in rows}
    except Exception as e:
        logger.error("get_app_state_failed", extra={"error": str(e)})
        msg = f"Failed to read app state: {e}"
        raise PersistenceIOError(msg) from e


async def set_app_state(values: dict[str, str | None], *, db_path: str | None = None) -> None:
    """Upsert app-state values; a None value removes the key."""
    conn = await get_connection(db_path=db_path)
    try:
        for key, value in values.items():
            if value is None:
                await conn.execute("DELETE FROM app_state WHERE key = ?", (key,))
            else:
                await conn.execute(
                    "INSERT INTO app_state (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        await conn.commit()
    except Exception as e:
        await conn.rollback()
        logger.error("set_app_state_failed", extra={"error": str(e)})
        msg = f"Failed to write app state: {e}"
        raise PersistenceIOError(msg) from e
