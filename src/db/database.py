# manages connection to db, provides helper methods internal to db package
import asyncio
import os.path
import sqlite3
from contextlib import asynccontextmanager
from sqlite3 import Row

import aiosqlite

from utils import config
from utils.errors import StoreError
from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = config.DB_PATH
DB_INIT_SCRIPTS = [
    os.path.join(os.path.dirname(__file__), "tables.sql"),
]

_initialized = False
_init_lock = asyncio.Lock()


async def _init_db(conn: aiosqlite.Connection) -> None:
    for script in DB_INIT_SCRIPTS:
        if not os.path.exists(script) or os.path.getsize(script) == 0:
            continue
        _logger.info(f"Initializing database with script {script}...")
        with open(script, "r") as f:
            await conn.executescript(f.read())
    await conn.commit()


async def _table_exists(conn: aiosqlite.Connection, table_name: str) -> bool:
    cur = await conn.execute(
        """
        SELECT name
        FROM sqlite_master
        WHERE type = 'table'
          AND name = ?;
        """,
        (table_name,),
    )
    row = await cur.fetchone()
    await cur.close()
    return row is not None


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    Ensures the schema exists on first use. Any sqlite failure, on open or
    inside the block, surfaces as StoreError.
    """
    global _initialized
    try:
        directory = os.path.dirname(DB_PATH)
        if directory:
            os.makedirs(directory, exist_ok=True)
        conn = await aiosqlite.connect(DB_PATH)
    except (OSError, sqlite3.Error) as exc:
        raise StoreError(f"cannot open database {DB_PATH}: {exc}") from exc
    conn.row_factory = Row

    try:
        if not _initialized:
            async with _init_lock:
                if not _initialized:
                    exists = await _table_exists(conn, "cart_lines")
                    if not exists:
                        _logger.info("Initializing database...")
                        await _init_db(conn)
                    _initialized = True
        yield conn
    except sqlite3.Error as exc:
        raise StoreError(str(exc)) from exc
    finally:
        await conn.close()
