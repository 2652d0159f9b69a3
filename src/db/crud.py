# src/db/crud.py
from __future__ import annotations

from datetime import datetime
from typing import List

from db import models
from db.database import connect


def _now() -> str:
    return datetime.now().isoformat(timespec="seconds")


# ---------------------------
# Cart Lines
# ---------------------------


async def list_cart_lines() -> List[models.CartLine]:
    """Return every cart line in the order it was first added."""
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT product_id, quantity FROM cart_lines ORDER BY added_at, rowid;"
        )
        rows = await cur.fetchall()
        await cur.close()
    return [models.CartLine(product_id=row[0], quantity=int(row[1])) for row in rows]


async def get_cart_quantity(product_id: str) -> int:
    """Quantity of the line for product_id, 0 when there is no line."""
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT quantity FROM cart_lines WHERE product_id = ?;", (product_id,)
        )
        row = await cur.fetchone()
        await cur.close()
    return int(row[0]) if row else 0


async def upsert_cart_line(product_id: str, quantity: int) -> None:
    """
    Create the line for product_id or overwrite its quantity.
    A line keeps its original position when updated.
    """
    if quantity < 1:
        raise ValueError("Quantity must be at least 1, delete the line instead.")
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO cart_lines(product_id, quantity, added_at)
            VALUES (?, ?, ?)
            ON CONFLICT(product_id) DO UPDATE SET quantity = excluded.quantity;
            """,
            (product_id, quantity, _now()),
        )
        await conn.commit()


async def increment_cart_line(product_id: str, delta: int = 1) -> None:
    """Add delta to the line for product_id, creating the line when absent."""
    if delta < 1:
        raise ValueError("Delta must be at least 1.")
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO cart_lines(product_id, quantity, added_at)
            VALUES (?, ?, ?)
            ON CONFLICT(product_id) DO UPDATE SET quantity = quantity + excluded.quantity;
            """,
            (product_id, delta, _now()),
        )
        await conn.commit()


async def decrement_cart_line(product_id: str) -> bool:
    """
    Take one off the line for product_id; a line at 1 is deleted.
    Both statements share one transaction. False if there was no line.
    """
    async with connect() as conn:
        cur = await conn.execute(
            "UPDATE cart_lines SET quantity = quantity - 1 "
            "WHERE product_id = ? AND quantity > 1;",
            (product_id,),
        )
        changed = cur.rowcount > 0
        await cur.close()
        if not changed:
            cur = await conn.execute(
                "DELETE FROM cart_lines WHERE product_id = ? AND quantity = 1;",
                (product_id,),
            )
            changed = cur.rowcount > 0
            await cur.close()
        await conn.commit()
    return changed


async def delete_cart_line(product_id: str) -> bool:
    """Remove the line for product_id. True if a line was removed."""
    async with connect() as conn:
        cur = await conn.execute(
            "DELETE FROM cart_lines WHERE product_id = ?;", (product_id,)
        )
        removed = cur.rowcount > 0
        await cur.close()
        await conn.commit()
    return removed


async def clear_cart() -> None:
    async with connect() as conn:
        await conn.execute("DELETE FROM cart_lines;")
        await conn.commit()


# ---------------------------
# Favorites
# ---------------------------


async def list_favorites() -> List[str]:
    """Favorited product ids, oldest first."""
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT product_id FROM favorites ORDER BY added_at, rowid;"
        )
        rows = await cur.fetchall()
        await cur.close()
    return [row[0] for row in rows]


async def is_favorite(product_id: str) -> bool:
    async with connect() as conn:
        cur = await conn.execute(
            "SELECT 1 FROM favorites WHERE product_id = ? LIMIT 1;", (product_id,)
        )
        row = await cur.fetchone()
        await cur.close()
    return row is not None


async def upsert_favorite(product_id: str) -> None:
    """Mark product_id as favorite; marking twice keeps a single row."""
    async with connect() as conn:
        await conn.execute(
            "INSERT OR IGNORE INTO favorites(product_id, added_at) VALUES (?, ?);",
            (product_id, _now()),
        )
        await conn.commit()


async def delete_favorite(product_id: str) -> bool:
    async with connect() as conn:
        cur = await conn.execute(
            "DELETE FROM favorites WHERE product_id = ?;", (product_id,)
        )
        removed = cur.rowcount > 0
        await cur.close()
        await conn.commit()
    return removed


async def clear_favorites() -> None:
    async with connect() as conn:
        await conn.execute("DELETE FROM favorites;")
        await conn.commit()
