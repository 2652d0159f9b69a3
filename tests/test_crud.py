import os
import unittest

from catalog_fixtures import TempDatabaseMixin
from db import crud
from db import database as db_database
from db.models import CartLine
from utils.errors import StoreError


class CrudTestCase(TempDatabaseMixin, unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        # Touch initialization by opening a connection
        async with db_database.connect() as conn:
            cur = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table';"
            )
            self.tables = {row[0] for row in await cur.fetchall()}
            await cur.close()

    def test_schema_initialized(self):
        self.assertIn("cart_lines", self.tables)
        self.assertIn("favorites", self.tables)
        self.assertTrue(os.path.exists(self.db_path))

    # ---------- Cart lines ----------

    async def test_upsert_creates_then_overwrites_quantity(self):
        self.assertEqual(await crud.list_cart_lines(), [])
        self.assertEqual(await crud.get_cart_quantity("1"), 0)

        await crud.upsert_cart_line("1", 1)
        await crud.upsert_cart_line("2", 4)
        await crud.upsert_cart_line("1", 3)

        self.assertEqual(await crud.get_cart_quantity("1"), 3)
        # one row per product, first-added order kept on update
        self.assertEqual(
            await crud.list_cart_lines(),
            [CartLine(product_id="1", quantity=3), CartLine(product_id="2", quantity=4)],
        )

    async def test_upsert_rejects_zero_quantity(self):
        with self.assertRaises(ValueError):
            await crud.upsert_cart_line("1", 0)
        self.assertEqual(await crud.list_cart_lines(), [])

    async def test_delete_and_clear_cart(self):
        await crud.upsert_cart_line("1", 2)
        await crud.upsert_cart_line("2", 1)

        self.assertTrue(await crud.delete_cart_line("1"))
        self.assertFalse(await crud.delete_cart_line("1"))
        self.assertEqual(await crud.list_cart_lines(), [CartLine("2", 1)])

        await crud.clear_cart()
        self.assertEqual(await crud.list_cart_lines(), [])

    async def test_increment_and_decrement_in_place(self):
        await crud.increment_cart_line("1")
        await crud.upsert_cart_line("2", 1)
        await crud.increment_cart_line("1", 2)
        self.assertEqual(
            await crud.list_cart_lines(), [CartLine("1", 3), CartLine("2", 1)]
        )

        self.assertTrue(await crud.decrement_cart_line("1"))
        self.assertEqual(await crud.get_cart_quantity("1"), 2)

        self.assertTrue(await crud.decrement_cart_line("2"))
        self.assertFalse(await crud.decrement_cart_line("2"))
        self.assertFalse(await crud.decrement_cart_line("missing"))
        self.assertEqual(await crud.list_cart_lines(), [CartLine("1", 2)])

        with self.assertRaises(ValueError):
            await crud.increment_cart_line("1", 0)

    async def test_zero_quantity_never_stored(self):
        # the table itself refuses a 0 quantity
        with self.assertRaises(StoreError):
            async with db_database.connect() as conn:
                await conn.execute(
                    "INSERT INTO cart_lines(product_id, quantity, added_at) VALUES('9', 0, 'now');"
                )

    # ---------- Favorites ----------

    async def test_favorites_are_unique(self):
        await crud.upsert_favorite("5")
        await crud.upsert_favorite("5")
        await crud.upsert_favorite("3")

        self.assertEqual(await crud.list_favorites(), ["5", "3"])
        self.assertTrue(await crud.is_favorite("5"))
        self.assertFalse(await crud.is_favorite("4"))

    async def test_delete_and_clear_favorites(self):
        await crud.upsert_favorite("1")
        await crud.upsert_favorite("2")

        self.assertTrue(await crud.delete_favorite("1"))
        self.assertFalse(await crud.delete_favorite("1"))
        self.assertEqual(await crud.list_favorites(), ["2"])

        await crud.clear_favorites()
        self.assertEqual(await crud.list_favorites(), [])

    # ---------- Errors ----------

    async def test_unopenable_database_raises_store_error(self):
        # a directory can't be opened as a database file
        db_database.DB_PATH = self.temp_dir.name
        db_database._initialized = False
        with self.assertRaises(StoreError):
            await crud.list_cart_lines()


if __name__ == "__main__":
    unittest.main()
