import asyncio
import os
import tempfile

from db import database as db_database
from db.models import Product


def make_product(i, name=None, brand="Apple", model=None, price="100"):
    return Product(
        id=str(i),
        name=name or f"Product {i}",
        brand=brand,
        model=model or f"M{i}",
        price=price,
        description=f"Description of product {i}",
        image=f"https://loremflickr.com/640/480/{i}",
        created_at="2023-07-17T07:21:02.529Z",
    )


def make_products(n):
    return [make_product(i, brand=("Apple", "Samsung", "Nokia")[i % 3]) for i in range(1, n + 1)]


class FakeClient:
    """Stands in for CatalogClient: counts calls, can fail or stall."""

    def __init__(self, products=None, error=None, delay=0.0):
        self.products = list(products or [])
        self.error = error
        self.delay = delay
        self.calls = 0

    async def fetch_products(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.products)


class TempDatabaseMixin:
    """Point the store at a fresh temporary database file for each test."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        self._orig_db_path = db_database.DB_PATH
        db_database.DB_PATH = self.db_path
        db_database._initialized = False

    def tearDown(self):
        db_database.DB_PATH = self._orig_db_path
        db_database._initialized = False
        self.temp_dir.cleanup()
