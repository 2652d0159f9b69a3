import unittest

from catalog_fixtures import FakeClient, TempDatabaseMixin, make_product
from db import crud
from engine.bus import FAVORITES_CHANGED, ChangeBus
from engine.catalog import CatalogCache
from engine.favorites import FavoriteState
from utils.messages import FavoritesUpdatedMessage


class FavoriteStateTestCase(TempDatabaseMixin, unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.phone = make_product(1, name="iPhone 15")
        self.tablet = make_product(2, name="iPad Air")
        self.watch = make_product(3, name="Watch")

        self.bus = ChangeBus()
        self.catalog = CatalogCache(FakeClient([self.phone, self.tablet, self.watch]), self.bus)
        await self.catalog.load_first_page()

        self.messages = []
        self.favorites = FavoriteState(self.bus, self.catalog, post=self.messages.append)

        self.publishes = []
        self.bus.subscribe(FAVORITES_CHANGED, self.publishes.append)

    def tearDown(self):
        self.favorites.dispose()
        super().tearDown()

    async def test_toggle_twice_restores_membership(self):
        await self.favorites.toggle(self.phone)
        self.assertTrue(self.favorites.is_favorited("1"))
        self.assertTrue(await crud.is_favorite("1"))

        await self.favorites.toggle(self.phone)
        self.assertFalse(self.favorites.is_favorited("1"))
        self.assertFalse(await crud.is_favorite("1"))
        self.assertEqual(self.publishes, [FAVORITES_CHANGED, FAVORITES_CHANGED])

    async def test_toggle_reads_the_store(self):
        # written behind the mirror's back
        await crud.upsert_favorite("2")
        self.assertFalse(self.favorites.is_favorited("2"))

        await self.favorites.toggle(self.tablet)
        self.assertFalse(await crud.is_favorite("2"))

    async def test_add_twice_keeps_one_mark(self):
        await self.favorites.add(self.phone)
        await self.favorites.add(self.phone)
        self.assertEqual(await crud.list_favorites(), ["1"])
        self.assertEqual(self.favorites.product_ids, ["1"])

    async def test_add_remove_clear_update_mirror(self):
        await self.favorites.add(self.watch)
        await self.favorites.add(self.phone)
        self.assertEqual(self.favorites.product_ids, ["3", "1"])

        await self.favorites.remove("3")
        self.assertEqual(self.favorites.product_ids, ["1"])

        await self.favorites.clear()
        self.assertEqual(self.favorites.product_ids, [])
        self.assertEqual(len(self.publishes), 4)
        self.assertEqual(
            len([m for m in self.messages if isinstance(m, FavoritesUpdatedMessage)]), 4
        )

    async def test_products_follow_mark_order(self):
        await self.favorites.add(self.watch)
        await self.favorites.add(self.phone)
        await crud.upsert_favorite("999")
        await self.favorites.reload()

        self.assertEqual([p.id for p in self.favorites.products()], ["3", "1"])

    async def test_independent_instances_stay_in_sync(self):
        other = FavoriteState(self.bus)
        try:
            await self.favorites.add(self.tablet)
            self.assertTrue(other.is_favorited("2"))
            # no catalog to join against
            self.assertEqual(other.products(), [])

            await self.favorites.remove("2")
            self.assertFalse(other.is_favorited("2"))
        finally:
            other.dispose()

    async def test_disposed_instance_stops_receiving(self):
        other = FavoriteState(self.bus)
        other.dispose()
        await self.favorites.add(self.phone)
        self.assertFalse(other.is_favorited("1"))

    async def test_catalog_refetch_reloads_marks(self):
        await crud.upsert_favorite("2")
        await self.catalog.refresh()
        self.assertTrue(self.favorites.is_favorited("2"))


if __name__ == "__main__":
    unittest.main()
