from typing import Callable, List, Optional, Set

import db.crud as crud
from db.models import Product
from engine.bus import CATALOG_CHANGED, FAVORITES_CHANGED, ChangeBus
from engine.catalog import CatalogCache
from utils.logger import get_logger
from utils.messages import FavoritesUpdatedMessage

_logger = get_logger(__name__)


class FavoriteState:
    """
    Favorite marks adapter over the durable store, with an in-memory mirror
    of the favorited ids refreshed on every favorites-changed delivery.
    """

    def __init__(
        self,
        bus: ChangeBus,
        catalog: Optional[CatalogCache] = None,
        post: Optional[Callable] = None,
    ):
        self._bus = bus
        self._catalog = catalog
        self._post = post
        self.product_ids: List[str] = []
        self._id_set: Set[str] = set()
        self._reload_generation = 0

        self._subscriptions = [bus.subscribe(FAVORITES_CHANGED, self._on_changed)]
        if catalog is not None:
            self._subscriptions.append(bus.subscribe(CATALOG_CHANGED, self._on_changed))

    def is_favorited(self, product_id: str) -> bool:
        return product_id in self._id_set

    def products(self) -> List[Product]:
        """Favorited products found in the catalog snapshot, oldest mark first."""
        if self._catalog is None:
            return []
        found = (self._catalog.find(pid) for pid in self.product_ids)
        return [p for p in found if p is not None]

    async def toggle(self, product: Product) -> None:
        if await crud.is_favorite(product.id):
            await self.remove(product.id)
        else:
            await self.add(product)

    async def add(self, product: Product) -> None:
        await crud.upsert_favorite(product.id)
        _logger.debug(f"Favorite added: {product.id}")
        await self._bus.publish(FAVORITES_CHANGED)

    async def remove(self, product_id: str) -> None:
        await crud.delete_favorite(product_id)
        _logger.debug(f"Favorite removed: {product_id}")
        await self._bus.publish(FAVORITES_CHANGED)

    async def clear(self) -> None:
        await crud.clear_favorites()
        await self._bus.publish(FAVORITES_CHANGED)

    async def reload(self) -> None:
        self._reload_generation += 1
        generation = self._reload_generation
        product_ids = await crud.list_favorites()
        # a newer reload already started and will apply its own read
        if generation != self._reload_generation:
            return
        self.product_ids = product_ids
        self._id_set = set(product_ids)
        if self._post is not None:
            self._post(FavoritesUpdatedMessage())

    async def _on_changed(self, _topic: str) -> None:
        await self.reload()

    def dispose(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        self._post = None
