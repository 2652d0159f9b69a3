from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from api.catalog_client import CatalogClient
from engine.bus import ChangeBus
from engine.cart import CartState
from engine.catalog import CatalogCache
from engine.favorites import FavoriteState


@dataclass
class GlobalState:
    """
    Composition root shared by screens.

    Fields:
      - bus: the one ChangeBus every cart/favorite/catalog consumer subscribes to
      - client: catalog service client
      - catalog: the shared catalog cache (snapshot, window, criteria)

    Cart and favorite adapters are built per consumer through new_cart() and
    new_favorites(); the consumer disposes them when it goes away.
    """

    bus: ChangeBus = field(default_factory=ChangeBus)
    client: CatalogClient = field(default_factory=CatalogClient)
    catalog: Optional[CatalogCache] = None

    def __post_init__(self):
        if self.catalog is None:
            self.catalog = CatalogCache(self.client, self.bus)

    def new_cart(self, post: Optional[Callable] = None) -> CartState:
        return CartState(self.bus, self.catalog, post=post)

    def new_favorites(self, post: Optional[Callable] = None) -> FavoriteState:
        return FavoriteState(self.bus, self.catalog, post=post)

    def shutdown(self) -> None:
        """Cancel any in-flight fetch and drop the snapshot."""
        self.catalog.dispose()
