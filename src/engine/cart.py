from decimal import Decimal
from typing import Callable, List, Optional

import db.crud as crud
from db.models import CartItem, CartLine, Product
from engine.bus import CART_CHANGED, CATALOG_CHANGED, ChangeBus
from engine.catalog import CatalogCache
from utils.logger import get_logger
from utils.messages import CartUpdatedMessage, LoadingChangedMessage
from utils.pure import parse_price

_logger = get_logger(__name__)


class CartState:
    """
    Cart adapter over the durable store.

    Mutations write to the store, then publish cart-changed; every live
    CartState (whatever screen built it) reloads its lines on delivery and
    joins them against the catalog for display.
    """

    def __init__(
        self,
        bus: ChangeBus,
        catalog: CatalogCache,
        post: Optional[Callable] = None,
    ):
        self._bus = bus
        self._catalog = catalog
        self._post = post

        self.lines: List[CartLine] = []
        self.items: List[CartItem] = []
        self.is_loading = False
        self._reload_generation = 0

        self._subscriptions = [
            bus.subscribe(CART_CHANGED, self._on_cart_changed),
            bus.subscribe(CATALOG_CHANGED, self._on_catalog_changed),
        ]

    # ---------------------------
    # Derived values
    # ---------------------------

    @property
    def total_price(self) -> Decimal:
        return sum(
            (parse_price(item.product.price) * item.quantity for item in self.items),
            Decimal(0),
        )

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    def quantity_for(self, product_id: str) -> int:
        for line in self.lines:
            if line.product_id == product_id:
                return line.quantity
        return 0

    # ---------------------------
    # Mutations
    # ---------------------------

    async def add_line(self, product: Product) -> None:
        await crud.increment_cart_line(product.id)
        _logger.debug(f"Cart: {product.id} +1")
        await self._bus.publish(CART_CHANGED)

    async def increment(self, product: Product) -> None:
        await self.add_line(product)

    async def decrement(self, product: Product) -> None:
        if not await crud.decrement_cart_line(product.id):
            return
        _logger.debug(f"Cart: {product.id} -1")
        await self._bus.publish(CART_CHANGED)

    async def remove_line(self, product: Product) -> None:
        await crud.delete_cart_line(product.id)
        await self._bus.publish(CART_CHANGED)

    async def clear(self) -> None:
        await crud.clear_cart()
        await self._bus.publish(CART_CHANGED)

    async def complete_order(self) -> None:
        _logger.info(
            f"Order completed: {self.total_quantity} item(s), total {self.total_price}"
        )
        await self.clear()

    # ---------------------------
    # Join
    # ---------------------------

    async def reload(self) -> None:
        """
        Re-read the lines and join them against the catalog.
        Fetches the catalog snapshot first when none is held yet.
        Only the most recently started reload applies its result.
        """
        self._reload_generation += 1
        generation = self._reload_generation

        lines = await crud.list_cart_lines()
        if generation != self._reload_generation:
            return
        self.lines = lines

        if not self._catalog.is_loaded:
            self._set_loading(True)
            try:
                resolved = await self._catalog.ensure_snapshot()
            finally:
                self._set_loading(False)
            if not resolved:
                _logger.warning("Cart join skipped, catalog snapshot unavailable")
                return
            # lines may have moved while waiting on the catalog
            lines = await crud.list_cart_lines()
            if generation != self._reload_generation:
                return
            self.lines = lines

        self._join()
        self._notify(CartUpdatedMessage())

    def _join(self) -> None:
        items = []
        for line in self.lines:
            product = self._catalog.find(line.product_id)
            if product is None:
                _logger.debug(f"Cart line {line.product_id} not in catalog, skipped")
                continue
            items.append(CartItem(product=product, quantity=line.quantity))
        self.items = items

    async def _on_cart_changed(self, _topic: str) -> None:
        await self.reload()

    async def _on_catalog_changed(self, _topic: str) -> None:
        # our own reload is waiting on this snapshot and will join it itself
        if self.is_loading:
            return
        await self.reload()

    def _set_loading(self, is_loading: bool) -> None:
        self.is_loading = is_loading
        self._notify(LoadingChangedMessage(is_loading))

    def _notify(self, message) -> None:
        if self._post is not None:
            self._post(message)

    def dispose(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        self._post = None
