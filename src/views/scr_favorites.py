from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Label

from db.models import Product
from utils.messages import FavoritesUpdatedMessage
from utils.pure import format_price, parse_price
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal
from views.modal_prod_detail import ProdDetailModal


class FavoritesScreen(BaseScreen):
    """
    favorited products, joined against the shared catalog
    """

    BINDINGS = [
        Binding("a", "add_to_cart", "Add to Cart", show=True),
        Binding("delete", "remove_favorite", "Remove", show=True),
        Binding("ctrl+d", "clear_favorites", "Clear Favorites", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-favorites")
        yield Label("", id="label-empty")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Brand", "Model", "Price")

        self._favorites = self.app.state.new_favorites(post=self.post_message)
        self._cart = self.app.state.new_cart()
        self.load_favorites()

    def on_unmount(self):
        self._favorites.dispose()
        self._cart.dispose()

    @work(exclusive=True, group="favorites")
    async def load_favorites(self):
        table = self.query_one(DataTable)
        table.loading = True
        try:
            if not await self.app.state.catalog.ensure_snapshot():
                self.notify("Could not load products.", severity="error")
        finally:
            table.loading = False
        await self._favorites.reload()

    def selected_product(self) -> Optional[Product]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self.app.state.catalog.find(row_key.value)

    @work(group="cart")
    async def action_add_to_cart(self):
        product = self.selected_product()
        if product is None:
            return
        await self._cart.add_line(product)
        self.notify(f"{product.name} added to cart.")

    @work(group="mutate")
    async def action_remove_favorite(self):
        product = self.selected_product()
        if product is not None:
            await self._favorites.remove(product.id)

    @work(group="mutate")
    async def action_clear_favorites(self):
        if not self._favorites.product_ids:
            self.app.notify("You have no favorites.", severity="warning")
            return

        clear_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all favorites?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        )
        if clear_confirmed:
            await self._favorites.clear()

    @on(DataTable.RowSelected, "#table-favorites")
    @work()
    async def handle_row_selected(self, message: DataTable.RowSelected):
        product = self.app.state.catalog.find(message.row_key.value)
        if product is not None:
            await self.app.push_screen_wait(ProdDetailModal(product))

    @on(FavoritesUpdatedMessage)
    def render_favorites(self):
        table = self.query_one(DataTable)
        table.clear()
        products = self._favorites.products()
        for product in products:
            table.add_row(
                product.name,
                product.brand,
                product.model,
                format_price(parse_price(product.price)),
                key=product.id,
            )
        self.query_one("#label-empty").update(
            ""
            if products
            else "No favorites yet. Press f on a product to add it to your favorites."
        )
