from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Input, Label, Select

from db.models import Product, SortOption
from engine.debounce import SearchDebouncer
from utils.messages import (
    CatalogLoadFailedMessage,
    CatalogUpdatedMessage,
    FavoritesUpdatedMessage,
    LoadingChangedMessage,
)
from utils.pure import format_price, parse_price
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal

ALL_BRANDS = "All Brands"


class ProdListScreen(BaseScreen):
    """
    product list: search, brand filter, sort, paging over the shared catalog
    """

    CSS = """
    #select-brand, #select-sort {
        width: 28;
    }
    """

    BINDINGS = [
        Binding("a", "add_to_cart", "Add to Cart", show=True),
        Binding("f", "toggle_favorite", "Favorite", show=True),
        Binding("m", "load_more", "Load More", show=True),
        Binding("ctrl+r", "reload", "Reload", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield Input(id="input-search", placeholder="Search")
        with Horizontal(id="hort-filters"):
            yield Select([], prompt=ALL_BRANDS, id="select-brand")
            yield Select(
                [(opt.value, opt) for opt in SortOption],
                allow_blank=False,
                value=SortOption.NONE,
                id="select-sort",
            )
            yield Button("Clear All Filters", id="btn-clear-filters")
        yield DataTable(id="table-products")
        with Horizontal(id="hort-paging"):
            yield Label("", id="label-status")
            yield Button("Load More", id="btn-load-more")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("♥", "Name", "Brand", "Model", "Price")

        catalog = self.app.state.catalog
        catalog.observe(self.post_message)
        self._debouncer = SearchDebouncer(catalog.set_search_term)
        self._favorites = self.app.state.new_favorites(post=self.post_message)
        self._cart = self.app.state.new_cart()

        self.reload_favorites()
        if catalog.is_loaded:
            self.render_products()
        else:
            self.load_first_page()

        self.query_one("#input-search").focus()

    def on_unmount(self):
        self._debouncer.cancel()
        self._favorites.dispose()
        self._cart.dispose()
        self.app.state.catalog.observe(None)

    # ---------------------------
    # engine calls
    # ---------------------------

    @work(exclusive=True, group="catalog")
    async def load_first_page(self):
        await self.app.state.catalog.load_first_page()

    @work(exclusive=True, group="catalog")
    async def load_next_page(self):
        await self.app.state.catalog.load_next_page()

    @work(exclusive=True, group="favorites")
    async def reload_favorites(self):
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

    @work(group="favorites")
    async def action_toggle_favorite(self):
        product = self.selected_product()
        if product is not None:
            await self._favorites.toggle(product)

    def action_load_more(self):
        self.load_next_page()

    def action_reload(self):
        self.load_first_page()

    # ---------------------------
    # input
    # ---------------------------

    @on(Input.Changed, "#input-search")
    def handle_search_changed(self, message: Input.Changed):
        if message.value:
            self._debouncer.push(message.value)
        else:
            self._debouncer.clear()

    @on(Input.Submitted, "#input-search")
    def handle_search_submitted(self, message: Input.Submitted):
        self._debouncer.submit(message.value)

    @on(Select.Changed, "#select-brand")
    def handle_brand_changed(self, message: Select.Changed):
        brand = message.value if isinstance(message.value, str) else None
        if brand != self.app.state.catalog.criteria.brand:
            self.app.state.catalog.set_brand(brand)

    @on(Select.Changed, "#select-sort")
    def handle_sort_changed(self, message: Select.Changed):
        if isinstance(message.value, SortOption):
            self.app.state.catalog.set_sort_option(message.value)

    @on(Button.Pressed, "#btn-clear-filters")
    def handle_clear_filters(self):
        self._debouncer.cancel()
        self.query_one("#input-search").clear()
        self.query_one("#select-brand").clear()
        self.query_one("#select-sort").value = SortOption.NONE
        self.app.state.catalog.clear_filters()

    @on(Button.Pressed, "#btn-load-more")
    def handle_load_more(self):
        self.load_next_page()

    @on(DataTable.RowHighlighted, "#table-products")
    def handle_row_highlighted(self, message: DataTable.RowHighlighted):
        # reaching the last row pages in more, like scrolling to the bottom
        table = message.data_table
        if message.cursor_row == table.row_count - 1:
            catalog = self.app.state.catalog
            if catalog.has_more_data and not catalog.is_loading:
                self.load_next_page()

    @on(DataTable.RowSelected, "#table-products")
    @work()
    async def handle_row_selected(self, message: DataTable.RowSelected):
        product = self.app.state.catalog.find(message.row_key.value)
        if product is not None:
            await self.app.push_screen_wait(ProdDetailModal(product))

    # ---------------------------
    # observer messages
    # ---------------------------

    @on(CatalogUpdatedMessage)
    @on(FavoritesUpdatedMessage)
    def render_products(self):
        catalog = self.app.state.catalog
        table = self.query_one(DataTable)
        cursor_row = table.cursor_row

        table.clear()
        for product in catalog.filtered:
            table.add_row(
                "♥" if self._favorites.is_favorited(product.id) else "",
                product.name,
                product.brand,
                product.model,
                format_price(parse_price(product.price)),
                key=product.id,
            )
        if table.row_count:
            table.move_cursor(row=min(cursor_row, table.row_count - 1))

        self.update_brand_options()
        self.update_status()

    def update_brand_options(self):
        catalog = self.app.state.catalog
        select = self.query_one("#select-brand", Select)
        brands = catalog.available_brands
        if getattr(self, "_brands", None) == brands:
            return
        self._brands = brands
        with select.prevent(Select.Changed):
            select.set_options([(brand, brand) for brand in brands])
            if catalog.criteria.brand in brands:
                select.value = catalog.criteria.brand
        if catalog.criteria.brand is not None and catalog.criteria.brand not in brands:
            catalog.set_brand(None)

    def update_status(self):
        catalog = self.app.state.catalog
        window = catalog.window
        if catalog.is_loading:
            status = "Loading..."
        elif not catalog.filtered and window.loaded:
            status = "No products found"
        else:
            status = (
                f"{len(catalog.filtered)} shown, "
                f"{window.visible_count}/{window.full_count} loaded"
            )
        self.query_one("#label-status").update(status)
        self.query_one("#btn-load-more").disabled = not (
            window.loaded and catalog.has_more_data
        )

    @on(LoadingChangedMessage)
    def handle_loading_changed(self, message: LoadingChangedMessage):
        self.query_one(DataTable).loading = (
            message.is_loading and not self.app.state.catalog.filtered
        )
        self.update_status()

    @on(CatalogLoadFailedMessage)
    def handle_load_failed(self, message: CatalogLoadFailedMessage):
        self.notify(
            f"Could not load products: {message.error}. Press ctrl+r to retry.",
            severity="error",
        )
        self.update_status()
