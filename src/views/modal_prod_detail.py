from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, MarkdownViewer

from db.models import Product
from utils.messages import FavoritesUpdatedMessage
from utils.pure import format_price, generate_markdown_table, parse_price


class ProdDetailModal(ModalScreen[bool]):
    """
    prod detail, plus add to cart and favorite toggle
    Will return true if cart changed, false if not
    """

    CSS = """
    #btn-favorite {
        min-width: 16;
    }
    """

    def __init__(self, product: Product) -> None:
        super().__init__()

        self._prod = product
        self._cart_changed = False

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label(format_price(parse_price(self._prod.price)), id="label-price")
                yield Button("☆ Favorite", id="btn-favorite")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self):
        table_headers = ["Attribute", "Value"]
        table_align = ["l", "l"]
        table_rows = [
            ["Brand", self._prod.brand],
            ["Model", self._prod.model],
            ["Price", format_price(parse_price(self._prod.price))],
            ["Description", self._prod.description],
            ["Image", self._prod.image],
        ]
        md_table_str = generate_markdown_table(table_headers, table_rows, table_align)
        header_md = f"### {self._prod.name}\n\n"
        await self.query_one(MarkdownViewer).document.update(header_md + md_table_str)

        self._cart = self.app.state.new_cart()
        self._favorites = self.app.state.new_favorites(post=self.post_message)
        self.reload_favorites()

        self.query_one("#btn-addcart").focus()

    def on_unmount(self):
        self._cart.dispose()
        self._favorites.dispose()

    @work(exclusive=True, group="favorites")
    async def reload_favorites(self):
        await self._favorites.reload()

    @on(FavoritesUpdatedMessage)
    def handle_favorites_updated(self):
        btn = self.query_one("#btn-favorite")
        if self._favorites.is_favorited(self._prod.id):
            btn.label = "★ Favorited"
            btn.variant = "warning"
        else:
            btn.label = "☆ Favorite"
            btn.variant = "default"

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(self._cart_changed)

    @on(Button.Pressed, "#btn-favorite")
    @work(exclusive=True, group="favorites")
    async def handle_favorite(self):
        await self._favorites.toggle(self._prod)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(self._cart_changed)

    @on(Button.Pressed, "#btn-addcart")
    @work(exclusive=True, group="cart")
    async def handle_addcart(self):
        await self._cart.add_line(self._prod)
        self._cart_changed = True
        self.app.notify("Product has been added to your cart.")
        self.dismiss(True)
