from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.message import Message
from textual.widgets import Button, Label, Rule

from db.models import CartItem, Product
from utils.messages import CartUpdatedMessage, LoadingChangedMessage
from utils.pure import format_price, parse_price
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class CartLineActionMessage(Message):
    """
    Posted by a cart row when one of its buttons is pressed,
    handled by the cart screen
    """

    bubble = True

    def __init__(self, action: str, product: Product) -> None:
        super().__init__()
        self.action = action  # "increment" | "decrement" | "remove"
        self.product = product


class CartItemWidget(HorizontalGroup):
    def __init__(self, item: CartItem):
        super().__init__()
        self.item = item

    def compose(self):
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(self.item.product.name, id="label-item-name")
                yield Label(format_price(self._line_total()), id="label-item-price")
            with Horizontal(id="div-actions"):
                yield Button("−", id="btn-decrement")
                yield Label(str(self.item.quantity), id="label-item-qty")
                yield Button("+", id="btn-increment")
                yield Button("Remove", id="btn-remove", variant="error")

    def _line_total(self):
        return parse_price(self.item.product.price) * self.item.quantity

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        action = event.button.id.removeprefix("btn-")
        self.post_message(CartLineActionMessage(action, self.item.product))


class CartScreen(BaseScreen):
    """
    cart lines with quantity controls, total, and order completion
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Total: 0 ₺", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Complete Order", id="btn-checkout", variant="primary")

    def on_mount(self):
        self._cart = self.app.state.new_cart(post=self.post_message)
        self.reload_cart()

    def on_unmount(self):
        self._cart.dispose()

    @work(exclusive=True, group="reload")
    async def reload_cart(self):
        await self._cart.reload()

    @on(LoadingChangedMessage)
    def handle_loading_changed(self, message: LoadingChangedMessage):
        self.query_one("#vertscroll-content").loading = message.is_loading

    @on(CartUpdatedMessage)
    async def handle_cart_updated(self):
        content = self.query_one("#vertscroll-content")
        shown = [(c.item.product.id, c.item.quantity) for c in content.children]
        current = [(i.product.id, i.quantity) for i in self._cart.items]

        if shown != current:
            await content.remove_children()
            await content.mount_all([CartItemWidget(item) for item in self._cart.items])

        if not self._cart.items:
            content.add_class("no-items")
        else:
            content.remove_class("no-items")

        self.query_one("#label-cart-total").update(
            f"Total: {format_price(self._cart.total_price)}"
        )

    @on(CartLineActionMessage)
    @work(group="mutate")
    async def handle_line_action(self, message: CartLineActionMessage):
        if message.action == "increment":
            await self._cart.increment(message.product)
        elif message.action == "decrement":
            await self._cart.decrement(message.product)
        elif message.action == "remove":
            await self._cart.remove_line(message.product)
            self.notify(f"{message.product.name} removed from cart.")

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if not self._cart.lines:
            self.app.notify("Your cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        )
        if remove_confirmed:
            await self._cart.clear()

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if not self._cart.lines:
            self.app.notify("Your cart is empty.", severity="warning")
            return

        confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to complete your order?",
                primary_text="Complete",
                secondary_text="Cancel",
                tone="positive",
            )
        )
        if confirmed:
            await self._cart.complete_order()
            self.app.notify("Your order has been successfully placed!")
