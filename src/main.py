from typing import Optional

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage
from utils.state import GlobalState
from views.scr_cart import CartScreen
from views.scr_favorites import FavoritesScreen
from views.scr_prod_list import ProdListScreen

_logger = get_logger(__name__)


class EMarketApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "products": ProdListScreen,
        "cart": CartScreen,
        "favorites": FavoritesScreen,
    }

    MENU = {
        "products": "Products",
        "cart": "Cart",
        "favorites": "Favorites",
    }

    CSS = """
    Sidebar {
        dock: left;
        width: 24;
        padding: 0 1;
        border-right: solid $primary;
    }
    #label-cart-badge {
        margin-bottom: 1;
        text-style: bold;
    }
    #hort-filters, #hort-paging, #hort-buttons {
        height: auto;
    }
    #label-status {
        width: 1fr;
        padding: 1;
    }
    #div-cart-item-group, #div-item {
        height: auto;
    }
    #div-actions {
        height: auto;
        width: auto;
    }
    #label-item-qty {
        padding: 1 2;
    }
    #label-cart-total {
        text-style: bold;
        padding: 1;
    }
    #div-dialog {
        width: 60;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }
    #dialog {
        height: auto;
        align-horizontal: right;
    }
    DialogModal, ProdDetailModal {
        align: center middle;
    }
    """

    state: GlobalState

    def __init__(self, state: Optional[GlobalState] = None):
        super().__init__()
        self.state = state or GlobalState()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.post_message(ModeSwitchedMessage(self.current_mode, "products"))
        await self.switch_mode("products")

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(QuitRequestedMessage)
    def handle_quit(self):
        _logger.debug("Quit requested")
        self.state.shutdown()
        self.exit()


def main() -> None:
    app = EMarketApp()
    app.run()


if __name__ == "__main__":
    main()
