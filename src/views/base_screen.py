from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Footer, Header, Label, ListItem, ListView

from utils.messages import CartUpdatedMessage, ModeSwitchedMessage
from utils.pure import format_price
from views.modal_dialog import QuitDialogModal


class Sidebar(Container):
    """
    Menu of app modes plus a cart badge.
    Each sidebar keeps its own CartState, so the badge follows cart changes
    made from any screen.
    """

    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("Cart", id="label-info-1")
        yield Label("0 items", id="label-cart-badge")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        self.init_mode = self.app.current_mode

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(v), id="list-menu-item-" + k)
                for k, v in self.app.MENU.items()
            ]
        )
        self.highlight_item(self.init_mode)

        self._cart = self.app.state.new_cart(post=self.post_message)
        self.reload_cart()

    def on_unmount(self):
        self._cart.dispose()

    @work(exclusive=True)
    async def reload_cart(self):
        await self._cart.reload()

    @on(CartUpdatedMessage)
    def handle_cart_updated(self):
        qty = self._cart.total_quantity
        badge = f"{qty} item{'s' if qty != 1 else ''}"
        if self._cart.items:
            badge += f"\n{format_price(self._cart.total_price)}"
        self.query_one("#label-cart-badge").update(badge)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = mode_str in item.id


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Base Screen",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        :return:
        """

        self.app.title = "E-Market"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                self.sub_title = self.app.MENU.get(k, header_sub_title)

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
