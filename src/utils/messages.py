from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode


# ---------------------------
# Engine observer messages
# posted through the `post` callable handed to each engine object,
# usually the owning screen's post_message
# ---------------------------


class EngineMessage(Message):
    """
    Base for observer messages, delivered only to the object that asked for them
    """

    bubble = False


class LoadingChangedMessage(EngineMessage):
    """
    Catalog fetch (or a cart join waiting on it) started or finished
    """

    def __init__(self, is_loading: bool) -> None:
        super().__init__()
        self.is_loading = is_loading


class CatalogUpdatedMessage(EngineMessage):
    """
    Filtered/sorted product list recomputed: new page, new snapshot or new criteria
    """


class CatalogLoadFailedMessage(EngineMessage):
    """
    Catalog fetch failed, the window and snapshot are left as they were
    """

    def __init__(self, error: Exception) -> None:
        super().__init__()
        self.error = error


class CartUpdatedMessage(EngineMessage):
    """
    Cart lines re-read from the store and joined against the catalog
    """


class FavoritesUpdatedMessage(EngineMessage):
    """
    Favorite ids re-read from the store
    """
