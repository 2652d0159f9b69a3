import asyncio
from typing import Callable, Optional

from utils import config


class SearchDebouncer:
    """
    Coalesces rapid search input into one committed term.

    push() re-arms a single timer; only the value that survives `delay`
    seconds of quiet is committed. submit() and clear() commit right away.
    """

    def __init__(
        self,
        commit: Callable[[str], object],
        delay: float = config.SEARCH_DEBOUNCE_DELAY,
    ):
        self._commit = commit
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, text: str) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, text)

    def submit(self, text: str) -> None:
        self.cancel()
        self._commit(text)

    def clear(self) -> None:
        self.cancel()
        self._commit("")

    def cancel(self) -> None:
        """Drop the pending timer without committing anything."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, text: str) -> None:
        self._handle = None
        self._commit(text)
