import asyncio
import dataclasses
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from db.models import FilterCriteria, PageWindow, Product, SortOption
from engine.bus import CATALOG_CHANGED, ChangeBus
from utils import config
from utils.errors import DecodeError, FetchCancelledError, FetchTimeoutError, NetworkError
from utils.logger import get_logger
from utils.messages import (
    CatalogLoadFailedMessage,
    CatalogUpdatedMessage,
    LoadingChangedMessage,
)
from utils.pure import distinct_brands, filter_and_sort

_logger = get_logger(__name__)


class ProductSource(Protocol):
    async def fetch_products(self) -> List[Product]: ...


class CatalogCache:
    """
    Owns the fetched product snapshot, the visible window over it and the
    filter criteria applied to that window.

    The first page fetches the whole snapshot from the catalog service; later
    pages are sliced out of the held snapshot. Every change to the window or
    to the criteria recomputes `filtered` and posts CatalogUpdatedMessage.
    """

    def __init__(
        self,
        client: ProductSource,
        bus: Optional[ChangeBus] = None,
        post: Optional[Callable] = None,
        page_size: int = config.PAGE_SIZE,
        fetch_timeout: Optional[float] = config.FETCH_TIMEOUT,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._client = client
        self._bus = bus
        self._post = post
        self.page_size = page_size
        self.fetch_timeout = fetch_timeout

        self._snapshot: List[Product] = []
        self._by_id: Dict[str, Product] = {}
        self._loaded = False
        self._visible: List[Product] = []

        self.criteria = FilterCriteria()
        self.filtered: List[Product] = []

        self.is_loading = False
        self._fetch_task: Optional[asyncio.Task] = None
        self._settled = asyncio.Event()
        self._settled.set()

    # ---------------------------
    # Window state
    # ---------------------------

    @property
    def products(self) -> Sequence[Product]:
        """The full snapshot."""
        return tuple(self._snapshot)

    @property
    def visible(self) -> Sequence[Product]:
        return tuple(self._visible)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def window(self) -> PageWindow:
        return PageWindow(
            page_size=self.page_size,
            visible_count=len(self._visible),
            full_count=len(self._snapshot),
            loaded=self._loaded,
        )

    @property
    def visible_count(self) -> int:
        return len(self._visible)

    @property
    def full_count(self) -> int:
        return len(self._snapshot)

    @property
    def has_more_data(self) -> bool:
        return self.window.has_more_data

    @property
    def available_brands(self) -> List[str]:
        return distinct_brands(self._visible)

    def find(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    def observe(self, post: Optional[Callable]) -> None:
        """Route observer messages to `post` (None to stop notifying)."""
        self._post = post

    # ---------------------------
    # Pagination
    # ---------------------------

    async def load_first_page(self) -> None:
        """Refetch the snapshot and restart the window at the first page."""
        if self.is_loading:
            return
        await self._fetch_and_apply()

    refresh = load_first_page

    async def load_next_page(self) -> None:
        if self.is_loading or not self.has_more_data:
            return
        if not self._loaded:
            await self._fetch_and_apply()
            return

        start = len(self._visible)
        batch = self._snapshot[start : start + self.page_size]
        self._visible.extend(batch)
        _logger.debug(
            f"Page appended: {len(self._visible)}/{len(self._snapshot)} visible"
        )
        self._recompute()

    async def ensure_snapshot(self) -> bool:
        """
        Make sure a snapshot is held, fetching it or waiting for the fetch
        already in flight. Returns whether a snapshot is held afterwards.
        """
        if self._loaded:
            return True
        if self.is_loading:
            await self._settled.wait()
        else:
            await self.load_first_page()
        return self._loaded

    def cancel_loading(self) -> bool:
        """Cancel the in-flight fetch, if any. True if one was cancelled."""
        if self._fetch_task is None or self._fetch_task.done():
            return False
        _logger.info("Cancelling catalog fetch")
        return self._fetch_task.cancel()

    async def _fetch(self) -> List[Product]:
        try:
            async with asyncio.timeout(self.fetch_timeout):
                return await self._client.fetch_products()
        except TimeoutError as exc:
            raise FetchTimeoutError(
                f"catalog fetch exceeded {self.fetch_timeout}s"
            ) from exc

    async def _fetch_and_apply(self) -> None:
        self._set_loading(True)
        self._settled.clear()
        self._fetch_task = asyncio.create_task(self._fetch())
        try:
            products = await self._fetch_task
        except asyncio.CancelledError:
            self._finish_loading()
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                # the caller itself is being cancelled, not just the fetch
                raise
            self._fail(FetchCancelledError("catalog fetch cancelled"))
            return
        except (NetworkError, DecodeError) as exc:
            self._finish_loading()
            self._fail(exc)
            return
        except Exception as exc:
            _logger.exception("Unexpected error while fetching the catalog")
            self._finish_loading()
            error = NetworkError(f"catalog fetch failed: {exc!r}")
            error.__cause__ = exc
            self._fail(error)
            return

        self._snapshot = list(products)
        self._by_id = {p.id: p for p in self._snapshot}
        self._loaded = True
        self._visible = self._snapshot[: self.page_size]
        _logger.info(
            f"Snapshot of {len(self._snapshot)} products, "
            f"{len(self._visible)} visible"
        )
        self._finish_loading()
        self._recompute()
        if self._bus is not None:
            await self._bus.publish(CATALOG_CHANGED)

    def _finish_loading(self) -> None:
        self._fetch_task = None
        self._set_loading(False)
        self._settled.set()

    def _set_loading(self, is_loading: bool) -> None:
        self.is_loading = is_loading
        self._notify(LoadingChangedMessage(is_loading))

    def _fail(self, error: Exception) -> None:
        _logger.warning(f"Catalog load failed: {error!r}")
        self._notify(CatalogLoadFailedMessage(error))

    # ---------------------------
    # Criteria
    # ---------------------------

    def set_search_term(self, term: str) -> None:
        self._set_criteria(search_term=term or "")

    def set_brand(self, brand: Optional[str]) -> None:
        self._set_criteria(brand=brand)

    def set_sort_option(self, option: SortOption) -> None:
        self._set_criteria(sort_option=option)

    def clear_filters(self) -> None:
        self._set_criteria(search_term="", brand=None, sort_option=SortOption.NONE)

    def _set_criteria(self, **changes) -> None:
        self.criteria = dataclasses.replace(self.criteria, **changes)
        self._recompute()

    def _recompute(self) -> None:
        self.filtered = filter_and_sort(self._visible, self.criteria)
        self._notify(CatalogUpdatedMessage())

    def _notify(self, message) -> None:
        if self._post is not None:
            self._post(message)

    def dispose(self) -> None:
        self.cancel_loading()
        self._post = None
        self._snapshot = []
        self._by_id = {}
        self._visible = []
        self.filtered = []
        self._loaded = False
