# provide dataclass models

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    brand: str
    model: str
    price: str  # decimal as text, exactly as served
    description: str
    image: str
    created_at: str


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int  # >= 1, a line at 0 is deleted instead


@dataclass(frozen=True)
class CartItem:
    """A cart line joined with the product it refers to."""

    product: Product
    quantity: int


class SortOption(Enum):
    NONE = "Default"
    PRICE_ASC = "Price: Low to High"
    PRICE_DESC = "Price: High to Low"
    NAME_ASC = "Name: A to Z"
    NAME_DESC = "Name: Z to A"


@dataclass(frozen=True)
class FilterCriteria:
    search_term: str = ""
    brand: Optional[str] = None
    sort_option: SortOption = SortOption.NONE


@dataclass(frozen=True)
class PageWindow:
    page_size: int
    visible_count: int = 0
    full_count: int = 0
    loaded: bool = field(default=False, compare=False)

    @property
    def has_more_data(self) -> bool:
        # until a snapshot is held the first page is always requestable
        if not self.loaded:
            return True
        return self.visible_count < self.full_count
