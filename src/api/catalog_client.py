"""
Catalog service HTTP client.

One call, GET /products, returning the full product snapshot. No query
parameters are sent: paging, filtering and sorting all happen client side
over the returned list.
"""

from typing import Any, List, Optional

import httpx

from db.models import Product
from utils import config
from utils.errors import DecodeError, FetchTimeoutError, NetworkError
from utils.logger import get_logger

_logger = get_logger(__name__)

# json key -> Product field
_PRODUCT_FIELDS = {
    "id": "id",
    "name": "name",
    "brand": "brand",
    "model": "model",
    "price": "price",
    "description": "description",
    "image": "image",
    "createdAt": "created_at",
}


def decode_product(raw: Any) -> Product:
    if not isinstance(raw, dict):
        raise DecodeError(f"product entry is not an object: {raw!r}")
    values = {}
    for key, attr in _PRODUCT_FIELDS.items():
        value = raw.get(key)
        if not isinstance(value, str):
            raise DecodeError(f"product field '{key}' missing or not a string")
        values[attr] = value
    return Product(**values)


def decode_products(payload: Any) -> List[Product]:
    """Decode the /products payload; the whole batch fails on one bad entry."""
    if not isinstance(payload, list):
        raise DecodeError("expected a JSON array of products")
    return [decode_product(raw) for raw in payload]


class CatalogClient:
    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        timeout: float = config.FETCH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def fetch_products(self) -> List[Product]:
        """
        Fetch the product snapshot.
        Raises NetworkError (FetchTimeoutError on timeout) or DecodeError.
        """
        url = f"{self.base_url}{config.PRODUCTS_PATH}"
        _logger.debug(f"GET {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(f"timed out fetching {url}") from exc
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"catalog service answered {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(f"cannot reach catalog service: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError("catalog payload is not valid JSON") from exc
        products = decode_products(payload)
        _logger.info(f"Fetched {len(products)} products from {url}")
        return products
