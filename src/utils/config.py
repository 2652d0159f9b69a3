# runtime configuration, read once from the environment
import os


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


DEBUG = bool(os.getenv("DEBUG"))
LOG_LEVEL = os.getenv("EMARKET_LOG_LEVEL", "INFO").upper()

API_BASE_URL = os.getenv(
    "EMARKET_API_URL", "https://5fc9346b2af77700165ae514.mockapi.io"
)
PRODUCTS_PATH = "/products"
FETCH_TIMEOUT = _float_env("EMARKET_FETCH_TIMEOUT", 15.0)  # seconds

PAGE_SIZE = max(_int_env("EMARKET_PAGE_SIZE", 8), 1)
SEARCH_DEBOUNCE_DELAY = _float_env("EMARKET_SEARCH_DEBOUNCE", 0.5)  # seconds

DB_PATH = os.getenv("EMARKET_DB_PATH", "data/emarket.sqlite")
