from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Literal, Optional

from db.models import FilterCriteria, Product, SortOption

CURRENCY_SYMBOL = "₺"


def parse_price(text: Optional[str]) -> Decimal:
    """Parse a decimal-as-text price; anything unparsable or non-finite is 0."""
    try:
        value = Decimal((text or "").strip())
    except InvalidOperation:
        return Decimal(0)
    if not value.is_finite():
        return Decimal(0)
    return value


def format_price(value: Decimal) -> str:
    """
    Format a price the way the storefront shows it: dot grouping, comma
    decimals, at most two fraction digits and a trailing lira sign.

    >>> format_price(Decimal("29999.9"))
    '29.999,9 ₺'
    """
    quantized = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    text = f"{quantized:,.2f}".rstrip("0").rstrip(".")
    text = text.translate(str.maketrans({",": ".", ".": ","}))
    return f"{text} {CURRENCY_SYMBOL}"


# ---------------------------
# Filter & sort pipeline
# ---------------------------


def filter_products(
    products: Iterable[Product], search_term: str, brand: Optional[str]
) -> List[Product]:
    """Search on name/brand/model (case-insensitive), then exact brand match."""
    result = list(products)
    if search_term:
        needle = search_term.casefold()
        result = [
            p
            for p in result
            if needle in p.name.casefold()
            or needle in p.brand.casefold()
            or needle in p.model.casefold()
        ]
    if brand is not None:
        result = [p for p in result if p.brand == brand]
    return result


def sort_products(products: Iterable[Product], option: SortOption) -> List[Product]:
    if option == SortOption.PRICE_ASC:
        return sorted(products, key=lambda p: parse_price(p.price))
    if option == SortOption.PRICE_DESC:
        return sorted(products, key=lambda p: parse_price(p.price), reverse=True)
    if option == SortOption.NAME_ASC:
        return sorted(products, key=lambda p: p.name)
    if option == SortOption.NAME_DESC:
        return sorted(products, key=lambda p: p.name, reverse=True)
    return sorted(products, key=lambda p: p.id)


def filter_and_sort(
    products: Iterable[Product], criteria: FilterCriteria
) -> List[Product]:
    """Full recompute of the visible list for the given criteria."""
    filtered = filter_products(products, criteria.search_term, criteria.brand)
    return sort_products(filtered, criteria.sort_option)


def distinct_brands(products: Iterable[Product]) -> List[str]:
    return sorted({p.brand for p in products})


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [[str(cell).replace("|", "\\|") for cell in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])
