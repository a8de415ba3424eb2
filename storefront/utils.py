import html
import re
from typing import Iterable, List, Optional

import bleach

from . import schemas

CATEGORIES = ["All", "Electronics", "Clothing", "Books", "Home"]
FEATURED_COUNT = 4


def sanitize_input(value: Optional[str]) -> str:
    """Sanitize a user-supplied search string for safe display and matching.

    - Removes NULL bytes
    - Strips HTML tags using bleach.clean(..., strip=True), keeping plain text
      unescaped (templates escape on output)
    - Collapses runs of whitespace and trims
    """
    if value is None:
        return ""
    val = value.replace("\x00", "")
    val = html.unescape(bleach.clean(val, tags=[], strip=True))
    val = re.sub(r"\s+", " ", val)
    return val.strip()


def filter_products(products: Iterable[schemas.Product], category: str = "All", term: str = "") -> List[schemas.Product]:
    filtered = list(products)
    if category and category != "All":
        filtered = [p for p in filtered if p.category == category]
    if term:
        needle = term.lower()
        filtered = [
            p for p in filtered
            if needle in p.product_name.lower() or needle in (p.description or "").lower()
        ]
    return filtered


def format_price(value: Optional[float]) -> str:
    return f"${(value or 0):.2f}"
