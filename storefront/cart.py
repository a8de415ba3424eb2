"""Browser-local cart. Lines live in the session cookie and never reach a backend.

The cookie only keeps `{id, productId, quantity, userId}` per line and at most
MAX_LINES distinct products, so it stays well under the browser cookie limit.
Products are resolved against the catalog when the cart is rendered.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, NamedTuple

from pydantic import ValidationError

from . import schemas

logger = logging.getLogger(__name__)

TAX_RATE = Decimal("0.08")
MAX_LINES = 20


class CartFull(Exception):
    pass


def round_amount(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def load_lines(raw: list) -> List[schemas.CartLine]:
    lines = []
    for entry in raw or []:
        try:
            lines.append(schemas.CartLine.model_validate(entry))
        except ValidationError:
            logger.warning("dropping malformed cart entry: %r", entry)
    return lines


def dump_lines(lines: List[schemas.CartLine]) -> list:
    return [line.model_dump(by_alias=True, mode="json") for line in lines]


def add_line(lines: List[schemas.CartLine], product_id: int, user_id: int, quantity: int = 1) -> List[schemas.CartLine]:
    for pos, line in enumerate(lines):
        if line.product_id == product_id:
            updated = list(lines)
            updated[pos] = line.model_copy(update={"quantity": line.quantity + quantity})
            return updated
    if len(lines) >= MAX_LINES:
        raise CartFull(f"cart already holds {MAX_LINES} products")
    next_id = max((line.id for line in lines), default=0) + 1
    return list(lines) + [schemas.CartLine(id=next_id, product_id=product_id, quantity=quantity, user_id=user_id)]


def remove_line(lines: List[schemas.CartLine], line_id: int) -> List[schemas.CartLine]:
    return [line for line in lines if line.id != line_id]


def update_quantity(lines: List[schemas.CartLine], line_id: int, quantity: int) -> List[schemas.CartLine]:
    if quantity <= 0:
        return remove_line(lines, line_id)
    return [line.model_copy(update={"quantity": quantity}) if line.id == line_id else line for line in lines]


def resolve(lines: List[schemas.CartLine], products: Iterable[schemas.Product]) -> List[schemas.CartItem]:
    by_id = {p.id: p for p in products}
    items = []
    for line in lines:
        product = by_id.get(line.product_id)
        if product is None:
            logger.warning("dropping cart line %s: product %s is no longer in the catalog", line.id, line.product_id)
            continue
        items.append(schemas.CartItem(id=line.id, product=product, quantity=line.quantity, user_id=line.user_id))
    return items


class CartTotals(NamedTuple):
    items: int
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def totals(items: List[schemas.CartItem]) -> CartTotals:
    subtotal = sum((Decimal(str(i.product.price)) * i.quantity for i in items), Decimal("0"))
    return CartTotals(
        items=sum(i.quantity for i in items),
        subtotal=round_amount(subtotal),
        tax=round_amount(subtotal * TAX_RATE),
        total=round_amount(subtotal * (1 + TAX_RATE)),
    )
