from decimal import Decimal

import pytest

from storefront import cart, schemas


def product(id=1, price=10.0, **extra):
    return schemas.Product(id=id, product_name=f"P{id}", price=price, category="Home", description="long text", **extra)


def items_for(*pairs):
    """Build resolved cart items from (product, quantity) pairs."""
    lines = []
    for p, quantity in pairs:
        lines = cart.add_line(lines, p.id, 1, quantity)
    return cart.resolve(lines, [p for p, _ in pairs])


def test_add_new_and_existing_product():
    lines = cart.add_line([], 1, user_id=1)
    lines = cart.add_line(lines, 2, user_id=1)
    lines = cart.add_line(lines, 1, user_id=1, quantity=2)
    assert [(l.id, l.product_id, l.quantity) for l in lines] == [(1, 1, 3), (2, 2, 1)]
    assert all(l.user_id == 1 for l in lines)


def test_update_quantity_and_remove():
    lines = cart.add_line(cart.add_line([], 1, 1), 2, 1)
    lines = cart.update_quantity(lines, 1, 4)
    assert lines[0].quantity == 4
    lines = cart.update_quantity(lines, 1, 0)
    assert [l.id for l in lines] == [2]
    lines = cart.update_quantity(lines, 2, -1)
    assert lines == []
    assert cart.remove_line(cart.add_line([], 1, 1), 1) == []


def test_new_line_ids_follow_highest():
    lines = cart.add_line(cart.add_line([], 1, 1), 2, 1)
    lines = cart.remove_line(lines, 1)
    lines = cart.add_line(lines, 3, 1)
    assert [l.id for l in lines] == [2, 3]


def test_cart_refuses_new_products_past_limit():
    lines = []
    for pid in range(1, cart.MAX_LINES + 1):
        lines = cart.add_line(lines, pid, 1)
    with pytest.raises(cart.CartFull):
        cart.add_line(lines, cart.MAX_LINES + 1, 1)
    # More of a product already in the cart is still accepted
    lines = cart.add_line(lines, 1, 1, quantity=5)
    assert lines[0].quantity == 6
    assert len(lines) == cart.MAX_LINES


def test_totals():
    totals = cart.totals(items_for((product(1, price=2499.99), 1), (product(2, price=299.99), 2)))
    assert totals.items == 3
    assert totals.subtotal == Decimal("3099.97")
    assert totals.tax == Decimal("248.00")  # 247.9976
    assert totals.total == Decimal("3347.97")  # 3347.9676


def test_empty_totals():
    totals = cart.totals([])
    assert totals.items == 0
    assert totals.total == Decimal("0.00")


def test_stored_line_has_no_product_snapshot():
    raw = cart.dump_lines(cart.add_line([], 7, 1))
    assert raw == [{"id": 1, "productId": 7, "quantity": 1, "userId": 1}]
    loaded = cart.load_lines(raw)
    assert loaded[0].product_id == 7
    assert loaded[0].quantity == 1


def test_resolve_drops_lines_for_missing_products():
    lines = cart.add_line(cart.add_line([], 1, 1), 2, 1, quantity=3)
    items = cart.resolve(lines, [product(2, price=5.0)])
    assert [(i.id, i.product.product_name, i.quantity) for i in items] == [(2, "P2", 3)]


def test_load_skips_malformed_entries():
    raw = [{"id": 1, "quantity": 0, "userId": 1, "productId": 1}, {"bogus": True}]
    assert cart.load_lines(raw) == []
