"""Tests for cart pricing."""

from datetime import datetime, timedelta

from schemas.cart import CartLine
from schemas.offer import OfferResponse
from schemas.product import ProductResponse
from services.cart_pricing import price_cart

NOW = datetime(2026, 6, 15, 12, 0)


def product(product_id, price, discount_price=None, is_active=True):
    return ProductResponse(
        id=product_id,
        name=f"Product {product_id}",
        sku=f"SKU-{product_id}",
        price=price,
        discount_price=discount_price,
        stock=100,
        is_active=is_active,
        gender_id=1,
        category_id=1,
        subcategory_id=1,
        images=[f"/img/{product_id}.jpg"],
    )


def percentage_offer(product_ids, pct):
    return OfferResponse(
        id=1,
        name="Sale",
        offer_type="percentageOff",
        rules={"discount_percentage": pct},
        product_ids=product_ids,
        start_date=NOW - timedelta(days=1),
        end_date=NOW + timedelta(days=1),
    )


def test_line_without_offers():
    cart = price_cart([CartLine(product_id=1, quantity=2)], {1: product(1, 100)}, [], NOW)

    item = cart.items[0]
    assert item.item_total == 200.0
    assert item.applied_offer is None
    assert item.image == "/img/1.jpg"
    assert cart.summary.total == 200.0
    assert cart.summary.total_items == 2
    assert cart.summary.item_count == 1


def test_percentage_offer_line():
    cart = price_cart(
        [CartLine(product_id=1, quantity=2)], {1: product(1, 200)}, [percentage_offer([1], 25)], NOW
    )

    item = cart.items[0]
    assert item.offer_discount == 100.0
    assert item.item_total == 300.0
    assert item.applied_offer.id == 1
    assert cart.summary.total_offer_discount == 100.0


def test_summary_combines_product_and_offer_discounts():
    lines = [CartLine(product_id=1, quantity=2), CartLine(product_id=2, quantity=1)]
    products = {1: product(1, 200, discount_price=150), 2: product(2, 80)}

    cart = price_cart(lines, products, [percentage_offer([1], 10)], NOW)
    summary = cart.summary

    assert summary.subtotal == 480.0
    assert summary.total_product_discount == 100.0
    assert summary.total_offer_discount == 30.0
    assert summary.total_discount == 130.0
    assert summary.total == 350.0
    assert summary.total == sum(item.item_total for item in cart.items)
    assert summary.total == summary.subtotal - summary.total_discount


def test_missing_and_inactive_products_are_skipped():
    lines = [
        CartLine(product_id=1, quantity=1),
        CartLine(product_id=2, quantity=1),
        CartLine(product_id=3, quantity=1),
    ]
    products = {1: product(1, 10), 3: product(3, 10, is_active=False)}

    cart = price_cart(lines, products, [], NOW)

    assert [item.product_id for item in cart.items] == [1]
    assert cart.summary.skipped_product_ids == [2, 3]
    assert cart.summary.total == 10.0


def test_cent_amounts_add_up():
    lines = [CartLine(product_id=i, quantity=3) for i in (1, 2, 3)]
    products = {i: product(i, 0.1) for i in (1, 2, 3)}

    cart = price_cart(lines, products, [], NOW)

    assert cart.summary.subtotal == 0.9
    assert cart.summary.total == 0.9
