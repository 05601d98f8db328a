"""Tests for offer resolution."""

import itertools
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from schemas.offer import OfferResponse
from schemas.product import ProductResponse
from services.offer_engine import compute_discount, is_offer_applicable, select_best_offer

NOW = datetime(2026, 6, 15, 12, 0)


def product(price=100.0, discount_price=None, **overrides):
    data = {
        "id": 1,
        "name": "Shirt",
        "sku": "SKU-1",
        "price": price,
        "discount_price": discount_price,
        "stock": 50,
        "gender_id": 1,
        "category_id": 2,
        "subcategory_id": 3,
    }
    data.update(overrides)
    return ProductResponse(**data)


def offer(offer_id=1, offer_type="percentageOff", rules=None, **overrides):
    data = {
        "id": offer_id,
        "name": f"Offer {offer_id}",
        "offer_type": offer_type,
        "rules": rules if rules is not None else {"discount_percentage": 10},
        "product_ids": [1],
        "start_date": NOW - timedelta(days=1),
        "end_date": NOW + timedelta(days=1),
    }
    data.update(overrides)
    return OfferResponse(**data)


def test_buy_x_get_y_redeems_full_groups_only():
    buy2get1 = offer(offer_type="buyXgetY", rules={"buy_quantity": 2, "get_quantity": 1})

    assert compute_discount(buy2get1, 100, 5) == Decimal("100.00")
    assert compute_discount(buy2get1, 100, 6) == Decimal("200.00")
    assert compute_discount(buy2get1, 100, 2) == Decimal("0.00")


def test_bundle_discount():
    bundle = offer(offer_type="bundleDiscount", rules={"min_quantity": 3, "bundle_price": 120})

    assert compute_discount(bundle, 50, 3) == Decimal("30.00")
    # units beyond the bundle pay the effective price
    assert compute_discount(bundle, 50, 5) == Decimal("30.00")
    assert compute_discount(bundle, 50, 2) == Decimal("0.00")


def test_bundle_priced_above_units_gives_no_discount():
    bundle = offer(offer_type="bundleDiscount", rules={"min_quantity": 2, "bundle_price": 300})

    assert compute_discount(bundle, 100, 2) == Decimal("0.00")


def test_percentage_off():
    pct = offer(rules={"discount_percentage": 25})

    assert compute_discount(pct, 200, 2) == Decimal("100.00")


def test_percentage_rounds_half_up():
    pct = offer(rules={"discount_percentage": 12.5})

    # 0.1 * 1 * 12.5% = 0.0125 -> 0.01; 0.3 * 12.5% = 0.0375 -> 0.04
    assert compute_discount(pct, 0.1, 1) == Decimal("0.01")
    assert compute_discount(pct, 0.3, 1) == Decimal("0.04")


def test_fixed_amount_is_clamped_to_line_value():
    fixed = offer(offer_type="fixedAmountOff", rules={"discount_amount": 500})

    assert compute_discount(fixed, 100, 2) == Decimal("200.00")


def test_min_quantity_gates_discount():
    fixed = offer(offer_type="fixedAmountOff", rules={"discount_amount": 10, "min_quantity": 3})

    assert compute_discount(fixed, 100, 2) == Decimal("0.00")
    assert compute_discount(fixed, 100, 3) == Decimal("10.00")


@pytest.mark.parametrize(
    "overrides",
    [
        {"is_active": False},
        {"start_date": NOW + timedelta(hours=1)},
        {"end_date": NOW - timedelta(hours=1)},
        {"usage_limit": 5, "usage_count": 5},
        {"product_ids": []},
        {"product_ids": [99]},
    ],
)
def test_ineligible_offers(overrides):
    assert not is_offer_applicable(offer(**overrides), product(), NOW)


@pytest.mark.parametrize(
    "scope",
    [
        {"product_ids": [], "category_ids": [2]},
        {"product_ids": [], "subcategory_ids": [3]},
        {"product_ids": [], "gender_ids": [1]},
    ],
)
def test_scope_matches_taxonomy(scope):
    assert is_offer_applicable(offer(**scope), product(), NOW)


def test_window_bounds_are_inclusive():
    assert is_offer_applicable(offer(start_date=NOW), product(), NOW)
    assert is_offer_applicable(offer(end_date=NOW), product(), NOW)


def test_offer_uses_effective_price():
    selection = select_best_offer(
        product(price=200, discount_price=150), [offer(rules={"discount_percentage": 10})], 2, NOW
    )

    assert selection.discount == Decimal("30.00")


def test_higher_priority_wins_over_bigger_discount():
    small = offer(1, rules={"discount_percentage": 5}, priority=10)
    big = offer(2, rules={"discount_percentage": 50}, priority=1)

    selection = select_best_offer(product(), [big, small], 1, NOW)

    assert selection.offer.id == 1
    assert selection.discount == Decimal("5.00")


def test_equal_priority_picks_bigger_discount():
    small = offer(1, rules={"discount_percentage": 5})
    big = offer(2, rules={"discount_percentage": 50})

    assert select_best_offer(product(), [small, big], 1, NOW).offer.id == 2


def test_full_tie_breaks_on_start_date_then_id():
    early = offer(3, start_date=NOW - timedelta(days=5))
    late = offer(1, start_date=NOW - timedelta(days=1))
    twin = offer(2, start_date=NOW - timedelta(days=5))

    assert select_best_offer(product(), [late, early, twin], 1, NOW).offer.id == 2


def test_selection_does_not_depend_on_input_order():
    offers = [
        offer(1, rules={"discount_percentage": 10}, priority=2),
        offer(2, offer_type="fixedAmountOff", rules={"discount_amount": 10}, priority=2),
        offer(3, offer_type="buyXgetY", rules={"buy_quantity": 1, "get_quantity": 1}),
        offer(4, rules={"discount_percentage": 10}, priority=2, start_date=NOW - timedelta(days=3)),
    ]

    results = {
        (s.offer.id, s.discount)
        for s in (select_best_offer(product(), list(p), 2, NOW) for p in itertools.permutations(offers))
    }

    assert results == {(4, Decimal("20.00"))}


def test_zero_discount_offers_are_dropped():
    useless = offer(1, offer_type="buyXgetY", rules={"buy_quantity": 5, "get_quantity": 1}, priority=99)
    real = offer(2, rules={"discount_percentage": 10})

    selection = select_best_offer(product(), [useless, real], 2, NOW)

    assert selection.offer.id == 2


def test_no_applicable_offer():
    selection = select_best_offer(product(), [offer(is_active=False)], 1, NOW)

    assert selection.offer is None
    assert selection.discount == Decimal("0")


@pytest.mark.parametrize("quantity", range(1, 12))
def test_discount_never_exceeds_line_value(quantity):
    offers = [
        offer(1, offer_type="buyXgetY", rules={"buy_quantity": 1, "get_quantity": 3}),
        offer(2, offer_type="fixedAmountOff", rules={"discount_amount": 1000}),
        offer(3, rules={"discount_percentage": 100}),
        offer(4, offer_type="bundleDiscount", rules={"min_quantity": 1, "bundle_price": 0}),
    ]
    p = product(price=19.99)

    for candidate in offers:
        selection = select_best_offer(p, [candidate], quantity, NOW)
        assert Decimal("0") <= selection.discount <= Decimal("19.99") * quantity
