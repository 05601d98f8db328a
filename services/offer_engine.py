"""
Offer resolution.

Pure functions: given a product, a quantity, the candidate offers and the
current time, pick the single best offer and the discount it grants. All
money arithmetic uses Decimal rounded half-up to cents.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from schemas.offer import (
    BundleDiscountRule,
    BuyXGetYRule,
    FixedAmountOffRule,
    OfferResponse,
    PercentageOffRule,
)
from schemas.product import ProductResponse

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OfferSelection:
    offer: Optional[OfferResponse]
    discount: Decimal = ZERO


def in_scope(offer: OfferResponse, product: ProductResponse) -> bool:
    """Offer scope matches on product id, category, subcategory or gender."""
    return (
        product.id in offer.product_ids
        or product.category_id in offer.category_ids
        or product.subcategory_id in offer.subcategory_ids
        or product.gender_id in offer.gender_ids
    )


def is_offer_applicable(offer: OfferResponse, product: ProductResponse, now: datetime) -> bool:
    if not offer.is_active:
        return False
    if not (offer.start_date <= now <= offer.end_date):
        return False
    if offer.usage_limit is not None and offer.usage_count >= offer.usage_limit:
        return False
    return in_scope(offer, product)


def compute_discount(offer: OfferResponse, effective_price, quantity: int) -> Decimal:
    """Discount granted by `offer` on `quantity` units, clamped to [0, line value]."""
    price = to_decimal(effective_price)
    line_value = price * quantity
    rule = offer.rules
    discount = ZERO

    if isinstance(rule, BuyXGetYRule):
        group = rule.buy_quantity + rule.get_quantity
        if quantity >= group:
            discount = (quantity // group) * rule.get_quantity * price
    elif isinstance(rule, BundleDiscountRule):
        if quantity >= rule.min_quantity:
            # one bundle replaces min_quantity units, the rest pay the effective price
            discount = price * rule.min_quantity - to_decimal(rule.bundle_price)
    elif isinstance(rule, PercentageOffRule):
        if quantity >= rule.min_quantity:
            discount = line_value * to_decimal(rule.discount_percentage) / 100
    elif isinstance(rule, FixedAmountOffRule):
        if quantity >= rule.min_quantity:
            discount = min(to_decimal(rule.discount_amount), line_value)

    return round_money(min(max(discount, ZERO), line_value))


def select_best_offer(
    product: ProductResponse,
    offers: Iterable[OfferResponse],
    quantity: int,
    now: datetime,
) -> OfferSelection:
    """
    Best applicable offer for `quantity` units of `product`.

    Ranking: priority desc, then discount desc, then start_date asc, then
    id asc. The result does not depend on the order of `offers`.
    """
    if quantity < 1:
        return OfferSelection(None)

    candidates = []
    for offer in offers:
        if not is_offer_applicable(offer, product, now):
            continue
        discount = compute_discount(offer, product.effective_price, quantity)
        if discount > ZERO:
            candidates.append((offer, discount))

    if not candidates:
        return OfferSelection(None)

    offer, discount = min(
        candidates,
        key=lambda c: (-c[0].priority, -c[1], c[0].start_date, c[0].id),
    )
    return OfferSelection(offer, discount)
