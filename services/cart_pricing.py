"""Cart pricing: stored lines + current products + offers -> priced cart."""

from datetime import datetime
from typing import Iterable, List, Mapping

from schemas.cart import CartItemResponse, CartLine, CartResponse, CartSummary
from schemas.offer import AppliedOffer, OfferResponse
from schemas.product import ProductResponse
from services.offer_engine import ZERO, round_money, select_best_offer, to_decimal


def price_cart(
    lines: Iterable[CartLine],
    products: Mapping[int, ProductResponse],
    offers: List[OfferResponse],
    now: datetime,
) -> CartResponse:
    """
    Price every line against the current product state.

    Lines whose product no longer exists or is inactive are left out and
    listed in `summary.skipped_product_ids`.
    """
    items: List[CartItemResponse] = []
    skipped: List[int] = []
    subtotal = product_discounts = offer_discounts = total = ZERO
    total_items = 0

    for line in lines:
        product = products.get(line.product_id)
        if product is None or not product.is_active:
            skipped.append(line.product_id)
            continue

        price = to_decimal(product.price)
        effective = to_decimal(product.effective_price)
        quantity = line.quantity
        product_discount = round_money((price - effective) * quantity)
        selection = select_best_offer(product, offers, quantity, now)
        item_total = round_money(effective * quantity - selection.discount)

        items.append(
            CartItemResponse(
                product_id=product.id,
                name=product.name,
                sku=product.sku,
                image=product.images[0] if product.images else None,
                price=product.price,
                discount_price=product.discount_price,
                effective_price=product.effective_price,
                quantity=quantity,
                stock=product.stock,
                product_discount=float(product_discount),
                applied_offer=(
                    AppliedOffer(
                        id=selection.offer.id,
                        name=selection.offer.name,
                        description=selection.offer.description,
                        offer_type=selection.offer.offer_type,
                    )
                    if selection.offer
                    else None
                ),
                offer_discount=float(selection.discount),
                item_total=float(item_total),
                added_at=line.added_at,
            )
        )

        subtotal += round_money(price * quantity)
        product_discounts += product_discount
        offer_discounts += selection.discount
        total += item_total
        total_items += quantity

    summary = CartSummary(
        subtotal=float(subtotal),
        total_product_discount=float(product_discounts),
        total_offer_discount=float(offer_discounts),
        total_discount=float(product_discounts + offer_discounts),
        total=float(max(total, ZERO)),
        total_items=total_items,
        item_count=len(items),
        skipped_product_ids=skipped,
    )
    return CartResponse(items=items, summary=summary)
