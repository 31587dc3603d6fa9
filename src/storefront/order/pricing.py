"""Order price policies: tax and shipping.

Both are plain functions of the order's contents and destination so they can
be exercised without a store.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from math import ceil

FREE_SHIPPING_THRESHOLD = 100.0
BASE_SHIPPING = 10.0
INCLUDED_WEIGHT = 10.0  # pounds covered by the base fee
WEIGHT_TIER = 5.0  # pounds per surcharge step
WEIGHT_TIER_FEE = 5.0
MAX_SHIPPING = 50.0

FLAT_TAX_RATE = 0.08
DEFAULT_TAX_RATE = 0.05
STATE_TAX_RATES = {
    "CA": 0.0875,
    "NY": 0.08,
    "TX": 0.0625,
    "FL": 0.06,
}


def round_money(amount: float) -> float:
    """Round half-up to cents."""
    return float(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def tax_rate_for(state: str | None) -> float:
    return STATE_TAX_RATES.get((state or "").strip().upper(), DEFAULT_TAX_RATE)


def state_tax(items_price: float, state: str | None) -> float:
    return round_money(items_price * tax_rate_for(state))


def flat_tax(items_price: float, state: str | None = None) -> float:  # noqa: ARG001
    return round_money(items_price * FLAT_TAX_RATE)


def shipping_cost(items_price: float, total_weight: float) -> float:
    """Free above the threshold; otherwise a base fee plus a surcharge per started weight tier, capped."""
    if items_price >= FREE_SHIPPING_THRESHOLD:
        return 0.0

    cost = BASE_SHIPPING
    if total_weight > INCLUDED_WEIGHT:
        cost += ceil((total_weight - INCLUDED_WEIGHT) / WEIGHT_TIER) * WEIGHT_TIER_FEE
    return min(cost, MAX_SHIPPING)


@dataclass(frozen=True)
class PriceBreakdown:
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float


def price_order(line_totals, total_weight: float, state: str | None, tax_policy=state_tax) -> PriceBreakdown:
    items_price = round_money(sum(line_totals))
    tax_price = tax_policy(items_price, state)
    shipping_price = shipping_cost(items_price, total_weight)
    return PriceBreakdown(
        items_price=items_price,
        tax_price=tax_price,
        shipping_price=shipping_price,
        total_price=round_money(items_price + tax_price + shipping_price),
    )
