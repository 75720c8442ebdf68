"""Domain service: Order Cost Calculator.

Pure functions over an immutable list of line items. Each step depends on
the previous one, so the order is fixed:

    subtotal -> tax -> shipping -> total
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from bookstore.domain.exceptions import ValidationError
from bookstore.domain.model.order import OrderCosts, OrderLineItem
from bookstore.domain.model.value_objects import Money

DEFAULT_TAX_RATE = Decimal("0.08")
DEFAULT_FREE_SHIPPING_THRESHOLD = Money.of("50")
DEFAULT_FLAT_SHIPPING_FEE = Money.of("199")


@dataclass(frozen=True)
class CostPolicy:
    tax_rate: Decimal = DEFAULT_TAX_RATE
    free_shipping_threshold: Money = DEFAULT_FREE_SHIPPING_THRESHOLD
    flat_shipping_fee: Money = DEFAULT_FLAT_SHIPPING_FEE

    def __post_init__(self) -> None:
        if not isinstance(self.tax_rate, Decimal) or self.tax_rate < 0:
            raise ValidationError("Tax rate must be a non-negative Decimal")


def calculate_subtotal(items: Iterable[OrderLineItem]) -> Money:
    result = Money.zero()
    for item in items:
        result = result + item.subtotal
    return result


def calculate_shipping(subtotal: Money, policy: CostPolicy) -> Money:
    if subtotal >= policy.free_shipping_threshold:
        return Money.zero()
    return policy.flat_shipping_fee


def calculate_order_costs(
    items: Iterable[OrderLineItem],
    policy: CostPolicy | None = None,
) -> OrderCosts:
    """Derive subtotal, tax, shipping and total for a fixed item list."""
    policy = policy or CostPolicy()
    subtotal = calculate_subtotal(items)
    tax = subtotal.scaled(policy.tax_rate)
    shipping = calculate_shipping(subtotal, policy)
    total = (subtotal + tax + shipping).rounded()
    return OrderCosts(subtotal=subtotal, tax=tax, shipping_cost=shipping, total=total)


def ensure_costs(
    existing: OrderCosts | None,
    items: Iterable[OrderLineItem],
    policy: CostPolicy | None = None,
) -> OrderCosts:
    """Return *existing* untouched once it carries a non-zero subtotal.

    Costs are fixed the first time they are computed; saving an order again
    must never re-price it.
    """
    if existing is not None and not existing.subtotal.is_zero:
        return existing
    return calculate_order_costs(items, policy)
