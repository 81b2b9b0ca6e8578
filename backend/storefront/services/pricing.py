"""Order totals: subtotal, shipping, tax, discount.

All arithmetic is done on unrounded Decimals. ``round_money`` and
``format_money`` exist for presentation only; nothing in this module rounds
an intermediate value.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from storefront.core.config import settings

ZERO = Decimal("0")
CENT = Decimal("0.01")


def D(x) -> Decimal:
    """Coerce to Decimal (floats go through str to avoid binary noise)"""
    if isinstance(x, Decimal):
        return x
    if x is None:
        return ZERO
    return Decimal(str(x))


def round_money(x) -> Decimal:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)


def money_json(x) -> Optional[float]:
    """Display value for JSON responses"""
    if x is None:
        return None
    return float(round_money(x))


def format_money(x, currency: str = "eur") -> str:
    symbol = {"eur": "€", "usd": "$", "gbp": "£", "sek": "kr "}.get(currency.lower(), "")
    return f"{symbol}{round_money(x):,.2f}"


@dataclass(frozen=True)
class PricingPolicy:
    """Tax and shipping rules for one checkout flow"""
    name: str
    tax_rate: Decimal
    free_shipping_threshold: Decimal
    standard_shipping: Decimal
    country_rates: dict = field(default_factory=dict)
    # True: free at >= threshold. False: free only strictly above it.
    free_shipping_inclusive: bool = True


def get_policies() -> dict[str, PricingPolicy]:
    return {
        "storefront": PricingPolicy(
            name="storefront",
            tax_rate=settings.STOREFRONT_TAX_RATE,
            free_shipping_threshold=settings.STOREFRONT_FREE_SHIPPING_THRESHOLD,
            standard_shipping=settings.STOREFRONT_SHIPPING_RATE,
            country_rates=settings.storefront_shipping_overrides,
            free_shipping_inclusive=True,
        ),
        "custom_print": PricingPolicy(
            name="custom_print",
            tax_rate=settings.CUSTOM_PRINT_TAX_RATE,
            free_shipping_threshold=settings.CUSTOM_PRINT_FREE_SHIPPING_THRESHOLD,
            standard_shipping=settings.CUSTOM_PRINT_SHIPPING_RATE,
            free_shipping_inclusive=False,
        ),
    }


def get_policy(name: str) -> PricingPolicy:
    policies = get_policies()
    if name not in policies:
        raise ValueError(f"Unknown pricing policy: {name}")
    return policies[name]


def shipping_cost(policy: PricingPolicy, country: str, subtotal) -> Decimal:
    """Shipping for a destination country and subtotal"""
    subtotal = D(subtotal)
    threshold = policy.free_shipping_threshold
    if subtotal > threshold or (policy.free_shipping_inclusive and subtotal == threshold):
        return ZERO
    country_key = (country or "").strip().lower()
    if country_key in policy.country_rates:
        return D(policy.country_rates[country_key])
    return D(policy.standard_shipping)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_amount: Decimal
    discounted_subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    original_total: Decimal


def items_subtotal(items: Iterable) -> Decimal:
    """Sum of unit price x quantity; items expose ``price`` and ``quantity``"""
    return sum((D(item.price) * item.quantity for item in items), ZERO)


def calculate_totals(items: Iterable, shipping, tax_rate, discount_amount=ZERO) -> OrderTotals:
    """
    Totals for a set of line items.

    Tax is charged on the pre-discount subtotal; the discount only reduces
    the merchandise amount.
    """
    subtotal = items_subtotal(items)
    discount_amount = max(ZERO, D(discount_amount))
    shipping = D(shipping)
    tax = subtotal * D(tax_rate)
    discounted_subtotal = max(ZERO, subtotal - discount_amount)
    return OrderTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        discounted_subtotal=discounted_subtotal,
        shipping=shipping,
        tax=tax,
        total=discounted_subtotal + shipping + tax,
        original_total=subtotal + shipping + tax,
    )
