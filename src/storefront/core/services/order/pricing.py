"""Checkout pricing rules."""

from dataclasses import dataclass

from src.storefront.runtime.config.config_data import StoreConfig


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    shipping: float
    tax: float
    total: float


def _cents(amount: float) -> float:
    return round(amount, 2)


def compute_totals(lines: list[tuple[float, int]], store: StoreConfig) -> OrderTotals:
    """Price a list of ``(unit_price, quantity)`` lines.

    Shipping is free once the subtotal is strictly above the threshold.
    """
    subtotal = _cents(sum(price * quantity for price, quantity in lines))
    shipping = 0.0 if subtotal > store.free_shipping_threshold else store.shipping_fee
    tax = _cents(subtotal * store.tax_rate)
    return OrderTotals(
        subtotal=subtotal,
        shipping=_cents(shipping),
        tax=tax,
        total=_cents(subtotal + shipping + tax),
    )


def to_minor_units(amount: float) -> int:
    """Amount in hundredths, the unit payment gateways exchange."""
    return int(round(amount * 100))
