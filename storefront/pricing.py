"""Cart total computation: subtotal, flat shipping with a free threshold, and flat-rate tax."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, NamedTuple, Optional

from .config import Settings, settings as default_settings


class CartTotals(NamedTuple):
    subtotal: float
    shipping: float
    tax: float
    total: float


def _line_amount(item: Any) -> float:
    if isinstance(item, Mapping):
        price, quantity = item.get("price", 0), item.get("quantity", 0)
    else:
        price, quantity = item.price, item.quantity
    return float(price or 0) * int(quantity or 0)


def compute_subtotal(items: Iterable[Any]) -> float:
    return sum((_line_amount(item) for item in items), 0.0)


def shipping_for(subtotal: float, config: Optional[Settings] = None) -> float:
    """Free once the subtotal reaches the threshold (inclusive), flat fee below it."""
    config = config or default_settings
    return 0.0 if subtotal >= config.free_shipping_threshold else config.shipping_fee


def tax_for(subtotal: float, config: Optional[Settings] = None) -> float:
    config = config or default_settings
    return subtotal * config.tax_rate


def compute_totals(items: Iterable[Any], config: Optional[Settings] = None) -> CartTotals:
    """
    Compute checkout totals for a list of items.

    Items may be model objects exposing ``price``/``quantity`` or plain mappings
    with the same keys. No rounding is applied; see :func:`format_money`.
    """
    subtotal = compute_subtotal(items)
    shipping = shipping_for(subtotal, config)
    tax = tax_for(subtotal, config)
    return CartTotals(subtotal=subtotal, shipping=shipping, tax=tax, total=subtotal + shipping + tax)


def free_shipping_remaining(subtotal: float, config: Optional[Settings] = None) -> float:
    config = config or default_settings
    return max(config.free_shipping_threshold - subtotal, 0.0)


def format_money(amount: float) -> str:
    return f"${amount:,.2f}"
