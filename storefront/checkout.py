"""
Order placement from the current cart.

The order is an immutable snapshot of the cart plus the computed totals and an
address pair. Persistence goes through :class:`OrderService`, which falls back
to the local store, so placing an order does not fail on network errors. There
is no idempotency key: submitting twice creates two orders.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional

from .cart import CartManager
from .config import Settings, settings as default_settings
from .errors import CheckoutValidationError, EmptyCartError
from .pricing import compute_totals
from .schemas import Address, Cart, Order, OrderItem, PaymentMethod, now_iso
from .services.orders import OrderService

logger = logging.getLogger(__name__)

REQUIRED_ADDRESS_FIELDS = {
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "address_line1": "Street address is required",
    "city": "City is required",
    "state": "State is required",
    "postal_code": "ZIP code is required",
}


def validate_address(address: Address, require_email: bool = False) -> Dict[str, str]:
    errors = {
        field: message for field, message in REQUIRED_ADDRESS_FIELDS.items() if not getattr(address, field).strip()
    }
    if require_email:
        if not address.email.strip():
            errors["email"] = "Email is required"
        elif "@" not in address.email:
            errors["email"] = "Email is invalid"
    return errors


def generate_order_number(now_ms: Optional[int] = None) -> str:
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"ORD-{str(now_ms)[-8:]}"


def build_order(
    cart: Cart,
    billing_address: Address,
    payment: PaymentMethod,
    shipping_address: Optional[Address] = None,
    notes: str = "",
    config: Optional[Settings] = None,
) -> Order:
    """Assemble a pending order from a cart snapshot without persisting it."""

    config = config or default_settings
    items = [
        OrderItem(
            id=item.id,
            product_id=item.product_id,
            product_name=item.name,
            product_image=item.image,
            price=item.price,
            quantity=item.quantity,
            total_price=item.line_total,
            color=item.color,
            size=item.size,
        )
        for item in cart.items
    ]
    totals = compute_totals(items, config)
    timestamp = now_iso()
    return Order(
        order_number=generate_order_number(),
        customer_email=billing_address.email,
        customer_name=billing_address.full_name,
        items=items,
        subtotal=totals.subtotal,
        tax=totals.tax,
        shipping=totals.shipping,
        total=totals.total,
        status="pending",
        payment_status="pending",
        billing_address=billing_address,
        shipping_address=shipping_address or billing_address,
        payment_method=payment,
        notes=notes,
        created_at=timestamp,
        updated_at=timestamp,
    )


def place_order(
    cart: Cart,
    billing_address: Address,
    payment: PaymentMethod,
    order_service: OrderService,
    shipping_address: Optional[Address] = None,
    notes: str = "",
    cart_manager: Optional[CartManager] = None,
) -> Order:
    """Validate the form values, create the order and clear the cart on success."""

    if not cart.items:
        raise EmptyCartError()

    errors: Dict[str, Dict[str, str]] = {}
    billing_errors = validate_address(billing_address, require_email=True)
    if billing_errors:
        errors["billing"] = billing_errors
    if shipping_address is not None:
        shipping_errors = validate_address(shipping_address)
        if shipping_errors:
            errors["shipping"] = shipping_errors
    if errors:
        raise CheckoutValidationError(errors)

    order = build_order(
        cart,
        billing_address,
        payment,
        shipping_address=shipping_address,
        notes=notes,
        config=cart_manager.config if cart_manager is not None else order_service.config,
    )
    created = order_service.create_order(order)
    logger.info("Placed order %s for %s items", created.order_number, len(created.items))

    if cart_manager is not None:
        cart_manager.clear()
    return created
