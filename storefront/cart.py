"""Session cart kept in the local store under the ``cart`` key."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from pydantic import ValidationError

from .config import Settings, settings as default_settings
from .pricing import compute_totals
from .schemas import Cart, CartItem, Product, now_iso
from .storage import CART_KEY, LocalStore

logger = logging.getLogger(__name__)


class CartManager:
    """Read/update interface over the persisted cart. Every mutation recomputes totals and saves."""

    def __init__(self, store: Optional[LocalStore] = None, config: Optional[Settings] = None) -> None:
        self.config = config or default_settings
        self.store = store or LocalStore(self.config.store_path)

    def load(self) -> Cart:
        raw = self.store.get_value(CART_KEY)
        if isinstance(raw, dict):
            try:
                return Cart.model_validate(raw)
            except ValidationError:
                logger.warning("Stored cart is unreadable; starting with an empty cart")
        timestamp = now_iso()
        return Cart(created_at=timestamp, updated_at=timestamp)

    def save(self, cart: Cart) -> Cart:
        totals = compute_totals(cart.items, self.config)
        cart = cart.model_copy(
            update={
                "subtotal": totals.subtotal,
                "tax": totals.tax,
                "shipping": totals.shipping,
                "total": totals.total,
                "updated_at": now_iso(),
            }
        )
        self.store.set_value(CART_KEY, cart.to_record())
        return cart

    def add_item(
        self,
        product_id: str,
        quantity: int = 1,
        name: Optional[str] = None,
        price: float = 0.0,
        image: Optional[str] = None,
        color: Optional[str] = None,
        size: Optional[str] = None,
    ) -> Cart:
        """Add a line, or grow the existing line with the same product, color and size."""

        if quantity < 1:
            raise ValueError("Quantity must be positive")

        cart = self.load()
        product_id = str(product_id)
        items = list(cart.items)
        for index, item in enumerate(items):
            if item.product_id == product_id and item.color == color and item.size == size:
                items[index] = item.model_copy(update={"quantity": item.quantity + quantity})
                break
        else:
            items.append(
                CartItem(
                    id=f"item-{uuid4().hex[:12]}",
                    product_id=product_id,
                    name=name or f"Product {product_id}",
                    price=price,
                    quantity=quantity,
                    image=image,
                    color=color,
                    size=size,
                    added_at=now_iso(),
                )
            )
        return self.save(cart.model_copy(update={"items": items}))

    def add_product(
        self,
        product: Product,
        quantity: int = 1,
        color: Optional[str] = None,
        size: Optional[str] = None,
    ) -> Cart:
        return self.add_item(
            product_id=product.id,
            quantity=quantity,
            name=product.name,
            price=product.price,
            image=product.images[0] if product.images else None,
            color=color,
            size=size,
        )

    def update_item(self, item_id: str, quantity: int) -> Cart:
        cart = self.load()
        items = []
        for item in cart.items:
            if item.id != item_id:
                items.append(item)
            elif quantity > 0:
                items.append(item.model_copy(update={"quantity": quantity}))
        return self.save(cart.model_copy(update={"items": items}))

    def remove_item(self, item_id: str) -> Cart:
        cart = self.load()
        return self.save(cart.model_copy(update={"items": [i for i in cart.items if i.id != item_id]}))

    def clear(self) -> Cart:
        self.store.remove(CART_KEY)
        return self.load()

    def count(self) -> int:
        return sum(item.quantity for item in self.load().items)
