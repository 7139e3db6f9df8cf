"""
Pydantic models for the storefront records.

Fields are snake_case in Python and camelCase on the wire and in the local
store, so records written by the API and by the fallback path share one shape.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ProductStatus = Literal["active", "inactive", "draft", "discontinued"]
CategoryStatus = Literal["active", "inactive"]
OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled", "refunded"]
PaymentStatus = Literal["pending", "processing", "completed", "failed", "refunded"]
PaymentType = Literal["credit_card", "paypal", "cash_on_delivery"]

ORDER_STATUSES: tuple[str, ...] = get_args(OrderStatus)


def now_iso() -> str:
    return datetime.now().isoformat()


def unwrap_envelope(payload: Any) -> Any:
    """Strip the backend's ``{"success": true, "data": ...}`` wrapper when present."""

    if isinstance(payload, dict) and payload.get("success") and "data" in payload:
        return payload["data"]
    return payload


def normalize_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Map a backend document onto the local record shape (``_id`` becomes ``id``)."""

    out = dict(doc)
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out


class StoreModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_record(self, exclude: Optional[set[str]] = None) -> Dict[str, Any]:
        """Serialize in the camelCase shape used by the API and the local store."""
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


def _as_str(value: Any) -> Any:
    # Backends hand out numeric ids as often as string ones.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


RecordId = Annotated[str, BeforeValidator(_as_str)]


class ColorOption(StoreModel):
    name: str
    hex: str = ""


class Product(StoreModel):
    id: RecordId = ""
    name: str
    description: str = ""
    price: float = 0.0
    old_price: Optional[float] = None
    stock: int = 0
    status: ProductStatus = "active"
    category: str = ""
    subcategory: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    colors: List[ColorOption] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    brand: Optional[str] = None
    sku: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    rating: float = 0.0
    reviews: int = 0
    featured: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def discount_percent(self) -> int:
        if self.old_price and self.old_price > self.price:
            return int(((self.old_price - self.price) / self.old_price) * 100)
        return 0

    def stock_label(self, low_stock_threshold: int = 10) -> str:
        if self.stock <= 0:
            return "Out of Stock"
        if self.stock < low_stock_threshold:
            return "Low Stock"
        return "In Stock"


class ProductStats(StoreModel):
    total_products: int = 0
    active_products: int = 0
    out_of_stock: int = 0
    low_stock: int = 0
    total_value: float = 0.0


class ProductPage(StoreModel):
    products: List[Product] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0


class Category(StoreModel):
    id: RecordId = ""
    name: str
    slug: str = Field(default="", validate_default=True)
    description: str = ""
    image: Optional[str] = None
    parent_id: Optional[RecordId] = None
    status: CategoryStatus = "active"
    product_count: int = 0
    subcategories: List["Category"] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("slug", mode="after")
    @classmethod
    def default_slug(cls, value: str, info) -> str:
        if value:
            return value
        name = info.data.get("name") or ""
        return "-".join(name.lower().split())


class CartItem(StoreModel):
    id: RecordId
    product_id: RecordId
    name: str
    price: float = 0.0
    quantity: int = 1
    image: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    added_at: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Cart(StoreModel):
    id: str = "cart-1"
    items: List[CartItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    total: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Address(StoreModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class PaymentMethod(StoreModel):
    """Payment details kept on an order. Only the last four card digits are stored."""

    type: PaymentType = "credit_card"
    last4: str = ""
    brand: str = ""
    cardholder_name: str = ""
    expiry_month: str = ""
    expiry_year: str = ""

    @classmethod
    def from_card(
        cls,
        card_number: str,
        cardholder_name: str = "",
        expiry_month: str = "",
        expiry_year: str = "",
        brand: str = "visa",
    ) -> "PaymentMethod":
        digits = "".join(ch for ch in card_number if ch.isdigit())
        return cls(
            type="credit_card",
            last4=digits[-4:],
            brand=brand,
            cardholder_name=cardholder_name,
            expiry_month=expiry_month,
            expiry_year=expiry_year,
        )


def _payment_from_type(value: Any) -> Any:
    # The orders API stores the payment method as a bare type string.
    if isinstance(value, str):
        return {"type": value}
    return value


class OrderItem(StoreModel):
    id: RecordId = ""
    product_id: RecordId
    product_name: str
    product_image: Optional[str] = None
    price: float = 0.0
    quantity: int = 1
    total_price: float = 0.0
    color: Optional[str] = None
    size: Optional[str] = None
    sku: Optional[str] = None


class Order(StoreModel):
    model_config = ConfigDict(frozen=True)

    id: RecordId = ""
    order_number: str = ""
    customer_email: str = ""
    customer_name: str = ""
    items: List[OrderItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    status: OrderStatus = "pending"
    payment_status: PaymentStatus = "pending"
    billing_address: Address = Field(default_factory=Address)
    shipping_address: Address = Field(default_factory=Address)
    payment_method: Annotated[PaymentMethod, BeforeValidator(_payment_from_type)] = Field(default_factory=PaymentMethod)
    shipping_method: str = "standard"
    notes: str = ""
    tracking_number: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OrderStats(StoreModel):
    total_orders: int = 0
    total_revenue: float = 0.0
    average_order_value: float = 0.0
    pending_orders: int = 0
    confirmed_orders: int = 0
    processing_orders: int = 0
    shipped_orders: int = 0
    delivered_orders: int = 0
    cancelled_orders: int = 0
    refunded_orders: int = 0


class Customer(StoreModel):
    id: RecordId = ""
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    addresses: List[Address] = Field(default_factory=list)
    status: Literal["active", "inactive"] = "active"
    total_orders: int = 0
    total_spent: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CustomerStats(StoreModel):
    total_customers: int = 0
    active_customers: int = 0
    total_revenue: float = 0.0
    average_spent: float = 0.0
