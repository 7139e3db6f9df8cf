from __future__ import annotations

from typing import Iterable, List, Optional

from ..errors import ApiError
from ..schemas import ORDER_STATUSES, Order, OrderStats, unwrap_envelope
from ..storage import ORDERS_KEY
from .base import FallbackService, sort_records

# Dashboard sort names that differ from the field they sort on.
_SORT_FIELDS = {"customer": "customer_email"}


def filter_orders(
    orders: Iterable[Order],
    status: Optional[str] = None,
    search: Optional[str] = None,
    customer_email: Optional[str] = None,
) -> List[Order]:
    filtered = list(orders)

    if status and status != "all":
        filtered = [o for o in filtered if o.status == status]
    if customer_email:
        filtered = [o for o in filtered if o.customer_email.lower() == customer_email.lower()]
    if search:
        needle = search.lower()
        filtered = [
            o
            for o in filtered
            if needle in o.order_number.lower()
            or needle in o.customer_email.lower()
            or needle in o.customer_name.lower()
            or any(needle in item.product_name.lower() for item in o.items)
        ]
    return filtered


def compute_order_stats(orders: Iterable[Order]) -> OrderStats:
    orders = list(orders)
    revenue = sum(o.total for o in orders)
    counts = {f"{status}_orders": sum(1 for o in orders if o.status == status) for status in ORDER_STATUSES}
    return OrderStats(
        total_orders=len(orders),
        total_revenue=revenue,
        average_order_value=revenue / len(orders) if orders else 0.0,
        **counts,
    )


class OrderService(FallbackService):
    storage_key = ORDERS_KEY
    model = Order
    label = "Order"

    def create_order(self, order: Order) -> Order:
        """Persist a new order, locally when the API cannot be reached.

        An order the API accepted is never written again locally.
        """

        record = order.to_record(exclude={"id"}) if not order.id else order.to_record()
        # The orders API takes the payment method as its type string.
        record["paymentMethod"] = order.payment_method.type
        return self.write(
            f"create order {order.order_number}",
            lambda: self.client.post("/orders", json=record),
            lambda: self.local_create(order.model_dump()),
            sent=record,
        )

    def list_orders(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        customer_email: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> List[Order]:
        params = {
            "status": status,
            "search": search,
            "customerEmail": customer_email,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }

        def local() -> List[Order]:
            matches = filter_orders(self.load_local(), status=status, search=search, customer_email=customer_email)
            return sort_records(matches, _SORT_FIELDS.get(sort_by, sort_by), sort_order)

        return self.run(
            "list orders",
            lambda: self.parse_list(self.client.get("/orders", params=params), "orders"),
            local,
        )

    def get_order(self, order_id: str) -> Order:
        return self.run(
            f"get order {order_id}",
            lambda: self.parse(self.client.get(f"/orders/{order_id}")),
            lambda: self.local_get(order_id),
        )

    def update_order_status(self, order_id: str, status: str, notes: Optional[str] = None) -> Order:
        """Set any status on an order; transitions are not restricted."""

        if status not in ORDER_STATUSES:
            raise ValueError(f"Unknown order status: {status}")
        body = {"status": status}
        if notes is not None:
            body["notes"] = notes
        return self.write(
            f"update status of order {order_id}",
            lambda: self.client.put(f"/orders/{order_id}/status", json=body),
            lambda: self.local_update(order_id, body),
        )

    def update_tracking(self, order_id: str, tracking_number: str) -> Order:
        body = {"trackingNumber": tracking_number}
        return self.write(
            f"update tracking of order {order_id}",
            lambda: self.client.put(f"/orders/{order_id}/tracking", json=body),
            lambda: self.local_update(order_id, body),
        )

    def delete_order(self, order_id: str) -> None:
        self.run(
            f"delete order {order_id}",
            lambda: self.client.delete(f"/orders/{order_id}"),
            lambda: self.local_delete(order_id),
        )

    def order_stats(self) -> OrderStats:
        def remote() -> OrderStats:
            payload = unwrap_envelope(self.client.get("/orders/stats"))
            if not isinstance(payload, dict):
                raise ApiError("Unexpected order stats payload")
            return OrderStats.model_validate(payload)

        return self.run("get order stats", remote, lambda: compute_order_stats(self.load_local()))
