from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ..errors import ApiError
from ..schemas import Customer, CustomerStats, unwrap_envelope
from ..storage import CUSTOMERS_KEY
from .base import FallbackService, to_aliases, to_field_names


def compute_customer_stats(customers: Iterable[Customer]) -> CustomerStats:
    customers = list(customers)
    revenue = sum(c.total_spent for c in customers)
    return CustomerStats(
        total_customers=len(customers),
        active_customers=sum(1 for c in customers if c.status == "active"),
        total_revenue=revenue,
        average_spent=revenue / len(customers) if customers else 0.0,
    )


class CustomerService(FallbackService):
    storage_key = CUSTOMERS_KEY
    model = Customer
    label = "Customer"

    def list_customers(self, search: Optional[str] = None) -> List[Customer]:
        def local() -> List[Customer]:
            customers = self.load_local()
            if search:
                needle = search.lower()
                customers = [
                    c
                    for c in customers
                    if needle in c.email.lower() or needle in f"{c.first_name} {c.last_name}".lower()
                ]
            return customers

        return self.run(
            "list customers",
            lambda: self.parse_list(self.client.get("/customers", params={"search": search}), "customers"),
            local,
        )

    def get_customer(self, customer_id: str) -> Customer:
        return self.run(
            f"get customer {customer_id}",
            lambda: self.parse(self.client.get(f"/customers/{customer_id}")),
            lambda: self.local_get(customer_id),
        )

    def create_customer(self, data: Dict[str, Any]) -> Customer:
        draft = Customer.model_validate(to_field_names(Customer, data))
        record = draft.to_record(exclude={"id"})
        return self.write(
            "create customer",
            lambda: self.client.post("/customers", json=record),
            lambda: self.local_create(draft.model_dump(exclude_unset=True)),
            sent=record,
        )

    def update_customer(self, customer_id: str, changes: Dict[str, Any]) -> Customer:
        return self.write(
            f"update customer {customer_id}",
            lambda: self.client.put(f"/customers/{customer_id}", json=to_aliases(Customer, changes)),
            lambda: self.local_update(customer_id, changes),
        )

    def delete_customer(self, customer_id: str) -> None:
        self.run(
            f"delete customer {customer_id}",
            lambda: self.client.delete(f"/customers/{customer_id}"),
            lambda: self.local_delete(customer_id),
        )

    def customer_stats(self) -> CustomerStats:
        def remote() -> CustomerStats:
            payload = unwrap_envelope(self.client.get("/customers/stats"))
            if not isinstance(payload, dict):
                raise ApiError("Unexpected customer stats payload")
            return CustomerStats.model_validate(payload)

        return self.run("get customer stats", remote, lambda: compute_customer_stats(self.load_local()))
