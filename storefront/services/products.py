from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ..schemas import Product, ProductPage, ProductStats
from ..storage import PRODUCTS_KEY
from .base import FallbackService, page_count, sort_records, to_aliases, to_field_names


def filter_products(
    products: Iterable[Product],
    category: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    in_stock: Optional[bool] = None,
) -> List[Product]:
    filtered = list(products)

    if category:
        filtered = [p for p in filtered if p.category.lower() == category.lower()]
    if status:
        filtered = [p for p in filtered if p.status == status]
    if search:
        needle = search.lower()
        filtered = [
            p
            for p in filtered
            if needle in p.name.lower()
            or needle in p.description.lower()
            or any(needle in tag.lower() for tag in p.tags)
        ]
    if featured is not None:
        filtered = [p for p in filtered if p.featured == featured]
    if min_price is not None:
        filtered = [p for p in filtered if p.price >= min_price]
    if max_price is not None:
        filtered = [p for p in filtered if p.price <= max_price]
    if in_stock:
        filtered = [p for p in filtered if p.stock > 0]
    return filtered


def paginate(products: List[Product], page: int, limit: int) -> ProductPage:
    start = (page - 1) * limit
    return ProductPage(
        products=products[start : start + limit],
        total=len(products),
        page=page,
        total_pages=page_count(len(products), limit),
    )


def product_stats(products: Iterable[Product], low_stock_threshold: int = 10) -> ProductStats:
    """Inventory summary: counts by stock level and the value of active stock."""

    products = list(products)
    active = [p for p in products if p.status != "inactive"]
    return ProductStats(
        total_products=len(products),
        active_products=len(active),
        out_of_stock=sum(1 for p in products if p.stock <= 0),
        low_stock=sum(1 for p in products if 0 < p.stock < low_stock_threshold),
        total_value=sum(p.price * p.stock for p in active),
    )


class ProductService(FallbackService):
    storage_key = PRODUCTS_KEY
    model = Product
    label = "Product"

    def list_products(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        in_stock: Optional[bool] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
        page: int = 1,
        limit: int = 12,
    ) -> ProductPage:
        params = {
            "category": category,
            "status": status,
            "search": search,
            "featured": _flag(featured),
            "minPrice": min_price,
            "maxPrice": max_price,
            "inStock": _flag(in_stock),
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "page": page,
            "limit": limit,
        }

        def remote() -> ProductPage:
            payload = self.client.get("/products", params=params)
            products = self.parse_list(payload, "products")
            if isinstance(payload, dict) and "total" in payload:
                total = int(payload["total"])
                return ProductPage(
                    products=products,
                    total=total,
                    page=int(payload.get("page", page)),
                    total_pages=int(payload.get("totalPages", page_count(total, limit))),
                )
            return ProductPage(products=products, total=len(products), page=page, total_pages=1)

        def local() -> ProductPage:
            filtered = filter_products(
                self.load_local(),
                category=category,
                status=status,
                search=search,
                featured=featured,
                min_price=min_price,
                max_price=max_price,
                in_stock=in_stock,
            )
            return paginate(sort_records(filtered, sort_by, sort_order), page, limit)

        return self.run("list products", remote, local)

    def get_product(self, product_id: str) -> Product:
        return self.run(
            f"get product {product_id}",
            lambda: self.parse(self.client.get(f"/products/{product_id}")),
            lambda: self.local_get(product_id),
        )

    def create_product(self, data: Dict[str, Any]) -> Product:
        draft = Product.model_validate(to_field_names(Product, data))
        record = draft.to_record(exclude={"id"})
        return self.write(
            "create product",
            lambda: self.client.post("/products", json=record),
            lambda: self.local_create(draft.model_dump(exclude_unset=True)),
            sent=record,
        )

    def update_product(self, product_id: str, changes: Dict[str, Any]) -> Product:
        return self.write(
            f"update product {product_id}",
            lambda: self.client.put(f"/products/{product_id}", json=to_aliases(Product, changes)),
            lambda: self.local_update(product_id, changes),
        )

    def delete_product(self, product_id: str) -> None:
        self.run(
            f"delete product {product_id}",
            lambda: self.client.delete(f"/products/{product_id}"),
            lambda: self.local_delete(product_id),
        )

    def get_featured_products(self, limit: int = 8) -> List[Product]:
        return self.run(
            "get featured products",
            lambda: self.parse_list(self.client.get("/products/featured", params={"limit": limit}), "products"),
            lambda: [p for p in self.load_local() if p.featured][:limit],
        )

    def search_products(
        self,
        query: str,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
    ) -> List[Product]:
        params = {
            "q": query,
            "category": category,
            "minPrice": min_price,
            "maxPrice": max_price,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }

        def local() -> List[Product]:
            matches = filter_products(
                self.load_local(), category=category, search=query, min_price=min_price, max_price=max_price
            )
            return sort_records(matches, sort_by, sort_order)

        return self.run(
            f"search products for {query!r}",
            lambda: self.parse_list(self.client.get("/products/search", params=params), "products"),
            local,
        )

    def get_related_products(self, product_id: str, limit: int = 4) -> List[Product]:
        def local() -> List[Product]:
            product = self.local_get(product_id)
            related = [p for p in self.load_local() if p.category == product.category and p.id != product.id]
            return related[:limit]

        return self.run(
            f"get products related to {product_id}",
            lambda: self.parse_list(
                self.client.get(f"/products/{product_id}/related", params={"limit": limit}), "products"
            ),
            local,
        )

    def stats(self) -> ProductStats:
        page = self.list_products(limit=1000)
        return product_stats(page.products, self.config.low_stock_threshold)


def _flag(value: Optional[bool]) -> Optional[str]:
    return None if value is None else str(value).lower()
