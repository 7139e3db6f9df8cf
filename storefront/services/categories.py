from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from ..schemas import Category, Product
from ..storage import CATEGORIES_KEY
from .base import FallbackService, to_aliases, to_field_names


def build_category_tree(categories: Iterable[Category]) -> List[Category]:
    """Nest child categories under their parents. Only one level is kept."""

    categories = list(categories)
    children: Dict[str, List[Category]] = {}
    for category in categories:
        if category.parent_id:
            children.setdefault(category.parent_id, []).append(category)
    return [
        category.model_copy(update={"subcategories": children.get(category.id, [])})
        for category in categories
        if not category.parent_id
    ]


class CategoryService(FallbackService):
    storage_key = CATEGORIES_KEY
    model = Category
    label = "Category"

    def list_categories(self, status: Optional[str] = None, parent_id: Optional[str] = None) -> List[Category]:
        params = {"status": status, "parentId": parent_id, "includeProductCount": "true"}

        def local() -> List[Category]:
            categories = self.load_local()
            if status:
                categories = [c for c in categories if c.status == status]
            if parent_id:
                categories = [c for c in categories if c.parent_id == str(parent_id)]
            return categories

        return self.run(
            "list categories",
            lambda: self.parse_list(self.client.get("/categories", params=params), "categories"),
            local,
        )

    def get_category(self, category_id: str) -> Category:
        return self.run(
            f"get category {category_id}",
            lambda: self.parse(self.client.get(f"/categories/{category_id}")),
            lambda: self.local_get(category_id),
        )

    def create_category(self, data: Dict[str, Any]) -> Category:
        draft = Category.model_validate(to_field_names(Category, data))
        record = draft.to_record(exclude={"id", "subcategories"})
        return self.write(
            "create category",
            lambda: self.client.post("/categories", json=record),
            lambda: self.local_create(draft.model_dump(exclude_unset=True) | {"slug": draft.slug}),
            sent=record,
        )

    def update_category(self, category_id: str, changes: Dict[str, Any]) -> Category:
        return self.write(
            f"update category {category_id}",
            lambda: self.client.put(f"/categories/{category_id}", json=to_aliases(Category, changes)),
            lambda: self.local_update(category_id, changes),
        )

    def delete_category(self, category_id: str) -> None:
        self.run(
            f"delete category {category_id}",
            lambda: self.client.delete(f"/categories/{category_id}"),
            lambda: self.local_delete(category_id),
        )

    def get_subcategories(self, parent_id: str) -> List[Category]:
        return self.run(
            f"get subcategories of {parent_id}",
            lambda: self.parse_list(self.client.get(f"/categories/{parent_id}/subcategories"), "categories"),
            lambda: [c for c in self.load_local() if c.parent_id == str(parent_id)],
        )

    def get_category_tree(self) -> List[Category]:
        return self.run(
            "get category tree",
            lambda: self.parse_list(self.client.get("/categories/tree"), "categories"),
            lambda: build_category_tree(self.load_local()),
        )

    def refresh_product_counts(self, products: Iterable[Product]) -> List[Category]:
        """Recompute the denormalized ``product_count`` of every stored category."""

        counts = Counter(p.category.lower() for p in products if p.category)
        categories = [
            c.model_copy(update={"product_count": counts.get(c.name.lower(), 0) + counts.get(c.id.lower(), 0)})
            for c in self.load_local()
        ]
        self.save_local(categories)
        return categories
