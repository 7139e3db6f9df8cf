from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .schemas import Category, Product, now_iso
from .storage import CATEGORIES_KEY, CUSTOMERS_KEY, ORDERS_KEY, PRODUCTS_KEY, LocalStore

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "name": "Premium Wireless Headphones",
        "description": "High-quality wireless headphones with noise cancellation and premium sound quality.",
        "price": 299.99,
        "oldPrice": 399.99,
        "category": "Electronics",
        "images": ["https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=800&h=600&fit=crop"],
        "stock": 15,
        "rating": 4.5,
        "reviews": 128,
        "featured": True,
        "sku": "WH-001",
        "tags": ["wireless", "headphones", "audio", "bluetooth"],
    },
    {
        "id": "2",
        "name": "Smart Watch Pro",
        "description": "Advanced fitness tracking, heart rate monitoring, and smartphone integration.",
        "price": 199.99,
        "category": "Electronics",
        "images": ["https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=800&h=600&fit=crop"],
        "stock": 25,
        "rating": 4.3,
        "reviews": 89,
        "featured": True,
        "sku": "SW-002",
        "tags": ["smartwatch", "fitness", "health", "wearable"],
    },
    {
        "id": "3",
        "name": "Organic Cotton T-Shirt",
        "description": "Comfortable and sustainable organic cotton t-shirt in various colors.",
        "price": 29.99,
        "oldPrice": 39.99,
        "category": "Clothing",
        "images": ["https://images.unsplash.com/photo-1521572163464-3c558bba6374?w=800&h=600&fit=crop"],
        "sizes": ["S", "M", "L", "XL"],
        "colors": [{"name": "White", "hex": "#ffffff"}, {"name": "Black", "hex": "#000000"}],
        "stock": 50,
        "rating": 4.7,
        "reviews": 234,
        "sku": "CT-003",
        "tags": ["clothing", "organic", "cotton", "sustainable"],
    },
    {
        "id": "4",
        "name": "Professional Camera Lens",
        "description": "High-quality 50mm prime lens for professional photography.",
        "price": 599.99,
        "category": "Electronics",
        "images": ["https://images.unsplash.com/photo-1516035069371-29a1b244cc32?w=800&h=600&fit=crop"],
        "stock": 8,
        "rating": 4.8,
        "reviews": 67,
        "sku": "CL-004",
        "tags": ["camera", "lens", "photography"],
    },
    {
        "id": "5",
        "name": "Yoga Mat Premium",
        "description": "Non-slip yoga mat with alignment lines, perfect for all types of yoga practice.",
        "price": 49.99,
        "category": "Sports",
        "images": ["https://images.unsplash.com/photo-1601925260368-ae2f83cf8b7f?w=800&h=600&fit=crop"],
        "stock": 30,
        "rating": 4.6,
        "reviews": 156,
        "featured": True,
        "sku": "YM-005",
        "tags": ["yoga", "fitness", "exercise"],
    },
    {
        "id": "6",
        "name": "Leather Travel Bag",
        "description": "Handcrafted leather weekender bag with plenty of room for short trips.",
        "price": 149.99,
        "oldPrice": 189.99,
        "category": "Accessories",
        "images": ["https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=800&h=600&fit=crop"],
        "stock": 0,
        "rating": 4.4,
        "reviews": 45,
        "sku": "LB-006",
        "tags": ["bag", "leather", "travel"],
    },
    {
        "id": "7",
        "name": "Insulated Water Bottle",
        "description": "Stainless steel bottle that keeps drinks cold for 24 hours.",
        "price": 24.99,
        "category": "Accessories",
        "images": ["https://images.unsplash.com/photo-1602143407151-7111542de6e8?w=800&h=600&fit=crop"],
        "stock": 120,
        "rating": 4.2,
        "reviews": 310,
        "sku": "WB-007",
        "tags": ["bottle", "hydration", "outdoor"],
    },
]

SAMPLE_CATEGORIES: List[Dict[str, Any]] = [
    {"id": "1", "name": "Electronics", "description": "Latest gadgets and electronic devices"},
    {"id": "2", "name": "Clothing", "description": "Fashion and apparel for all occasions"},
    {"id": "3", "name": "Sports", "description": "Sports equipment and fitness gear"},
    {"id": "4", "name": "Accessories", "description": "Bags, bottles, and everyday accessories"},
]


def load_catalog(path: str | Path) -> Dict[str, List[Dict[str, Any]]]:
    """Load a seed catalog from YAML with ``products`` and ``categories`` lists."""

    catalog_path = Path(path)
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog not found at {catalog_path}")

    with catalog_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    for key in ("products", "categories"):
        if not isinstance(data.get(key, []), list):
            raise ValueError(f"Catalog '{key}' must be a list.")

    return {"products": data.get("products", []), "categories": data.get("categories", [])}


def initialize_sample_data(store: LocalStore, catalog: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> Dict[str, int]:
    """Seed keys that are absent. Existing data is never overwritten. Returns how many records were written per key."""

    catalog = catalog or {"products": SAMPLE_PRODUCTS, "categories": SAMPLE_CATEGORIES}
    timestamp = now_iso()
    written: Dict[str, int] = {}

    if not store.has(PRODUCTS_KEY):
        products = [
            Product.model_validate({"createdAt": timestamp, "updatedAt": timestamp, **raw}).to_record()
            for raw in catalog.get("products", [])
        ]
        store.set_items(PRODUCTS_KEY, products)
        written[PRODUCTS_KEY] = len(products)

    if not store.has(CATEGORIES_KEY):
        counts: Dict[str, int] = {}
        for raw in catalog.get("products", []):
            counts[raw.get("category", "")] = counts.get(raw.get("category", ""), 0) + 1
        categories = [
            Category.model_validate(
                {"createdAt": timestamp, "updatedAt": timestamp, "productCount": counts.get(raw["name"], 0), **raw}
            ).to_record()
            for raw in catalog.get("categories", [])
        ]
        store.set_items(CATEGORIES_KEY, categories)
        written[CATEGORIES_KEY] = len(categories)

    for key in (ORDERS_KEY, CUSTOMERS_KEY):
        if not store.has(key):
            store.set_items(key, [])
            written[key] = 0

    logger.info("Sample data initialized: %s", written)
    return written
