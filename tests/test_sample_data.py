"""Tests for seeding the local store."""

import pytest

from storefront.sample_data import SAMPLE_PRODUCTS, initialize_sample_data, load_catalog
from storefront.storage import CATEGORIES_KEY, CUSTOMERS_KEY, ORDERS_KEY, PRODUCTS_KEY


class TestInitializeSampleData:
    def test_seeds_every_key(self, store):
        written = initialize_sample_data(store)

        assert written == {PRODUCTS_KEY: 7, CATEGORIES_KEY: 4, ORDERS_KEY: 0, CUSTOMERS_KEY: 0}
        first = store.get_items(PRODUCTS_KEY)[0]
        assert first["oldPrice"] == 399.99
        assert first["createdAt"]

    def test_existing_data_is_not_overwritten(self, store):
        store.set_items(PRODUCTS_KEY, [{"id": "x", "name": "Mine"}])

        written = initialize_sample_data(store)

        assert PRODUCTS_KEY not in written
        assert store.get_items(PRODUCTS_KEY) == [{"id": "x", "name": "Mine"}]

    def test_second_run_is_a_no_op(self, store):
        initialize_sample_data(store)
        assert initialize_sample_data(store) == {}

    def test_sample_catalog_covers_stock_levels(self):
        stocks = {p["id"]: p["stock"] for p in SAMPLE_PRODUCTS}
        assert stocks["6"] == 0
        assert 0 < stocks["4"] < 10


class TestLoadCatalog:
    def test_loads_yaml(self, tmp_path, store):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "products:\n"
            "  - id: p1\n"
            "    name: Kettle\n"
            "    price: 35\n"
            "    category: Kitchen\n"
            "categories:\n"
            "  - id: c1\n"
            "    name: Kitchen\n",
            encoding="utf-8",
        )

        catalog = load_catalog(path)
        initialize_sample_data(store, catalog)

        assert [p["name"] for p in store.get_items(PRODUCTS_KEY)] == ["Kettle"]
        assert store.get_items(CATEGORIES_KEY)[0]["productCount"] == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "nope.yaml")

    def test_sections_must_be_lists(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("products: {name: Kettle}\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_catalog(path)
