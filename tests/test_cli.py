"""End-to-end runs of the command line against an offline store."""

import pytest

from storefront.cli import main
from storefront.storage import CART_KEY, LocalStore, ORDERS_KEY


@pytest.fixture
def run(tmp_path):
    store_path = str(tmp_path / "cli.db")

    def _run(*args):
        return main(["--store", store_path, "--offline", "--log-level", "ERROR", *args])

    _run.store = LocalStore(store_path)
    return _run


CHECKOUT_ARGS = [
    "checkout",
    "--first-name", "Ada",
    "--last-name", "Lovelace",
    "--email", "ada@example.com",
    "--address", "12 Analytical Way",
    "--city", "London",
    "--state", "LDN",
    "--postal-code", "10001",
    "--card-number", "4242424242424242",
]


class TestCli:
    def test_seed_and_list(self, run, capsys):
        assert run("seed") == 0
        assert run("products", "--category", "Sports") == 0

        out = capsys.readouterr().out
        assert "Yoga Mat Premium" in out

    def test_categories_tree(self, run):
        run("seed")
        assert run("categories", "--tree") == 0

    def test_cart_add_and_show(self, run, capsys):
        run("seed")
        assert run("cart", "add", "3", "--quantity", "2", "--size", "M") == 0
        assert run("cart") == 0

        cart = run.store.get_value(CART_KEY)
        assert cart["items"][0]["quantity"] == 2
        assert "Organic Cotton T-Shirt" in capsys.readouterr().out

    def test_unknown_product_fails(self, run, capsys):
        run("seed")
        assert run("cart", "add", "999") == 1
        assert "Product not found" in capsys.readouterr().out

    def test_checkout_places_order(self, run, capsys):
        run("seed")
        run("cart", "add", "1")

        assert run(*CHECKOUT_ARGS) == 0

        orders = run.store.get_items(ORDERS_KEY)
        assert len(orders) == 1
        assert orders[0]["paymentMethod"]["last4"] == "4242"
        assert run.store.has(CART_KEY) is False
        assert "Order placed" in capsys.readouterr().out

    def test_checkout_with_empty_cart_fails(self, run, capsys):
        run("seed")
        assert run(*CHECKOUT_ARGS) == 1
        assert "Cart is empty" in capsys.readouterr().out

    def test_checkout_with_missing_fields_fails(self, run, capsys):
        run("seed")
        run("cart", "add", "1")

        assert run("checkout", "--first-name", "Ada") == 1
        assert run.store.get_items(ORDERS_KEY) == []
        assert "billing.city" in capsys.readouterr().out

    def test_order_status_and_stats(self, run):
        run("seed")
        run("cart", "add", "2")
        run(*CHECKOUT_ARGS)
        order_id = run.store.get_items(ORDERS_KEY)[0]["id"]

        assert run("orders", "status", order_id, "shipped") == 0
        assert run.store.get_items(ORDERS_KEY)[0]["status"] == "shipped"
        assert run("orders", "stats") == 0
        assert run("orders", "list", "--status", "shipped") == 0
