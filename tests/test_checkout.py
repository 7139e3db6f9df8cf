"""Tests for turning a cart into an order."""

import pytest
from pydantic import ValidationError

from storefront.api_client import ApiClient
from storefront.cart import CartManager
from storefront.checkout import build_order, generate_order_number, place_order, validate_address
from storefront.config import load_settings
from storefront.errors import CheckoutValidationError, EmptyCartError
from storefront.schemas import Address, PaymentMethod
from storefront.services import OrderService
from storefront.storage import CART_KEY, ORDERS_KEY


@pytest.fixture
def cart_manager(store, config):
    return CartManager(store=store, config=config)


@pytest.fixture
def order_service(store, config):
    return OrderService(client=ApiClient(store=store, config=config), store=store, config=config)


@pytest.fixture
def billing():
    return Address(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        address_line1="12 Analytical Way",
        city="London",
        state="LDN",
        postal_code="10001",
        country="UK",
    )


@pytest.fixture
def payment():
    return PaymentMethod.from_card("4242 4242 4242 4242", cardholder_name="Ada Lovelace", expiry_month="12", expiry_year="29")


@pytest.fixture
def filled_cart(cart_manager):
    cart_manager.add_item("1", quantity=2, name="Mug", price=20.0, size="M")
    return cart_manager.add_item("2", quantity=1, name="Lamp", price=47.0)


class TestBuildOrder:
    def test_order_mirrors_cart(self, filled_cart, billing, payment, config):
        order = build_order(filled_cart, billing, payment, config=config)

        assert len(order.items) == len(filled_cart.items)
        assert [i.product_name for i in order.items] == ["Mug", "Lamp"]
        assert order.items[0].total_price == pytest.approx(40.0)
        assert order.items[0].size == "M"
        assert order.subtotal == pytest.approx(filled_cart.subtotal)
        assert order.total == pytest.approx(filled_cart.total)
        assert order.total == pytest.approx(order.subtotal + order.shipping + order.tax)

    def test_new_order_is_pending(self, filled_cart, billing, payment, config):
        order = build_order(filled_cart, billing, payment, config=config)

        assert order.status == "pending"
        assert order.payment_status == "pending"
        assert order.customer_email == "ada@example.com"
        assert order.customer_name == "Ada Lovelace"

    def test_shipping_address_defaults_to_billing(self, filled_cart, billing, payment, config):
        order = build_order(filled_cart, billing, payment, config=config)
        assert order.shipping_address == billing

    def test_only_last_four_card_digits_are_kept(self, filled_cart, billing, payment, config):
        order = build_order(filled_cart, billing, payment, config=config)

        assert order.payment_method.last4 == "4242"
        assert "4242424242424242" not in order.model_dump_json()

    def test_order_is_immutable(self, filled_cart, billing, payment, config):
        order = build_order(filled_cart, billing, payment, config=config)
        with pytest.raises(ValidationError):
            order.total = 0


class TestOrderNumber:
    def test_uses_last_eight_digits_of_timestamp(self):
        assert generate_order_number(1700000123456) == "ORD-00123456"

    def test_default_format(self):
        number = generate_order_number()
        assert number.startswith("ORD-")
        assert len(number) == 12
        assert number[4:].isdigit()


class TestValidateAddress:
    def test_complete_address_passes(self, billing):
        assert validate_address(billing, require_email=True) == {}

    def test_missing_fields_are_reported(self):
        errors = validate_address(Address(first_name="Ada"), require_email=True)

        assert "first_name" not in errors
        assert errors["last_name"] == "Last name is required"
        assert errors["email"] == "Email is required"

    def test_invalid_email(self, billing):
        bad = billing.model_copy(update={"email": "not-an-email"})
        assert validate_address(bad, require_email=True) == {"email": "Email is invalid"}


class TestPlaceOrder:
    def test_places_order_and_clears_cart(self, filled_cart, billing, payment, order_service, cart_manager, store):
        order = place_order(filled_cart, billing, payment, order_service, cart_manager=cart_manager)

        assert order.id
        assert order.order_number.startswith("ORD-")
        assert store.get_items(ORDERS_KEY)[0]["id"] == order.id
        assert store.has(CART_KEY) is False

    def test_cart_is_kept_without_manager(self, filled_cart, billing, payment, order_service, store):
        place_order(filled_cart, billing, payment, order_service)
        assert store.has(CART_KEY) is True

    def test_empty_cart_is_rejected(self, cart_manager, billing, payment, order_service, store):
        with pytest.raises(EmptyCartError):
            place_order(cart_manager.load(), billing, payment, order_service)
        assert store.get_items(ORDERS_KEY) == []

    def test_incomplete_form_is_rejected(self, filled_cart, payment, order_service, store):
        with pytest.raises(CheckoutValidationError) as excinfo:
            place_order(
                filled_cart,
                Address(first_name="Ada"),
                payment,
                order_service,
                shipping_address=Address(),
            )

        assert "last_name" in excinfo.value.errors["billing"]
        assert "city" in excinfo.value.errors["shipping"]
        assert store.get_items(ORDERS_KEY) == []

    def test_separate_shipping_address(self, filled_cart, billing, payment, order_service):
        shipping = billing.model_copy(update={"city": "Paris", "email": ""})
        order = place_order(filled_cart, billing, payment, order_service, shipping_address=shipping)
        assert order.shipping_address.city == "Paris"

    def test_submitting_twice_creates_two_orders(self, filled_cart, billing, payment, order_service, store):
        first = place_order(filled_cart, billing, payment, order_service)
        second = place_order(filled_cart, billing, payment, order_service)

        assert first.id != second.id
        assert len(store.get_items(ORDERS_KEY)) == 2

    def test_order_is_priced_with_the_cart_settings(self, store, config, billing, payment, order_service):
        cart_config = load_settings(store_path=config.store_path, offline=True, tax_rate=0.2)
        manager = CartManager(store=store, config=cart_config)
        cart = manager.add_item("1", quantity=1, name="Mug", price=50.0)

        order = place_order(cart, billing, payment, order_service, cart_manager=manager)

        assert order.tax == pytest.approx(cart.tax)
        assert order.total == pytest.approx(cart.total)
