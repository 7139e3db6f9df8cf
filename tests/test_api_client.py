"""Tests for the REST client."""

import pytest
import requests

from storefront.api_client import ApiClient
from storefront.errors import ApiError
from storefront.storage import AUTH_TOKEN_KEY

from .conftest import FakeSession, make_response


class TestRequests:
    def test_get_returns_parsed_json(self, online_client, session):
        session.queue(make_response(200, {"products": []}))

        assert online_client.get("/products") == {"products": []}
        assert session.calls[0]["method"] == "GET"
        assert session.calls[0]["url"] == "http://api.test/api/products"

    def test_none_params_are_dropped(self, online_client, session):
        session.queue(make_response(200, []))

        online_client.get("/products", params={"category": "Shoes", "search": None})

        assert session.calls[0]["params"] == {"category": "Shoes"}

    def test_timeout_comes_from_settings(self, online_client, session):
        session.queue(make_response(200, {}))
        online_client.get("/health")
        assert session.calls[0]["timeout"] == 10.0

    def test_json_body_is_sent(self, online_client, session):
        session.queue(make_response(201, {"id": "1"}))
        online_client.post("/orders", json={"total": 5})
        assert session.calls[0]["json"] == {"total": 5}

    def test_empty_body_returns_none(self, online_client, session):
        session.queue(make_response(204))
        assert online_client.delete("/products/1") is None

    def test_relative_path_gets_leading_slash(self, online_client):
        assert online_client._build_url("orders") == "http://api.test/api/orders"
        assert online_client._build_url("https://other.test/x") == "https://other.test/x"


class TestFailures:
    def test_offline_mode_fails_fast(self, config, store):
        session = FakeSession()
        client = ApiClient(store=store, session=session, config=config)

        with pytest.raises(ApiError, match="offline"):
            client.get("/products")
        assert session.calls == []

    def test_connection_error_becomes_api_error(self, online_client, session):
        session.queue(requests.ConnectionError("refused"))

        with pytest.raises(ApiError):
            online_client.get("/products")

    def test_http_error_carries_status_and_payload(self, online_client, session):
        session.queue(make_response(500, {"message": "Server error"}, reason="Internal Server Error"))

        with pytest.raises(ApiError) as excinfo:
            online_client.get("/orders")

        assert excinfo.value.status_code == 500
        assert excinfo.value.payload == {"message": "Server error"}

    def test_non_json_body_is_an_error(self, online_client, session):
        session.queue(make_response(200, raw="<html>oops</html>"))

        with pytest.raises(ApiError, match="non-JSON"):
            online_client.get("/products")


class TestAuthToken:
    def test_bearer_token_is_attached(self, online_client, session, store):
        store.set_value(AUTH_TOKEN_KEY, "secret-token")
        session.queue(make_response(200, {}))

        online_client.get("/customers")

        assert session.calls[0]["headers"] == {"Authorization": "Bearer secret-token"}

    def test_no_token_means_no_header(self, online_client, session):
        session.queue(make_response(200, {}))
        online_client.get("/customers")
        assert session.calls[0]["headers"] == {}

    def test_unauthorized_clears_stored_token(self, online_client, session, store):
        store.set_value(AUTH_TOKEN_KEY, "expired")
        session.queue(make_response(401, {"message": "Unauthorized"}, reason="Unauthorized"))

        with pytest.raises(ApiError):
            online_client.get("/customers")

        assert store.has(AUTH_TOKEN_KEY) is False
