"""Shared pytest fixtures for storefront tests."""

import json

import pytest
import requests

from storefront.api_client import ApiClient
from storefront.config import load_settings
from storefront.storage import LocalStore


def make_response(status_code=200, body=None, reason="OK", raw=None):
    """Build a real ``requests.Response`` carrying a JSON body."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    if raw is not None:
        response._content = raw.encode("utf-8")
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    return response


class FakeSession:
    """Stand-in for ``requests.Session`` that replays queued responses."""

    def __init__(self):
        self.headers = {}
        self.calls = []
        self.responses = []

    def queue(self, response_or_exc):
        self.responses.append(response_or_exc)
        return self

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise requests.ConnectionError("no route to host")
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def config(tmp_path):
    """Offline settings backed by a temporary store."""
    return load_settings(store_path=str(tmp_path / "store.db"), offline=True, api_base_url="http://api.test/api")


@pytest.fixture
def online_config(tmp_path):
    """Settings that go to the (fake) network first."""
    return load_settings(store_path=str(tmp_path / "store.db"), offline=False, api_base_url="http://api.test/api")


@pytest.fixture
def store(config):
    return LocalStore(config.store_path)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def online_client(online_config, store, session):
    return ApiClient(store=store, session=session, config=online_config)
