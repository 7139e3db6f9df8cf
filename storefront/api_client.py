from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .config import Settings, settings as default_settings
from .errors import ApiError
from .storage import AUTH_TOKEN_KEY, LocalStore

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin JSON client for the storefront REST API.

    Every failure (connection error, timeout, HTTP status >= 400, non-JSON body)
    surfaces as :class:`ApiError` so callers have a single thing to catch.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        store: Optional[LocalStore] = None,
        session: Optional[requests.Session] = None,
        config: Optional[Settings] = None,
    ) -> None:
        config = config or default_settings
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.offline = config.offline
        self.store = store
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        if self.offline:
            raise ApiError("offline mode")

        url = self._build_url(path)
        kwargs: Dict[str, Any] = {"timeout": self.timeout, "headers": self._auth_headers()}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if json is not None:
            kwargs["json"] = json

        try:
            response = self._session.request(method=method, url=url, **kwargs)
        except requests.RequestException as exc:
            raise ApiError(f"{method} {url} failed: {exc}") from exc

        if response.status_code == 401 and self.store is not None:
            self.store.remove(AUTH_TOKEN_KEY)

        if response.status_code >= 400:
            raise ApiError(
                f"{method} {url} -> {response.status_code} {response.reason}",
                status_code=response.status_code,
                payload=self._safe_json(response),
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"{method} {url} returned a non-JSON body", status_code=response.status_code) from exc

    def _build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _auth_headers(self) -> Dict[str, str]:
        if self.store is None:
            return {}
        token = self.store.get_value(AUTH_TOKEN_KEY)
        return {"Authorization": f"Bearer {token}"} if token else {}

    @staticmethod
    def _safe_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text[:500]
