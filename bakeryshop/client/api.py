"""HTTP client for the bakery API, mirroring what the storefront pages do.

The auth token, cart and checkout snapshot live in a `LocalStorage`. No call
is ever retried; a failure raises `ClientError` with the server's message (or
a generic one) for the caller to show to the user.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from bakeryshop.client.cart import build_order_payload
from bakeryshop.client.storage import CART_KEY, CHECKOUT_KEY, TOKEN_KEY, LocalStorage

logger = logging.getLogger(__name__)


class ClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ShopClient:
    def __init__(
        self,
        base_url: str,
        storage: Optional[LocalStorage] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.storage = storage if storage is not None else LocalStorage()
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def token(self) -> Optional[str]:
        return self.storage.get_item(TOKEN_KEY)

    def _request(self, method: str, path: str, fallback: str, json: Any = None) -> Dict[str, Any]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            resp = self.session.request(
                method, f"{self.base_url}{path}", json=json, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ClientError(fallback) from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if not resp.ok or (isinstance(body, dict) and body.get("success") is False):
            err = body.get("error") if isinstance(body, dict) else None
            if isinstance(err, dict):
                raise ClientError(err.get("message") or fallback, resp.status_code, err.get("code"))
            raise ClientError(err if isinstance(err, str) and err else fallback, resp.status_code)
        return body

    # --- auth ---
    def register(self, form: Mapping[str, Any]) -> Dict[str, Any]:
        body = self._request("POST", "/api/register", "Registration failed. Please try again.", json=dict(form))
        self.storage.set_item(TOKEN_KEY, body["token"])
        return body["user"]

    def login(self, password: str, phone: Optional[str] = None, email: Optional[str] = None) -> Dict[str, Any]:
        payload = {"password": password}
        if phone:
            payload["phone"] = phone
        if email:
            payload["email"] = email
        body = self._request("POST", "/api/login", "Login failed. Please try again.", json=payload)
        self.storage.set_item(TOKEN_KEY, body["token"])
        return body["user"]

    def logout(self) -> None:
        self._request("POST", "/api/logout", "Error logging out")
        self.storage.remove_item(TOKEN_KEY)

    def auth_status(self) -> Dict[str, Any]:
        return self._request("GET", "/api/auth/status", "Could not check login status")

    def current_user(self) -> Dict[str, Any]:
        return self._request("GET", "/api/user", "Could not load profile")

    # --- orders ---
    def place_order(self, form: Mapping[str, Any]) -> int:
        """Send the checkout snapshot; on success the cart is emptied."""
        items = self.storage.get_item(CHECKOUT_KEY) or []
        payload = build_order_payload(items, form)
        body = self._request("POST", "/api/orders", "Order failed. Please try again.", json=payload)
        self.storage.remove_item(CART_KEY)
        self.storage.remove_item(CHECKOUT_KEY)
        return body["orderId"]

    def list_orders(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/orders", "Could not load orders")["orders"]
