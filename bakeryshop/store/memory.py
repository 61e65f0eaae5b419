from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from bakeryshop.store.base import (
    ConflictError,
    OrderRecord,
    OrderStatus,
    Store,
    UserRecord,
    utcnow,
)


class MemoryStore(Store):
    """Process-local store. Everything is gone once the process exits."""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._lock = threading.Lock()
        self._users: Dict[int, UserRecord] = {}
        self._orders: Dict[int, OrderRecord] = {}
        self._next_user_id = 1
        self._next_order_id = 1

    # --- users ---
    def add_user(self, **fields: Any) -> UserRecord:
        with self._lock:
            phone = fields.get("phone")
            email = fields.get("email")
            self._check_unique(phone, email)

            user = UserRecord(id=self._next_user_id, created_at=self._clock(), **fields)
            self._users[user.id] = user
            self._next_user_id += 1
            return replace(user)

    def _check_unique(self, phone: Optional[str], email: Optional[str], exclude_id: Optional[int] = None) -> None:
        for existing in self._users.values():
            if existing.id == exclude_id:
                continue
            if existing.phone == phone:
                raise ConflictError("phone")
            if email and existing.email == email:
                raise ConflictError("email")

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def find_user(self, phone: Optional[str] = None, email: Optional[str] = None) -> Optional[UserRecord]:
        if not phone and not email:
            return None
        with self._lock:
            # phone wins over email, same as the SQL store
            if phone:
                for user in self._users.values():
                    if user.phone == phone:
                        return replace(user)
            if email:
                for user in self._users.values():
                    if user.email == email:
                        return replace(user)
        return None

    def update_user(self, user_id: int, **changes: Any) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            if "phone" in changes or "email" in changes:
                self._check_unique(
                    changes.get("phone", user.phone), changes.get("email", user.email), exclude_id=user_id
                )
            updated = replace(user, **changes)
            self._users[user_id] = updated
            return replace(updated)

    def list_users(self) -> List[UserRecord]:
        with self._lock:
            return [replace(u) for u in self._users.values()]

    # --- orders ---
    def add_order(self, **fields: Any) -> OrderRecord:
        with self._lock:
            if "created_at" not in fields:
                fields["created_at"] = self._clock()
            items = [dict(i) for i in fields.pop("items", [])]
            order = OrderRecord(id=self._next_order_id, items=items, **fields)
            self._orders[order.id] = order
            self._next_order_id += 1
            return replace(order, items=[dict(i) for i in order.items])

    def get_order(self, order_id: int) -> Optional[OrderRecord]:
        with self._lock:
            order = self._orders.get(order_id)
            return replace(order, items=[dict(i) for i in order.items]) if order else None

    def list_orders(self, user_id: Optional[int] = None) -> List[OrderRecord]:
        with self._lock:
            orders = [
                replace(o, items=[dict(i) for i in o.items])
                for o in self._orders.values()
                if user_id is None or o.user_id == user_id
            ]
        # sorted() is stable with reverse=True, so ties stay in insertion order
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def mark_delivered(self, order_id: int) -> Optional[OrderRecord]:
        with self._lock:
            order = self._orders.get(order_id)
            if not order:
                return None
            if order.status != OrderStatus.DELIVERED.value:
                order.status = OrderStatus.DELIVERED.value
                order.delivered_at = self._clock()
            return replace(order, items=[dict(i) for i in order.items])
