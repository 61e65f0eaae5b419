"""Repository abstraction shared by the HTTP handlers.

Handlers only talk to a `Store`; the backing implementation is picked in the
app factory (`STORE_BACKEND`). Records handed out by a store are copies, so
mutating one never changes what the store holds.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DELIVERED = "delivered"


ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"
ROLES = {ROLE_CUSTOMER, ROLE_ADMIN}

# Address fields copied from the user onto every new order.
ADDRESS_SNAPSHOT_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "street",
    "house_number",
    "apartment",
    "postal_code",
    "city",
    "state",
)


def utcnow() -> datetime:
    # Naive UTC, matching what SQLite hands back for DateTime columns.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StoreError(Exception):
    """Base class for repository failures."""


class ConflictError(StoreError):
    """A unique contact method (phone or email) is already taken."""

    def __init__(self, field_name: str):
        super().__init__(f"{field_name} already registered")
        self.field_name = field_name


@dataclass
class UserRecord:
    id: int
    first_name: str
    last_name: str
    phone: str
    street: str
    house_number: str
    postal_code: str
    city: str
    state: str
    apartment: str = ""
    email: Optional[str] = None
    birth_date: Optional[str] = None
    country: str = "Deutschland"
    newsletter: bool = False
    password_hash: Optional[str] = None
    role: str = ROLE_CUSTOMER
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class OrderRecord:
    id: int
    user_id: int
    items: List[Dict[str, Any]]
    quantity: int
    total_cents: int
    status: str
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    street: str = ""
    house_number: str = ""
    apartment: str = ""
    postal_code: str = ""
    city: str = ""
    state: str = ""
    delivery_date: Optional[str] = None
    delivery_time: Optional[str] = None
    special_instructions: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    delivered_at: Optional[datetime] = None


def address_snapshot(user: UserRecord) -> Dict[str, str]:
    return {name: getattr(user, name) or "" for name in ADDRESS_SNAPSHOT_FIELDS}


class Store(ABC):
    """get / find / insert / update over users and orders.

    `add_user` and `add_order` assign the next sequential id and insert in
    one atomic step. `add_user` also enforces contact uniqueness inside that
    step and raises `ConflictError` without writing anything.
    """

    # --- users ---
    @abstractmethod
    def add_user(self, **fields: Any) -> UserRecord: ...

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    @abstractmethod
    def find_user(self, phone: Optional[str] = None, email: Optional[str] = None) -> Optional[UserRecord]: ...

    @abstractmethod
    def update_user(self, user_id: int, **changes: Any) -> Optional[UserRecord]: ...

    @abstractmethod
    def list_users(self) -> List[UserRecord]: ...

    # --- orders ---
    @abstractmethod
    def add_order(self, **fields: Any) -> OrderRecord: ...

    @abstractmethod
    def get_order(self, order_id: int) -> Optional[OrderRecord]: ...

    @abstractmethod
    def list_orders(self, user_id: Optional[int] = None) -> List[OrderRecord]:
        """Newest first; orders created at the same instant keep insertion order."""

    @abstractmethod
    def mark_delivered(self, order_id: int) -> Optional[OrderRecord]:
        """Move an order to delivered. Repeat calls keep the first `delivered_at`."""
