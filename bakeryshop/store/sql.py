"""Flask-SQLAlchemy backed store (users + orders tables).

Atomicity comes from the database transaction: each write commits on
success and rolls back on any failure.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError

from bakeryshop.app.extensions import db
from bakeryshop.app.models import Account, Order
from bakeryshop.store.base import (
    ConflictError,
    OrderRecord,
    OrderStatus,
    Store,
    UserRecord,
    utcnow,
)

_USER_COLUMNS = (
    "id", "first_name", "last_name", "phone", "email", "birth_date",
    "street", "house_number", "apartment", "postal_code", "city", "state",
    "country", "newsletter", "password_hash", "role", "created_at",
)

_ORDER_COLUMNS = (
    "id", "user_id", "quantity", "total_cents", "status",
    "first_name", "last_name", "phone", "street", "house_number", "apartment",
    "postal_code", "city", "state",
    "delivery_date", "delivery_time", "special_instructions", "payment_method",
    "created_at", "delivered_at",
)


def _user_record(row: Account) -> UserRecord:
    return UserRecord(**{c: getattr(row, c) for c in _USER_COLUMNS})


def _order_record(row: Order) -> OrderRecord:
    return OrderRecord(items=json.loads(row.items_json or "[]"), **{c: getattr(row, c) for c in _ORDER_COLUMNS})


class SqlStore(Store):
    def __init__(self, database=db):
        self.db = database

    # --- users ---
    def _conflicting_field(
        self, phone: Optional[str], email: Optional[str], exclude_id: Optional[int] = None
    ) -> Optional[str]:
        q = Account.query
        if exclude_id is not None:
            q = q.filter(Account.id != exclude_id)
        if q.filter(Account.phone == phone).first():
            return "phone"
        if email and q.filter(Account.email == email).first():
            return "email"
        return None

    def _commit_contact(self, phone: Optional[str], email: Optional[str], exclude_id: Optional[int] = None) -> None:
        try:
            self.db.session.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent write for the same contact
            self.db.session.rollback()
            raise ConflictError(self._conflicting_field(phone, email, exclude_id) or "phone") from exc
        except Exception:
            self.db.session.rollback()
            raise

    def add_user(self, **fields: Any) -> UserRecord:
        phone, email = fields.get("phone"), fields.get("email")
        taken = self._conflicting_field(phone, email)
        if taken:
            raise ConflictError(taken)

        row = Account(**fields)
        self.db.session.add(row)
        self._commit_contact(phone, email)
        return _user_record(row)

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        row = self.db.session.get(Account, user_id)
        return _user_record(row) if row else None

    def find_user(self, phone: Optional[str] = None, email: Optional[str] = None) -> Optional[UserRecord]:
        row = None
        if phone:
            row = Account.query.filter_by(phone=phone).first()
        if row is None and email:
            row = Account.query.filter_by(email=email).first()
        return _user_record(row) if row else None

    def update_user(self, user_id: int, **changes: Any) -> Optional[UserRecord]:
        row = self.db.session.get(Account, user_id)
        if not row:
            return None
        phone, email = changes.get("phone", row.phone), changes.get("email", row.email)
        if "phone" in changes or "email" in changes:
            taken = self._conflicting_field(phone, email, exclude_id=user_id)
            if taken:
                raise ConflictError(taken)
        for key, value in changes.items():
            setattr(row, key, value)
        self._commit_contact(phone, email, exclude_id=user_id)
        return _user_record(row)

    def list_users(self) -> List[UserRecord]:
        return [_user_record(r) for r in Account.query.order_by(Account.id.asc()).all()]

    # --- orders ---
    def add_order(self, **fields: Any) -> OrderRecord:
        items = fields.pop("items", [])
        row = Order(items_json=json.dumps(items), **fields)
        self.db.session.add(row)
        try:
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise
        return _order_record(row)

    def get_order(self, order_id: int) -> Optional[OrderRecord]:
        row = self.db.session.get(Order, order_id)
        return _order_record(row) if row else None

    def list_orders(self, user_id: Optional[int] = None) -> List[OrderRecord]:
        q = Order.query
        if user_id is not None:
            q = q.filter(Order.user_id == user_id)
        rows = q.order_by(Order.created_at.desc(), Order.id.asc()).all()
        return [_order_record(r) for r in rows]

    def mark_delivered(self, order_id: int) -> Optional[OrderRecord]:
        row = self.db.session.get(Order, order_id)
        if not row:
            return None
        if row.status != OrderStatus.DELIVERED.value:
            row.status = OrderStatus.DELIVERED.value
            row.delivered_at = utcnow()
            try:
                self.db.session.commit()
            except Exception:
                self.db.session.rollback()
                raise
        return _order_record(row)
