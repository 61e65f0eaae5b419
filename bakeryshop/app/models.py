from __future__ import annotations

from sqlalchemy import Index

from bakeryshop.app.extensions import db
from bakeryshop.store.base import ROLE_CUSTOMER, utcnow


class Account(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(50), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=True, unique=True, index=True)
    birth_date = db.Column(db.String(20), nullable=True)

    street = db.Column(db.String(255), nullable=False)
    house_number = db.Column(db.String(20), nullable=False)
    apartment = db.Column(db.String(50), nullable=False, default="")
    postal_code = db.Column(db.String(20), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    state = db.Column(db.String(100), nullable=False)
    country = db.Column(db.String(100), nullable=False)

    newsletter = db.Column(db.Boolean, nullable=False, default=False)
    password_hash = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(20), nullable=False, default=ROLE_CUSTOMER)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    orders = db.relationship("Order", backref="account", lazy=True)


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    items_json = db.Column(db.Text, nullable=False, default="[]")  # serialized item list
    quantity = db.Column(db.Integer, nullable=False, default=1)
    total_cents = db.Column(db.Integer, nullable=False, default=0)

    # Address snapshot taken at checkout
    first_name = db.Column(db.String(100), nullable=False, default="")
    last_name = db.Column(db.String(100), nullable=False, default="")
    phone = db.Column(db.String(50), nullable=False, default="")
    street = db.Column(db.String(255), nullable=False, default="")
    house_number = db.Column(db.String(20), nullable=False, default="")
    apartment = db.Column(db.String(50), nullable=False, default="")
    postal_code = db.Column(db.String(20), nullable=False, default="")
    city = db.Column(db.String(100), nullable=False, default="")
    state = db.Column(db.String(100), nullable=False, default="")

    delivery_date = db.Column(db.String(20), nullable=True)
    delivery_time = db.Column(db.String(20), nullable=True)
    special_instructions = db.Column(db.Text, nullable=True)
    payment_method = db.Column(db.String(50), nullable=True)

    status = db.Column(db.String(20), nullable=False, default="confirmed")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    delivered_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        Index("ix_orders_user_created", "user_id", "created_at"),
    )
