from __future__ import annotations

from typing import TYPE_CHECKING

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS

if TYPE_CHECKING:
    from bakeryshop.store.base import Store

# Singletons (initialized in app factory)
db = SQLAlchemy()
migrate = Migrate()
cors = CORS()

STORE_KEY = "bakeryshop.store"


def get_store() -> "Store":
    """Repository bound to the current app (see `init_store` in the factory)."""
    return current_app.extensions[STORE_KEY]
