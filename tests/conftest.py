import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bakeryshop.app.config import TestConfig
from bakeryshop.app.extensions import get_store
from bakeryshop.app.factory import create_app


class MemoryTestConfig(TestConfig):
    STORE_BACKEND = "memory"


CONFIGS = {"sql": TestConfig, "memory": MemoryTestConfig}


def user_payload(**overrides):
    data = {
        "firstName": "Anna",
        "lastName": "Schmidt",
        "phone": "+49 151 1234567",
        "email": "anna@example.com",
        "street": "Lindenstraße",
        "houseNumber": "5",
        "apartment": "2B",
        "postalCode": "10969",
        "city": "Berlin",
        "state": "Berlin",
        "password": "secret123",
        "confirmPassword": "secret123",
    }
    data.update(overrides)
    return data


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


# Both store backends must behave identically behind the API.
@pytest.fixture(params=["sql", "memory"])
def app(request):
    app = create_app(CONFIGS[request.param])
    yield app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def register(client):
    """Register a user and return (token, user dict)."""

    def _register(**overrides):
        r = client.post("/api/register", json=user_payload(**overrides))
        assert r.status_code == 201, r.json
        return r.json["token"], r.json["user"]

    return _register


@pytest.fixture()
def make_admin(app):
    def _make_admin(user_id):
        with app.app_context():
            get_store().update_user(user_id, role="admin")

    return _make_admin
