import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _token_max_age(raw: str) -> int | None:
    # "0" or "none" -> permanent tokens
    raw = (raw or "").strip().lower()
    if raw in {"", "0", "none", "never"}:
        return None
    return int(raw)


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///bakeryshop.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # "sql" (Flask-SQLAlchemy) or "memory" (lost on restart)
    STORE_BACKEND = os.getenv("STORE_BACKEND", "sql").strip().lower()
    AUTO_CREATE_TABLES = _env_flag("AUTO_CREATE_TABLES", "true")

    TOKEN_SALT = os.getenv("TOKEN_SALT", "bakeryshop-auth")
    TOKEN_MAX_AGE = _token_max_age(os.getenv("TOKEN_MAX_AGE", "86400"))

    PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))
    DEFAULT_COUNTRY = os.getenv("DEFAULT_COUNTRY", "Deutschland")

    ORDER_INITIAL_STATUS = os.getenv("ORDER_INITIAL_STATUS", "confirmed").strip().lower()
    ORDER_IDENTITY_FALLBACK = _env_flag("ORDER_IDENTITY_FALLBACK", "true")
    DEFAULT_PRODUCT_NAME = os.getenv("DEFAULT_PRODUCT_NAME", "Traditionelles Barbari-Brot")
    DEFAULT_PRODUCT_PRICE_CENTS = int(os.getenv("DEFAULT_PRODUCT_PRICE_CENTS", "350"))

    # Comma-separated list
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "3001"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    SEED_ADMIN_PHONE = os.getenv("SEED_ADMIN_PHONE", "+49 30 1000000")
    SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "Password123!")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STORE_BACKEND = "sql"
    AUTO_CREATE_TABLES = True
    TOKEN_MAX_AGE = 24 * 60 * 60
    ORDER_INITIAL_STATUS = "confirmed"
    ORDER_IDENTITY_FALLBACK = True
    LOG_LEVEL = "WARNING"
