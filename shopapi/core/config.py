# shopapi/core/config.py

from __future__ import annotations

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _get_list(name: str, default: str) -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class Settings:
    """
    Configuration unique de l'app (stateless).
    - DB: privilégie DATABASE_URL, sinon compose avec POSTGRES_* ou fallback SQLite.
    - Sécurité: header `token` (JWT signé avec JWT_SECRET).
    - Messaging: RabbitMQ optionnel (désactivé si RABBITMQ_URL absent).
    - Console admin: BACKEND_URL + CURRENCY.
    """

    def __init__(self) -> None:
        # ---------- Métadonnées ----------
        self.ENV = os.getenv("ENV", "dev")
        self.APP_NAME = os.getenv("APP_NAME", "shop-api")
        self.APP_TITLE = os.getenv("APP_TITLE", "Shop API")
        self.APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.APP_DESCRIPTION = os.getenv("APP_DESCRIPTION", "Storefront orders and admin order console")

        # ---------- Base de données ----------
        self.DATABASE_URL = os.getenv("DATABASE_URL") or self._compose_db_url()
        self.DB_ECHO = _get_bool("DB_ECHO", False)

        # ---------- Sécurité ----------
        self.JWT_SECRET = os.getenv("JWT_SECRET", "")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.ROLE_ADMIN = os.getenv("ROLE_ADMIN", "admin")

        # ---------- Commandes ----------
        self.ORDER_STATUS_STRICT = _get_bool("ORDER_STATUS_STRICT", True)

        # ---------- RabbitMQ ----------
        self.RABBITMQ_URL = os.getenv("RABBITMQ_URL")
        self.RABBITMQ_EXCHANGE = os.getenv("RABBITMQ_EXCHANGE", "events")
        self.RABBITMQ_EXCHANGE_TYPE = os.getenv("RABBITMQ_EXCHANGE_TYPE", "topic")

        # ---------- Logging ----------
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
        self.LOG_TO_FILE = _get_bool("LOG_TO_FILE", False)
        self.LOG_DIR = os.getenv("LOG_DIR", "logs")
        self.LOG_FILE = os.getenv("LOG_FILE", "app.log")
        self.LOG_MAX_BYTES = _get_int("LOG_MAX_BYTES", 10 * 1024 * 1024)
        self.LOG_BACKUP_COUNT = _get_int("LOG_BACKUP_COUNT", 5)

        # ---------- HTTP ----------
        self.CORS_ALLOW_ORIGINS = _get_list(
            "CORS_ALLOW_ORIGINS", "http://localhost:5173,http://localhost:5174"
        )
        self.CORS_ALLOW_CREDENTIALS = _get_bool("CORS_ALLOW_CREDENTIALS", True)
        self.CORS_ALLOW_METHODS = os.getenv("CORS_ALLOW_METHODS", "*")
        self.CORS_ALLOW_HEADERS = os.getenv("CORS_ALLOW_HEADERS", "*")
        self.FORCE_HTTPS = _get_bool("FORCE_HTTPS", self.ENV == "prod")

        # ---------- Console admin ----------
        self.BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:4000")
        self.CURRENCY = os.getenv("CURRENCY", "KES ")

    # -------- Helpers internes --------
    def _compose_db_url(self) -> str:
        pg_host = os.getenv("POSTGRES_HOST")
        pg_db = os.getenv("POSTGRES_DB")
        pg_user = os.getenv("POSTGRES_USER")
        pg_pwd = os.getenv("POSTGRES_PASSWORD", "")
        pg_port = os.getenv("POSTGRES_PORT", "5432")

        if pg_host and pg_db and pg_user:
            return f"postgresql+psycopg2://{pg_user}:{pg_pwd}@{pg_host}:{pg_port}/{pg_db}"

        sqlite_path = os.getenv("SQLITE_PATH", "data/shop.db")
        path = Path(sqlite_path)
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{path.as_posix()}"


settings = Settings()
