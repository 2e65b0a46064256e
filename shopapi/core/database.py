from __future__ import annotations

import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from shopapi.core.config import settings

logger = logging.getLogger(__name__)

_connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

# --- Engine SQLAlchemy ---
engine = create_engine(
    str(settings.DATABASE_URL),
    future=True,
    pool_pre_ping=True,
    echo=settings.DB_ECHO,
    connect_args=_connect_args,
)

# --- Session factory ---
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)

# --- Base déclarative ---
Base = declarative_base()


def init_db() -> None:
    """
    Enregistre tous les modèles et crée les tables manquantes.
    IMPORTANT: il faut importer les modèles avant d'appeler create_all().
    """
    from shopapi import models  # noqa: F401  (import retardé)
    Base.metadata.create_all(bind=engine)
    logger.info("[shop-api] DB init: tables ensured")


def get_db():
    """Fournit une session DB par requête HTTP."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        logger.exception("[shop-api] db session rolled back due to exception")
        raise
    finally:
        db.close()
        logger.debug("[shop-api] db session closed")
