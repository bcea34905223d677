import logging
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from walletauth.core.config import settings
from walletauth.core.errors import StoreUnavailable
from walletauth.db.base import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url,
                         connect_args={"connect_timeout": settings.DB_CONNECT_TIMEOUT},
                         pool_pre_ping=True,
                         pool_recycle=3600,
    )


# Create the SQLAlchemy engine
engine = build_engine(settings.DATABASE_URL)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create tables and check the database answers. Called once at startup."""
    # register the models on Base.metadata
    import walletauth.models.accounts  # noqa: F401

    try:
        Base.metadata.create_all(bind)
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database unreachable at startup: %s", e.__class__.__name__)
        raise StoreUnavailable("Database unreachable") from e


# Dependency that can be used in routes to get the session
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()  # generate a new SessionLocal
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
