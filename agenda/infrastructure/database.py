"""SQLAlchemy engine/session setup shared by the document store, auth provider and secure store."""

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = structlog.get_logger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create the engine. In-memory SQLite shares one connection so every session sees the same data."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
    else:
        engine = create_engine(database_url, pool_pre_ping=True, pool_recycle=300)

    logger.info("Database engine created", dialect=engine.dialect.name)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables (dev only — use migrations in production)."""
    # Models must be imported so they register on Base.metadata
    from agenda.domain.models import account, document, secure_entry  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")
