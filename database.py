"""Database engine, session factory and the per-request session dependency."""
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from logger import get_logger

logger = get_logger("database")

Base = declarative_base()


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Create the SQLAlchemy engine for the given database URL"""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            # a single shared connection so every session sees the same database
            options["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **options)

    return create_engine(url, echo=echo, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory used for every request"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_models(engine: Engine) -> None:
    """Create all tables defined in models.py"""
    import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=engine)
    logger.debug("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))


def get_db(request: Request):
    """Dependency function that provides a database session"""
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
