"""Database handle (engine + session factory) and per-request session dependency."""

import logging
from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

_IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


class Database:
    """
    Connection pool to the credential/catalog store.

    Constructed once at process start (FastAPI lifespan or CLI main) and
    disposed on shutdown; handed to request handlers through app.state.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        connect_args: dict = {}
        engine_kwargs: dict = {"pool_pre_ping": True, "echo": echo}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            if url in _IN_MEMORY_SQLITE_URLS:
                # One shared connection, otherwise every pool checkout sees an empty DB
                engine_kwargs["poolclass"] = StaticPool
        self.engine: Engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info("Database engine created (dialect=%s)", self.engine.dialect.name)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session from the app's Database and closes it when done."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.warning("Database connectivity check failed", exc_info=True)
        return False
