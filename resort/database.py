import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Handle on the relational store: one engine plus its session factory.

    Built once at process startup and disposed at shutdown; request handlers
    receive sessions through ``get_db`` instead of importing a global engine.
    """

    def __init__(self, url: str, **engine_kwargs):
        connect_args = engine_kwargs.pop("connect_args", {})
        if url.startswith("sqlite"):
            # Needed for SQLite when the server hands the connection to worker threads
            connect_args.setdefault("check_same_thread", False)
        else:
            engine_kwargs.setdefault("pool_pre_ping", True)

        self.url = url
        self.engine = create_engine(url, connect_args=connect_args, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, autocommit=False)

    def create_all(self):
        """Create tables for every model registered on ``Base``"""
        # Import models here so they get registered with Base before creating tables
        import resort.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self):
        logger.info("Disposing database engine for %s", self.engine.url.render_as_string(hide_password=True))
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """Yield a session bound to the application's database handle"""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
