"""
Database configuration and session management
"""
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from contact_manager.core.config import Settings
from contact_manager.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

# Base class for models
Base = declarative_base()


def _engine_options(url: str, settings: Settings) -> dict:
    """Engine keyword arguments for the target dialect"""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False, "timeout": 5}}
        # In-memory databases live and die with their connection
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
        "connect_args": {
            "connect_timeout": 5,
            "options": "-c statement_timeout=5000"
        } if url.startswith("postgresql") else {},
    }


class Database:
    """
    Owns the engine and session factory for one process

    Built from explicit settings; `init()` at startup, `dispose()` at shutdown.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.url = settings.sqlalchemy_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database.init() has not been called")
        return self._engine

    def init(self) -> "Database":
        """Create the engine and session factory"""
        if self._engine is not None:
            return self
        self._engine = create_engine(
            self.url,
            echo=self.settings.log_sqlalchemy,
            **_engine_options(self.url, self.settings)
        )
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        logger.info("Database engine created", extra={"dialect": self._engine.dialect.name})
        return self

    def dispose(self) -> None:
        """Release pooled connections"""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database.init() has not been called")
        return self._session_factory()

    def create_all(self) -> None:
        """Create tables from model metadata (tests and local scratch databases)"""
        import contact_manager.models  # noqa: F401 - register models

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        import contact_manager.models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def ping(self) -> None:
        """Run a trivial query; raises on connection problems"""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting database session
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
