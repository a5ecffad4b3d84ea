"""Shared SQLAlchemy engine and session factory."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from src.storefront.runtime.config.config_data import ConfigData
from src.storefront.runtime.context import get_config


def _engine_options(config: ConfigData) -> dict[str, Any]:
    """Engine keyword arguments for the configured backend."""
    db = config.database
    if db.is_sqlite:
        if config.app.environment == "production":
            logger.warning(
                "SQLite is not recommended for production use; "
                "concurrent checkouts serialize on the database lock"
            )
        return {"connect_args": {"check_same_thread": False, "timeout": 20}}

    options: dict[str, Any] = {
        "pool_size": db.pool_size,
        "max_overflow": db.max_overflow,
        "pool_timeout": db.pool_timeout,
        "pool_recycle": db.pool_recycle,
        "pool_pre_ping": True,
    }
    if db.url.startswith("postgresql"):
        options["connect_args"] = {
            "application_name": f"storefront_{config.app.environment}",
            "connect_timeout": 30,
        }
    return options


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Own the engine used by every request and CLI command.

        An already built ``engine`` may be supplied, which is how tests bind
        the service to an in-memory database.
        """
        if engine is None:
            config = get_config()
            options = _engine_options(config)
            engine = create_engine(config.database.connection_string, **options)
            logger.bind(
                environment=config.app.environment,
                dialect=engine.dialect.name,
                pooled="pool_size" in options,
            ).info("Database engine created")
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Open a session; objects stay usable after commit."""
        return Session(self._engine, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Commit on success, roll back and re-raise on error. Used by the CLI."""
        with self.get_session() as db:
            try:
                yield db
                db.commit()
            except Exception as e:
                db.rollback()
                logger.bind(error_type=type(e).__name__).error(
                    "Database transaction failed: {}", e
                )
                raise

    def health_check(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.bind(error_type=type(e).__name__).error("Database health check failed: {}", e)
            return False
        return True

    def get_pool_status(self) -> dict[str, int]:
        """Connection counts of a ``QueuePool``; zeros for pools without them."""
        pool = self._engine.pool
        stats = {
            "size": "size",
            "checked_in": "checkedin",
            "checked_out": "checkedout",
            "overflow": "overflow",
        }
        return {
            name: getattr(pool, method)() if hasattr(pool, method) else 0
            for name, method in stats.items()
        }
