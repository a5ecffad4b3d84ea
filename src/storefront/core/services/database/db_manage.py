"""Schema management helpers."""

from loguru import logger
from sqlalchemy import Engine
from sqlmodel import SQLModel


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables."""
        from src.storefront.entities import (  # noqa: F401
            CartItemTable,
            CartTable,
            OrderItemTable,
            OrderTable,
            ProductTable,
            ReviewTable,
            UserTable,
        )

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        """Drop every storefront table. Used by ``storefront db reset``."""
        from src.storefront import entities  # noqa: F401

        SQLModel.metadata.drop_all(self._engine)
        logger.warning("All database tables dropped.")
