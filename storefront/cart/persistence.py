"""
Cart persistence hooks.

The cart engine hands a ``CartSnapshot`` (lines + applied coupon) to
``save_cart`` after every mutation and asks ``load_cart`` for the initial
state on cold start. Stores keep one snapshot per session; the latest save
wins, there is no merging between writers.

Implementations:
  InMemoryCartStore: process-local dict, used by tests and when DATABASE_URL is unset
  SqlCartStore: SQLAlchemy table ``cart_snapshots`` (SQLite or Postgres)
"""
from __future__ import annotations

import copy
from typing import Dict, Optional, Protocol

from sqlalchemy import Column, DateTime, JSON, String, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import func

from storefront.cart.models import CartSnapshot
from storefront.utils.logger import get_logger

logger = get_logger("cart.persistence")

Base = declarative_base()


class CartPersistenceError(RuntimeError):
    """Raised when a cart snapshot cannot be read or written."""


class CartPersistence(Protocol):
    def load_cart(self, session_id: str) -> Optional[CartSnapshot]:
        ...

    def save_cart(self, session_id: str, snapshot: CartSnapshot) -> None:
        ...


class InMemoryCartStore:
    """Snapshots kept as plain dicts so later engine mutations never leak into the store."""

    def __init__(self) -> None:
        self._snapshots: Dict[str, dict] = {}

    def load_cart(self, session_id: str) -> Optional[CartSnapshot]:
        data = self._snapshots.get(session_id)
        if data is None:
            return None
        return CartSnapshot.from_dict(copy.deepcopy(data))

    def save_cart(self, session_id: str, snapshot: CartSnapshot) -> None:
        self._snapshots[session_id] = snapshot.to_dict()

    def clear(self) -> None:
        self._snapshots.clear()

    def __len__(self) -> int:
        return len(self._snapshots)


class CartSnapshotRow(Base):
    """One persisted cart per session."""
    __tablename__ = "cart_snapshots"

    session_id = Column(String(64), primary_key=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class SqlCartStore:
    """
    Cart snapshots in a relational database via SQLAlchemy.

    ``sqlite://`` (in-memory) shares a single connection so every session
    sees the same database.
    """

    def __init__(self, database_url: str, create_tables: bool = True):
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            self.engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(database_url, pool_pre_ping=True)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        if create_tables:
            Base.metadata.create_all(bind=self.engine)
        logger.info("SQL cart store ready (%s)", self.engine.url.get_backend_name())

    def load_cart(self, session_id: str) -> Optional[CartSnapshot]:
        db = self.SessionLocal()
        try:
            row = db.get(CartSnapshotRow, session_id)
            if row is None:
                return None
            payload = row.payload
        except SQLAlchemyError as e:
            logger.error("load_cart failed for session=%s: %s", session_id, e)
            raise CartPersistenceError(f"Failed to load cart {session_id}") from e
        finally:
            db.close()

        try:
            return CartSnapshot.from_dict(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("Stored cart for session=%s is malformed: %r", session_id, e)
            raise CartPersistenceError(f"Stored cart {session_id} is malformed") from e

    def save_cart(self, session_id: str, snapshot: CartSnapshot) -> None:
        db = self.SessionLocal()
        try:
            db.merge(CartSnapshotRow(session_id=session_id, payload=snapshot.to_dict()))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("save_cart failed for session=%s: %s", session_id, e)
            raise CartPersistenceError(f"Failed to save cart {session_id}") from e
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()


def create_cart_store(database_url: str = "") -> CartPersistence:
    """SQL store when a database URL is configured, in-memory otherwise."""
    if database_url:
        return SqlCartStore(database_url)
    logger.info("DATABASE_URL not set, carts are kept in memory only")
    return InMemoryCartStore()
