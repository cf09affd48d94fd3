"""Shared pytest fixtures and configuration for all tests."""

import asyncio
import os
from datetime import datetime, timezone
from typing import Any, Callable
from unittest.mock import MagicMock, patch

# Settings are read at import time; keep tests off the real database and broker
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from tableside import main
from tableside.database import Base, get_db
from tableside.models import FoodItem, RestaurantTable

PUBLISHED = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def session_maker(tmp_path) -> async_sessionmaker:
    """Session factory bound to a fresh SQLite file with foreign keys enforced."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'tableside.db'}",
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async def create_schema() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_schema())
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def seed(session_maker: async_sessionmaker) -> Callable[..., tuple]:
    """Insert model instances and return them with ids assigned."""

    def _seed(*rows: Any) -> tuple:
        async def add_rows() -> None:
            async with session_maker() as session:
                session.add_all(rows)
                await session.commit()

        asyncio.run(add_rows())
        return rows

    return _seed


@pytest.fixture
def fetch_all(session_maker: async_sessionmaker) -> Callable[[type], list]:
    """Read every row of a model back, ordered by id."""

    def _fetch(model: type) -> list:
        async def select_rows() -> list:
            async with session_maker() as session:
                result = await session.execute(select(model).order_by(model.id))
                return list(result.scalars().all())

        return asyncio.run(select_rows())

    return _fetch


@pytest.fixture
def ledger_task() -> MagicMock:
    """Replace the Celery ledger export so no broker is needed."""
    with patch.object(main, "export_order_to_ledger") as task:
        yield task


@pytest.fixture
def client(session_maker: async_sessionmaker, ledger_task: MagicMock) -> TestClient:
    """Test client whose requests run against the temporary database."""

    async def override_get_db():
        async with session_maker() as session:
            yield session

    main.app.dependency_overrides[get_db] = override_get_db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def menu(seed) -> tuple:
    """Published and unpublished menu items, inserted out of id order."""
    return seed(
        FoodItem(id=3, name="Lemonade", price=3.5, type="DRINK", image="lemonade.png", published_at=PUBLISHED),
        FoodItem(id=1, name="Margherita", price=10.0, type="PIZZA", image="margherita.png", published_at=PUBLISHED),
        FoodItem(id=4, name="Chef special", price=25.0, type="PIZZA", image=None, published_at=None),
        FoodItem(id=2, name="House bread", price=None, type=None, image=None, published_at=PUBLISHED),
        FoodItem(id=5, name="Diavola", price=12.0, type="PIZZA", image="diavola.png", published_at=PUBLISHED),
    )


@pytest.fixture
def tables(seed) -> tuple:
    """Two tables on the floor."""
    return seed(
        RestaurantTable(table_number="12", qr_code_image="qr-token-12", seats=4, location="terrace"),
        RestaurantTable(table_number="5", qr_code_image="qr-token-5", seats=2, location="window"),
    )


@pytest.fixture
def order_payload() -> dict:
    """A valid order from table 12."""
    return {
        "tableNumber": "12",
        "orderItems": [{"name": "Pizza", "amount": 2, "price": 10}],
        "totalAmount": 20,
        "paymentMethod": "cash",
    }
