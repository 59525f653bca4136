"""Shared fixtures: in-memory SQLite database, seeded taxonomies and an API client."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db, get_taxonomy_cache
from app.config import settings
from app.infra.cache import TTLCache
from app.infra.database import build_engine, create_schema
from app.main import app
from app.models import (
    CharacteristicGroup,
    CharacteristicValue,
    Product,
    ProductCategory,
    ProductCharacteristic,
)

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


async def add_rows(session: AsyncSession, *rows) -> None:
    """Insert rows one at a time so parents always exist before children."""
    for row in rows:
        session.add(row)
        await session.flush()
    await session.commit()


@pytest.fixture(autouse=True)
def dev_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "environment", "dev")
    monkeypatch.setattr(settings, "admin_api_token", "")
    monkeypatch.setattr(settings, "cache_version", "v1")


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(
        SQLITE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache() -> TTLCache:
    return TTLCache(default_ttl=60)


@pytest_asyncio.fixture
async def electronics(db_session: AsyncSession) -> AsyncSession:
    """Electronics (1) > Phones (2) > Smartphones (3), plus Audio (4) at the root.

    Product "Pixel" sits in Phones and "Headset" in Audio.
    """
    await add_rows(
        db_session,
        ProductCategory(id=1, name="Electronics", sort_order=0),
        ProductCategory(id=2, name="Phones", parent_id=1, sort_order=0),
        ProductCategory(id=3, name="Smartphones", parent_id=2, sort_order=0),
        ProductCategory(id=4, name="Audio", sort_order=1),
        Product(id=1, name="Pixel", sku="PX-1", category_id=2),
        Product(id=2, name="Headset", sku="HS-1", category_id=4),
    )
    return db_session


@pytest_asyncio.fixture
async def specifications(db_session: AsyncSession) -> AsyncSession:
    """Specs (1) > Display (2) > Panel (3), plus Unused (4) at the root.

    Display owns "OLED" (1) and "LCD" (2); Panel owns "120Hz" (3); Unused
    owns "Spare" (4). Pixel uses OLED and 120Hz, Galaxy uses OLED.
    """
    await add_rows(
        db_session,
        CharacteristicGroup(id=1, name="Specs", sort_order=0),
        CharacteristicGroup(id=2, name="Display", parent_id=1, sort_order=0),
        CharacteristicGroup(id=3, name="Panel", parent_id=2, sort_order=0),
        CharacteristicGroup(id=4, name="Unused", sort_order=1),
        CharacteristicValue(id=1, group_id=2, value="OLED", sort_order=0),
        CharacteristicValue(id=2, group_id=2, value="LCD", sort_order=1),
        CharacteristicValue(id=3, group_id=3, value="120Hz", sort_order=0),
        CharacteristicValue(id=4, group_id=4, value="Spare", sort_order=0),
        Product(id=1, name="Pixel", sku="PX-1"),
        Product(id=2, name="Galaxy", sku="GX-1"),
        ProductCharacteristic(product_id=1, value_id=1),
        ProductCharacteristic(product_id=1, value_id=3),
        ProductCharacteristic(product_id=2, value_id=1),
    )
    return db_session


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    cache: TTLCache,
) -> AsyncGenerator[AsyncClient, None]:
    """API client bound to the test database and a private cache."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_taxonomy_cache] = lambda: cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
