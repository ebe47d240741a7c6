import os
from decimal import Decimal
from io import BytesIO
from typing import AsyncGenerator, Awaitable, Callable, Optional

# Keep the application engine off the network; every test gets its own database below
os.environ.setdefault("DATABASE_URI", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JSON_LOGS", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inventory_api.core.config import settings
from inventory_api.core.security import create_access_token, get_password_hash
from inventory_api.db.models import Category, Product, User
from inventory_api.db.session import build_engine, create_tables, get_db
from inventory_api.main import app

TEST_PASSWORD = "password123"


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables(test_engine)

    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    yield factory

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def media_root(tmp_path, monkeypatch):
    root = tmp_path / "media"
    monkeypatch.setattr(settings, "MEDIA_ROOT", root)
    settings.ensure_media_dirs()
    return root


@pytest_asyncio.fixture(scope="function")
async def user(db_session: AsyncSession) -> User:
    user = User(name="Test User", email="test@example.com", hashed_password=get_password_hash(TEST_PASSWORD))
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}


@pytest_asyncio.fixture(scope="function")
async def anon_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}


@pytest_asyncio.fixture(scope="function")
async def client(anon_client: AsyncClient, auth_headers: dict) -> AsyncClient:
    anon_client.headers.update(auth_headers)
    return anon_client


@pytest.fixture
def make_category(db_session: AsyncSession) -> Callable[..., Awaitable[Category]]:
    async def _make(name: str, description: Optional[str] = None) -> Category:
        category = Category(name=name, description=description)
        db_session.add(category)
        await db_session.commit()
        await db_session.refresh(category)
        return category

    return _make


@pytest.fixture
def make_product(db_session: AsyncSession) -> Callable[..., Awaitable[Product]]:
    async def _make(
        name: str,
        price: str = "10.00",
        category: Optional[Category] = None,
        rating: str = "0.00",
        description: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Product:
        product = Product(
            name=name,
            price=Decimal(price),
            rating=Decimal(rating),
            category_id=category.id if category is not None else None,
            description=description,
            image=image,
        )
        db_session.add(product)
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Encode a small solid image in the given Pillow format."""

    def _make(fmt: str = "PNG", size: tuple = (8, 8)) -> bytes:
        buffer = BytesIO()
        Image.new("RGB", size, (200, 30, 30)).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make
