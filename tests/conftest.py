"""
Pytest configuration and fixtures for VR Asset Catalog tests.
"""

import io
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vrcatalog.auth.dependencies import get_optional_caller
from vrcatalog.auth.jwt import Caller
from vrcatalog.db.base import Base
from vrcatalog.db.session import create_engine_for_url, get_db
from vrcatalog.main import app
from vrcatalog.storage import LocalStorageBackend, get_storage

import vrcatalog.models  # noqa: F401  registers every table

OWNER_ID = "account-alice"
OTHER_ID = "account-bob"


class Identity:
    """The caller every request is made as. ``None`` means anonymous."""

    def __init__(self) -> None:
        self.current: Caller | None = Caller(account_id=OWNER_ID, display_name="Alice")

    def use(self, account_id: str | None, display_name: str = "") -> None:
        if account_id is None:
            self.current = None
        else:
            self.current = Caller(account_id=account_id, display_name=display_name or account_id)


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a per-test SQLite database engine."""
    engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def test_storage(tmp_path) -> LocalStorageBackend:
    """Create a test storage backend."""
    return LocalStorageBackend(base_path=str(tmp_path / "storage"))


@pytest.fixture
def identity() -> Identity:
    return Identity()


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, test_storage, identity) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    Every request gets its own session that commits on success, like the
    production ``get_db``.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def override_get_storage():
        return test_storage

    async def override_get_optional_caller():
        return identity.current

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = override_get_storage
    app.dependency_overrides[get_optional_caller] = override_get_optional_caller

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def upload_element(client: AsyncClient):
    """Upload a content element as the current caller and return its ID."""

    async def upload(file_name: str = "scene.gltf", content: bytes = b'{"asset": {"version": "2.0"}}') -> str:
        response = await client.post(
            "/v1/elements",
            files={"file": (file_name, io.BytesIO(content), "application/octet-stream")},
        )
        assert response.status_code == 201, response.text
        return response.json()["elementId"]

    return upload


@pytest.fixture
def create_asset(client: AsyncClient, upload_element):
    """Create an asset with one glTF format and one thumbnail as the current caller."""

    async def create(**fields: Any) -> dict[str, Any]:
        root_id = await upload_element("scene.gltf")
        thumbnail_id = await upload_element("thumb.png", b"\x89PNG\r\n\x1a\n")
        body = {
            "displayName": "Test asset",
            "formats": [{"rootId": root_id}],
            "thumbnailIds": [thumbnail_id],
        }
        body.update(fields)
        response = await client.post("/v1/assets", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return create
