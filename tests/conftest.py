"""Pytest configuration and fixtures."""
import os
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Ensure the application uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
# Keep external collaborators switched off; tests inject fakes instead
os.environ["CLOUDINARY_CLOUD_NAME"] = ""
os.environ["CLOUDINARY_API_KEY"] = ""
os.environ["CLOUDINARY_API_SECRET"] = ""
os.environ["PAYSTACK_SECRET_KEY"] = ""

from contestvote.config import get_settings
from contestvote.database import Base, enable_sqlite_foreign_keys
from contestvote.services.media_service import MediaAsset, public_id_from_url


BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test.db"
settings = get_settings()


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    command.upgrade(alembic_cfg, "head")

    yield

    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # On Windows, the database might still be in use
            pass


@pytest.fixture
async def test_engine():
    """Engine on the migrated test database; every row is removed afterwards."""
    engine = create_async_engine(settings.database_url, echo=False, pool_pre_ping=True)
    enable_sqlite_foreign_keys(engine)

    yield engine

    async with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            await conn.execute(table.delete())
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()
        await session.close()


class FakeMediaService:
    """In-memory stand-in for the photo host that records every call."""

    def __init__(self):
        self.uploaded: list[MediaAsset] = []
        self.deleted: list[str] = []
        self.fail_uploads = False
        self._counter = 0

    @property
    def configured(self) -> bool:
        return True

    async def upload(self, filename, content, content_type=None):
        from contestvote.utils.exceptions import MediaUploadError

        if self.fail_uploads:
            raise MediaUploadError("Failed to upload image: rejected")
        self._counter += 1
        public_id = f"contest_participants/photo_{self._counter}"
        asset = MediaAsset(
            url=f"https://res.cloudinary.com/demo/image/upload/v1700000000/{public_id}.jpg",
            public_id=public_id,
        )
        self.uploaded.append(asset)
        return asset

    async def delete(self, public_id):
        if not public_id:
            return False
        self.deleted.append(public_id)
        return True

    async def delete_by_url(self, url):
        return await self.delete(public_id_from_url(url))

    async def delete_many_by_url(self, urls):
        deleted = 0
        for url in urls:
            if url and await self.delete_by_url(url):
                deleted += 1
        return deleted

    async def close(self):
        pass


@pytest.fixture
def media_service():
    return FakeMediaService()


@pytest.fixture
def payment_service():
    """Payment gateway double; tests set return values on initiate/verify."""
    from unittest.mock import AsyncMock, MagicMock

    service = MagicMock()
    service.initiate = AsyncMock()
    service.verify = AsyncMock()
    service.close = AsyncMock()
    return service


@pytest.fixture
async def test_app(session_factory, media_service, payment_service):
    """Create test app with database and collaborator overrides."""
    from contestvote.main import app
    from contestvote.database import get_db
    from contestvote.services.media_service import get_media_service
    from contestvote.services.payment_service import get_payment_service

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_service] = lambda: media_service
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    yield app
    app.dependency_overrides.clear()
