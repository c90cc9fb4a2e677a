"""
Test suite for the dependency injection container.

Verifies ServiceCache wiring from settings and the caller identity
dependencies.

System role: Verification of DI container
"""

import uuid

import pytest
from fastapi import HTTPException

from docmanager.api.deps.dependencies import (
    ServiceCache,
    get_caller_identity,
    require_admin,
    require_job_manager,
)
from docmanager.boundary.db.document_gateway import SqlDocumentStatusGateway
from docmanager.boundary.db.job_store import SqlJobStore
from docmanager.boundary.processing.processing_client import HttpProcessingClient
from docmanager.configs import Settings
from docmanager.configs.database import DatabaseSettings
from docmanager.configs.ingestion import IngestionSettings
from docmanager.configs.processing import ProcessingSettings
from docmanager.core.identity import CallerIdentity, UserRole
from docmanager.core.ingestion.job_manager import IngestionJobManager


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
        processing=ProcessingSettings(backend_url="http://processing.test", timeout_seconds=7.5),
        ingestion=IngestionSettings(default_max_retries=5, max_page_size=50, stale_after_seconds=120),
    )


class TestServiceCache:
    """Test suite for ServiceCache."""

    async def test_ingestion_manager_is_wired_from_settings(self, settings: Settings) -> None:
        # Arrange
        cache = ServiceCache(settings)

        # Act
        manager = cache.ingestion_manager

        # Assert
        assert isinstance(manager, IngestionJobManager)
        assert isinstance(manager.store, SqlJobStore)
        assert isinstance(manager.gateway, SqlDocumentStatusGateway)
        assert isinstance(manager.client, HttpProcessingClient)
        assert manager.processing_timeout == 7.5
        assert manager.default_max_retries == 5
        assert manager.max_page_size == 50
        assert cache.ingestion_manager is manager
        await cache.aclose()

    async def test_sweeper_shares_manager_store(self, settings: Settings) -> None:
        cache = ServiceCache(settings)

        sweeper = cache.sweeper

        assert sweeper.store is cache.ingestion_manager.store
        assert sweeper.stale_after.total_seconds() == 120
        await cache.aclose()

    async def test_aclose_clears_instances(self, settings: Settings) -> None:
        cache = ServiceCache(settings)
        first = cache.ingestion_manager

        await cache.aclose()

        assert cache.ingestion_manager is not first
        await cache.aclose()


class TestCallerIdentity:
    """Test suite for identity dependencies."""

    async def test_headers_resolve_to_identity(self) -> None:
        user_id = uuid.uuid4()

        caller = await get_caller_identity(x_user_id=str(user_id), x_user_role=" Admin ")

        assert caller == CallerIdentity(id=user_id, role=UserRole.ADMIN)

    async def test_unknown_role_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_caller_identity(x_user_id=str(uuid.uuid4()), x_user_role="superuser")

        assert exc_info.value.status_code == 401

    async def test_role_guards(self) -> None:
        editor = CallerIdentity(id=uuid.uuid4(), role=UserRole.EDITOR)
        viewer = CallerIdentity(id=uuid.uuid4(), role=UserRole.VIEWER)

        assert await require_job_manager(caller=editor) is editor
        with pytest.raises(HTTPException) as exc_info:
            await require_job_manager(caller=viewer)
        assert exc_info.value.status_code == 403
        with pytest.raises(HTTPException):
            await require_admin(caller=editor)


class TestSettings:
    """Test suite for settings validation."""

    def test_log_level_is_normalized(self) -> None:
        assert Settings(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            Settings(log_level="chatty")

    def test_database_url_override_selects_sqlite(self) -> None:
        database = DatabaseSettings(url="sqlite+aiosqlite:///./local.db")

        assert database.is_sqlite is True
        assert database.async_database_url == "sqlite+aiosqlite:///./local.db"

    def test_database_url_from_parts(self) -> None:
        database = DatabaseSettings(
            host="db", port=6543, user="svc", password="pw", db="docs", sslmode="require"
        )

        assert database.async_database_url == "postgresql+asyncpg://svc:pw@db:6543/docs?ssl=require"
        assert database.is_sqlite is False
