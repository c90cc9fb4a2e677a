"""
Dependency injection container.

Factory functions for FastAPI dependencies: the process-wide ingestion
job manager and the caller identity forwarded by the auth layer.

Dependencies: fastapi, docmanager.configs, docmanager.core, docmanager.boundary
System role: DI container for service injection
"""

import logging
import uuid
from collections.abc import Callable
from datetime import timedelta

from fastapi import Depends, Header, HTTPException, status

from docmanager.boundary.db.connection import get_async_engine, get_async_session_factory
from docmanager.boundary.db.document_gateway import SqlDocumentStatusGateway
from docmanager.boundary.db.job_store import SqlJobStore
from docmanager.boundary.processing.processing_client import HttpProcessingClient
from docmanager.configs import Settings, get_settings
from docmanager.core.identity import CallerIdentity, UserRole
from docmanager.core.ingestion.job_manager import IngestionJobManager
from docmanager.core.ingestion.recovery import StaleJobSweeper

logger = logging.getLogger(__name__)


class ServiceCache:
    """
    Container for long-lived instances built from settings.

    The engine, processing client and job manager are created lazily on
    first access and torn down together by ``aclose``.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._engine = None
        self._session_factory = None
        self._processing_client = None
        self._ingestion_manager = None
        self._sweeper = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def engine(self):
        """Get cached async engine."""
        if self._engine is None:
            self._engine = get_async_engine(self.settings.database)
        return self._engine

    @property
    def session_factory(self):
        if self._session_factory is None:
            self._session_factory = get_async_session_factory(self.engine)
        return self._session_factory

    @property
    def processing_client(self) -> HttpProcessingClient:
        if self._processing_client is None:
            self._processing_client = HttpProcessingClient.from_settings(self.settings.processing)
        return self._processing_client

    @property
    def ingestion_manager(self) -> IngestionJobManager:
        """Get cached ingestion job manager."""
        if self._ingestion_manager is None:
            ingestion = self.settings.ingestion
            self._ingestion_manager = IngestionJobManager(
                store=SqlJobStore(self.session_factory),
                gateway=SqlDocumentStatusGateway(self.session_factory),
                client=self.processing_client,
                processing_timeout=self.settings.processing.timeout_seconds,
                default_max_retries=ingestion.default_max_retries,
                max_page_size=ingestion.max_page_size,
            )
        return self._ingestion_manager

    @property
    def sweeper(self) -> StaleJobSweeper:
        if self._sweeper is None:
            ingestion = self.settings.ingestion
            manager = self.ingestion_manager
            self._sweeper = StaleJobSweeper(
                store=manager.store,
                gateway=manager.gateway,
                stale_after=timedelta(seconds=ingestion.stale_after_seconds),
                interval=ingestion.sweep_interval_seconds,
            )
        return self._sweeper

    async def aclose(self) -> None:
        """Stop background work and release connections."""
        if self._sweeper is not None:
            await self._sweeper.stop()
        if self._ingestion_manager is not None:
            await self._ingestion_manager.shutdown()
        if self._processing_client is not None:
            await self._processing_client.aclose()
        if self._engine is not None:
            await self._engine.dispose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._engine = None
        self._session_factory = None
        self._processing_client = None
        self._ingestion_manager = None
        self._sweeper = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_ingestion_manager() -> IngestionJobManager:
    """Get the process-wide ingestion job manager."""
    return get_service_cache().ingestion_manager


async def get_caller_identity(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
    x_user_role: str | None = Header(None, alias="X-User-Role"),
) -> CallerIdentity:
    """
    Read the caller identity forwarded by the upstream auth layer.

    Raises:
        HTTPException(401): Header missing or malformed
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity",
        )
    try:
        return CallerIdentity(
            id=uuid.UUID(x_user_id),
            role=UserRole(x_user_role.strip().lower()),
        )
    except ValueError:
        logger.warning(
            "Malformed caller identity",
            extra={"user_id": x_user_id, "user_role": x_user_role},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed caller identity",
        ) from None


def require_roles(*roles: UserRole) -> Callable[..., CallerIdentity]:
    """
    Build a dependency that admits only callers holding one of ``roles``.

    Raises:
        HTTPException(403): Caller role not allowed
    """
    allowed = frozenset(roles)

    async def dependency(
        caller: CallerIdentity = Depends(get_caller_identity),
    ) -> CallerIdentity:
        if caller.role not in allowed:
            logger.warning(
                "Caller role not permitted",
                extra={"user_id": str(caller.id), "user_role": caller.role.value},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this operation",
            )
        return caller

    return dependency


require_job_manager = require_roles(UserRole.EDITOR, UserRole.ADMIN)
require_admin = require_roles(UserRole.ADMIN)
