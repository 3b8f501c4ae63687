"""FastAPI application for the cadastre API.

Serves parcel geometry from PostGIS as GeoJSON and resolves legal-entity
ownership through the MAJIC datasets and the company registry.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cadastre.core.config import Settings
from cadastre.core.errors import CadastreError
from cadastre.db.engine import DatabaseManager
from cadastre.gis.store import ParcelStore, PostgisParcelStore
from cadastre.majic.client import MajicClient
from cadastre.majic.resolver import OwnershipResolver
from cadastre.registry.client import CompanyRegistryClient
from cadastre.web.owner_router import router as owner_router
from cadastre.web.parcel_router import router as parcel_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    parcel_store: ParcelStore | None = None,
    majic_client: MajicClient | None = None,
    registry_client: CompanyRegistryClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with fake collaborators.

    Args:
        settings: Application settings. Defaults to Settings().
        parcel_store: Optional pre-built parcel store. When omitted a
            PostGIS store is built on ``settings.db.database_url``.
        majic_client: Optional pre-built MAJIC client.
        registry_client: Optional pre-built company registry client.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    # Resources created here are released on shutdown; injected ones belong
    # to the caller.
    owned: list[Any] = []

    if parcel_store is None:
        db_manager = DatabaseManager(
            settings.db.database_url,
            echo=settings.db.echo,
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.max_overflow,
            command_timeout=settings.db.command_timeout_seconds,
        )
        owned.append(db_manager)
        parcel_store = PostgisParcelStore(db_manager)

    if majic_client is None:
        majic_client = MajicClient(settings.majic)
        owned.append(majic_client)

    if registry_client is None:
        registry_client = CompanyRegistryClient(settings.registry)
        owned.append(registry_client)

    ownership_resolver = OwnershipResolver(
        store=parcel_store,
        client=majic_client,
        default_dataset_id=settings.majic.default_dataset_id,
        discovery_pattern=settings.majic.discovery_pattern,
        discovery_limit=settings.majic.discovery_limit,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        for resource in owned:
            await resource.close()

    app = FastAPI(
        title="Cadastre API",
        description="Cadastral parcels and legal-entity ownership",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store on app state for access in route handlers
    app.state.settings = settings
    app.state.parcel_store = parcel_store
    app.state.majic_client = majic_client
    app.state.registry_client = registry_client
    app.state.ownership_resolver = ownership_resolver

    app.include_router(parcel_router)
    app.include_router(owner_router)

    @app.exception_handler(CadastreError)
    async def handle_cadastre_error(request: Request, exc: CadastreError) -> JSONResponse:
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            level, "%s %s -> %d: %s",
            request.method, request.url.path, exc.status_code, exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.get("/health")
    async def health_check() -> Any:
        """Database round-trip health check."""
        try:
            db = await parcel_store.ping()
        except CadastreError as exc:
            logger.error("Health check failed: %s", exc.message)
            return JSONResponse(status_code=500, content={"ok": False, "error": exc.message})
        return {"ok": True, "db": db}

    return app
