"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agenda.config import Settings, get_settings
from agenda.core.logging import configure_logging
from agenda.core.middleware import setup_middleware
from agenda.core.exceptions import AppError, global_exception_handler
from agenda.interfaces.deps import AgendaContainer, build_container

# Import routers
from agenda.interfaces.api.auth import router as auth_router
from agenda.interfaces.api.accounts import router as accounts_router
from agenda.interfaces.api.clients import router as clients_router
from agenda.interfaces.api.schedules import router as schedules_router
from agenda.interfaces.api.profile import router as profile_router

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None, container: Optional[AgendaContainer] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan — startup and shutdown events."""
        logger.info("Starting Agenda...", env=settings.ENVIRONMENT)
        app.state.container = container or build_container(settings)

        yield

        app.state.container.close()
        logger.info("Agenda stopped")

    app = FastAPI(
        title="Agenda — Agendamentos para salões",
        description="API Backend — clientes, agenda do dia e contas de profissionais",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Setup Middleware (Correlation ID, Logging)
    setup_middleware(app)

    # Global Exception Handling (AppError is handled inside the router stack, anything else as a 500)
    app.add_exception_handler(AppError, global_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth_router)
    app.include_router(accounts_router)
    app.include_router(clients_router)
    app.include_router(schedules_router)
    app.include_router(profile_router)

    @app.get("/")
    def root():
        return {
            "name": "Agenda",
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs",
        }

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
