"""FastAPI application factory."""

import time
from contextlib import asynccontextmanager
from typing import Callable, List, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from sos_matching.clients.factory import CollaboratorClients, build_clients
from sos_matching.config.environment import EnvironmentConfig
from sos_matching.config.models import AppConfig
from sos_matching.events.bus import EventBus, LoggingEventBus
from sos_matching.events.publisher import EventPublisher
from sos_matching.lifecycle.service import MatchLifecycleService
from sos_matching.logging import get_logger
from sos_matching.logging.config import SERVICE_NAME
from sos_matching.persistence.database import close_database, init_database
from sos_matching.pipeline.runner import MatchOrchestrator
from sos_matching.utils.timestamps import format_timestamp, utc_now

from .errors import register_exception_handlers
from .routes import router
from .schemas import HealthResponse

logger = get_logger(__name__, component="api")


def create_app(
    orchestrator: MatchOrchestrator,
    lifecycle: MatchLifecycleService,
    cors_origins: Optional[List[str]] = None,
    on_shutdown: Optional[Callable[[], None]] = None,
) -> FastAPI:
    """
    Build the API around already-wired services.

    Args:
        orchestrator: Runs POST /match
        lifecycle: Backs accept, reject, list and stats
        cors_origins: Allowed origins (all when None)
        on_shutdown: Called once when the application stops
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Matching API starting", extra={"event": "api.startup"})
        yield
        logger.info("Matching API shutting down", extra={"event": "api.shutdown"})
        if on_shutdown is not None:
            on_shutdown()

    app = FastAPI(
        title="SOS Matching Service",
        description="Matches SOS requests to volunteers and resources",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator
    app.state.lifecycle = lifecycle

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            f"{request.method} {request.url.path}",
            extra={
                "event": "api.request.completed",
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                "client_ip": request.client.host if request.client else None,
            },
        )
        return response

    register_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    def health():
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "timestamp": format_timestamp(utc_now()),
        }

    app.include_router(router)
    return app


def create_app_from_config(
    app_config: AppConfig,
    env_config: EnvironmentConfig,
    bus: Optional[EventBus] = None,
    clients: Optional[CollaboratorClients] = None,
) -> FastAPI:
    """Initialise storage and collaborators from configuration and build the app.

    Raises:
        DatabaseConnectionError: If the database cannot be initialised
        ClientConfigurationError: If a collaborator URL or HTTP setting is invalid
    """
    init_database(env_config.database_url)

    clients = clients or build_clients(app_config)
    publisher = EventPublisher(bus or LoggingEventBus(), app_config.queues)
    orchestrator = MatchOrchestrator.from_clients(app_config.matching, clients, publisher)
    lifecycle = MatchLifecycleService(publisher)

    def shutdown() -> None:
        clients.close()
        close_database()

    return create_app(orchestrator, lifecycle, on_shutdown=shutdown)
