# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from starlette.middleware.authentication import AuthenticationMiddleware

from shopchat.auth import AuthBackend
from shopchat.logging import logger
from shopchat.managers.connection_registry import ConnectionRegistry
from shopchat.managers.identity_manager import DatabaseIdentityVerifier
from shopchat.managers.websocket_connection_manager import ConnectionManager
from shopchat.routing import collect_subrouters
from shopchat.storage.db import engine, wait_and_init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Startup waits for the database and creates missing tables; shutdown
    disposes of the engine's connection pool.
    """
    logger.info("Application startup initiated")
    await wait_and_init_db()
    logger.info("Initialized database and tables")

    yield

    logger.info("Application shutdown initiated")
    await engine.dispose()
    logger.info("Application shutdown complete")


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    The application carries its own connection registry and transport
    manager in ``app.state``, so independent instances (e.g., in tests)
    never share connection state.

    Middlewares:
    - `AuthenticationMiddleware` with `AuthBackend`: verifies bearer tokens
      on HTTP requests and WebSocket handshakes.
    """
    app = FastAPI(
        title="Shop messages gateway",
        description="Presence and chat WebSocket channel for shop users",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.connection_registry = ConnectionRegistry(
        DatabaseIdentityVerifier()
    )
    app.state.connection_manager = ConnectionManager()

    app.include_router(collect_subrouters())

    app.add_middleware(AuthenticationMiddleware, backend=AuthBackend())

    return app
