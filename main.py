"""
Application entry point.

``create_app`` assembles the FastAPI application around an injected record
store. Nothing is built at import time; serve it as a factory::

    uvicorn main:create_app --factory --port 3009

or through the ``customer-service`` console script.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.addresses import create_addresses_router
from api.customers import create_customers_router
from api.errors import register_error_handlers
from api.health import create_health_router
from api.middleware import RequestIDMiddleware
from core.config import AppConfig, load_config
from core.stores import RecordStore, create_store
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None, store: RecordStore | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        config: Service configuration (loaded from the environment if omitted)
        store: Record store to serve (built from config if omitted)
    """
    config = config or load_config()
    setup_logging(config.log_level, config.log_file)
    store = store or create_store(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.initialize()
        logger.info(f"{config.app_name} started with {store.backend} store")
        try:
            yield
        finally:
            store.close()
            logger.info("Record store closed")

    app = FastAPI(title=config.app_name, lifespan=lifespan)
    app.state.store = store

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    register_error_handlers(app)

    app.include_router(create_customers_router(store), prefix="/api")
    app.include_router(create_addresses_router(store), prefix="/api")
    app.include_router(create_health_router(store))

    return app


def main() -> None:
    """Serve the application with uvicorn."""
    config = load_config()
    uvicorn.run("main:create_app", factory=True, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
