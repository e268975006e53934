import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notification_hub.config import get_settings
from notification_hub.infrastructure.background import background_runner
from notification_hub.infrastructure.database import engine, initialize_database
from notification_hub.interfaces.api.dependencies import get_dispatcher
from notification_hub.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on startup and release push and database resources on exit."""

    initialize_database()
    yield
    if get_dispatcher.cache_info().currsize:
        try:
            await get_dispatcher().aclose()
        except Exception:
            logger.exception("Failed to close push transports")
    background_runner.shutdown()
    engine.dispose()


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title="Notification Hub", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
