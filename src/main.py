"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.health import router as health_router
from src.api.monsters import router as monsters_router
from src.config import settings
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import engine as db_engine
from src.db.models import Base

setup_logging(settings.LOG_LEVEL, settings.SQL_ECHO)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    yield

    logger.info("Shutting down...")
    app.state.event_bus.clear()


app = FastAPI(title=settings.APP_TITLE, debug=settings.DEBUG, lifespan=lifespan)

# Collaborators (quest tracking, notifications) subscribe here.
# Mood decay needs no scheduler: it is computed when a monster is read.
app.state.event_bus = EventBus()

app.include_router(health_router)
app.include_router(monsters_router)
