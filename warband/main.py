"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from warband.api.characters import router as characters_router
from warband.api.gear import router as gear_router
from warband.api.guilds import router as guilds_router
from warband.api.health import router as health_router
from warband.api.locations import router as locations_router
from warband.api.sets import router as sets_router
from warband.api.users import router as users_router
from warband.config import settings
from warband.core.event_bus import DomainEvent, EventBus
from warband.core.event_types import EventTypes
from warband.core.logging import get_logger, setup_logging
from warband.db.database import engine as db_engine
from warband.db.models import Base

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


def _log_event(event: DomainEvent) -> None:
    logger.debug("Event %s from %s: %s", event.event_type, event.source, event.data)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    # EventBus 초기화 (서비스는 요청마다 세션과 함께 생성)
    event_bus = EventBus()
    event_bus.subscribe(EventTypes.GEAR_UPDATED, _log_event)
    event_bus.subscribe(EventTypes.CHARACTERS_IMPORTED, _log_event)
    app.state.event_bus = event_bus
    logger.info("EventBus initialized.")

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    event_bus.clear()


app = FastAPI(title="Warband Tracker", lifespan=lifespan)

app.include_router(health_router)
app.include_router(characters_router)
app.include_router(gear_router)
app.include_router(guilds_router)
app.include_router(sets_router)
app.include_router(locations_router)
app.include_router(users_router)
