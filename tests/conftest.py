"""Shared test fixtures."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event as sa_event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from warband.api.characters import router as characters_router
from warband.api.gear import router as gear_router
from warband.api.guilds import router as guilds_router
from warband.api.health import router as health_router
from warband.api.locations import router as locations_router
from warband.api.sets import router as sets_router
from warband.api.users import router as users_router
from warband.core.event_bus import EventBus
from warband.db.database import get_db
from warband.db.models import Base, UserModel


@pytest.fixture()
def db_engine():
    """인메모리 SQLite (FK 활성화)"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @sa_event.listens_for(engine, "connect")
    def _set_fk(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(db_engine) -> Session:
    """Raw database session for direct DB assertions."""
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def app(db_engine, bus) -> FastAPI:
    """라우터 전체 + 테스트 DB"""
    session_factory = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = FastAPI()
    for router in (
        health_router,
        characters_router,
        gear_router,
        guilds_router,
        sets_router,
        locations_router,
        users_router,
    ):
        app.include_router(router)
    app.state.event_bus = bus
    app.dependency_overrides[get_db] = _override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database."""
    return TestClient(app)


@pytest.fixture()
def admin_user(db_session) -> UserModel:
    """is_admin 플래그를 가진 사용자 행"""
    user = UserModel(external_id="admin_1", name="Admin", is_admin=True)
    db_session.add(user)
    db_session.commit()
    return user

