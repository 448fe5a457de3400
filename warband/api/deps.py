"""Shared API dependencies: principal resolution, services, error mapping."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from warband.config import settings
from warband.core.event_bus import EventBus
from warband.core.gear.errors import InvalidSlot, OffHandLocked
from warband.core.logging import get_logger
from warband.core.principal import Principal
from warband.db.database import get_db
from warband.db.models import UserModel
from warband.services.character_service import CharacterService
from warband.services.errors import ServiceError
from warband.services.guild_service import GuildService
from warband.services.location_service import LocationService
from warband.services.set_service import SetService
from warband.services.user_service import UserService

logger = get_logger(__name__)


def get_event_bus(request: Request) -> EventBus:
    """EventBus 인스턴스 반환 (의존성 주입)"""
    bus: EventBus = request.app.state.event_bus
    return bus


def get_optional_principal(
    request: Request,
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """식별 헤더 → Principal. 헤더가 없으면 None."""
    user_id = request.headers.get(settings.IDENTITY_HEADER)
    if not user_id:
        return None

    user = db.query(UserModel).filter(UserModel.external_id == user_id).first()
    is_admin = user_id in settings.ADMIN_USER_IDS or bool(user and user.is_admin)
    return Principal(user_id=user_id, is_admin=is_admin)


def get_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return principal


def get_character_service(
    db: Session = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> CharacterService:
    return CharacterService(db, bus)


def get_guild_service(
    db: Session = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> GuildService:
    return GuildService(db, bus)


def get_set_service(
    db: Session = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> SetService:
    return SetService(db, bus)


def get_location_service(db: Session = Depends(get_db)) -> LocationService:
    return LocationService(db)


def get_user_service(
    db: Session = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
) -> UserService:
    return UserService(db, bus)


@contextmanager
def service_errors() -> Iterator[None]:
    """Service/Core 예외 → HTTPException"""
    try:
        yield
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e
    except OffHandLocked as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except InvalidSlot as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except ValueError as e:
        logger.warning("Rejected request: %s", e)
        raise HTTPException(status_code=400, detail=str(e)) from e
