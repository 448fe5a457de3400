"""드롭 위치 Service — 위치, 보스, 드롭 패턴 (변경은 관리자 전용)"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from warband.core.gear.enums import DropLocationType
from warband.core.logging import get_logger
from warband.core.principal import Principal
from warband.db.models import (
    BossModel,
    DropPatternModel,
    GearSetModel,
    LocationModel,
    utcnow,
)
from warband.services.auth import require_admin
from warband.services.errors import ConflictError, NotFoundError

logger = get_logger(__name__)


def _boss_sort_key(boss: BossModel) -> tuple[int, int, int]:
    """order 지정된 보스 먼저(order 순), 나머지는 생성 순"""
    if boss.order is not None:
        return (0, boss.order, boss.id)
    return (1, 0, boss.id)


class LocationService:
    """위치/보스/드롭 패턴 CRUD"""

    def __init__(self, db: Session):
        self._db = db

    # === 위치 ===

    def list_locations(self) -> list[LocationModel]:
        return self._db.query(LocationModel).order_by(LocationModel.id).all()

    def list_by_type(self, type_: DropLocationType | str) -> list[LocationModel]:
        return (
            self._db.query(LocationModel)
            .filter(LocationModel.type == DropLocationType(type_).value)
            .order_by(LocationModel.id)
            .all()
        )

    def get_location(self, location_id: int) -> LocationModel | None:
        return self._db.get(LocationModel, location_id)

    def create_location(
        self,
        principal: Optional[Principal],
        type_: DropLocationType | str,
        name: str,
    ) -> LocationModel:
        require_admin(principal)
        type_value = DropLocationType(type_).value
        if self._find_location(type_value, name) is not None:
            raise ConflictError(f'A {type_value} named "{name}" already exists')

        now = utcnow()
        row = LocationModel(type=type_value, name=name, created_at=now, updated_at=now)
        self._db.add(row)
        self._db.commit()
        logger.info("Location created: %s/%s", type_value, name)
        return row

    def update_location(
        self,
        principal: Optional[Principal],
        location_id: int,
        name: str | None = None,
        type_: DropLocationType | str | None = None,
    ) -> LocationModel:
        require_admin(principal)
        row = self._db.get(LocationModel, location_id)
        if row is None:
            raise NotFoundError("Location not found")

        new_name = name if name is not None else row.name
        new_type = DropLocationType(type_).value if type_ is not None else row.type
        if name or type_:
            duplicate = self._find_location(new_type, new_name)
            if duplicate is not None and duplicate.id != row.id:
                raise ConflictError(f'A {new_type} named "{new_name}" already exists')

        row.name = new_name
        row.type = new_type
        row.updated_at = utcnow()
        self._db.commit()
        return row

    def delete_location(self, principal: Optional[Principal], location_id: int) -> None:
        """위치 삭제. 소속 보스도 함께 삭제."""
        require_admin(principal)
        row = self._db.get(LocationModel, location_id)
        if row is None:
            raise NotFoundError("Location not found")
        self._db.delete(row)
        self._db.commit()
        logger.info("Location deleted: %s", location_id)

    # === 보스 ===

    def list_bosses(self, location_id: int) -> list[BossModel]:
        bosses = (
            self._db.query(BossModel).filter(BossModel.location_id == location_id).all()
        )
        return sorted(bosses, key=_boss_sort_key)

    def list_all_bosses(self) -> list[BossModel]:
        return self._db.query(BossModel).order_by(BossModel.id).all()

    def get_boss(self, boss_id: int) -> BossModel | None:
        return self._db.get(BossModel, boss_id)

    def add_boss(
        self,
        principal: Optional[Principal],
        location_id: int,
        name: str,
        order: int | None = None,
    ) -> BossModel:
        require_admin(principal)
        if self._db.get(LocationModel, location_id) is None:
            raise NotFoundError("Location not found")

        now = utcnow()
        row = BossModel(
            location_id=location_id,
            name=name,
            order=order,
            created_at=now,
            updated_at=now,
        )
        self._db.add(row)
        self._db.commit()
        return row

    def update_boss(
        self,
        principal: Optional[Principal],
        boss_id: int,
        name: str | None = None,
        order: int | None = None,
    ) -> BossModel:
        require_admin(principal)
        row = self._db.get(BossModel, boss_id)
        if row is None:
            raise NotFoundError("Boss not found")
        if name is not None:
            row.name = name
        if order is not None:
            row.order = order
        row.updated_at = utcnow()
        self._db.commit()
        return row

    def remove_boss(self, principal: Optional[Principal], boss_id: int) -> None:
        require_admin(principal)
        row = self._db.get(BossModel, boss_id)
        if row is None:
            raise NotFoundError("Boss not found")
        self._db.delete(row)
        self._db.commit()

    # === 드롭 패턴 ===

    def list_drop_patterns(self) -> list[DropPatternModel]:
        return self._db.query(DropPatternModel).order_by(DropPatternModel.id).all()

    def get_drop_pattern(self, pattern_id: int) -> DropPatternModel | None:
        return self._db.get(DropPatternModel, pattern_id)

    def create_drop_pattern(
        self,
        principal: Optional[Principal],
        name: str,
        slot_drops: list[dict[str, Any]],
        default_bonuses: list[dict[str, Any]] | None = None,
    ) -> DropPatternModel:
        require_admin(principal)
        if self._find_pattern(name) is not None:
            raise ConflictError(f'A drop pattern named "{name}" already exists')

        now = utcnow()
        row = DropPatternModel(
            name=name,
            slot_drops=slot_drops,
            default_bonuses=default_bonuses,
            created_at=now,
            updated_at=now,
        )
        self._db.add(row)
        self._db.commit()
        return row

    def update_drop_pattern(
        self,
        principal: Optional[Principal],
        pattern_id: int,
        name: str | None = None,
        slot_drops: list[dict[str, Any]] | None = None,
        default_bonuses: list[dict[str, Any]] | None = None,
    ) -> DropPatternModel:
        require_admin(principal)
        row = self._db.get(DropPatternModel, pattern_id)
        if row is None:
            raise NotFoundError("Drop pattern not found")

        if name and name != row.name:
            if self._find_pattern(name) is not None:
                raise ConflictError(f'A drop pattern named "{name}" already exists')
            row.name = name
        if slot_drops is not None:
            row.slot_drops = slot_drops
        if default_bonuses is not None:
            row.default_bonuses = default_bonuses
        row.updated_at = utcnow()
        self._db.commit()
        return row

    def remove_drop_pattern(
        self, principal: Optional[Principal], pattern_id: int
    ) -> None:
        """사용 중인 세트가 있으면 삭제 불가."""
        require_admin(principal)
        row = self._db.get(DropPatternModel, pattern_id)
        if row is None:
            raise NotFoundError("Drop pattern not found")

        used_by = (
            self._db.query(GearSetModel)
            .filter(GearSetModel.drop_pattern_id == pattern_id)
            .all()
        )
        if used_by:
            names = ", ".join(s.name for s in used_by)
            raise ConflictError(f"Cannot delete drop pattern. It is used by: {names}")

        self._db.delete(row)
        self._db.commit()

    # === 내부 헬퍼 ===

    def _find_location(self, type_value: str, name: str) -> LocationModel | None:
        return (
            self._db.query(LocationModel)
            .filter(LocationModel.type == type_value, LocationModel.name == name)
            .first()
        )

    def _find_pattern(self, name: str) -> DropPatternModel | None:
        return (
            self._db.query(DropPatternModel)
            .filter(DropPatternModel.name == name)
            .first()
        )
