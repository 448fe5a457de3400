"""세트 카탈로그 Service — 관리자 전용 변경, 공개 조회

세트 하위 문서(pieces/bonuses/dropLocations)는 camelCase JSON으로 저장.
평가용 GearSetDefinition 변환은 get_catalog()에서.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from warband.core.event_bus import DomainEvent, EventBus
from warband.core.event_types import EventTypes
from warband.core.gear.enums import CharacterClass, SetQuality
from warband.core.gear.set_bonus import GearSetDefinition, missing_fields
from warband.core.logging import get_logger
from warband.core.principal import Principal
from warband.db.models import DropPatternModel, GearSetModel, utcnow
from warband.services.auth import require_admin
from warband.services.errors import ConflictError, NotFoundError, ValidationError

logger = get_logger(__name__)

SOURCE = "set_service"

# 갱신 가능한 필드 (GearSetModel 속성명)
_UPDATABLE = (
    "name",
    "quality",
    "classes",
    "drop_locations",
    "pieces",
    "bonuses",
    "required_level",
    "drop_pattern_id",
)


class SetService:
    """세트 카탈로그 CRUD"""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus

    # === 조회 (인증 불필요) ===

    def list_sets(self) -> list[GearSetModel]:
        return self._db.query(GearSetModel).order_by(GearSetModel.id).all()

    def list_by_class(self, class_name: CharacterClass | str) -> list[GearSetModel]:
        class_value = CharacterClass(class_name).value
        return [s for s in self.list_sets() if class_value in (s.classes or [])]

    def get_set(self, set_id: int) -> GearSetModel | None:
        return self._db.get(GearSetModel, set_id)

    def get_catalog(self) -> list[GearSetDefinition]:
        """평가용 카탈로그 스냅샷"""
        return [self._to_core(s) for s in self.list_sets()]

    # === 변경 (관리자) ===

    def create_set(
        self,
        principal: Optional[Principal],
        name: str,
        quality: SetQuality | str,
        classes: list[str],
        pieces: list[dict[str, Any]],
        bonuses: list[dict[str, Any]],
        drop_locations: list[dict[str, Any]] | None = None,
        required_level: int | None = None,
        drop_pattern_id: int | None = None,
    ) -> GearSetModel:
        require_admin(principal)
        quality = SetQuality(quality)

        self._validate(
            {
                "name": name,
                "quality": quality.value,
                "classes": classes,
                "pieces": pieces,
                "bonuses": bonuses,
            }
        )
        if self._find(name, quality.value) is not None:
            raise ConflictError(
                f'A {quality.value} set named "{name}" already exists'
            )
        self._require_pattern(drop_pattern_id)

        now = utcnow()
        row = GearSetModel(
            name=name,
            quality=quality.value,
            classes=[CharacterClass(c).value for c in classes],
            drop_locations=drop_locations,
            pieces=pieces,
            bonuses=bonuses,
            required_level=required_level,
            drop_pattern_id=drop_pattern_id,
            created_at=now,
            updated_at=now,
        )
        self._db.add(row)
        self._db.commit()

        self._emit(EventTypes.SET_CREATED, {"set_id": row.id, "name": name})
        logger.info("Set created: %s (%s)", name, quality.value)
        return row

    def update_set(
        self,
        principal: Optional[Principal],
        set_id: int,
        **updates: Any,
    ) -> GearSetModel:
        """지정된 필드만 갱신. 이름/등급 변경 시 중복 검사."""
        require_admin(principal)
        row = self._db.get(GearSetModel, set_id)
        if row is None:
            raise NotFoundError("Set not found")

        unknown = set(updates) - set(_UPDATABLE)
        if unknown:
            raise ValidationError(f"Unknown set fields: {sorted(unknown)}")
        updates = {k: v for k, v in updates.items() if v is not None}
        if "quality" in updates:
            updates["quality"] = SetQuality(updates["quality"]).value
        if "classes" in updates:
            updates["classes"] = [CharacterClass(c).value for c in updates["classes"]]

        new_name = updates.get("name", row.name)
        new_quality = updates.get("quality", row.quality)
        if "name" in updates or "quality" in updates:
            duplicate = self._find(new_name, new_quality)
            if duplicate is not None and duplicate.id != row.id:
                raise ConflictError(
                    f'A {new_quality} set named "{new_name}" already exists'
                )

        self._validate(
            {
                "name": new_name,
                "quality": new_quality,
                "classes": updates.get("classes", row.classes),
                "pieces": updates.get("pieces", row.pieces),
                "bonuses": updates.get("bonuses", row.bonuses),
            }
        )
        if "drop_pattern_id" in updates:
            self._require_pattern(updates["drop_pattern_id"])

        for key, value in updates.items():
            setattr(row, key, value)
        row.updated_at = utcnow()
        self._db.commit()

        self._emit(EventTypes.SET_UPDATED, {"set_id": row.id})
        return row

    def delete_set(self, principal: Optional[Principal], set_id: int) -> None:
        require_admin(principal)
        row = self._db.get(GearSetModel, set_id)
        if row is None:
            raise NotFoundError("Set not found")
        self._db.delete(row)
        self._db.commit()

        self._emit(EventTypes.SET_DELETED, {"set_id": set_id})
        logger.info("Set deleted: %s", set_id)

    # === 내부 헬퍼 ===

    def _find(self, name: str, quality: str) -> GearSetModel | None:
        return (
            self._db.query(GearSetModel)
            .filter(GearSetModel.name == name, GearSetModel.quality == quality)
            .first()
        )

    def _require_pattern(self, drop_pattern_id: int | None) -> None:
        if drop_pattern_id is None:
            return
        if self._db.get(DropPatternModel, drop_pattern_id) is None:
            raise NotFoundError("Drop pattern not found")

    @staticmethod
    def _validate(raw: dict[str, Any]) -> None:
        missing = missing_fields(raw)
        if missing:
            logger.warning("Incomplete set rejected: %s", ", ".join(missing))
            raise ValidationError(f"Incomplete set: {', '.join(missing)}")

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        self._bus.emit(DomainEvent(event_type=event_type, data=data, source=SOURCE))

    @staticmethod
    def _to_core(row: GearSetModel) -> GearSetDefinition:
        """ORM → Core"""
        return GearSetDefinition.from_dict(
            {
                "name": row.name,
                "quality": row.quality,
                "classes": row.classes or [],
                "pieces": row.pieces or [],
                "bonuses": row.bonuses or [],
                "dropLocations": row.drop_locations or [],
                "requiredLevel": row.required_level,
            }
        )
