"""캐릭터 Service — Core↔DB 연결, EventBus 통신

Service → Core, Service → DB 허용.
Service → Service 금지 (세트 카탈로그는 호출자가 주입).
"""

from typing import Any, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from warband.core.character import Character, GearSummary, summarize_gear
from warband.core.event_bus import DomainEvent, EventBus
from warband.core.event_types import EventTypes
from warband.core.gear.enums import ALL_SLOTS, CharacterClass, EquipmentSlot, GearMode
from warband.core.gear.errors import OffHandLocked
from warband.core.gear.gear_set import apply_gear_update, is_off_hand_locked
from warband.core.gear.models import GearPiece, GearSet, coerce_slot
from warband.core.gear.set_bonus import GearSetDefinition
from warband.core.gear.stats import parse_secondary_stats
from warband.core.logging import get_logger
from warband.core.principal import Principal
from warband.db.models import CharacterModel, GuildMemberModel, utcnow
from warband.services.auth import require_principal
from warband.services.errors import ConflictError, NotFoundError

logger = get_logger(__name__)

SOURCE = "character_service"


class CharacterService:
    """캐릭터 CRUD + 장비 갱신 + 일괄 가져오기"""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus

    # === 조회 ===

    def list_characters(self, principal: Optional[Principal]) -> list[Character]:
        """본인 캐릭터 목록. 미인증이면 빈 목록."""
        if principal is None:
            return []
        rows = (
            self._db.query(CharacterModel)
            .filter(CharacterModel.user_id == principal.user_id)
            .order_by(CharacterModel.id)
            .all()
        )
        return [self._to_core(r) for r in rows]

    def get_character(
        self, principal: Optional[Principal], character_id: int
    ) -> Character | None:
        """본인 소유가 아니면 None."""
        row = self._get_owned_row(principal, character_id)
        return self._to_core(row) if row else None

    def get_by_class(
        self, principal: Optional[Principal], class_name: CharacterClass | str
    ) -> Character | None:
        if principal is None:
            return None
        row = self._find_by_class(principal.user_id, CharacterClass(class_name))
        return self._to_core(row) if row else None

    def list_by_guild_member(
        self, principal: Optional[Principal], user_id: str
    ) -> list[Character]:
        """같은 길드원의 캐릭터 목록. 같은 길드가 아니면 빈 목록."""
        if principal is None:
            return []

        caller = (
            self._db.query(GuildMemberModel)
            .filter(GuildMemberModel.user_id == principal.user_id)
            .first()
        )
        if caller is None:
            return []

        target = (
            self._db.query(GuildMemberModel)
            .filter(
                GuildMemberModel.guild_id == caller.guild_id,
                GuildMemberModel.user_id == user_id,
            )
            .first()
        )
        if target is None:
            return []

        rows = (
            self._db.query(CharacterModel)
            .filter(CharacterModel.user_id == user_id)
            .order_by(CharacterModel.id)
            .all()
        )
        return [self._to_core(r) for r in rows]

    # === 생성/수정/삭제 ===

    def create_character(
        self,
        principal: Optional[Principal],
        class_name: CharacterClass | str,
        name: str | None = None,
        hit_percent: float | None = None,
        expertise_percent: float | None = None,
    ) -> Character:
        """새 캐릭터. 같은 직업이 이미 있으면 ConflictError.
        두 장비 세트는 빈 16슬롯으로 시작.
        """
        principal = require_principal(principal)
        class_name = CharacterClass(class_name)

        if self._find_by_class(principal.user_id, class_name) is not None:
            logger.info(
                "Duplicate class rejected: user=%s class=%s",
                principal.user_id,
                class_name.value,
            )
            raise ConflictError(f"You already have a {class_name.value} character")

        now = utcnow()
        row = CharacterModel(
            user_id=principal.user_id,
            class_name=class_name.value,
            name=name,
            hit_percent=hit_percent if hit_percent is not None else 0.0,
            expertise_percent=(
                expertise_percent if expertise_percent is not None else 0.0
            ),
            adventure_gear=GearSet.empty().to_list(),
            dungeon_gear=GearSet.empty().to_list(),
            created_at=now,
            updated_at=now,
        )
        self._db.add(row)
        self._commit_or_conflict(
            f"You already have a {class_name.value} character"
        )

        self._emit(
            EventTypes.CHARACTER_CREATED,
            {"character_id": row.id, "user_id": row.user_id},
        )
        logger.info(
            "Created character %s (user=%s, class=%s)",
            row.id,
            row.user_id,
            row.class_name,
        )
        return self._to_core(row)

    def update_character(
        self,
        principal: Optional[Principal],
        character_id: int,
        name: str | None = None,
        hit_percent: float | None = None,
        expertise_percent: float | None = None,
    ) -> Character:
        """지정된 필드만 갱신."""
        row = self._require_owned_row(principal, character_id)

        if name is not None:
            row.name = name
        if hit_percent is not None:
            row.hit_percent = hit_percent
        if expertise_percent is not None:
            row.expertise_percent = expertise_percent
        row.updated_at = utcnow()
        self._db.commit()

        self._emit(EventTypes.CHARACTER_UPDATED, {"character_id": row.id})
        return self._to_core(row)

    def update_gear_piece(
        self,
        principal: Optional[Principal],
        character_id: int,
        mode: GearMode | str,
        slot: EquipmentSlot | str,
        fields: dict[str, Any],
    ) -> Character:
        """한 슬롯 전체 교체 + 양손 커플링 후 저장.

        fields에 없는 필드는 비워진다 (부분 갱신 아님).
        Main Hand가 양손 무기일 때 Off Hand 직접 수정은 OffHandLocked.
        """
        mode = GearMode(mode)
        target = coerce_slot(slot)
        row = self._require_owned_row(principal, character_id)

        current = self._gear_from_row(row, mode)
        if target == EquipmentSlot.OFF_HAND and is_off_hand_locked(current):
            raise OffHandLocked()

        updated = apply_gear_update(current, target, fields)

        if mode == GearMode.ADVENTURE:
            row.adventure_gear = updated.to_list()
        else:
            row.dungeon_gear = updated.to_list()
        row.updated_at = utcnow()
        self._db.commit()

        self._emit(
            EventTypes.GEAR_UPDATED,
            {"character_id": row.id, "mode": mode.value, "slot": target.value},
        )
        logger.debug(
            "Gear updated: character=%s mode=%s slot=%s",
            row.id,
            mode.value,
            target.value,
        )
        return self._to_core(row)

    def delete_character(
        self, principal: Optional[Principal], character_id: int
    ) -> None:
        row = self._require_owned_row(principal, character_id)
        self._db.delete(row)
        self._db.commit()

        self._emit(EventTypes.CHARACTER_DELETED, {"character_id": character_id})
        logger.info("Deleted character %s", character_id)

    # === 일괄 가져오기 ===

    def import_characters(
        self,
        principal: Optional[Principal],
        characters: Iterable[dict[str, Any]],
    ) -> list[dict[str, str]]:
        """JSON 일괄 가져오기. (user, class) 기준 upsert.

        - 알 수 없는 직업은 건너뜀
        - 16슬롯 각각 입력에서 같은 slot 항목 사용, ilvl이 null이면 빈 슬롯
        - secondaryStats는 "Hit, Crit" 형태 문자열 → 인식 가능한 값만
        - 빈 setBonus/legendary → absent

        Returns: [{"className": ..., "action": "created"|"updated"}, ...]
        """
        principal = require_principal(principal)
        valid_classes = {c.value for c in CharacterClass}
        results: list[dict[str, str]] = []

        for entry in characters:
            raw_class = entry.get("className")
            if raw_class not in valid_classes:
                logger.warning("Import: skipping unknown class %r", raw_class)
                continue
            class_name = CharacterClass(raw_class)

            adventure = _import_gear(entry.get("adventureGear") or [])
            dungeon = _import_gear(entry.get("dungeonGear") or [])
            now = utcnow()

            existing = self._find_by_class(principal.user_id, class_name)
            if existing is not None:
                existing.adventure_gear = adventure.to_list()
                existing.dungeon_gear = dungeon.to_list()
                existing.updated_at = now
                results.append({"className": class_name.value, "action": "updated"})
            else:
                self._db.add(
                    CharacterModel(
                        user_id=principal.user_id,
                        class_name=class_name.value,
                        hit_percent=0.0,
                        expertise_percent=0.0,
                        adventure_gear=adventure.to_list(),
                        dungeon_gear=dungeon.to_list(),
                        created_at=now,
                        updated_at=now,
                    )
                )
                results.append({"className": class_name.value, "action": "created"})
            # 같은 직업이 입력에 두 번 나오면 두 번째는 updated
            self._flush_or_conflict(
                f"You already have a {class_name.value} character"
            )

        self._commit_or_conflict("Import conflicted with a concurrent change")

        self._emit(
            EventTypes.CHARACTERS_IMPORTED,
            {"user_id": principal.user_id, "count": len(results)},
        )
        logger.info(
            "Imported %d characters for user %s", len(results), principal.user_id
        )
        return results

    # === 요약 ===

    def summarize(
        self,
        character: Character,
        mode: GearMode | str,
        catalog: Iterable[GearSetDefinition],
    ) -> GearSummary:
        return summarize_gear(character, mode, catalog)

    # === 내부 헬퍼 ===

    def _find_by_class(
        self, user_id: str, class_name: CharacterClass
    ) -> CharacterModel | None:
        return (
            self._db.query(CharacterModel)
            .filter(
                CharacterModel.user_id == user_id,
                CharacterModel.class_name == class_name.value,
            )
            .first()
        )

    def _get_owned_row(
        self, principal: Optional[Principal], character_id: int
    ) -> CharacterModel | None:
        if principal is None:
            return None
        row = self._db.get(CharacterModel, character_id)
        if row is None or row.user_id != principal.user_id:
            return None
        return row

    def _require_owned_row(
        self, principal: Optional[Principal], character_id: int
    ) -> CharacterModel:
        principal = require_principal(principal)
        row = self._get_owned_row(principal, character_id)
        if row is None:
            raise NotFoundError("Character not found")
        return row

    def _commit_or_conflict(self, message: str) -> None:
        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            raise ConflictError(message) from None

    def _flush_or_conflict(self, message: str) -> None:
        try:
            self._db.flush()
        except IntegrityError:
            self._db.rollback()
            raise ConflictError(message) from None

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        self._bus.emit(DomainEvent(event_type=event_type, data=data, source=SOURCE))

    # === ORM ↔ Core 변환 ===

    @staticmethod
    def _gear_from_row(row: CharacterModel, mode: GearMode) -> GearSet:
        raw = row.adventure_gear if mode == GearMode.ADVENTURE else row.dungeon_gear
        return GearSet.from_list(raw or [])

    def _to_core(self, row: CharacterModel) -> Character:
        """ORM → Core"""
        return Character(
            id=row.id,
            user_id=row.user_id,
            class_name=CharacterClass(row.class_name),
            name=row.name,
            hit_percent=row.hit_percent,
            expertise_percent=row.expertise_percent,
            adventure_gear=self._gear_from_row(row, GearMode.ADVENTURE),
            dungeon_gear=self._gear_from_row(row, GearMode.DUNGEON),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


def _import_gear(entries: Iterable[dict[str, Any]]) -> GearSet:
    """가져오기 포맷 → GearSet. 알 수 없는 slot 항목은 무시."""
    by_slot: dict[str, dict[str, Any]] = {}
    for e in entries:
        by_slot.setdefault(e.get("slot"), e)  # 먼저 나온 항목 우선

    pieces: list[GearPiece] = []
    for slot in ALL_SLOTS:
        entry = by_slot.get(slot.value)
        if entry is None or entry.get("ilvl") is None:
            pieces.append(GearPiece(slot=slot))
            continue
        pieces.append(
            GearPiece(
                slot=slot,
                item_level=entry["ilvl"],
                secondary_stats=parse_secondary_stats(entry.get("secondaryStats")),
                set_bonus_name=entry.get("setBonus") or None,
                legendary_name=entry.get("legendary") or None,
            )
        )
    return GearSet(tuple(pieces))
