"""세트 카탈로그 모델 + 세트 보너스 평가

장착 아이템의 set_bonus_name은 카탈로그 이름을 가리키는 자유 텍스트다 (FK 아님).
평가 시점의 카탈로그 스냅샷으로 이름 → 정의 맵을 새로 만들고,
매칭 실패는 오류가 아니라 fallback 결과로 처리한다.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .enums import (
    BonusStat,
    CharacterClass,
    DropLocationType,
    SetQuality,
)
from .models import GearPiece

logger = logging.getLogger(__name__)

MIN_PIECES_REQUIRED = 1
MAX_PIECES_REQUIRED = 8

FALLBACK_QUALITY = "epic"


# ── 카탈로그 모델 ─────────────────────────────────────────────


@dataclass(frozen=True)
class DropLocation:
    type: DropLocationType
    name: str
    dropped_by: Optional[str] = None


@dataclass(frozen=True)
class SetPiece:
    """카탈로그 세트 구성 아이템"""

    slot: str  # 카탈로그 입력값 그대로 (정규 슬롯이 아닐 수 있음)
    name: str
    drop_location: Optional[DropLocation] = None


@dataclass(frozen=True)
class StatGrant:
    stat: BonusStat
    value: float
    for_classes: tuple[CharacterClass, ...] = ()  # 비어 있으면 전 직업

    def applies_to(self, character_class: CharacterClass) -> bool:
        return not self.for_classes or character_class in self.for_classes


@dataclass(frozen=True)
class SetBonusTier:
    pieces_required: int  # 1~8
    stats: tuple[StatGrant, ...] = ()
    special_bonus: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """스탯 부여 1개 이상 또는 특수 보너스 문구가 있어야 유효."""
        has_special = bool(self.special_bonus and self.special_bonus.strip())
        return bool(self.stats) or has_special


@dataclass(frozen=True)
class GearSetDefinition:
    """관리자가 관리하는 세트 카탈로그 항목"""

    name: str
    quality: SetQuality
    classes: tuple[CharacterClass, ...]
    pieces: tuple[SetPiece, ...] = ()
    bonuses: tuple[SetBonusTier, ...] = ()
    drop_locations: tuple[DropLocation, ...] = ()
    required_level: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> GearSetDefinition:
        """저장 포맷 (camelCase) → 정의"""
        return cls(
            name=raw["name"],
            quality=SetQuality(raw["quality"]),
            classes=tuple(CharacterClass(c) for c in raw.get("classes", [])),
            pieces=tuple(
                SetPiece(
                    slot=p["slot"],
                    name=p["name"],
                    drop_location=_drop_location_from_dict(p.get("dropLocation")),
                )
                for p in raw.get("pieces", [])
            ),
            bonuses=tuple(
                SetBonusTier(
                    pieces_required=int(b["pieces"]),
                    stats=tuple(
                        StatGrant(
                            stat=BonusStat(s["stat"]),
                            value=s["value"],
                            for_classes=tuple(
                                CharacterClass(c) for c in s.get("forClasses") or ()
                            ),
                        )
                        for s in b.get("stats") or ()
                    ),
                    special_bonus=b.get("specialBonus"),
                )
                for b in raw.get("bonuses", [])
            ),
            drop_locations=tuple(
                loc
                for loc in (
                    _drop_location_from_dict(d) for d in raw.get("dropLocations") or ()
                )
                if loc is not None
            ),
            required_level=raw.get("requiredLevel"),
        )


def _drop_location_from_dict(raw: Optional[dict[str, Any]]) -> Optional[DropLocation]:
    if not raw:
        return None
    return DropLocation(
        type=DropLocationType(raw["type"]),
        name=raw["name"],
        dropped_by=raw.get("droppedBy"),
    )


def missing_fields(raw: dict[str, Any]) -> list[str]:
    """세트 입력(camelCase dict)의 누락/불완전 필드 경로 목록.

    예: ["name", "pieces[0].slot", "bonuses[1].stats"]
    """
    missing: list[str] = []

    if not (raw.get("name") or "").strip():
        missing.append("name")
    if not raw.get("quality"):
        missing.append("quality")
    if not raw.get("classes"):
        missing.append("classes")
    if not raw.get("pieces"):
        missing.append("pieces")
    if not raw.get("bonuses"):
        missing.append("bonuses")

    for i, piece in enumerate(raw.get("pieces") or ()):
        if not (piece.get("name") or "").strip():
            missing.append(f"pieces[{i}].name")
        if not (piece.get("slot") or "").strip():
            missing.append(f"pieces[{i}].slot")

    for i, bonus in enumerate(raw.get("bonuses") or ()):
        pieces = bonus.get("pieces")
        if pieces is None or not MIN_PIECES_REQUIRED <= pieces <= MAX_PIECES_REQUIRED:
            missing.append(f"bonuses[{i}].pieces")
        has_stats = bool(bonus.get("stats"))
        has_special = bool((bonus.get("specialBonus") or "").strip())
        if not has_stats and not has_special:
            missing.append(f"bonuses[{i}].stats")

    return missing


def is_set_complete(raw: dict[str, Any]) -> bool:
    return not missing_fields(raw)


# ── 평가 결과 ─────────────────────────────────────────────────


@dataclass(frozen=True)
class SetPieceStatus:
    slot: str
    name: str
    equipped: bool


@dataclass(frozen=True)
class BonusTierResult:
    pieces_required: int
    active: bool
    stats: tuple[StatGrant, ...]  # 직업 필터 적용 후
    special_bonus: Optional[str] = None


@dataclass(frozen=True)
class SetBonusResult:
    set_name: str
    quality: str
    equipped_count: int
    total_pieces: int
    pieces: tuple[SetPieceStatus, ...]
    bonuses: tuple[BonusTierResult, ...] = ()
    fallback: bool = False  # 카탈로그에 없는 세트
    definition: Optional[GearSetDefinition] = field(default=None, compare=False)

    @property
    def active_bonuses(self) -> tuple[BonusTierResult, ...]:
        return tuple(b for b in self.bonuses if b.active)


# ── 평가 ──────────────────────────────────────────────────────


def count_set_bonuses(gear: Iterable[GearPiece]) -> dict[str, int]:
    """세트 이름별 장착 수"""
    return dict(Counter(p.set_bonus_name for p in gear if p.set_bonus_name))


def _group_by_set(gear: Iterable[GearPiece]) -> dict[str, list[GearPiece]]:
    # dict는 삽입 순서 유지 → 처음 등장한 순서
    groups: dict[str, list[GearPiece]] = {}
    for piece in gear:
        if piece.set_bonus_name:
            groups.setdefault(piece.set_bonus_name, []).append(piece)
    return groups


def _build_catalog_index(
    catalog: Iterable[GearSetDefinition],
) -> dict[str, GearSetDefinition]:
    index: dict[str, GearSetDefinition] = {}
    for definition in catalog:
        # 같은 이름이 여러 등급으로 있으면 먼저 나온 것 사용
        index.setdefault(definition.name, definition)
    return index


def _matched_result(
    set_name: str,
    equipped: list[GearPiece],
    definition: GearSetDefinition,
    character_class: CharacterClass,
) -> SetBonusResult:
    equipped_slots = {p.slot.value for p in equipped}
    count = len(equipped)
    pieces = tuple(
        SetPieceStatus(slot=p.slot, name=p.name, equipped=p.slot in equipped_slots)
        for p in definition.pieces
    )
    bonuses = tuple(
        BonusTierResult(
            pieces_required=tier.pieces_required,
            active=count >= tier.pieces_required,
            stats=tuple(s for s in tier.stats if s.applies_to(character_class)),
            special_bonus=tier.special_bonus,
        )
        for tier in definition.bonuses
    )
    return SetBonusResult(
        set_name=set_name,
        quality=definition.quality.value,
        equipped_count=count,
        total_pieces=len(definition.pieces),
        pieces=pieces,
        bonuses=bonuses,
        fallback=False,
        definition=definition,
    )


def _fallback_result(set_name: str, equipped: list[GearPiece]) -> SetBonusResult:
    return SetBonusResult(
        set_name=set_name,
        quality=FALLBACK_QUALITY,
        equipped_count=len(equipped),
        total_pieces=len(equipped),
        pieces=tuple(
            SetPieceStatus(
                slot=p.slot.value, name=p.item_name or p.slot.value, equipped=True
            )
            for p in equipped
        ),
        bonuses=(),
        fallback=True,
    )


def evaluate_set_bonuses(
    equipped_gear: Iterable[GearPiece],
    catalog: Iterable[GearSetDefinition],
    character_class: CharacterClass | str,
) -> list[SetBonusResult]:
    """장착 장비 + 카탈로그 → 세트별 보너스 상태.

    1. set_bonus_name별 그룹 (처음 등장한 순서)
    2. 이름 정확히 일치(대소문자 구분)하는 정의 탐색 — 없으면 fallback
    3. equipped_count 내림차순 (동률은 등장 순서 유지)

    예외 없음. 빈 카탈로그면 fallback만 생성.
    """
    character_class = CharacterClass(character_class)
    index = _build_catalog_index(catalog)

    results: list[SetBonusResult] = []
    for set_name, equipped in _group_by_set(equipped_gear).items():
        definition = index.get(set_name)
        if definition is None:
            logger.debug("Set not in catalog, using fallback: %s", set_name)
            results.append(_fallback_result(set_name, equipped))
        else:
            results.append(
                _matched_result(set_name, equipped, definition, character_class)
            )

    # sorted()는 안정 정렬
    return sorted(results, key=lambda r: r.equipped_count, reverse=True)
