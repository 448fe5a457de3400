"""캐릭터 도메인 모델 + 읽기 전용 요약 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from warband.core.gear.enums import CharacterClass, GearMode, StatKind
from warband.core.gear.models import GearPiece, GearSet
from warband.core.gear.set_bonus import (
    GearSetDefinition,
    SetBonusResult,
    evaluate_set_bonuses,
)
from warband.core.gear.stats import average_item_level, get_legendaries, is_capped


@dataclass
class Character:
    """사용자 워밴드의 캐릭터. (user_id, class_name)당 하나."""

    id: int
    user_id: str
    class_name: CharacterClass
    hit_percent: float = 0.0
    expertise_percent: float = 0.0
    name: Optional[str] = None
    adventure_gear: GearSet = field(default_factory=GearSet.empty)
    dungeon_gear: GearSet = field(default_factory=GearSet.empty)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def gear_for(self, mode: GearMode | str) -> GearSet:
        if GearMode(mode) == GearMode.ADVENTURE:
            return self.adventure_gear
        return self.dungeon_gear


@dataclass(frozen=True)
class GearSummary:
    mode: GearMode
    average_item_level: float
    hit_capped: bool
    expertise_capped: bool
    set_bonuses: tuple[SetBonusResult, ...]
    legendaries: tuple[GearPiece, ...]


def summarize_gear(
    character: Character,
    mode: GearMode | str,
    catalog: Iterable[GearSetDefinition],
) -> GearSummary:
    """캐릭터 화면용 요약: 평균 ilvl, 캡 여부, 세트 보너스, 전설 아이템"""
    mode = GearMode(mode)
    gear = character.gear_for(mode)
    return GearSummary(
        mode=mode,
        average_item_level=average_item_level(gear),
        hit_capped=is_capped(StatKind.HIT, character.hit_percent),
        expertise_capped=is_capped(StatKind.EXPERTISE, character.expertise_percent),
        set_bonuses=tuple(
            evaluate_set_bonuses(gear, catalog, character.class_name)
        ),
        legendaries=tuple(get_legendaries(gear)),
    )
