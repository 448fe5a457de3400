"""스탯 계산 — 캡 판정, 평균 아이템 레벨, 등급 추정, 2차 스탯 파싱"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from .enums import Quality, SecondaryStat, StatKind

if TYPE_CHECKING:
    from .models import GearPiece

STAT_CAPS: dict[StatKind, float] = {
    StatKind.HIT: 20.0,
    StatKind.EXPERTISE: 20.0,
}

MAX_SECONDARY_STATS = 2

# 게임 밸런스 상수. 공식에서 유도된 값 아님. 밸런스 변경 시 조정.
QUALITY_THRESHOLDS: tuple[tuple[int, Quality], ...] = (
    (64, Quality.EPIC),
    (60, Quality.RARE),
    (50, Quality.UNCOMMON),
)


def is_capped(stat_kind: StatKind | str, percent: float) -> bool:
    """percent >= cap. 음수 포함 모든 수치 허용."""
    return percent >= STAT_CAPS[StatKind(stat_kind)]


def average_item_level(gear: Iterable[GearPiece]) -> float:
    """item_level > 0 인 슬롯의 평균. 소수 첫째 자리 반올림(half away from zero).
    해당 슬롯 없으면 0.
    """
    levels = [
        p.item_level for p in gear if p.item_level is not None and p.item_level > 0
    ]
    if not levels:
        return 0.0
    total = sum(Decimal(str(lvl)) for lvl in levels)
    mean = total / Decimal(len(levels))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def quality_from_item_level(item_level: Optional[int]) -> Quality:
    """epic >= 64, rare >= 60, uncommon >= 50, 그 외 common"""
    if not item_level:
        return Quality.COMMON
    for threshold, quality in QUALITY_THRESHOLDS:
        if item_level >= threshold:
            return quality
    return Quality.COMMON


def parse_secondary_stats(
    stats_text: Optional[str],
) -> Optional[tuple[SecondaryStat, ...]]:
    """"Hit, Crit, ???" → (Hit, Crit). 인식 불가 값은 조용히 버림.
    중복은 한 번만, 앞에서부터 최대 2개. 남는 값이 없으면 None (빈 tuple 아님).
    """
    if not stats_text:
        return None
    valid = {s.value: s for s in SecondaryStat}
    parsed: list[SecondaryStat] = []
    for token in (t.strip() for t in stats_text.split(",")):
        stat = valid.get(token)
        if stat is not None and stat not in parsed:
            parsed.append(stat)
    return tuple(parsed[:MAX_SECONDARY_STATS]) or None


def format_secondary_stats(stats: Optional[Iterable[SecondaryStat]]) -> str:
    values = [SecondaryStat(s).value for s in stats or ()]
    if not values:
        return "-"
    return ", ".join(values)


def get_legendaries(gear: Iterable[GearPiece]) -> list[GearPiece]:
    return [p for p in gear if p.legendary_name]
