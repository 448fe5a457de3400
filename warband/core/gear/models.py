"""장비 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Iterator, Optional

from .enums import ALL_SLOTS, EquipmentSlot, Quality, SecondaryStat
from .errors import InvalidSlot
from .stats import MAX_SECONDARY_STATS, quality_from_item_level


def coerce_slot(value: EquipmentSlot | str) -> EquipmentSlot:
    """문자열/Enum → EquipmentSlot. 16개 밖이면 InvalidSlot."""
    if isinstance(value, EquipmentSlot):
        return value
    try:
        return EquipmentSlot(value)
    except ValueError:
        raise InvalidSlot(value) from None


def _normalize_stats(
    stats: Optional[Iterable[SecondaryStat | str]],
) -> Optional[tuple[SecondaryStat, ...]]:
    """중복 제거 + Enum 변환. 비어 있으면 None (absent), 3개 이상이면 ValueError."""
    if not stats:
        return None
    seen: list[SecondaryStat] = []
    for s in stats:
        stat = SecondaryStat(s)
        if stat not in seen:
            seen.append(stat)
    if len(seen) > MAX_SECONDARY_STATS:
        raise ValueError(
            f"A gear piece holds at most {MAX_SECONDARY_STATS} secondary stats"
        )
    return tuple(seen) if seen else None


@dataclass(frozen=True)
class GearPiece:
    """한 GearSet의 한 슬롯을 차지하는 아이템. 빈 슬롯도 명시적 레코드."""

    slot: EquipmentSlot
    item_name: Optional[str] = None
    item_level: Optional[int] = None  # 없거나 <= 0 이면 빈 슬롯
    secondary_stats: Optional[tuple[SecondaryStat, ...]] = None  # 0~2개
    set_bonus_name: Optional[str] = None  # 카탈로그 이름 (FK 아님)
    legendary_name: Optional[str] = None
    quality: Optional[Quality] = None
    two_handed: Optional[bool] = None  # Main Hand에서만 의미 있음

    def __post_init__(self) -> None:
        object.__setattr__(self, "slot", coerce_slot(self.slot))
        object.__setattr__(
            self, "secondary_stats", _normalize_stats(self.secondary_stats)
        )
        if self.quality is not None:
            object.__setattr__(self, "quality", Quality(self.quality))

    @property
    def is_empty(self) -> bool:
        return self.item_level is None or self.item_level <= 0

    @property
    def effective_quality(self) -> Quality:
        """명시 quality 우선, 없으면 item_level로 추정."""
        if self.quality is not None:
            return self.quality
        return quality_from_item_level(self.item_level)

    def mirrored_to(self, slot: EquipmentSlot) -> GearPiece:
        """다른 슬롯으로 복제. two_handed는 복제하지 않는다."""
        return replace(self, slot=slot, two_handed=None)

    def to_dict(self) -> dict[str, Any]:
        """저장 포맷 (camelCase, absent 필드 생략)"""
        raw: dict[str, Any] = {
            "slot": self.slot.value,
            "itemName": self.item_name,
            "ilvl": self.item_level,
            "secondaryStats": (
                [s.value for s in self.secondary_stats]
                if self.secondary_stats
                else None
            ),
            "setBonus": self.set_bonus_name,
            "legendary": self.legendary_name,
            "quality": self.quality.value if self.quality else None,
            "twoHanded": self.two_handed,
        }
        return {k: v for k, v in raw.items() if v is not None}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> GearPiece:
        return cls(
            slot=coerce_slot(raw["slot"]),
            item_name=raw.get("itemName"),
            item_level=raw.get("ilvl"),
            secondary_stats=raw.get("secondaryStats"),
            set_bonus_name=raw.get("setBonus"),
            legendary_name=raw.get("legendary"),
            quality=raw.get("quality"),
            two_handed=raw.get("twoHanded"),
        )


@dataclass(frozen=True)
class GearSet:
    """16슬롯 장비 세트. 항상 정규 순서로 16개 전부 존재."""

    pieces: tuple[GearPiece, ...] = field(
        default_factory=lambda: tuple(GearPiece(slot=s) for s in ALL_SLOTS)
    )

    def __post_init__(self) -> None:
        slots = tuple(p.slot for p in self.pieces)
        if slots != ALL_SLOTS:
            raise ValueError(
                "GearSet must hold exactly one piece per slot in canonical order"
            )

    @classmethod
    def empty(cls) -> GearSet:
        return cls()

    @classmethod
    def from_pieces(cls, pieces: Iterable[GearPiece]) -> GearSet:
        """순서 무관 입력 → 정규 순서. 빠진 슬롯은 빈 레코드로 채움.
        같은 슬롯이 여러 번 나오면 마지막 값 사용.
        """
        by_slot = {p.slot: p for p in pieces}
        return cls(tuple(by_slot.get(s) or GearPiece(slot=s) for s in ALL_SLOTS))

    @classmethod
    def from_list(cls, raw: Iterable[dict[str, Any]]) -> GearSet:
        return cls.from_pieces(GearPiece.from_dict(r) for r in raw)

    def to_list(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self.pieces]

    def get(self, slot: EquipmentSlot | str) -> GearPiece:
        return self.pieces[ALL_SLOTS.index(coerce_slot(slot))]

    def with_piece(self, piece: GearPiece) -> GearSet:
        """한 슬롯만 교체한 새 GearSet"""
        idx = ALL_SLOTS.index(piece.slot)
        return GearSet(self.pieces[:idx] + (piece,) + self.pieces[idx + 1 :])

    def __iter__(self) -> Iterator[GearPiece]:
        return iter(self.pieces)

    def __len__(self) -> int:
        return len(self.pieces)
