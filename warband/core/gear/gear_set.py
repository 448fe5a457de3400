"""슬롯 단위 장비 갱신 + 양손 무기 커플링

규칙:
- 슬롯 갱신은 전체 교체 (누락 필드 = absent). 부분 갱신은 patch_slot 사용.
- Main Hand + two_handed=True → Off Hand에 Main Hand 내용 복제 (two_handed 제외)
- Main Hand + two_handed 없음/False → Off Hand 초기화
- 그 외 슬롯 → Off Hand 유지
"""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Any, Mapping

from .enums import EquipmentSlot
from .models import GearPiece, GearSet, coerce_slot

logger = logging.getLogger(__name__)

# 저장 포맷/API에서 쓰는 camelCase 키 → GearPiece 필드명
FIELD_ALIASES: dict[str, str] = {
    "itemName": "item_name",
    "itemLevel": "item_level",
    "ilvl": "item_level",
    "secondaryStats": "secondary_stats",
    "setBonusName": "set_bonus_name",
    "setBonus": "set_bonus_name",
    "legendaryName": "legendary_name",
    "legendary": "legendary_name",
    "twoHanded": "two_handed",
}

_PIECE_FIELDS = {f.name for f in fields(GearPiece)} - {"slot"}


def _normalize_fields(update_fields: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in update_fields.items():
        if key == "slot":
            continue  # 슬롯은 target_slot으로 고정
        name = FIELD_ALIASES.get(key, key)
        if name not in _PIECE_FIELDS:
            raise ValueError(f"Unknown gear field: {key}")
        normalized[name] = value
    return normalized


def is_off_hand_locked(gear_set: GearSet) -> bool:
    """Main Hand가 양손 무기면 Off Hand는 독립 수정 불가."""
    return bool(gear_set.get(EquipmentSlot.MAIN_HAND).two_handed)


def _couple_off_hand(gear_set: GearSet, main_hand: GearPiece) -> GearSet:
    if main_hand.two_handed:
        off_hand = main_hand.mirrored_to(EquipmentSlot.OFF_HAND)
    else:
        off_hand = GearPiece(slot=EquipmentSlot.OFF_HAND)
    return gear_set.with_piece(off_hand)


def replace_slot(
    gear_set: GearSet,
    slot: EquipmentSlot | str,
    piece: GearPiece,
) -> GearSet:
    """완전한 GearPiece로 슬롯 교체. piece.slot은 slot으로 강제."""
    target = coerce_slot(slot)
    new_piece = piece if piece.slot == target else replace(piece, slot=target)

    result = gear_set.with_piece(new_piece)
    if target == EquipmentSlot.MAIN_HAND:
        result = _couple_off_hand(result, new_piece)
    return result


def apply_gear_update(
    gear_set: GearSet,
    target_slot: EquipmentSlot | str,
    update_fields: Mapping[str, Any] | GearPiece,
) -> GearSet:
    """슬롯 전체 교체 + 양손 커플링. 새 GearSet 반환 (입력 불변).

    잘못된 슬롯은 변경 전에 InvalidSlot. 같은 입력으로 반복 적용해도 결과 동일.
    """
    target = coerce_slot(target_slot)
    if isinstance(update_fields, GearPiece):
        piece = update_fields
    else:
        piece = GearPiece(slot=target, **_normalize_fields(update_fields))

    result = replace_slot(gear_set, target, piece)
    logger.debug(
        "Gear update: slot=%s two_handed=%s", target.value, bool(piece.two_handed)
    )
    return result


def patch_slot(
    gear_set: GearSet,
    slot: EquipmentSlot | str,
    **changes: Any,
) -> GearSet:
    """부분 갱신 — 지정 필드만 바꾸고 나머지는 현재 값 유지.
    병합된 piece 기준으로 커플링 규칙 적용.
    """
    target = coerce_slot(slot)
    current = gear_set.get(target)
    merged = replace(current, **_normalize_fields(changes))
    return replace_slot(gear_set, target, merged)
