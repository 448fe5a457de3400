"""장비 도메인 Core — 순수 Python, DB 무관"""

from .enums import (
    ALL_SLOTS,
    BonusStat,
    CharacterClass,
    DropLocationType,
    EquipmentSlot,
    GearMode,
    Quality,
    SecondaryStat,
    SetQuality,
    StatKind,
)
from .errors import InvalidSlot, OffHandLocked
from .gear_set import apply_gear_update, is_off_hand_locked, patch_slot, replace_slot
from .models import GearPiece, GearSet
from .set_bonus import (
    GearSetDefinition,
    SetBonusResult,
    SetBonusTier,
    SetPiece,
    StatGrant,
    evaluate_set_bonuses,
)
from .slot_inference import infer_slot
from .stats import (
    average_item_level,
    is_capped,
    parse_secondary_stats,
    quality_from_item_level,
)

__all__ = [
    "ALL_SLOTS",
    "BonusStat",
    "CharacterClass",
    "DropLocationType",
    "EquipmentSlot",
    "GearMode",
    "Quality",
    "SecondaryStat",
    "SetQuality",
    "StatKind",
    "InvalidSlot",
    "OffHandLocked",
    "apply_gear_update",
    "is_off_hand_locked",
    "patch_slot",
    "replace_slot",
    "GearPiece",
    "GearSet",
    "GearSetDefinition",
    "SetBonusResult",
    "SetBonusTier",
    "SetPiece",
    "StatGrant",
    "evaluate_set_bonuses",
    "infer_slot",
    "average_item_level",
    "is_capped",
    "parse_secondary_stats",
    "quality_from_item_level",
]
