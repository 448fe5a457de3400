"""아이템 이름 → 장비 슬롯 추정 (키워드 매칭)

입력 폼에서 슬롯 필드를 미리 채우는 용도. 호출자가 언제든 덮어쓸 수 있다.
"""

from __future__ import annotations

import re
from typing import Optional

from .enums import EquipmentSlot

# 슬롯 정규 순서 = 매칭 순서 (first match wins).
# Ring 2 / Trinket 2 는 키워드 없음. 반지/장신구는 항상 1번 슬롯으로 추정.
SLOT_KEYWORDS: tuple[tuple[EquipmentSlot, tuple[str, ...]], ...] = (
    (
        EquipmentSlot.HEAD,
        (
            "helm", "helmet", "crown", "hood", "mask", "cowl", "coif",
            "circlet", "cap", "hat", "headpiece", "headguard", "headband",
            "diadem", "visor",
        ),
    ),
    (
        EquipmentSlot.NECK,
        (
            "neck", "necklace", "amulet", "pendant", "choker", "torc",
            "medallion", "locket",
        ),
    ),
    (
        EquipmentSlot.SHOULDERS,
        (
            "shoulder", "shoulderpad", "shoulderguard", "pauldron",
            "spaulder", "mantle", "epaulet", "amice",
        ),
    ),
    (
        EquipmentSlot.CHEST,
        (
            "chest", "chestguard", "chestplate", "breastplate", "robe",
            "tunic", "vest", "hauberk", "cuirass", "jerkin", "harness",
            "raiment", "shirt",
        ),
    ),
    (
        EquipmentSlot.BACK,
        ("cloak", "cape", "shroud", "drape", "wrap"),
    ),
    (
        EquipmentSlot.WRIST,
        (
            "wrist", "bracer", "wristguard", "wristband", "wristwrap",
            "binding", "cuff", "vambrace", "armguard",
        ),
    ),
    (
        EquipmentSlot.GLOVES,
        (
            "glove", "gauntlet", "handguard", "handwrap", "mitt", "grip",
            "grasp",
        ),
    ),
    (
        EquipmentSlot.MAIN_HAND,
        (
            "sword", "mace", "axe", "staff", "dagger", "blade", "hammer",
            "glaive", "spear", "polearm", "greatsword", "greataxe",
            "warhammer", "maul", "longsword", "shortsword", "claymore",
            "rapier", "katana", "scimitar", "cleaver", "knife", "halberd",
            "scythe", "flail", "scepter", "wand", "bow", "crossbow", "gun",
            "rifle",
        ),
    ),
    (
        EquipmentSlot.OFF_HAND,
        (
            "shield", "buckler", "offhand", "off-hand", "tome", "orb",
            "bulwark", "aegis", "lantern", "censer",
        ),
    ),
    (
        EquipmentSlot.BELT,
        (
            "belt", "girdle", "waist", "waistband", "sash", "cord", "cinch",
            "buckle",
        ),
    ),
    (
        EquipmentSlot.PANTS,
        (
            "pant", "trouser", "legging", "leg", "legguard", "legplate",
            "kilt", "breeches", "britches", "skirt",
        ),
    ),
    (
        EquipmentSlot.BOOTS,
        (
            "boot", "sabaton", "greave", "slipper", "shoe", "tread",
            "footguard", "footwrap", "sandal", "stomper",
        ),
    ),
    (
        EquipmentSlot.RING_1,
        ("ring", "band", "signet", "loop"),
    ),
    (EquipmentSlot.RING_2, ()),
    (
        EquipmentSlot.TRINKET_1,
        (
            "trinket", "charm", "talisman", "relic", "idol", "token",
            "totem", "figurine", "emblem", "insignia", "badge",
        ),
    ),
    (EquipmentSlot.TRINKET_2, ()),
)


def _compile(keywords: tuple[str, ...]) -> re.Pattern[str]:
    # 단어 단위 + 단순 복수형 "s" 허용
    alternation = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{alternation})s?\b")


_SLOT_PATTERNS: tuple[tuple[EquipmentSlot, re.Pattern[str]], ...] = tuple(
    (slot, _compile(keywords)) for slot, keywords in SLOT_KEYWORDS if keywords
)


def infer_slot(item_name: Optional[str]) -> Optional[EquipmentSlot]:
    """아이템 이름에서 슬롯 추정. 매칭 없으면 None.

    "Ring of Valor" → Ring 1, "Girdle of the Fallen" → Belt
    """
    if not item_name:
        return None
    name = item_name.lower()
    for slot, pattern in _SLOT_PATTERNS:
        if pattern.search(name):
            return slot
    return None
