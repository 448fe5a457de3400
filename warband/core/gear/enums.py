"""장비 도메인 열거형 — 값 자체가 저장/전송 계약"""

from enum import Enum


class CharacterClass(str, Enum):
    WARRIOR = "Warrior"
    ROGUE = "Rogue"
    PRIEST = "Priest"
    MAGE = "Mage"
    HUNTER = "Hunter"
    PALADIN = "Paladin"


class EquipmentSlot(str, Enum):
    """16개 고정 슬롯. 선언 순서 = 정규 순서."""

    HEAD = "Head"
    NECK = "Neck"
    SHOULDERS = "Shoulders"
    CHEST = "Chest"
    BACK = "Back"
    WRIST = "Wrist"
    GLOVES = "Gloves"
    MAIN_HAND = "Main Hand"
    OFF_HAND = "Off Hand"
    BELT = "Belt"
    PANTS = "Pants"
    BOOTS = "Boots"
    RING_1 = "Ring 1"
    RING_2 = "Ring 2"
    TRINKET_1 = "Trinket 1"
    TRINKET_2 = "Trinket 2"

    @property
    def display_name(self) -> str:
        """표시용 이름. Belt만 "Waist"로 표시 (저장값은 그대로)."""
        return SLOT_DISPLAY_NAMES.get(self, self.value)


SLOT_DISPLAY_NAMES: dict[EquipmentSlot, str] = {
    EquipmentSlot.BELT: "Waist",
}

ALL_SLOTS: tuple[EquipmentSlot, ...] = tuple(EquipmentSlot)


class SecondaryStat(str, Enum):
    HIT = "Hit"
    CRIT = "Crit"
    HASTE = "Haste"
    PARRY = "Parry"
    VERSATILITY = "Versatility"
    RESILIENCE = "Resilience"
    DG = "DG"
    EXPERTISE = "Expertise"


class Quality(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class SetQuality(str, Enum):
    """세트 등급 — 아이템 등급보다 좁음"""

    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class GearMode(str, Enum):
    ADVENTURE = "adventure"
    DUNGEON = "dungeon"


class StatKind(str, Enum):
    HIT = "hit"
    EXPERTISE = "expertise"


class BonusStat(str, Enum):
    """세트 보너스로 부여 가능한 스탯 (1차 + 2차)"""

    STA = "Sta"
    INT = "Int"
    STR = "Str"
    AGI = "Agi"
    HIT = "Hit"
    CRIT = "Crit"
    HASTE = "Haste"
    PARRY = "Parry"
    VERSATILITY = "Versatility"
    RESILIENCE = "Resilience"
    DG = "DG"
    EXPERTISE = "Expertise"


class DropLocationType(str, Enum):
    DUNGEON = "dungeon"
    RAID = "raid"
    WORLD = "world"
    PVP = "pvp"
    CRAFTED = "crafted"
    SHOP = "shop"


DROP_LOCATION_TYPE_LABELS: dict[DropLocationType, str] = {
    DropLocationType.DUNGEON: "Dungeon",
    DropLocationType.RAID: "Raid",
    DropLocationType.WORLD: "World Drop",
    DropLocationType.PVP: "PvP",
    DropLocationType.CRAFTED: "Crafted",
    DropLocationType.SHOP: "Shop",
}


class GuildRole(str, Enum):
    OWNER = "owner"
    MEMBER = "member"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
