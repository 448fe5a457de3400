"""API request/response schemas.

Gear pieces and catalog sub-documents use the camelCase field names they are
stored with; top-level resources use snake_case.
"""

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from warband.core.gear.enums import (
    BonusStat,
    CharacterClass,
    DropLocationType,
    EquipmentSlot,
    GearMode,
    Quality,
    SecondaryStat,
    SetQuality,
)


class CamelModel(BaseModel):
    """camelCase 별칭 모델 (snake_case 입력도 허용)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# === Gear ===


class GearPieceFields(BaseModel):
    """슬롯 내용 (slot 제외). 누락 필드는 absent."""

    model_config = ConfigDict(populate_by_name=True)

    item_name: Optional[str] = Field(None, alias="itemName", description="아이템 이름")
    item_level: Optional[int] = Field(None, alias="ilvl", description="아이템 레벨")
    secondary_stats: Optional[Annotated[list[SecondaryStat], Field(max_length=2)]] = (
        Field(None, alias="secondaryStats", description="보조 스탯 (최대 2개)")
    )
    set_bonus_name: Optional[str] = Field(None, alias="setBonus", description="세트 이름")
    legendary_name: Optional[str] = Field(None, alias="legendary", description="전설 효과")
    quality: Optional[Quality] = None
    two_handed: Optional[bool] = Field(
        None, alias="twoHanded", description="양손 무기 (Main Hand 전용)"
    )


class GearPieceSchema(GearPieceFields):
    """장비 한 칸"""

    slot: EquipmentSlot


class InferSlotRequest(BaseModel):
    """아이템 이름으로 슬롯 추정 요청"""

    item_name: str = Field(..., description="아이템 이름")


class InferSlotResponse(BaseModel):
    slot: Optional[EquipmentSlot] = None


class EvaluateGearRequest(BaseModel):
    """저장 없이 장비 세트 평가 요청"""

    class_name: CharacterClass
    gear: list[GearPieceSchema] = Field(default_factory=list)


# === Set bonus evaluation ===


class StatGrantSchema(CamelModel):
    stat: BonusStat
    value: float
    for_classes: Optional[list[CharacterClass]] = None


class SetPieceStatusSchema(BaseModel):
    slot: str
    name: str
    equipped: bool


class BonusTierResultSchema(BaseModel):
    pieces_required: int
    active: bool
    stats: list[StatGrantSchema] = []
    special_bonus: Optional[str] = None


class SetBonusResultSchema(BaseModel):
    """세트 보너스 평가 결과"""

    set_name: str
    quality: str
    equipped_count: int
    total_pieces: int
    pieces: list[SetPieceStatusSchema] = []
    bonuses: list[BonusTierResultSchema] = []
    fallback: bool = False


class EvaluateGearResponse(BaseModel):
    average_item_level: float
    set_bonuses: list[SetBonusResultSchema] = []
    legendaries: list[GearPieceSchema] = []


# === Characters ===


class CharacterCreateRequest(BaseModel):
    """캐릭터 생성 요청"""

    class_name: CharacterClass
    name: Optional[str] = Field(None, max_length=50)
    hit_percent: Optional[float] = None
    expertise_percent: Optional[float] = None


class CharacterUpdateRequest(BaseModel):
    """캐릭터 수정 요청 (지정 필드만)"""

    name: Optional[str] = Field(None, max_length=50)
    hit_percent: Optional[float] = None
    expertise_percent: Optional[float] = None


class CharacterResponse(BaseModel):
    """캐릭터 정보"""

    id: int
    user_id: str
    class_name: CharacterClass
    name: Optional[str] = None
    hit_percent: float
    expertise_percent: float
    adventure_gear: list[GearPieceSchema]
    dungeon_gear: list[GearPieceSchema]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GearSummaryResponse(BaseModel):
    """캐릭터 화면용 장비 요약"""

    mode: GearMode
    average_item_level: float
    hit_capped: bool
    expertise_capped: bool
    set_bonuses: list[SetBonusResultSchema] = []
    legendaries: list[GearPieceSchema] = []


class ImportGearEntry(BaseModel):
    """가져오기 포맷의 장비 한 칸"""

    slot: str
    ilvl: Optional[int] = None
    secondaryStats: Optional[str] = None
    setBonus: Optional[str] = None
    legendary: Optional[str] = None


class ImportCharacterEntry(BaseModel):
    className: str
    adventureGear: list[ImportGearEntry] = []
    dungeonGear: list[ImportGearEntry] = []


class ImportCharactersRequest(BaseModel):
    """캐릭터 일괄 가져오기 요청"""

    characters: list[ImportCharacterEntry]


class ImportResultEntry(BaseModel):
    className: str
    action: str


# === Guilds ===


class GuildCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class GuildUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class GuildResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    owner_id: str
    created_at: Optional[datetime] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    external_id: str
    name: str
    email: Optional[str] = None
    image_url: Optional[str] = None


class MembershipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    guild_id: int
    user_id: str
    role: str
    joined_at: Optional[datetime] = None


class MemberResponse(MembershipResponse):
    """길드원 + 사용자 정보"""

    user: Optional[UserResponse] = None


class ApplyRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=500)


class ResolveApplicationRequest(BaseModel):
    approved: bool


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    guild_id: int
    user_id: str
    message: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    user: Optional[UserResponse] = None


# === Set catalog ===


class DropLocationSchema(CamelModel):
    type: DropLocationType
    name: str
    dropped_by: Optional[str] = None


class SetPieceSchema(CamelModel):
    slot: str
    name: str
    drop_location: Optional[DropLocationSchema] = None


class SetBonusTierSchema(CamelModel):
    pieces: int
    stats: Optional[list[StatGrantSchema]] = None
    special_bonus: Optional[str] = None


class SetCreateRequest(BaseModel):
    """세트 생성 요청 (관리자)"""

    name: str
    quality: SetQuality
    classes: list[CharacterClass]
    pieces: list[SetPieceSchema]
    bonuses: list[SetBonusTierSchema]
    drop_locations: Optional[list[DropLocationSchema]] = None
    required_level: Optional[int] = None
    drop_pattern_id: Optional[int] = None


class SetUpdateRequest(BaseModel):
    """세트 수정 요청 (관리자, 지정 필드만)"""

    name: Optional[str] = None
    quality: Optional[SetQuality] = None
    classes: Optional[list[CharacterClass]] = None
    pieces: Optional[list[SetPieceSchema]] = None
    bonuses: Optional[list[SetBonusTierSchema]] = None
    drop_locations: Optional[list[DropLocationSchema]] = None
    required_level: Optional[int] = None
    drop_pattern_id: Optional[int] = None


class SetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    quality: SetQuality
    classes: list[CharacterClass]
    pieces: list[SetPieceSchema]
    bonuses: list[SetBonusTierSchema]
    drop_locations: Optional[list[DropLocationSchema]] = None
    required_level: Optional[int] = None
    drop_pattern_id: Optional[int] = None


# === Locations ===


class LocationCreateRequest(BaseModel):
    type: DropLocationType
    name: str = Field(..., min_length=1)


class LocationUpdateRequest(BaseModel):
    type: Optional[DropLocationType] = None
    name: Optional[str] = Field(None, min_length=1)


class LocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: DropLocationType
    name: str


class BossCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    order: Optional[int] = None


class BossUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    order: Optional[int] = None


class BossResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    location_id: int
    name: str
    order: Optional[int] = None


class SlotDropSchema(CamelModel):
    slot: str
    location_id: int
    boss_id: Optional[int] = None


class DropPatternCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    slot_drops: list[SlotDropSchema]
    default_bonuses: Optional[list[SetBonusTierSchema]] = None


class DropPatternUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    slot_drops: Optional[list[SlotDropSchema]] = None
    default_bonuses: Optional[list[SetBonusTierSchema]] = None


class DropPatternResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slot_drops: list[SlotDropSchema]
    default_bonuses: Optional[list[SetBonusTierSchema]] = None


# === Users ===


class UserSyncRequest(BaseModel):
    """인증 공급자 사용자 이벤트 (서명 검증은 상위에서 완료)"""

    type: str = Field(..., description="user.created | user.updated | user.deleted")
    data: dict[str, Any] = Field(default_factory=dict)


# === Common ===


class ErrorResponse(BaseModel):
    """에러 응답"""

    detail: str
