"""Core 객체 → 응답 스키마 변환"""

from typing import Iterable

from warband.api.schemas import (
    BonusTierResultSchema,
    CharacterResponse,
    GearPieceSchema,
    GearSummaryResponse,
    SetBonusResultSchema,
    SetPieceStatusSchema,
    StatGrantSchema,
)
from warband.core.character import Character, GearSummary
from warband.core.gear.models import GearPiece
from warband.core.gear.set_bonus import SetBonusResult, StatGrant


def build_gear_piece(piece: GearPiece) -> GearPieceSchema:
    return GearPieceSchema.model_validate(piece.to_dict())


def build_gear_list(pieces: Iterable[GearPiece]) -> list[GearPieceSchema]:
    return [build_gear_piece(p) for p in pieces]


def _build_stat_grant(grant: StatGrant) -> StatGrantSchema:
    return StatGrantSchema(
        stat=grant.stat,
        value=grant.value,
        for_classes=list(grant.for_classes) or None,
    )


def build_set_bonus_result(result: SetBonusResult) -> SetBonusResultSchema:
    """SetBonusResult를 SetBonusResultSchema로 변환"""
    return SetBonusResultSchema(
        set_name=result.set_name,
        quality=result.quality,
        equipped_count=result.equipped_count,
        total_pieces=result.total_pieces,
        pieces=[
            SetPieceStatusSchema(slot=p.slot, name=p.name, equipped=p.equipped)
            for p in result.pieces
        ],
        bonuses=[
            BonusTierResultSchema(
                pieces_required=b.pieces_required,
                active=b.active,
                stats=[_build_stat_grant(s) for s in b.stats],
                special_bonus=b.special_bonus,
            )
            for b in result.bonuses
        ],
        fallback=result.fallback,
    )


def build_character(character: Character) -> CharacterResponse:
    """Character를 CharacterResponse로 변환"""
    return CharacterResponse(
        id=character.id,
        user_id=character.user_id,
        class_name=character.class_name,
        name=character.name,
        hit_percent=character.hit_percent,
        expertise_percent=character.expertise_percent,
        adventure_gear=build_gear_list(character.adventure_gear),
        dungeon_gear=build_gear_list(character.dungeon_gear),
        created_at=character.created_at,
        updated_at=character.updated_at,
    )


def build_summary(summary: GearSummary) -> GearSummaryResponse:
    return GearSummaryResponse(
        mode=summary.mode,
        average_item_level=summary.average_item_level,
        hit_capped=summary.hit_capped,
        expertise_capped=summary.expertise_capped,
        set_bonuses=[build_set_bonus_result(r) for r in summary.set_bonuses],
        legendaries=build_gear_list(summary.legendaries),
    )
