"""Gear helper endpoints: slot inference and stateless set evaluation."""

from fastapi import APIRouter, Depends

from warband.api.builders import build_gear_list, build_set_bonus_result
from warband.api.deps import get_set_service, service_errors
from warband.api.schemas import (
    EvaluateGearRequest,
    EvaluateGearResponse,
    InferSlotRequest,
    InferSlotResponse,
)
from warband.core.gear.models import GearPiece, GearSet
from warband.core.gear.set_bonus import evaluate_set_bonuses
from warband.core.gear.slot_inference import infer_slot
from warband.core.gear.stats import average_item_level, get_legendaries
from warband.services.set_service import SetService

router = APIRouter(prefix="/gear", tags=["gear"])


@router.post("/infer-slot", response_model=InferSlotResponse)
def infer_slot_endpoint(request: InferSlotRequest) -> InferSlotResponse:
    """아이템 이름으로 슬롯 추정 (실패 시 slot=null)"""
    return InferSlotResponse(slot=infer_slot(request.item_name))


@router.post("/evaluate", response_model=EvaluateGearResponse)
def evaluate_gear(
    request: EvaluateGearRequest,
    set_service: SetService = Depends(get_set_service),
) -> EvaluateGearResponse:
    """
    저장 없이 장비 세트 평가

    빠진 슬롯은 빈 칸으로 채운 뒤 평균 ilvl, 세트 보너스, 전설 아이템을 계산합니다.
    """
    with service_errors():
        gear = GearSet.from_pieces(
            GearPiece.from_dict(p.model_dump(by_alias=True, exclude_none=True))
            for p in request.gear
        )
    bonuses = evaluate_set_bonuses(gear, set_service.get_catalog(), request.class_name)
    return EvaluateGearResponse(
        average_item_level=average_item_level(gear),
        set_bonuses=[build_set_bonus_result(r) for r in bonuses],
        legendaries=build_gear_list(get_legendaries(gear)),
    )
