"""Character API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from warband.api.builders import build_character, build_summary
from warband.api.deps import (
    get_character_service,
    get_optional_principal,
    get_principal,
    get_set_service,
    service_errors,
)
from warband.api.schemas import (
    CharacterCreateRequest,
    CharacterResponse,
    CharacterUpdateRequest,
    ErrorResponse,
    GearPieceFields,
    GearSummaryResponse,
    ImportCharactersRequest,
    ImportResultEntry,
)
from warband.core.gear.enums import CharacterClass, GearMode
from warband.core.logging import get_logger
from warband.core.principal import Principal
from warband.services.character_service import CharacterService
from warband.services.set_service import SetService

logger = get_logger(__name__)

router = APIRouter(prefix="/characters", tags=["characters"])


@router.get("", response_model=list[CharacterResponse])
def list_characters(
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: CharacterService = Depends(get_character_service),
) -> list[CharacterResponse]:
    """본인 캐릭터 목록 (미인증이면 빈 목록)"""
    return [build_character(c) for c in service.list_characters(principal)]


@router.post(
    "",
    response_model=CharacterResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
def create_character(
    request: CharacterCreateRequest,
    principal: Principal = Depends(get_principal),
    service: CharacterService = Depends(get_character_service),
) -> CharacterResponse:
    """
    캐릭터 생성

    직업당 하나. 두 장비 세트는 빈 16슬롯으로 시작합니다.
    """
    with service_errors():
        character = service.create_character(
            principal,
            request.class_name,
            name=request.name,
            hit_percent=request.hit_percent,
            expertise_percent=request.expertise_percent,
        )
    return build_character(character)


@router.post("/import", response_model=list[ImportResultEntry])
def import_characters(
    request: ImportCharactersRequest,
    principal: Principal = Depends(get_principal),
    service: CharacterService = Depends(get_character_service),
) -> list[ImportResultEntry]:
    """
    JSON 일괄 가져오기

    (사용자, 직업) 기준으로 생성 또는 갱신. 알 수 없는 직업은 건너뜁니다.
    """
    with service_errors():
        results = service.import_characters(
            principal, [c.model_dump() for c in request.characters]
        )
    return [ImportResultEntry(**r) for r in results]


@router.get("/by-member/{user_id}", response_model=list[CharacterResponse])
def list_member_characters(
    user_id: str,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: CharacterService = Depends(get_character_service),
) -> list[CharacterResponse]:
    """같은 길드원의 캐릭터 목록 (같은 길드가 아니면 빈 목록)"""
    return [
        build_character(c) for c in service.list_by_guild_member(principal, user_id)
    ]


@router.get(
    "/by-class/{class_name}",
    response_model=CharacterResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_character_by_class(
    class_name: CharacterClass,
    principal: Principal = Depends(get_principal),
    service: CharacterService = Depends(get_character_service),
) -> CharacterResponse:
    character = service.get_by_class(principal, class_name)
    if character is None:
        raise HTTPException(status_code=404, detail="Character not found")
    return build_character(character)


@router.get(
    "/{character_id}",
    response_model=CharacterResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_character(
    character_id: int,
    principal: Principal = Depends(get_principal),
    service: CharacterService = Depends(get_character_service),
) -> CharacterResponse:
    character = service.get_character(principal, character_id)
    if character is None:
        raise HTTPException(status_code=404, detail="Character not found")
    return build_character(character)


@router.patch(
    "/{character_id}",
    response_model=CharacterResponse,
    responses={404: {"model": ErrorResponse}},
)
def update_character(
    character_id: int,
    request: CharacterUpdateRequest,
    principal: Principal = Depends(get_principal),
    service: CharacterService = Depends(get_character_service),
) -> CharacterResponse:
    with service_errors():
        character = service.update_character(
            principal,
            character_id,
            name=request.name,
            hit_percent=request.hit_percent,
            expertise_percent=request.expertise_percent,
        )
    return build_character(character)


@router.put(
    "/{character_id}/gear/{mode}/{slot}",
    response_model=CharacterResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def update_gear_piece(
    character_id: int,
    mode: GearMode,
    slot: str,
    request: GearPieceFields,
    principal: Principal = Depends(get_principal),
    service: CharacterService = Depends(get_character_service),
) -> CharacterResponse:
    """
    장비 한 칸 교체

    본문에 없는 필드는 비워집니다. Main Hand가 양손 무기면
    Off Hand에 같은 내용이 복제되고, 그 동안 Off Hand 직접 수정은 409.
    """
    with service_errors():
        character = service.update_gear_piece(
            principal,
            character_id,
            mode,
            slot,
            request.model_dump(by_alias=True, exclude_none=True),
        )
    return build_character(character)


@router.get(
    "/{character_id}/summary/{mode}",
    response_model=GearSummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_gear_summary(
    character_id: int,
    mode: GearMode,
    principal: Principal = Depends(get_principal),
    service: CharacterService = Depends(get_character_service),
    set_service: SetService = Depends(get_set_service),
) -> GearSummaryResponse:
    """평균 ilvl, 스탯 캡, 세트 보너스, 전설 아이템 요약"""
    character = service.get_character(principal, character_id)
    if character is None:
        raise HTTPException(status_code=404, detail="Character not found")
    summary = service.summarize(character, mode, set_service.get_catalog())
    return build_summary(summary)


@router.delete(
    "/{character_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
)
def delete_character(
    character_id: int,
    principal: Principal = Depends(get_principal),
    service: CharacterService = Depends(get_character_service),
) -> None:
    with service_errors():
        service.delete_character(principal, character_id)
