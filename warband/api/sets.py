"""Set catalog API endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException

from warband.api.deps import get_optional_principal, get_set_service, service_errors
from warband.api.schemas import (
    ErrorResponse,
    SetCreateRequest,
    SetResponse,
    SetUpdateRequest,
)
from warband.core.gear.enums import CharacterClass
from warband.core.principal import Principal
from warband.services.set_service import SetService

router = APIRouter(prefix="/sets", tags=["sets"])


def _dump_list(items: Optional[list]) -> Optional[list[dict[str, Any]]]:
    """하위 문서를 저장 포맷(camelCase)으로"""
    if items is None:
        return None
    return [i.model_dump(mode="json", by_alias=True, exclude_none=True) for i in items]


@router.get("", response_model=list[SetResponse])
def list_sets(
    class_name: Optional[CharacterClass] = None,
    service: SetService = Depends(get_set_service),
):
    """세트 목록 (class_name 지정 시 해당 직업용만)"""
    if class_name is not None:
        return service.list_by_class(class_name)
    return service.list_sets()


@router.get(
    "/{set_id}",
    response_model=SetResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_set(set_id: int, service: SetService = Depends(get_set_service)):
    row = service.get_set(set_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Set not found")
    return row


@router.post(
    "",
    response_model=SetResponse,
    status_code=201,
    responses={
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def create_set(
    request: SetCreateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: SetService = Depends(get_set_service),
):
    """세트 생성 (관리자 전용)"""
    with service_errors():
        return service.create_set(
            principal,
            name=request.name,
            quality=request.quality,
            classes=[c.value for c in request.classes],
            pieces=_dump_list(request.pieces),
            bonuses=_dump_list(request.bonuses),
            drop_locations=_dump_list(request.drop_locations),
            required_level=request.required_level,
            drop_pattern_id=request.drop_pattern_id,
        )


@router.patch(
    "/{set_id}",
    response_model=SetResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def update_set(
    set_id: int,
    request: SetUpdateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: SetService = Depends(get_set_service),
):
    """세트 수정 (관리자 전용, 지정 필드만)"""
    with service_errors():
        return service.update_set(
            principal,
            set_id,
            name=request.name,
            quality=request.quality,
            classes=[c.value for c in request.classes] if request.classes else None,
            pieces=_dump_list(request.pieces),
            bonuses=_dump_list(request.bonuses),
            drop_locations=_dump_list(request.drop_locations),
            required_level=request.required_level,
            drop_pattern_id=request.drop_pattern_id,
        )


@router.delete(
    "/{set_id}",
    status_code=204,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_set(
    set_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: SetService = Depends(get_set_service),
) -> None:
    with service_errors():
        service.delete_set(principal, set_id)
