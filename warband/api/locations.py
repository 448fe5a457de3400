"""Drop location API endpoints: locations, bosses, drop patterns."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from warband.api.deps import (
    get_location_service,
    get_optional_principal,
    service_errors,
)
from warband.api.schemas import (
    BossCreateRequest,
    BossResponse,
    BossUpdateRequest,
    DropPatternCreateRequest,
    DropPatternResponse,
    DropPatternUpdateRequest,
    ErrorResponse,
    LocationCreateRequest,
    LocationResponse,
    LocationUpdateRequest,
)
from warband.core.gear.enums import DropLocationType
from warband.core.principal import Principal
from warband.services.location_service import LocationService

router = APIRouter(tags=["locations"])

_ADMIN_ERRORS = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _dump(items: Optional[list]) -> Optional[list[dict]]:
    if items is None:
        return None
    return [i.model_dump(mode="json", by_alias=True, exclude_none=True) for i in items]


# === 위치 ===


@router.get("/locations", response_model=list[LocationResponse])
def list_locations(
    type: Optional[DropLocationType] = None,
    service: LocationService = Depends(get_location_service),
):
    """위치 목록 (type 지정 시 해당 유형만)"""
    if type is not None:
        return service.list_by_type(type)
    return service.list_locations()


@router.get(
    "/locations/{location_id}",
    response_model=LocationResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_location(
    location_id: int, service: LocationService = Depends(get_location_service)
):
    row = service.get_location(location_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Location not found")
    return row


@router.post(
    "/locations",
    response_model=LocationResponse,
    status_code=201,
    responses=_ADMIN_ERRORS,
)
def create_location(
    request: LocationCreateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
):
    with service_errors():
        return service.create_location(principal, request.type, request.name)


@router.patch(
    "/locations/{location_id}",
    response_model=LocationResponse,
    responses=_ADMIN_ERRORS,
)
def update_location(
    location_id: int,
    request: LocationUpdateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
):
    with service_errors():
        return service.update_location(
            principal, location_id, name=request.name, type_=request.type
        )


@router.delete(
    "/locations/{location_id}", status_code=204, responses=_ADMIN_ERRORS
)
def delete_location(
    location_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
) -> None:
    """위치 삭제 (소속 보스 포함)"""
    with service_errors():
        service.delete_location(principal, location_id)


# === 보스 ===


@router.get("/bosses", response_model=list[BossResponse])
def list_all_bosses(service: LocationService = Depends(get_location_service)):
    return service.list_all_bosses()


@router.get("/locations/{location_id}/bosses", response_model=list[BossResponse])
def list_bosses(
    location_id: int, service: LocationService = Depends(get_location_service)
):
    """위치의 보스 목록 (order 지정 보스 먼저)"""
    return service.list_bosses(location_id)


@router.get(
    "/bosses/{boss_id}",
    response_model=BossResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_boss(boss_id: int, service: LocationService = Depends(get_location_service)):
    row = service.get_boss(boss_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Boss not found")
    return row


@router.post(
    "/locations/{location_id}/bosses",
    response_model=BossResponse,
    status_code=201,
    responses=_ADMIN_ERRORS,
)
def add_boss(
    location_id: int,
    request: BossCreateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
):
    with service_errors():
        return service.add_boss(principal, location_id, request.name, request.order)


@router.patch("/bosses/{boss_id}", response_model=BossResponse, responses=_ADMIN_ERRORS)
def update_boss(
    boss_id: int,
    request: BossUpdateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
):
    with service_errors():
        return service.update_boss(
            principal, boss_id, name=request.name, order=request.order
        )


@router.delete("/bosses/{boss_id}", status_code=204, responses=_ADMIN_ERRORS)
def remove_boss(
    boss_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
) -> None:
    with service_errors():
        service.remove_boss(principal, boss_id)


# === 드롭 패턴 ===


@router.get("/drop-patterns", response_model=list[DropPatternResponse])
def list_drop_patterns(service: LocationService = Depends(get_location_service)):
    return service.list_drop_patterns()


@router.get(
    "/drop-patterns/{pattern_id}",
    response_model=DropPatternResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_drop_pattern(
    pattern_id: int, service: LocationService = Depends(get_location_service)
):
    row = service.get_drop_pattern(pattern_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Drop pattern not found")
    return row


@router.post(
    "/drop-patterns",
    response_model=DropPatternResponse,
    status_code=201,
    responses=_ADMIN_ERRORS,
)
def create_drop_pattern(
    request: DropPatternCreateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
):
    with service_errors():
        return service.create_drop_pattern(
            principal,
            request.name,
            _dump(request.slot_drops),
            _dump(request.default_bonuses),
        )


@router.patch(
    "/drop-patterns/{pattern_id}",
    response_model=DropPatternResponse,
    responses=_ADMIN_ERRORS,
)
def update_drop_pattern(
    pattern_id: int,
    request: DropPatternUpdateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
):
    with service_errors():
        return service.update_drop_pattern(
            principal,
            pattern_id,
            name=request.name,
            slot_drops=_dump(request.slot_drops),
            default_bonuses=_dump(request.default_bonuses),
        )


@router.delete(
    "/drop-patterns/{pattern_id}", status_code=204, responses=_ADMIN_ERRORS
)
def remove_drop_pattern(
    pattern_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: LocationService = Depends(get_location_service),
) -> None:
    """드롭 패턴 삭제 (사용 중이면 409)"""
    with service_errors():
        service.remove_drop_pattern(principal, pattern_id)
