"""Guild API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from warband.api.deps import (
    get_guild_service,
    get_optional_principal,
    get_principal,
    service_errors,
)
from warband.api.schemas import (
    ApplicationResponse,
    ApplyRequest,
    ErrorResponse,
    GuildCreateRequest,
    GuildResponse,
    GuildUpdateRequest,
    MemberResponse,
    MembershipResponse,
    ResolveApplicationRequest,
    UserResponse,
)
from warband.core.principal import Principal
from warband.services.guild_service import ApplicationView, GuildService, MemberView

router = APIRouter(prefix="/guilds", tags=["guilds"])


def _build_member(view: MemberView) -> MemberResponse:
    response = MemberResponse.model_validate(view.member)
    if view.user is not None:
        response.user = UserResponse.model_validate(view.user)
    return response


def _build_application(view: ApplicationView) -> ApplicationResponse:
    response = ApplicationResponse.model_validate(view.application)
    if view.user is not None:
        response.user = UserResponse.model_validate(view.user)
    return response


# === 조회 ===


@router.get("", response_model=list[GuildResponse])
def list_guilds(service: GuildService = Depends(get_guild_service)):
    return service.list_guilds()


@router.get("/owned", response_model=Optional[GuildResponse])
def get_owned_guild(
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: GuildService = Depends(get_guild_service),
):
    """본인이 소유한 길드 (없으면 null)"""
    return service.get_owned(principal)


@router.get("/mine", response_model=Optional[GuildResponse])
def get_my_guild(
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: GuildService = Depends(get_guild_service),
):
    """본인이 소속된 길드 (없으면 null)"""
    return service.get_my_guild(principal)


@router.get("/membership", response_model=Optional[MembershipResponse])
def get_my_membership(
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: GuildService = Depends(get_guild_service),
):
    return service.get_my_membership(principal)


@router.get(
    "/{guild_id}",
    response_model=GuildResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_guild(guild_id: int, service: GuildService = Depends(get_guild_service)):
    guild = service.get_guild(guild_id)
    if guild is None:
        raise HTTPException(status_code=404, detail="Guild not found")
    return guild


@router.get("/{guild_id}/members", response_model=list[MemberResponse])
def get_members(
    guild_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: GuildService = Depends(get_guild_service),
) -> list[MemberResponse]:
    """길드원 목록 (길드원만 조회 가능)"""
    return [_build_member(v) for v in service.get_members(principal, guild_id)]


@router.get("/{guild_id}/applications", response_model=list[ApplicationResponse])
def get_pending_applications(
    guild_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: GuildService = Depends(get_guild_service),
) -> list[ApplicationResponse]:
    """대기 중인 가입 신청 (소유자만 조회 가능)"""
    return [
        _build_application(v)
        for v in service.get_pending_applications(principal, guild_id)
    ]


@router.get(
    "/{guild_id}/applications/mine",
    response_model=Optional[ApplicationResponse],
)
def get_my_application(
    guild_id: int,
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: GuildService = Depends(get_guild_service),
):
    return service.get_my_application(principal, guild_id)


# === 길드 생성/수정/삭제 ===


@router.post(
    "",
    response_model=GuildResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
def create_guild(
    request: GuildCreateRequest,
    principal: Principal = Depends(get_principal),
    service: GuildService = Depends(get_guild_service),
):
    with service_errors():
        return service.create_guild(principal, request.name, request.description)


@router.patch(
    "/{guild_id}",
    response_model=GuildResponse,
    responses={404: {"model": ErrorResponse}},
)
def update_guild(
    guild_id: int,
    request: GuildUpdateRequest,
    principal: Principal = Depends(get_principal),
    service: GuildService = Depends(get_guild_service),
):
    with service_errors():
        return service.update_guild(
            principal, guild_id, name=request.name, description=request.description
        )


@router.delete(
    "/{guild_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
)
def delete_guild(
    guild_id: int,
    principal: Principal = Depends(get_principal),
    service: GuildService = Depends(get_guild_service),
) -> None:
    with service_errors():
        service.delete_guild(principal, guild_id)


# === 가입 신청 ===


@router.post(
    "/{guild_id}/applications",
    response_model=ApplicationResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def apply_to_guild(
    guild_id: int,
    request: ApplyRequest,
    principal: Principal = Depends(get_principal),
    service: GuildService = Depends(get_guild_service),
):
    with service_errors():
        return service.apply(principal, guild_id, request.message)


@router.delete(
    "/applications/{application_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def cancel_application(
    application_id: int,
    principal: Principal = Depends(get_principal),
    service: GuildService = Depends(get_guild_service),
) -> None:
    with service_errors():
        service.cancel_application(principal, application_id)


@router.post(
    "/applications/{application_id}/resolve",
    response_model=ApplicationResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def resolve_application(
    application_id: int,
    request: ResolveApplicationRequest,
    principal: Principal = Depends(get_principal),
    service: GuildService = Depends(get_guild_service),
):
    """가입 신청 승인/거절 (소유자 전용)"""
    with service_errors():
        return service.resolve_application(
            principal, application_id, request.approved
        )


# === 멤버 관리 ===


@router.post(
    "/{guild_id}/leave",
    status_code=204,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def leave_guild(
    guild_id: int,
    principal: Principal = Depends(get_principal),
    service: GuildService = Depends(get_guild_service),
) -> None:
    with service_errors():
        service.leave(principal, guild_id)


@router.delete(
    "/{guild_id}/members/{user_id}",
    status_code=204,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def remove_member(
    guild_id: int,
    user_id: str,
    principal: Principal = Depends(get_principal),
    service: GuildService = Depends(get_guild_service),
) -> None:
    with service_errors():
        service.remove_member(principal, guild_id, user_id)
