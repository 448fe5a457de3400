"""User API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from warband.api.deps import get_optional_principal, get_user_service, service_errors
from warband.api.schemas import UserResponse, UserSyncRequest
from warband.core.logging import get_logger
from warband.core.principal import Principal
from warband.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/sync")
def sync_user(
    request: UserSyncRequest,
    service: UserService = Depends(get_user_service),
) -> dict[str, str]:
    """
    인증 공급자 사용자 이벤트 반영

    user.created / user.updated → upsert, user.deleted → 삭제.
    서명 검증은 상위 게이트웨이에서 완료된 것으로 간주합니다.
    """
    with service_errors():
        service.sync(request.type, request.data)
    logger.info("User sync event handled: %s", request.type)
    return {"status": "ok"}


@router.get("/me", response_model=Optional[UserResponse])
def get_me(
    principal: Optional[Principal] = Depends(get_optional_principal),
    service: UserService = Depends(get_user_service),
):
    return service.get_me(principal)


@router.get("", response_model=list[UserResponse])
def list_users(
    ids: list[str] = Query(default=[]),
    service: UserService = Depends(get_user_service),
):
    """외부 id 목록으로 사용자 조회 (없는 id 제외)"""
    return service.list_users(ids)
