"""Principal 확인 헬퍼"""

from typing import Optional

from warband.core.principal import Principal
from warband.services.errors import NotAuthenticatedError, PermissionDeniedError


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise NotAuthenticatedError()
    return principal


def require_admin(principal: Optional[Principal]) -> Principal:
    principal = require_principal(principal)
    if not principal.is_admin:
        raise PermissionDeniedError("Admin access required")
    return principal
