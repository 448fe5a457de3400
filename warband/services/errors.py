"""Service 예외 — API 레이어가 HTTP 상태로 변환"""


class ServiceError(ValueError):
    """서비스 규칙 위반 공통 부모"""

    status_code = 400


class NotAuthenticatedError(ServiceError):
    status_code = 401

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class PermissionDeniedError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class ValidationError(ServiceError):
    status_code = 422
