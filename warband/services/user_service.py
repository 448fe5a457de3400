"""사용자 Service — 외부 인증 공급자의 사용자 미러링"""

from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from warband.core.event_bus import DomainEvent, EventBus
from warband.core.event_types import EventTypes
from warband.core.logging import get_logger
from warband.core.principal import Principal
from warband.db.models import UserModel
from warband.services.errors import ValidationError

logger = get_logger(__name__)

SOURCE = "user_service"

SYNC_UPSERT_TYPES = ("user.created", "user.updated")
SYNC_DELETE_TYPE = "user.deleted"


def display_name(first_name: str | None, last_name: str | None) -> str:
    """이름 + 성, 둘 다 없으면 "Anonymous" """
    return " ".join(p for p in (first_name, last_name) if p) or "Anonymous"


class UserService:
    """사용자 upsert/삭제/조회"""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus

    def get_by_external_id(self, external_id: str) -> UserModel | None:
        return (
            self._db.query(UserModel)
            .filter(UserModel.external_id == external_id)
            .first()
        )

    def list_users(self, external_ids: Iterable[str]) -> list[UserModel]:
        """요청 순서 유지, 없는 id는 제외"""
        users = []
        for external_id in external_ids:
            user = self.get_by_external_id(external_id)
            if user is not None:
                users.append(user)
        return users

    def get_me(self, principal: Optional[Principal]) -> UserModel | None:
        if principal is None:
            return None
        return self.get_by_external_id(principal.user_id)

    def upsert_user(
        self,
        external_id: str,
        name: str,
        email: str | None = None,
        image_url: str | None = None,
    ) -> UserModel:
        """있으면 name/email/image_url 갱신, 없으면 생성. is_admin은 유지."""
        user = self.get_by_external_id(external_id)
        if user is not None:
            user.name = name
            user.email = email
            user.image_url = image_url
        else:
            user = UserModel(
                external_id=external_id,
                name=name,
                email=email,
                image_url=image_url,
                is_admin=False,
            )
            self._db.add(user)
        self._db.commit()

        self._emit(EventTypes.USER_SYNCED, {"external_id": external_id})
        return user

    def delete_user(self, external_id: str) -> bool:
        """삭제 여부 반환. 없는 사용자는 무시."""
        user = self.get_by_external_id(external_id)
        if user is None:
            return False
        self._db.delete(user)
        self._db.commit()

        self._emit(EventTypes.USER_DELETED, {"external_id": external_id})
        logger.info("User deleted: %s", external_id)
        return True

    def sync(self, event_type: str, data: dict[str, Any]) -> None:
        """인증 공급자 webhook 이벤트 반영 (서명 검증은 상위에서 완료).

        알 수 없는 이벤트 타입은 무시.
        """
        if event_type in SYNC_UPSERT_TYPES:
            external_id = data.get("id")
            if not external_id:
                raise ValidationError("User id is required")
            emails = data.get("email_addresses") or []
            email = emails[0].get("email_address") if emails else None
            self.upsert_user(
                external_id=external_id,
                name=display_name(data.get("first_name"), data.get("last_name")),
                email=email,
                image_url=data.get("image_url"),
            )
        elif event_type == SYNC_DELETE_TYPE:
            external_id = data.get("id")
            if external_id:
                self.delete_user(external_id)
        else:
            logger.debug("Ignoring user sync event: %s", event_type)

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        self._bus.emit(DomainEvent(event_type=event_type, data=data, source=SOURCE))
