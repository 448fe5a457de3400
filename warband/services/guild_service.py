"""길드 Service — 길드/멤버/가입 신청

규칙:
- 사용자는 길드 하나만 소유, 하나에만 소속
- 소유자는 탈퇴/자기 추방 불가 (길드 삭제로만 해제)
- 가입 신청 처리는 소유자만
"""

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.orm import Session

from warband.core.event_bus import DomainEvent, EventBus
from warband.core.event_types import EventTypes
from warband.core.gear.enums import ApplicationStatus, GuildRole
from warband.core.logging import get_logger
from warband.core.principal import Principal
from warband.db.models import (
    GuildApplicationModel,
    GuildMemberModel,
    GuildModel,
    UserModel,
    utcnow,
)
from warband.services.auth import require_principal
from warband.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)

logger = get_logger(__name__)

SOURCE = "guild_service"


@dataclass
class MemberView:
    member: GuildMemberModel
    user: UserModel | None


@dataclass
class ApplicationView:
    application: GuildApplicationModel
    user: UserModel | None


class GuildService:
    """길드 CRUD + 가입 신청 흐름"""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus

    # === 조회 ===

    def list_guilds(self) -> list[GuildModel]:
        return self._db.query(GuildModel).order_by(GuildModel.id).all()

    def get_guild(self, guild_id: int) -> GuildModel | None:
        return self._db.get(GuildModel, guild_id)

    def get_owned(self, principal: Optional[Principal]) -> GuildModel | None:
        if principal is None:
            return None
        return (
            self._db.query(GuildModel)
            .filter(GuildModel.owner_id == principal.user_id)
            .first()
        )

    def get_my_membership(
        self, principal: Optional[Principal]
    ) -> GuildMemberModel | None:
        if principal is None:
            return None
        return self._membership_of(principal.user_id)

    def get_my_guild(self, principal: Optional[Principal]) -> GuildModel | None:
        membership = self.get_my_membership(principal)
        if membership is None:
            return None
        return self._db.get(GuildModel, membership.guild_id)

    def get_members(
        self, principal: Optional[Principal], guild_id: int
    ) -> list[MemberView]:
        """길드원만 조회 가능. 비회원이면 빈 목록."""
        if principal is None or self._member(guild_id, principal.user_id) is None:
            return []
        members = (
            self._db.query(GuildMemberModel)
            .filter(GuildMemberModel.guild_id == guild_id)
            .order_by(GuildMemberModel.id)
            .all()
        )
        return [MemberView(member=m, user=self._user(m.user_id)) for m in members]

    def get_pending_applications(
        self, principal: Optional[Principal], guild_id: int
    ) -> list[ApplicationView]:
        """소유자만 조회 가능."""
        if principal is None:
            return []
        guild = self._db.get(GuildModel, guild_id)
        if guild is None or guild.owner_id != principal.user_id:
            return []
        applications = (
            self._db.query(GuildApplicationModel)
            .filter(
                GuildApplicationModel.guild_id == guild_id,
                GuildApplicationModel.status == ApplicationStatus.PENDING.value,
            )
            .order_by(GuildApplicationModel.id)
            .all()
        )
        return [
            ApplicationView(application=a, user=self._user(a.user_id))
            for a in applications
        ]

    def get_my_application(
        self, principal: Optional[Principal], guild_id: int
    ) -> GuildApplicationModel | None:
        if principal is None:
            return None
        return self._pending_application(guild_id, principal.user_id)

    # === 길드 생성/수정/삭제 ===

    def create_guild(
        self,
        principal: Optional[Principal],
        name: str,
        description: str | None = None,
    ) -> GuildModel:
        """길드 생성. 소유자를 owner 역할 멤버로 추가."""
        principal = require_principal(principal)

        if self.get_owned(principal) is not None:
            raise ConflictError("You already own a guild")
        if self._membership_of(principal.user_id) is not None:
            raise ConflictError(
                "You must leave your current guild before creating one"
            )

        guild = GuildModel(
            name=name, description=description, owner_id=principal.user_id
        )
        self._db.add(guild)
        self._db.flush()
        self._db.add(
            GuildMemberModel(
                guild_id=guild.id,
                user_id=principal.user_id,
                role=GuildRole.OWNER.value,
            )
        )
        self._db.commit()

        self._emit(
            EventTypes.GUILD_CREATED,
            {"guild_id": guild.id, "owner_id": principal.user_id},
        )
        logger.info("Guild created: %s (%s)", guild.id, name)
        return guild

    def update_guild(
        self,
        principal: Optional[Principal],
        guild_id: int,
        name: str | None = None,
        description: str | None = None,
    ) -> GuildModel:
        guild = self._require_owned_guild(
            principal, guild_id, "Guild not found or you are not the owner"
        )
        if name is not None:
            guild.name = name
        if description is not None:
            guild.description = description
        self._db.commit()
        return guild

    def delete_guild(self, principal: Optional[Principal], guild_id: int) -> None:
        """길드 삭제. 멤버/신청은 cascade."""
        guild = self._require_owned_guild(
            principal, guild_id, "Guild not found or you are not the owner"
        )
        self._db.delete(guild)
        self._db.commit()

        self._emit(EventTypes.GUILD_DELETED, {"guild_id": guild_id})
        logger.info("Guild deleted: %s", guild_id)

    # === 가입 신청 ===

    def apply(
        self,
        principal: Optional[Principal],
        guild_id: int,
        message: str | None = None,
    ) -> GuildApplicationModel:
        principal = require_principal(principal)

        if self._membership_of(principal.user_id) is not None:
            raise ConflictError("You must leave your current guild before applying")
        if self._pending_application(guild_id, principal.user_id) is not None:
            raise ConflictError(
                "You already have a pending application for this guild"
            )
        if self._db.get(GuildModel, guild_id) is None:
            raise NotFoundError("Guild not found")

        application = GuildApplicationModel(
            guild_id=guild_id,
            user_id=principal.user_id,
            message=message,
            status=ApplicationStatus.PENDING.value,
        )
        self._db.add(application)
        self._db.commit()

        self._emit(
            EventTypes.GUILD_APPLICATION_SUBMITTED,
            {"application_id": application.id, "guild_id": guild_id},
        )
        return application

    def cancel_application(
        self, principal: Optional[Principal], application_id: int
    ) -> None:
        principal = require_principal(principal)
        application = self._db.get(GuildApplicationModel, application_id)
        if application is None or application.user_id != principal.user_id:
            raise NotFoundError("Application not found")
        if application.status != ApplicationStatus.PENDING.value:
            raise ConflictError("Can only cancel pending applications")

        self._db.delete(application)
        self._db.commit()

    def resolve_application(
        self,
        principal: Optional[Principal],
        application_id: int,
        approved: bool,
    ) -> GuildApplicationModel:
        """소유자가 신청 승인/거절. 승인 시 member로 추가."""
        principal = require_principal(principal)
        application = self._db.get(GuildApplicationModel, application_id)
        if application is None:
            raise NotFoundError("Application not found")

        guild = self._db.get(GuildModel, application.guild_id)
        if guild is None or guild.owner_id != principal.user_id:
            raise PermissionDeniedError("You are not the owner of this guild")

        if application.status != ApplicationStatus.PENDING.value:
            raise ConflictError("Application has already been resolved")

        if approved and self._membership_of(application.user_id) is not None:
            raise ConflictError("Applicant has already joined another guild")

        application.status = (
            ApplicationStatus.APPROVED.value
            if approved
            else ApplicationStatus.REJECTED.value
        )
        application.resolved_at = utcnow()

        if approved:
            self._db.add(
                GuildMemberModel(
                    guild_id=application.guild_id,
                    user_id=application.user_id,
                    role=GuildRole.MEMBER.value,
                )
            )
        self._db.commit()

        self._emit(
            EventTypes.GUILD_APPLICATION_RESOLVED,
            {
                "application_id": application.id,
                "guild_id": application.guild_id,
                "approved": approved,
            },
        )
        logger.info("Application %s %s", application.id, application.status)
        return application

    # === 멤버 관리 ===

    def leave(self, principal: Optional[Principal], guild_id: int) -> None:
        principal = require_principal(principal)
        membership = self._member(guild_id, principal.user_id)
        if membership is None:
            raise NotFoundError("You are not a member of this guild")
        if membership.role == GuildRole.OWNER.value:
            raise ConflictError(
                "Guild owners cannot leave. Transfer ownership or delete the guild."
            )

        self._db.delete(membership)
        self._db.commit()
        self._emit(
            EventTypes.GUILD_MEMBER_LEFT,
            {"guild_id": guild_id, "user_id": principal.user_id},
        )

    def remove_member(
        self, principal: Optional[Principal], guild_id: int, user_id: str
    ) -> None:
        principal = require_principal(principal)
        guild = self._db.get(GuildModel, guild_id)
        if guild is None or guild.owner_id != principal.user_id:
            raise PermissionDeniedError("You are not the owner of this guild")
        if user_id == principal.user_id:
            raise ConflictError("Cannot remove yourself as owner")

        membership = self._member(guild_id, user_id)
        if membership is None:
            raise NotFoundError("Member not found")

        self._db.delete(membership)
        self._db.commit()
        self._emit(
            EventTypes.GUILD_MEMBER_REMOVED,
            {"guild_id": guild_id, "user_id": user_id},
        )
        logger.info("Member %s removed from guild %s", user_id, guild_id)

    # === 내부 헬퍼 ===

    def _require_owned_guild(
        self, principal: Optional[Principal], guild_id: int, message: str
    ) -> GuildModel:
        principal = require_principal(principal)
        guild = self._db.get(GuildModel, guild_id)
        if guild is None or guild.owner_id != principal.user_id:
            raise NotFoundError(message)
        return guild

    def _membership_of(self, user_id: str) -> GuildMemberModel | None:
        return (
            self._db.query(GuildMemberModel)
            .filter(GuildMemberModel.user_id == user_id)
            .first()
        )

    def _member(self, guild_id: int, user_id: str) -> GuildMemberModel | None:
        return (
            self._db.query(GuildMemberModel)
            .filter(
                GuildMemberModel.guild_id == guild_id,
                GuildMemberModel.user_id == user_id,
            )
            .first()
        )

    def _pending_application(
        self, guild_id: int, user_id: str
    ) -> GuildApplicationModel | None:
        return (
            self._db.query(GuildApplicationModel)
            .filter(
                GuildApplicationModel.guild_id == guild_id,
                GuildApplicationModel.user_id == user_id,
                GuildApplicationModel.status == ApplicationStatus.PENDING.value,
            )
            .first()
        )

    def _user(self, external_id: str) -> UserModel | None:
        return (
            self._db.query(UserModel)
            .filter(UserModel.external_id == external_id)
            .first()
        )

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        self._bus.emit(DomainEvent(event_type=event_type, data=data, source=SOURCE))
