"""GuildService 통합 테스트 — 길드/멤버/가입 신청 흐름"""

import pytest

from warband.core.event_types import EventTypes
from warband.core.gear.enums import ApplicationStatus, GuildRole
from warband.core.principal import Principal
from warband.db.models import (
    GuildApplicationModel,
    GuildMemberModel,
    UserModel,
)
from warband.services.errors import (
    ConflictError,
    NotAuthenticatedError,
    NotFoundError,
    PermissionDeniedError,
)
from warband.services.guild_service import GuildService

OWNER = Principal(user_id="user_owner")
ALICE = Principal(user_id="user_alice")
BOB = Principal(user_id="user_bob")


@pytest.fixture()
def service(db_session, bus) -> GuildService:
    return GuildService(db_session, bus)


@pytest.fixture()
def guild(service):
    return service.create_guild(OWNER, "Raiders", "Weekly raids")


def _join(service, guild, principal):
    application = service.apply(principal, guild.id, "let me in")
    return service.resolve_application(OWNER, application.id, approved=True)


class TestCreateGuild:
    def test_owner_becomes_member(self, service, guild):
        membership = service.get_my_membership(OWNER)
        assert membership.guild_id == guild.id
        assert membership.role == GuildRole.OWNER.value
        assert service.get_owned(OWNER).id == guild.id
        assert service.get_my_guild(OWNER).id == guild.id

    def test_cannot_own_two(self, service, guild):
        with pytest.raises(ConflictError, match="You already own a guild"):
            service.create_guild(OWNER, "Second")

    def test_member_cannot_create(self, service, guild):
        _join(service, guild, ALICE)
        with pytest.raises(ConflictError, match="leave your current guild"):
            service.create_guild(ALICE, "Splinter")

    def test_requires_principal(self, service):
        with pytest.raises(NotAuthenticatedError):
            service.create_guild(None, "Ghosts")

    def test_emits_event(self, service, bus):
        received = []
        bus.subscribe(EventTypes.GUILD_CREATED, received.append)
        guild = service.create_guild(OWNER, "Raiders")
        assert received[0].data == {"guild_id": guild.id, "owner_id": OWNER.user_id}


class TestUpdateDeleteGuild:
    def test_update_supplied_fields(self, service, guild):
        updated = service.update_guild(OWNER, guild.id, description="Daily raids")
        assert updated.name == "Raiders"
        assert updated.description == "Daily raids"

    def test_non_owner_update(self, service, guild):
        with pytest.raises(NotFoundError, match="not the owner"):
            service.update_guild(ALICE, guild.id, name="Mine now")

    def test_delete_cascades(self, service, guild, db_session):
        _join(service, guild, ALICE)
        service.apply(BOB, guild.id)
        service.delete_guild(OWNER, guild.id)

        assert service.get_guild(guild.id) is None
        assert db_session.query(GuildMemberModel).count() == 0
        assert db_session.query(GuildApplicationModel).count() == 0


class TestApplications:
    def test_apply_and_pending_list_for_owner(self, service, guild, db_session):
        db_session.add(UserModel(external_id=ALICE.user_id, name="Alice"))
        db_session.commit()
        service.apply(ALICE, guild.id, "hi")

        pending = service.get_pending_applications(OWNER, guild.id)
        assert len(pending) == 1
        assert pending[0].application.message == "hi"
        assert pending[0].user.name == "Alice"
        assert service.get_pending_applications(ALICE, guild.id) == []
        assert service.get_my_application(ALICE, guild.id) is not None

    def test_duplicate_pending(self, service, guild):
        service.apply(ALICE, guild.id)
        with pytest.raises(ConflictError, match="pending application"):
            service.apply(ALICE, guild.id)

    def test_member_cannot_apply(self, service, guild):
        _join(service, guild, ALICE)
        with pytest.raises(ConflictError):
            service.apply(ALICE, guild.id)

    def test_missing_guild(self, service):
        with pytest.raises(NotFoundError, match="Guild not found"):
            service.apply(ALICE, 999)

    def test_cancel_own_pending(self, service, guild):
        application = service.apply(ALICE, guild.id)
        with pytest.raises(NotFoundError):
            service.cancel_application(BOB, application.id)
        service.cancel_application(ALICE, application.id)
        assert service.get_my_application(ALICE, guild.id) is None

    def test_cancel_resolved(self, service, guild):
        application = service.apply(ALICE, guild.id)
        service.resolve_application(OWNER, application.id, approved=False)
        with pytest.raises(ConflictError, match="only cancel pending"):
            service.cancel_application(ALICE, application.id)


class TestResolve:
    def test_approve_adds_member(self, service, guild):
        application = _join(service, guild, ALICE)
        assert application.status == ApplicationStatus.APPROVED.value
        assert application.resolved_at is not None
        assert service.get_my_guild(ALICE).id == guild.id

    def test_reject(self, service, guild):
        application = service.apply(ALICE, guild.id)
        resolved = service.resolve_application(OWNER, application.id, approved=False)
        assert resolved.status == ApplicationStatus.REJECTED.value
        assert service.get_my_membership(ALICE) is None

    def test_only_owner(self, service, guild):
        application = service.apply(ALICE, guild.id)
        with pytest.raises(PermissionDeniedError):
            service.resolve_application(BOB, application.id, approved=True)

    def test_already_resolved(self, service, guild):
        application = _join(service, guild, ALICE)
        with pytest.raises(ConflictError, match="already been resolved"):
            service.resolve_application(OWNER, application.id, approved=True)

    def test_applicant_joined_elsewhere(self, service, guild):
        application = service.apply(ALICE, guild.id)
        other = service.create_guild(BOB, "Others")
        app_other = service.apply(ALICE, other.id)
        service.resolve_application(BOB, app_other.id, approved=True)

        with pytest.raises(ConflictError, match="already joined another guild"):
            service.resolve_application(OWNER, application.id, approved=True)


class TestMembers:
    def test_members_visible_to_members_only(self, service, guild):
        _join(service, guild, ALICE)
        members = service.get_members(ALICE, guild.id)
        assert [m.member.user_id for m in members] == [OWNER.user_id, ALICE.user_id]
        assert service.get_members(BOB, guild.id) == []
        assert service.get_members(None, guild.id) == []

    def test_leave(self, service, guild):
        _join(service, guild, ALICE)
        service.leave(ALICE, guild.id)
        assert service.get_my_membership(ALICE) is None

    def test_owner_cannot_leave(self, service, guild):
        with pytest.raises(ConflictError, match="owners cannot leave"):
            service.leave(OWNER, guild.id)

    def test_non_member_leave(self, service, guild):
        with pytest.raises(NotFoundError, match="not a member"):
            service.leave(ALICE, guild.id)

    def test_remove_member(self, service, guild):
        _join(service, guild, ALICE)
        service.remove_member(OWNER, guild.id, ALICE.user_id)
        assert service.get_members(OWNER, guild.id)[0].member.user_id == OWNER.user_id
        assert len(service.get_members(OWNER, guild.id)) == 1

    def test_remove_rules(self, service, guild):
        _join(service, guild, ALICE)
        with pytest.raises(PermissionDeniedError):
            service.remove_member(ALICE, guild.id, OWNER.user_id)
        with pytest.raises(ConflictError, match="Cannot remove yourself"):
            service.remove_member(OWNER, guild.id, OWNER.user_id)
        with pytest.raises(NotFoundError, match="Member not found"):
            service.remove_member(OWNER, guild.id, BOB.user_id)
