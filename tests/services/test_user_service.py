"""UserService 테스트 — 인증 공급자 사용자 미러링"""

import pytest

from warband.core.event_types import EventTypes
from warband.core.principal import Principal
from warband.services.errors import ValidationError
from warband.services.user_service import UserService, display_name


@pytest.fixture()
def service(db_session, bus) -> UserService:
    return UserService(db_session, bus)


def _created(user_id="user_alice", **data):
    payload = {
        "id": user_id,
        "first_name": "Alice",
        "last_name": "Liddell",
        "email_addresses": [{"email_address": "alice@example.com"}],
        "image_url": "https://img.example.com/alice.png",
    }
    payload.update(data)
    return payload


class TestDisplayName:
    @pytest.mark.parametrize(
        "first, last, expected",
        [
            ("Alice", "Liddell", "Alice Liddell"),
            ("Alice", None, "Alice"),
            (None, "Liddell", "Liddell"),
            ("", "", "Anonymous"),
            (None, None, "Anonymous"),
        ],
    )
    def test_display_name(self, first, last, expected):
        assert display_name(first, last) == expected


class TestUpsert:
    def test_insert_then_update(self, service):
        service.upsert_user("user_alice", "Alice")
        user = service.upsert_user("user_alice", "Alice L.", email="a@example.com")
        assert user.name == "Alice L."
        assert user.email == "a@example.com"
        assert len(service.list_users(["user_alice"])) == 1

    def test_update_keeps_admin_flag(self, service, db_session):
        user = service.upsert_user("admin_1", "Admin")
        user.is_admin = True
        db_session.commit()
        assert service.upsert_user("admin_1", "Root").is_admin

    def test_list_users_skips_missing(self, service):
        service.upsert_user("u1", "One")
        service.upsert_user("u2", "Two")
        names = [u.name for u in service.list_users(["u2", "ghost", "u1"])]
        assert names == ["Two", "One"]

    def test_get_me(self, service):
        service.upsert_user("user_alice", "Alice")
        assert service.get_me(Principal(user_id="user_alice")).name == "Alice"
        assert service.get_me(None) is None


class TestSync:
    def test_created(self, service, bus):
        received = []
        bus.subscribe(EventTypes.USER_SYNCED, received.append)
        service.sync("user.created", _created())

        user = service.get_by_external_id("user_alice")
        assert user.name == "Alice Liddell"
        assert user.email == "alice@example.com"
        assert user.image_url == "https://img.example.com/alice.png"
        assert received[0].data == {"external_id": "user_alice"}

    def test_updated_without_names_is_anonymous(self, service):
        service.sync("user.created", _created())
        service.sync(
            "user.updated",
            _created(first_name=None, last_name=None, email_addresses=[]),
        )
        user = service.get_by_external_id("user_alice")
        assert user.name == "Anonymous"
        assert user.email is None

    def test_deleted(self, service):
        service.sync("user.created", _created())
        service.sync("user.deleted", {"id": "user_alice"})
        assert service.get_by_external_id("user_alice") is None

    def test_delete_unknown_is_noop(self, service):
        assert service.delete_user("ghost") is False
        service.sync("user.deleted", {})

    def test_unknown_event_ignored(self, service):
        service.sync("session.created", {"id": "s1"})
        assert service.list_users(["s1"]) == []

    def test_upsert_requires_id(self, service):
        with pytest.raises(ValidationError):
            service.sync("user.created", {"first_name": "Nobody"})
