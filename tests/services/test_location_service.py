"""LocationService 테스트 — 위치/보스/드롭 패턴"""

import pytest

from warband.core.principal import Principal
from warband.db.models import BossModel, GearSetModel
from warband.services.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from warband.services.location_service import LocationService

ADMIN = Principal(user_id="admin_1", is_admin=True)
PLAYER = Principal(user_id="user_alice")


@pytest.fixture()
def service(db_session) -> LocationService:
    return LocationService(db_session)


@pytest.fixture()
def citadel(service):
    return service.create_location(ADMIN, "raid", "Sky Citadel")


class TestLocations:
    def test_create_and_list_by_type(self, service, citadel):
        service.create_location(ADMIN, "dungeon", "Deadmines")
        assert [loc.name for loc in service.list_by_type("raid")] == ["Sky Citadel"]
        assert len(service.list_locations()) == 2

    def test_duplicate_type_and_name(self, service, citadel):
        with pytest.raises(ConflictError, match='A raid named "Sky Citadel"'):
            service.create_location(ADMIN, "raid", "Sky Citadel")

    def test_same_name_other_type_allowed(self, service, citadel):
        assert service.create_location(ADMIN, "dungeon", "Sky Citadel").type == "dungeon"

    def test_admin_only(self, service):
        with pytest.raises(PermissionDeniedError):
            service.create_location(PLAYER, "raid", "Nope")

    def test_invalid_type(self, service):
        with pytest.raises(ValueError):
            service.create_location(ADMIN, "volcano", "Molten Core")

    def test_update(self, service, citadel):
        updated = service.update_location(ADMIN, citadel.id, name="Storm Citadel")
        assert updated.name == "Storm Citadel"
        assert updated.type == "raid"

    def test_update_into_duplicate(self, service, citadel):
        other = service.create_location(ADMIN, "raid", "Frozen Throne")
        with pytest.raises(ConflictError):
            service.update_location(ADMIN, other.id, name="Sky Citadel")

    def test_delete_cascades_bosses(self, service, citadel, db_session):
        service.add_boss(ADMIN, citadel.id, "Zephyr")
        service.delete_location(ADMIN, citadel.id)
        assert service.get_location(citadel.id) is None
        assert db_session.query(BossModel).count() == 0

    def test_delete_missing(self, service):
        with pytest.raises(NotFoundError, match="Location not found"):
            service.delete_location(ADMIN, 123)


class TestBosses:
    def test_ordered_first_then_creation(self, service, citadel):
        service.add_boss(ADMIN, citadel.id, "Trash Pack")
        service.add_boss(ADMIN, citadel.id, "Final Boss", order=3)
        service.add_boss(ADMIN, citadel.id, "Gatekeeper", order=1)
        service.add_boss(ADMIN, citadel.id, "Rare Spawn")

        names = [b.name for b in service.list_bosses(citadel.id)]
        assert names == ["Gatekeeper", "Final Boss", "Trash Pack", "Rare Spawn"]

    def test_location_must_exist(self, service):
        with pytest.raises(NotFoundError, match="Location not found"):
            service.add_boss(ADMIN, 999, "Ghost")

    def test_update_and_remove(self, service, citadel):
        boss = service.add_boss(ADMIN, citadel.id, "Zephyr")
        assert service.update_boss(ADMIN, boss.id, order=2).order == 2
        service.remove_boss(ADMIN, boss.id)
        assert service.get_boss(boss.id) is None
        with pytest.raises(NotFoundError, match="Boss not found"):
            service.remove_boss(ADMIN, boss.id)

    def test_list_all(self, service, citadel):
        other = service.create_location(ADMIN, "dungeon", "Deadmines")
        service.add_boss(ADMIN, citadel.id, "Zephyr")
        service.add_boss(ADMIN, other.id, "Van Cleef")
        assert len(service.list_all_bosses()) == 2


class TestDropPatterns:
    def _slot_drops(self, location_id, boss_id=None):
        return [{"slot": "Head", "locationId": location_id, "bossId": boss_id}]

    def test_create_unique_name(self, service, citadel):
        service.create_drop_pattern(ADMIN, "Raid T1", self._slot_drops(citadel.id))
        with pytest.raises(ConflictError, match='drop pattern named "Raid T1"'):
            service.create_drop_pattern(ADMIN, "Raid T1", [])

    def test_update(self, service, citadel):
        pattern = service.create_drop_pattern(ADMIN, "Raid T1", [])
        updated = service.update_drop_pattern(
            ADMIN,
            pattern.id,
            name="Raid T2",
            slot_drops=self._slot_drops(citadel.id),
        )
        assert updated.name == "Raid T2"
        assert updated.slot_drops[0]["slot"] == "Head"

    def test_update_to_taken_name(self, service):
        service.create_drop_pattern(ADMIN, "Raid T1", [])
        pattern = service.create_drop_pattern(ADMIN, "Raid T2", [])
        with pytest.raises(ConflictError):
            service.update_drop_pattern(ADMIN, pattern.id, name="Raid T1")

    def test_delete_rejected_while_used(self, service, db_session):
        pattern = service.create_drop_pattern(ADMIN, "Raid T1", [])
        db_session.add(
            GearSetModel(
                name="Storm Set",
                quality="epic",
                classes=["Warrior"],
                pieces=[],
                bonuses=[],
                drop_pattern_id=pattern.id,
            )
        )
        db_session.commit()

        with pytest.raises(ConflictError, match="It is used by: Storm Set"):
            service.remove_drop_pattern(ADMIN, pattern.id)

    def test_delete_unused(self, service):
        pattern = service.create_drop_pattern(ADMIN, "Raid T1", [])
        service.remove_drop_pattern(ADMIN, pattern.id)
        assert service.get_drop_pattern(pattern.id) is None
