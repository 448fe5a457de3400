"""CharacterService 통합 테스트 (인메모리 SQLite + EventBus)"""

import pytest

from warband.core.event_types import EventTypes
from warband.core.gear.enums import CharacterClass, EquipmentSlot, GearMode
from warband.core.gear.errors import InvalidSlot, OffHandLocked
from warband.core.principal import Principal
from warband.db.models import CharacterModel, GuildMemberModel, GuildModel
from warband.services.character_service import CharacterService
from warband.services.errors import (
    ConflictError,
    NotAuthenticatedError,
    NotFoundError,
)

ALICE = Principal(user_id="user_alice")
BOB = Principal(user_id="user_bob")

TWO_HANDER = {
    "itemName": "Stormforged Greatsword",
    "ilvl": 66,
    "secondaryStats": ["Hit"],
    "twoHanded": True,
}


@pytest.fixture()
def service(db_session, bus) -> CharacterService:
    return CharacterService(db_session, bus)


@pytest.fixture()
def events(bus) -> list:
    received = []
    for event_type in (
        EventTypes.CHARACTER_CREATED,
        EventTypes.CHARACTER_DELETED,
        EventTypes.GEAR_UPDATED,
        EventTypes.CHARACTERS_IMPORTED,
    ):
        bus.subscribe(event_type, received.append)
    return received


class TestCreate:
    def test_create_starts_with_empty_gear(self, service, events):
        character = service.create_character(ALICE, "Warrior", name="Grom")

        assert character.class_name == CharacterClass.WARRIOR
        assert character.name == "Grom"
        assert character.hit_percent == 0.0
        assert character.expertise_percent == 0.0
        assert len(character.adventure_gear) == 16
        assert all(p.is_empty for p in character.dungeon_gear)
        assert [e.event_type for e in events] == [EventTypes.CHARACTER_CREATED]

    def test_duplicate_class_conflict(self, service):
        service.create_character(ALICE, "Mage")
        with pytest.raises(ConflictError, match="You already have a Mage character"):
            service.create_character(ALICE, CharacterClass.MAGE)

    def test_same_class_for_different_users(self, service):
        service.create_character(ALICE, "Rogue")
        assert service.create_character(BOB, "Rogue").user_id == BOB.user_id

    def test_requires_principal(self, service):
        with pytest.raises(NotAuthenticatedError):
            service.create_character(None, "Priest")


class TestQueries:
    def test_list_only_own(self, service):
        service.create_character(ALICE, "Warrior")
        service.create_character(ALICE, "Hunter")
        service.create_character(BOB, "Priest")

        classes = [c.class_name for c in service.list_characters(ALICE)]
        assert classes == [CharacterClass.WARRIOR, CharacterClass.HUNTER]

    def test_anonymous_gets_empty(self, service):
        service.create_character(ALICE, "Warrior")
        assert service.list_characters(None) == []
        assert service.get_by_class(None, "Warrior") is None

    def test_get_not_owned_is_none(self, service):
        character = service.create_character(ALICE, "Warrior")
        assert service.get_character(BOB, character.id) is None
        assert service.get_character(ALICE, character.id).id == character.id

    def test_get_by_class(self, service):
        service.create_character(ALICE, "Paladin")
        assert service.get_by_class(ALICE, "Paladin").class_name == "Paladin"
        assert service.get_by_class(ALICE, "Mage") is None


class TestUpdate:
    def test_only_supplied_fields_change(self, service):
        character = service.create_character(ALICE, "Warrior", name="Grom")
        updated = service.update_character(ALICE, character.id, hit_percent=18.5)
        assert updated.name == "Grom"
        assert updated.hit_percent == 18.5

    def test_not_owned(self, service):
        character = service.create_character(ALICE, "Warrior")
        with pytest.raises(NotFoundError, match="Character not found"):
            service.update_character(BOB, character.id, name="Thief")

    def test_delete(self, service, db_session, events):
        character = service.create_character(ALICE, "Warrior")
        service.delete_character(ALICE, character.id)
        assert db_session.get(CharacterModel, character.id) is None
        assert events[-1].event_type == EventTypes.CHARACTER_DELETED


class TestUpdateGearPiece:
    def test_two_hander_persists_coupling(self, service, events):
        character = service.create_character(ALICE, "Warrior")
        service.update_gear_piece(
            ALICE, character.id, "dungeon", "Main Hand", TWO_HANDER
        )

        reloaded = service.get_character(ALICE, character.id)
        off = reloaded.dungeon_gear.get(EquipmentSlot.OFF_HAND)
        assert off.item_name == "Stormforged Greatsword"
        assert off.two_handed is None
        assert reloaded.adventure_gear.get("Main Hand").is_empty
        assert events[-1].event_type == EventTypes.GEAR_UPDATED
        assert events[-1].data["mode"] == GearMode.DUNGEON.value

    def test_off_hand_locked(self, service):
        character = service.create_character(ALICE, "Warrior")
        service.update_gear_piece(
            ALICE, character.id, "adventure", "Main Hand", TWO_HANDER
        )
        with pytest.raises(OffHandLocked):
            service.update_gear_piece(
                ALICE, character.id, "adventure", "Off Hand", {"itemName": "Shield"}
            )

    def test_invalid_slot(self, service):
        character = service.create_character(ALICE, "Warrior")
        with pytest.raises(InvalidSlot):
            service.update_gear_piece(ALICE, character.id, "dungeon", "Tail", {})

    def test_not_owned(self, service):
        character = service.create_character(ALICE, "Warrior")
        with pytest.raises(NotFoundError):
            service.update_gear_piece(BOB, character.id, "dungeon", "Head", {})


class TestImport:
    def _payload(self):
        return [
            {
                "className": "Hunter",
                "adventureGear": [
                    {"slot": "Head", "ilvl": 61, "secondaryStats": "Hit, Bogus"},
                    {"slot": "Neck", "ilvl": None, "secondaryStats": "Crit"},
                    {"slot": "Chest", "ilvl": 62, "secondaryStats": None, "setBonus": ""},
                    {"slot": "Tail", "ilvl": 99, "secondaryStats": None},
                ],
                "dungeonGear": [
                    {
                        "slot": "Back",
                        "ilvl": 64,
                        "secondaryStats": "",
                        "setBonus": "Wolf Set",
                        "legendary": "Howl",
                    }
                ],
            },
            {"className": "Necromancer", "adventureGear": [], "dungeonGear": []},
        ]

    def test_creates_and_skips_unknown_class(self, service, events):
        results = service.import_characters(ALICE, self._payload())
        assert results == [{"className": "Hunter", "action": "created"}]

        hunter = service.get_by_class(ALICE, "Hunter")
        head = hunter.adventure_gear.get("Head")
        assert head.item_level == 61
        assert [s.value for s in head.secondary_stats] == ["Hit"]
        assert hunter.adventure_gear.get("Neck").is_empty
        assert hunter.adventure_gear.get("Chest").set_bonus_name is None
        back = hunter.dungeon_gear.get("Back")
        assert back.secondary_stats is None
        assert back.set_bonus_name == "Wolf Set"
        assert back.legendary_name == "Howl"
        assert events[-1].event_type == EventTypes.CHARACTERS_IMPORTED

    def test_existing_class_updated(self, service):
        service.create_character(ALICE, "Hunter", name="Rexxar")
        results = service.import_characters(ALICE, self._payload())
        assert results == [{"className": "Hunter", "action": "updated"}]
        hunter = service.get_by_class(ALICE, "Hunter")
        assert hunter.name == "Rexxar"
        assert hunter.adventure_gear.get("Head").item_level == 61

    def test_same_class_twice_in_payload(self, service):
        entry = self._payload()[0]
        results = service.import_characters(ALICE, [entry, entry])
        assert [r["action"] for r in results] == ["created", "updated"]

    def test_concurrent_create_is_conflict(self, service, monkeypatch):
        # 조회 직후 다른 요청이 같은 직업을 만든 상황
        service.create_character(ALICE, "Hunter", name="Rexxar")
        monkeypatch.setattr(service, "_find_by_class", lambda *args: None)

        with pytest.raises(ConflictError, match="You already have a Hunter character"):
            service.import_characters(ALICE, self._payload())

        monkeypatch.undo()
        hunter = service.get_by_class(ALICE, "Hunter")
        assert hunter.name == "Rexxar"
        assert hunter.adventure_gear.get("Head").is_empty


class TestGuildMemberCharacters:
    def _guild(self, db_session, *user_ids):
        guild = GuildModel(name="Raiders", owner_id=user_ids[0])
        db_session.add(guild)
        db_session.flush()
        for i, uid in enumerate(user_ids):
            db_session.add(
                GuildMemberModel(
                    guild_id=guild.id, user_id=uid, role="owner" if i == 0 else "member"
                )
            )
        db_session.commit()

    def test_same_guild_sees_characters(self, service, db_session):
        service.create_character(BOB, "Priest")
        self._guild(db_session, ALICE.user_id, BOB.user_id)
        characters = service.list_by_guild_member(ALICE, BOB.user_id)
        assert [c.class_name for c in characters] == [CharacterClass.PRIEST]

    def test_other_guild_sees_nothing(self, service, db_session):
        service.create_character(BOB, "Priest")
        self._guild(db_session, ALICE.user_id)
        assert service.list_by_guild_member(ALICE, BOB.user_id) == []

    def test_anonymous_sees_nothing(self, service):
        assert service.list_by_guild_member(None, BOB.user_id) == []
